"""
Reputation module - running-average ratings and points awards.
"""
from typing import Optional, Tuple

from .errors import InvalidRating
from .models import COMPLETION_REASON

# Seed for users who were never reviewed
DEFAULT_RATING = 5.0
DEFAULT_REVIEW_COUNT = 0

MIN_RATING = 1
MAX_RATING = 5


def round1(value: float) -> float:
    """Round half up to one decimal place (4.25 -> 4.3)."""
    return int(value * 10 + 0.5) / 10


def update_running_mean(old_mean: float, old_count: int, new_value: int) -> Tuple[float, int]:
    """
    Fold one new rating into an incremental mean.

    Args:
        old_mean: Current rating (DEFAULT_RATING when never reviewed)
        old_count: Number of reviews already folded in
        new_value: The new review's rating

    Returns:
        tuple: (new_mean rounded to one decimal, new_count)
    """
    new_count = old_count + 1
    new_mean = (old_mean * old_count + new_value) / new_count
    return round1(new_mean), new_count


def current_reputation(user: Optional[dict]) -> Tuple[float, int]:
    """Stored (rating, reviewCount) of a user, falling back to the seed values."""
    if not user:
        return DEFAULT_RATING, DEFAULT_REVIEW_COUNT
    rating = user.get('rating')
    count = user.get('reviewCount')
    return (float(rating) if rating else DEFAULT_RATING,
            int(count) if count else DEFAULT_REVIEW_COUNT)


def validate_rating(rating) -> int:
    """Accept whole numbers between 1 and 5 (2.0 is fine, 2.5 and True are not)."""
    if isinstance(rating, bool) or not isinstance(rating, (int, float)):
        raise InvalidRating()
    if isinstance(rating, float):
        if not rating.is_integer():
            raise InvalidRating()
        rating = int(rating)
    if not MIN_RATING <= rating <= MAX_RATING:
        raise InvalidRating()
    return rating


def build_points_award(task: dict, awarded_at: str) -> Optional[dict]:
    """
    Ledger entry crediting the task's helper with its reward points.

    Returns None for tasks without an assigned helper, which award nothing.
    """
    helper_id = task.get('helperId')
    if not helper_id:
        return None
    return {
        'taskId': task['taskId'],
        'userId': helper_id,
        'points': int(task.get('rewardPoints', 0)),
        'reason': COMPLETION_REASON,
        'awardedAt': awarded_at,
    }
