"""
Reviews and the running-average rating they feed.
"""
from typing import Any, Dict, List, Optional

from .config import config
from .errors import (
    AlreadyReviewed,
    ConditionFailed,
    Forbidden,
    InvalidState,
    NotFound,
    Unauthenticated,
    ValidationError,
)
from .logging import logger
from .models import ReviewType, TaskStatus, parse_enum, status_of
from .permissions import TaskAction, can_act, counterpart_of, is_seeker
from .reputation import current_reputation, update_running_mean, validate_rating
from .utils import now_iso

ANONYMOUS = 'Anonymous'
UNKNOWN_TASK = 'Unknown Task'


def review_key(task_id: str, reviewer_id: str) -> str:
    """One review per (task, reviewer): the pair is the review's primary key."""
    return f'{task_id}#{reviewer_id}'


def create_review(
    store,
    user_id: Optional[str],
    task_id: str,
    reviewee_id: str,
    rating,
    review_type: str,
    comment: Optional[str] = None
) -> bool:
    """
    Rate the other participant of a completed task.

    The review insert and the reviewee's (rating, reviewCount) update
    commit in one transaction guarded by the reviewCount read beforehand;
    if another review lands in between, the aggregate is recomputed and
    the write retried.
    """
    if not user_id:
        raise Unauthenticated()
    rating = validate_rating(rating)
    review_type = parse_enum(ReviewType, review_type, 'reviewType')

    task = store.get_task(task_id)
    if not task:
        raise NotFound('Task not found')
    if status_of(task) != TaskStatus.COMPLETED:
        raise InvalidState('Task must be completed to review')
    if not can_act(user_id, task, TaskAction.REVIEW):
        raise Forbidden('Not authorized to review this task')

    review_id = review_key(task_id, user_id)
    if store.get_review(review_id):
        raise AlreadyReviewed()

    if reviewee_id != counterpart_of(user_id, task):
        raise Forbidden('Reviewee is not the other participant of this task')
    expected_type = ReviewType.SEEKER_TO_HELPER if is_seeker(user_id, task) else ReviewType.HELPER_TO_SEEKER
    if review_type != expected_type:
        raise ValidationError(f"reviewType must be '{expected_type.value}' for this reviewer")

    review = {
        'reviewId': review_id,
        'taskId': task_id,
        'reviewerId': user_id,
        'revieweeId': reviewee_id,
        'rating': rating,
        'reviewType': review_type.value,
        'createdAt': now_iso(),
    }
    if comment:
        review['comment'] = str(comment)

    for attempt in range(1, config.REVIEW_WRITE_ATTEMPTS + 1):
        reviewee = store.get_user(reviewee_id)
        if reviewee:
            old_rating, old_count = current_reputation(reviewee)
            new_rating, new_count = update_running_mean(old_rating, old_count, rating)
            write = dict(expected_count=old_count, rating=new_rating, review_count=new_count)
        else:
            write = {}

        try:
            store.add_review(review, **write)
        except ConditionFailed:
            if store.get_review(review_id):
                raise AlreadyReviewed()
            logger.warning(f"Rating of {reviewee_id} changed concurrently (attempt {attempt})")
            continue

        if write:
            logger.info(
                f"Review {review_id}: {reviewee_id} now {write['rating']} over {write['review_count']} reviews"
            )
        return True

    raise InvalidState('Could not record review, please retry')


def _enrich(store, review: dict, with_task: bool = False, with_reviewee: bool = False) -> Dict[str, Any]:
    reviewer = store.get_user(review['reviewerId'])
    enriched = {**review, 'reviewerName': (reviewer or {}).get('name') or ANONYMOUS}
    if with_reviewee:
        reviewee = store.get_user(review['revieweeId'])
        enriched['revieweeName'] = (reviewee or {}).get('name') or ANONYMOUS
    if with_task:
        task = store.get_task(review['taskId'])
        enriched['taskTitle'] = (task or {}).get('title') or UNKNOWN_TASK
    return enriched


def get_user_reviews(store, user_id: str) -> List[Dict[str, Any]]:
    """Latest reviews received by a user, newest first, with reviewer name and task title."""
    reviews = store.reviews_for_reviewee(user_id, limit=config.USER_REVIEWS_LIMIT)
    return [_enrich(store, r, with_task=True) for r in reviews]


def get_task_reviews(store, task_id: str) -> List[Dict[str, Any]]:
    return [_enrich(store, r, with_reviewee=True) for r in store.reviews_for_task(task_id)]
