"""
User profiles and the denormalized summaries embedded in task listings.
"""
from typing import Any, Dict, List, Optional

from .config import config
from .errors import ConditionFailed, NotFound, ProfileExists, Unauthenticated, ValidationError
from .geo import bounding_box, in_box
from .logging import logger
from .models import UserType, parse_enum, parse_location
from .reputation import DEFAULT_RATING, DEFAULT_REVIEW_COUNT, current_reputation

UNKNOWN_NAME = 'Unknown'

# Fields a user may change after profile creation
UPDATABLE_FIELDS = ('name', 'bio', 'userType', 'location', 'skills')

# User types returned by the nearby-helpers search
HELPER_TYPES = (UserType.HELPER, UserType.BOTH)


def user_summary(user: Optional[dict]) -> Optional[Dict[str, Any]]:
    """Name and reputation of a counterpart, or None when the record is gone."""
    if not user:
        return None
    rating, review_count = current_reputation(user)
    return {
        'name': user.get('name') or UNKNOWN_NAME,
        'rating': rating,
        'reviewCount': review_count,
    }


def applicant_summary(user: Optional[dict]) -> Optional[Dict[str, Any]]:
    if not user:
        return None
    return {
        'userId': user['userId'],
        **user_summary(user),
        'skills': list(user.get('skills') or []),
    }


def public_profile(user: dict) -> Dict[str, Any]:
    """Profile as shown to other users: everything but the email address."""
    return {k: v for k, v in user.items() if k != 'email'}


def is_profile_complete(user: Optional[dict]) -> bool:
    return bool(user and user.get('name') and user.get('email') and user.get('location'))


def _clean_skills(skills) -> List[str]:
    if not isinstance(skills, list) or not all(isinstance(s, str) for s in skills):
        raise ValidationError('Skills must be a list of strings')
    # Set semantics, first occurrence wins
    return list(dict.fromkeys(s.strip() for s in skills if s.strip()))


def _clean_name(name) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError('Name is required')
    return name.strip()


# ----------------------------------------------------------------------
# Queries
# ----------------------------------------------------------------------

def get_current_user(store, user_id: Optional[str]) -> Optional[Dict[str, Any]]:
    """Caller's profile; None when anonymous or the profile is not completed yet."""
    if not user_id:
        return None
    user = store.get_user(user_id)
    if not is_profile_complete(user):
        return None
    return user


def get_user_by_id(store, user_id: str) -> Optional[Dict[str, Any]]:
    user = store.get_user(user_id)
    return public_profile(user) if user else None


def get_nearby_helpers(store, lat: float, lng: float, radius_km: float = None) -> List[Dict[str, Any]]:
    """Active helper profiles whose location falls in the search box."""
    box = bounding_box(lat, lng, radius_km or config.DEFAULT_RADIUS_KM)
    helpers = []
    for user_type in HELPER_TYPES:
        for user in store.users_by_type(user_type.value):
            if user.get('isActive') is True and in_box(box, user.get('location')):
                helpers.append(public_profile(user))
    return helpers


def get_points_history(store, user_id: Optional[str]) -> List[Dict[str, Any]]:
    """Caller's points ledger, newest first, with the title of each task."""
    if not user_id:
        return []
    entries = []
    for entry in store.points_for_user(user_id):
        task = store.get_task(entry['taskId'])
        entries.append({**entry, 'taskTitle': task.get('title') if task else 'Unknown Task'})
    return entries


# ----------------------------------------------------------------------
# Mutations
# ----------------------------------------------------------------------

def create_user_profile(
    store,
    user_id: Optional[str],
    name: str,
    email: str,
    user_type: str,
    location: dict,
    skills: list,
    bio: Optional[str] = None
) -> str:
    """
    Complete the identity-linked user record and seed its reputation.

    Returns:
        The user id (the identity provider's subject)
    """
    if not user_id:
        raise Unauthenticated()
    if not isinstance(email, str) or not email.strip():
        raise ValidationError('Email is required')

    fields = {
        'name': _clean_name(name),
        'email': email.strip(),
        'userType': parse_enum(UserType, user_type, 'userType').value,
        'location': parse_location(location),
        'skills': _clean_skills(skills),
        'totalPoints': 0,
        'rating': DEFAULT_RATING,
        'reviewCount': DEFAULT_REVIEW_COUNT,
        'isActive': True,
    }
    if bio is not None:
        fields['bio'] = str(bio)

    try:
        store.create_profile(user_id, fields)
    except ConditionFailed:
        logger.warning(f"Profile already exists for {user_id}")
        raise ProfileExists()

    logger.info(f"Created profile for {user_id} ({fields['userType']})")
    return user_id


def update_user_profile(store, user_id: Optional[str], changes: Dict[str, Any]) -> str:
    """Patch any subset of name/bio/userType/location/skills; None values are ignored."""
    if not user_id:
        raise Unauthenticated()

    unknown = set(changes) - set(UPDATABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Cannot update: {', '.join(sorted(unknown))}")

    fields = {}
    for key, value in changes.items():
        if value is None:
            continue
        if key == 'name':
            value = _clean_name(value)
        elif key == 'userType':
            value = parse_enum(UserType, value, 'userType').value
        elif key == 'location':
            value = parse_location(value)
        elif key == 'skills':
            value = _clean_skills(value)
        else:
            value = str(value)
        fields[key] = value

    if not fields:
        return user_id

    try:
        store.update_user(user_id, fields)
    except ConditionFailed:
        raise NotFound('User not found')

    logger.info(f"Updated profile {user_id}: {sorted(fields)}")
    return user_id
