"""
Caller identity from the Cognito authorizer.

The identity provider is external: the marketplace only sees the opaque
``sub`` claim, which doubles as the key of the caller's User record.
"""
from typing import Optional


def _claim(event: dict, name: str) -> Optional[str]:
    try:
        value = event['requestContext']['authorizer']['claims'].get(name)
    except (KeyError, TypeError, AttributeError):
        return None
    return value or None


def get_user_sub(event: dict) -> Optional[str]:
    """
    Subject of the signed-in caller.

    Returns:
        User id, or None for anonymous requests (missing or empty claim)
    """
    return _claim(event, 'sub')


def get_user_email(event: dict) -> Optional[str]:
    """Email claim, used when a profile is created without an explicit email."""
    return _claim(event, 'email')
