"""
Create User Profile Handler.
POST /users/me
Body: { "name", "email"?, "bio"?, "userType", "location": {lat, lng, address}, "skills" }

The email defaults to the one in the caller's Cognito claims.
"""
from neighborly.auth import get_user_email, get_user_sub
from neighborly.dynamo import DynamoStore
from neighborly.errors import MarketplaceError
from neighborly.logging import logger, log_event
from neighborly.users import create_user_profile
from neighborly.utils import error_response, format_response, parse_body, server_error

store = DynamoStore()


def handler(event, context):
    log_event(event)

    try:
        body = parse_body(event)
        user_id = create_user_profile(
            store,
            get_user_sub(event),
            name=body.get('name'),
            email=body.get('email') or get_user_email(event),
            user_type=body.get('userType'),
            location=body.get('location'),
            skills=body.get('skills', []),
            bio=body.get('bio')
        )
        return format_response(201, {'userId': user_id})

    except MarketplaceError as e:
        logger.warning(f"Profile creation refused: {e}")
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error creating profile: {e}")
        return server_error()
