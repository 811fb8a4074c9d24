"""
Update User Profile Handler.
PATCH /users/me
Body: any subset of { "name", "bio", "userType", "location", "skills" }
"""
from neighborly.auth import get_user_sub
from neighborly.dynamo import DynamoStore
from neighborly.errors import MarketplaceError
from neighborly.logging import logger, log_event
from neighborly.users import update_user_profile
from neighborly.utils import error_response, format_response, parse_body, server_error

store = DynamoStore()


def handler(event, context):
    log_event(event)

    try:
        user_id = update_user_profile(store, get_user_sub(event), parse_body(event))
        return format_response(200, {'userId': user_id})

    except MarketplaceError as e:
        logger.warning(f"Profile update refused: {e}")
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error updating profile: {e}")
        return server_error()
