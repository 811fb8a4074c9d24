"""
Current User Handler.
GET /users/me
Returns {"user": null} until the caller completes their profile.
"""
from neighborly.auth import get_user_sub
from neighborly.dynamo import DynamoStore
from neighborly.logging import logger, log_event
from neighborly.users import get_current_user
from neighborly.utils import format_response, server_error

store = DynamoStore()


def handler(event, context):
    log_event(event)

    try:
        return format_response(200, {'user': get_current_user(store, get_user_sub(event))})
    except Exception as e:
        logger.exception(f"Error fetching current user: {e}")
        return server_error()
