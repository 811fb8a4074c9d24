"""
User Profile Handler.
GET /users/{userId}
"""
from neighborly.dynamo import DynamoStore
from neighborly.logging import logger, log_event
from neighborly.users import get_user_by_id
from neighborly.utils import format_response, get_path_param, server_error

store = DynamoStore()


def handler(event, context):
    log_event(event)

    try:
        user_id = get_path_param(event, 'userId')
        user = get_user_by_id(store, user_id) if user_id else None
        return format_response(200, {'user': user})
    except Exception as e:
        logger.exception(f"Error fetching user: {e}")
        return server_error()
