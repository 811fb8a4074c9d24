"""
Mark Messages Read Handler.
POST /tasks/{taskId}/messages/read
"""
from neighborly.auth import get_user_sub
from neighborly.dynamo import DynamoStore
from neighborly.errors import MarketplaceError
from neighborly.logging import logger, log_event
from neighborly.messaging import mark_messages_as_read
from neighborly.utils import error_response, format_response, get_path_param, server_error

store = DynamoStore()


def handler(event, context):
    log_event(event)

    try:
        mark_messages_as_read(store, get_user_sub(event), get_path_param(event, 'taskId'))
        return format_response(200, {'success': True})

    except MarketplaceError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error marking messages read: {e}")
        return server_error()
