"""
Send Message Handler.
POST /tasks/{taskId}/messages
Body: { "content": "..." }
"""
from neighborly.auth import get_user_sub
from neighborly.dynamo import DynamoStore
from neighborly.errors import MarketplaceError
from neighborly.logging import logger, log_event
from neighborly.messaging import send_message
from neighborly.utils import error_response, format_response, get_path_param, parse_body, server_error

store = DynamoStore()


def handler(event, context):
    log_event(event)

    try:
        send_message(
            store,
            get_user_sub(event),
            get_path_param(event, 'taskId'),
            parse_body(event).get('content')
        )
        return format_response(200, {'success': True})

    except MarketplaceError as e:
        logger.warning(f"Message refused: {e}")
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error sending message: {e}")
        return server_error()
