"""
Assign Task Handler.
POST /tasks/{taskId}/assign
Body: { "helperId": "..." }

Of two racing assignments only one commits; the other answers 409.
"""
from neighborly.auth import get_user_sub
from neighborly.dynamo import DynamoStore
from neighborly.errors import MarketplaceError, ValidationError
from neighborly.logging import logger, log_event
from neighborly.tasks import assign_task
from neighborly.utils import error_response, format_response, get_path_param, parse_body, server_error

store = DynamoStore()


def handler(event, context):
    log_event(event)

    try:
        helper_id = parse_body(event).get('helperId')
        if not helper_id:
            raise ValidationError('Missing helperId')

        assign_task(store, get_user_sub(event), get_path_param(event, 'taskId'), helper_id)
        return format_response(200, {'success': True})

    except MarketplaceError as e:
        logger.warning(f"Assignment refused: {e}")
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error assigning task: {e}")
        return server_error()
