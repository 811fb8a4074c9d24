"""
Complete Task Handler.
POST /tasks/{taskId}/complete
Credits the assigned helper with the task's reward points.
"""
from neighborly.auth import get_user_sub
from neighborly.dynamo import DynamoStore
from neighborly.errors import MarketplaceError
from neighborly.logging import logger, log_event
from neighborly.tasks import complete_task
from neighborly.utils import error_response, format_response, get_path_param, server_error

store = DynamoStore()


def handler(event, context):
    log_event(event)

    try:
        complete_task(store, get_user_sub(event), get_path_param(event, 'taskId'))
        return format_response(200, {'success': True})

    except MarketplaceError as e:
        logger.warning(f"Completion refused: {e}")
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error completing task: {e}")
        return server_error()
