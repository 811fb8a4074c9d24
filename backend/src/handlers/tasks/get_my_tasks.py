"""
My Tasks Handler.
GET /tasks/mine?type=posted|helping
"""
from neighborly.auth import get_user_sub
from neighborly.dynamo import DynamoStore
from neighborly.errors import MarketplaceError
from neighborly.logging import logger, log_event
from neighborly.models import TaskListType
from neighborly.tasks import get_my_tasks
from neighborly.utils import error_response, format_response, get_query_param, server_error

store = DynamoStore()


def handler(event, context):
    log_event(event)

    try:
        list_type = get_query_param(event, 'type', TaskListType.POSTED.value)
        tasks = get_my_tasks(store, get_user_sub(event), list_type)
        return format_response(200, {'tasks': tasks})

    except MarketplaceError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error listing my tasks: {e}")
        return server_error()
