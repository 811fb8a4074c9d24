"""
Task Messages Handler.
GET /tasks/{taskId}/messages
Non-participants receive an empty list, not an error.
"""
from neighborly.auth import get_user_sub
from neighborly.dynamo import DynamoStore
from neighborly.logging import logger, log_event
from neighborly.messaging import get_task_messages
from neighborly.utils import format_response, get_path_param, server_error

store = DynamoStore()


def handler(event, context):
    log_event(event)

    try:
        messages = get_task_messages(store, get_user_sub(event), get_path_param(event, 'taskId'))
        return format_response(200, {'messages': messages})
    except Exception as e:
        logger.exception(f"Error fetching messages: {e}")
        return server_error()
