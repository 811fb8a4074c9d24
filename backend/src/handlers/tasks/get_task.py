"""
Task Detail Handler.
GET /tasks/{taskId}
Returns {"task": null} for unknown ids.
"""
from neighborly.dynamo import DynamoStore
from neighborly.logging import logger, log_event
from neighborly.tasks import get_task_by_id
from neighborly.utils import format_response, get_path_param, server_error

store = DynamoStore()


def handler(event, context):
    log_event(event)

    try:
        task_id = get_path_param(event, 'taskId')
        task = get_task_by_id(store, task_id) if task_id else None
        return format_response(200, {'task': task})

    except Exception as e:
        logger.exception(f"Error fetching task: {e}")
        return server_error()
