"""
Task Reviews Handler.
GET /tasks/{taskId}/reviews
"""
from neighborly.dynamo import DynamoStore
from neighborly.logging import logger, log_event
from neighborly.reviews import get_task_reviews
from neighborly.utils import format_response, get_path_param, server_error

store = DynamoStore()


def handler(event, context):
    log_event(event)

    try:
        task_id = get_path_param(event, 'taskId')
        reviews = get_task_reviews(store, task_id) if task_id else []
        return format_response(200, {'reviews': reviews})
    except Exception as e:
        logger.exception(f"Error fetching task reviews: {e}")
        return server_error()
