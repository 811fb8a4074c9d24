"""
Create Task Handler.
POST /tasks
Body: { "title", "description", "category", "location": {lat, lng, address},
        "rewardPoints", "scheduledTime"? }
"""
from neighborly.auth import get_user_sub
from neighborly.dynamo import DynamoStore
from neighborly.errors import MarketplaceError
from neighborly.logging import logger, log_event
from neighborly.tasks import create_task
from neighborly.utils import error_response, format_response, parse_body, server_error

store = DynamoStore()


def handler(event, context):
    log_event(event)

    try:
        body = parse_body(event)
        task_id = create_task(
            store,
            get_user_sub(event),
            title=body.get('title'),
            description=body.get('description'),
            category=body.get('category'),
            location=body.get('location'),
            reward_points=body.get('rewardPoints'),
            scheduled_time=body.get('scheduledTime')
        )
        return format_response(201, {'taskId': task_id})

    except MarketplaceError as e:
        logger.warning(f"Task creation refused: {e}")
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error creating task: {e}")
        return server_error()
