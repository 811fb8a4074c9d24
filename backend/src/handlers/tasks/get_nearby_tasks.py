"""
Nearby Tasks Handler.
GET /tasks/nearby?lat=..&lng=..&radiusKm=..&category=..
Open tasks around a point; anonymous callers are allowed.
"""
from neighborly.auth import get_user_sub
from neighborly.config import config
from neighborly.dynamo import DynamoStore
from neighborly.errors import MarketplaceError
from neighborly.logging import logger, log_event
from neighborly.tasks import get_nearby_tasks
from neighborly.utils import error_response, format_response, get_query_param, parse_float, server_error

store = DynamoStore()


def handler(event, context):
    log_event(event)

    try:
        tasks = get_nearby_tasks(
            store,
            get_user_sub(event),
            lat=parse_float(get_query_param(event, 'lat'), 'lat'),
            lng=parse_float(get_query_param(event, 'lng'), 'lng'),
            radius_km=parse_float(get_query_param(event, 'radiusKm'), 'radiusKm', config.DEFAULT_RADIUS_KM),
            category=get_query_param(event, 'category')
        )
        return format_response(200, {'tasks': tasks, 'totalTasks': len(tasks)})

    except MarketplaceError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error listing nearby tasks: {e}")
        return server_error()
