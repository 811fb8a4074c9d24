"""
Points History Handler.
GET /users/me/points
"""
from neighborly.auth import get_user_sub
from neighborly.dynamo import DynamoStore
from neighborly.logging import logger, log_event
from neighborly.users import get_points_history
from neighborly.utils import format_response, server_error

store = DynamoStore()


def handler(event, context):
    log_event(event)

    try:
        entries = get_points_history(store, get_user_sub(event))
        return format_response(200, {
            'entries': entries,
            'totalAwarded': sum(int(e.get('points', 0)) for e in entries)
        })
    except Exception as e:
        logger.exception(f"Error fetching points history: {e}")
        return server_error()
