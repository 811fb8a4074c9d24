"""
User Reviews Handler.
GET /users/{userId}/reviews
"""
from neighborly.dynamo import DynamoStore
from neighborly.logging import logger, log_event
from neighborly.reviews import get_user_reviews
from neighborly.utils import format_response, get_path_param, server_error

store = DynamoStore()


def handler(event, context):
    log_event(event)

    try:
        user_id = get_path_param(event, 'userId')
        reviews = get_user_reviews(store, user_id) if user_id else []
        return format_response(200, {'reviews': reviews})
    except Exception as e:
        logger.exception(f"Error fetching user reviews: {e}")
        return server_error()
