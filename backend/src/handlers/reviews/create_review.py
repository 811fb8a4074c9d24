"""
Create Review Handler.
POST /tasks/{taskId}/reviews
Body: { "revieweeId", "rating": 1-5, "comment"?, "reviewType": "helper_to_seeker"|"seeker_to_helper" }
"""
from neighborly.auth import get_user_sub
from neighborly.dynamo import DynamoStore
from neighborly.errors import MarketplaceError
from neighborly.logging import logger, log_event
from neighborly.reviews import create_review
from neighborly.utils import error_response, format_response, get_path_param, parse_body, server_error

store = DynamoStore()


def handler(event, context):
    log_event(event)

    try:
        body = parse_body(event)
        create_review(
            store,
            get_user_sub(event),
            get_path_param(event, 'taskId'),
            reviewee_id=body.get('revieweeId'),
            rating=body.get('rating'),
            review_type=body.get('reviewType'),
            comment=body.get('comment')
        )
        return format_response(201, {'success': True})

    except MarketplaceError as e:
        logger.warning(f"Review refused: {e}")
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error creating review: {e}")
        return server_error()
