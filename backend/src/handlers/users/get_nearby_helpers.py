"""
Nearby Helpers Handler.
GET /users/helpers/nearby?lat=..&lng=..&radiusKm=..
"""
from neighborly.config import config
from neighborly.dynamo import DynamoStore
from neighborly.errors import MarketplaceError
from neighborly.logging import logger, log_event
from neighborly.users import get_nearby_helpers
from neighborly.utils import error_response, format_response, get_query_param, parse_float, server_error

store = DynamoStore()


def handler(event, context):
    log_event(event)

    try:
        helpers = get_nearby_helpers(
            store,
            lat=parse_float(get_query_param(event, 'lat'), 'lat'),
            lng=parse_float(get_query_param(event, 'lng'), 'lng'),
            radius_km=parse_float(get_query_param(event, 'radiusKm'), 'radiusKm', config.DEFAULT_RADIUS_KM)
        )
        return format_response(200, {'helpers': helpers})

    except MarketplaceError as e:
        return error_response(e)
    except Exception as e:
        logger.exception(f"Error listing nearby helpers: {e}")
        return server_error()
