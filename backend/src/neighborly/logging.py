"""
Shared 'neighborly' logger for the marketplace Lambdas.
"""
import json
import logging

from .config import config

logger = logging.getLogger('neighborly')
logger.setLevel(config.LOG_LEVEL)

# Warm Lambda containers re-import modules; attach the stream handler once
if not logger.handlers:
    stream = logging.StreamHandler()
    stream.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
    logger.addHandler(stream)


def log_event(event: dict) -> None:
    """Log route, caller and parameters of an API Gateway request; bodies and headers stay out of the logs."""
    try:
        claims = (event.get('requestContext') or {}).get('authorizer', {}).get('claims') or {}
        summary = {
            'method': event.get('httpMethod'),
            'resource': event.get('resource') or event.get('path'),
            'caller': claims.get('sub'),
            'pathParameters': event.get('pathParameters'),
            'queryStringParameters': event.get('queryStringParameters'),
        }
        logger.info(f"Request: {json.dumps(summary, default=str)}")
    except (TypeError, ValueError, AttributeError) as e:
        logger.warning(f"Could not log event: {e}")
