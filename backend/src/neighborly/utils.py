"""
Request parsing and response shaping shared by the API handlers.
"""
import json
import math
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional

from .errors import MarketplaceError, ValidationError

CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Credentials': True,
    'Content-Type': 'application/json'
}


class DecimalEncoder(json.JSONEncoder):
    """Serialize DynamoDB numbers: whole Decimals as int, the rest as float."""

    def default(self, o):
        if isinstance(o, Decimal):
            return int(o) if o == o.to_integral_value() else float(o)
        return super().default(o)


def format_response(status_code: int, body: Any, headers: Dict[str, str] = None) -> Dict[str, Any]:
    """
    Build an API Gateway proxy response.

    Args:
        status_code: HTTP status code
        body: JSON-serializable payload; Decimals are allowed
        headers: Extra headers merged over the CORS defaults

    Returns:
        Proxy response dict
    """
    return {
        'statusCode': status_code,
        'headers': {**CORS_HEADERS, **(headers or {})},
        'body': json.dumps(body, cls=DecimalEncoder)
    }


def error_response(error: MarketplaceError) -> Dict[str, Any]:
    """Map a refused operation onto its HTTP status and error code."""
    return format_response(error.status_code, {'error': error.code, 'message': str(error)})


def server_error() -> Dict[str, Any]:
    return format_response(500, {'error': 'InternalError', 'message': 'Internal Server Error'})


def parse_body(event: dict) -> dict:
    """JSON object sent in the request body; anything else reads as an empty payload."""
    raw = event.get('body') or '{}'
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError:
            return {}
    return raw if isinstance(raw, dict) else {}


def get_path_param(event: dict, name: str) -> Optional[str]:
    return (event.get('pathParameters') or {}).get(name)


def get_query_param(event: dict, name: str, default: str = None) -> Optional[str]:
    return (event.get('queryStringParameters') or {}).get(name, default)


def parse_float(value: Any, name: str, default: float = None) -> Optional[float]:
    """Numeric request value; blank falls back to default, malformed raises ValidationError."""
    if value is None or value == '':
        if default is None:
            raise ValidationError(f'Missing {name}')
        return default
    if isinstance(value, bool):
        raise ValidationError(f'Invalid {name}')
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f'Invalid {name}')
    if not math.isfinite(number):
        raise ValidationError(f'Invalid {name}')
    return number


def now_iso() -> str:
    """UTC ISO-8601 timestamp for createdAt, completedAt and awardedAt."""
    return datetime.now(timezone.utc).isoformat()
