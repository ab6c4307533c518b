"""
HTTP API Lambda handler for subscription lifecycle operations.

Routes (any path prefix before /subs is ignored, e.g. /api/v0.1):
- POST /subs/email/add -> subscribe (form or JSON body: eml, tid)
- GET /subs/confirm/{subscode}/{email} -> confirm
- GET /subs/remove/{subscode}/{email} -> unsubscribe
- GET /subs/flush-cache/{accessCode}/{accessCode2} -> flush caches

Lifecycle routes always answer with a redirect.
"""
import base64
import json
from typing import Any, Dict, List, Optional
from urllib.parse import parse_qs, unquote

from xnotify.config import SubscriptionSettings
from xnotify.services import SubscriptionLifecycle, create_subscription_lifecycle
from xnotify.utils import (
    ValidationError,
    configure_lambda_logging,
    get_structured_logger,
    json_response,
    redirect_response,
    validate_subscode,
)

configure_lambda_logging()

SUCCESS_BODY = {'statusCode': 200, 'ok': 1}
SERVER_ERROR_BODY = {'statusCode': 500, 'err': 1}

# Built on first use and kept for the life of the container
_lifecycle: Optional[SubscriptionLifecycle] = None
_settings: Optional[SubscriptionSettings] = None


def get_settings() -> SubscriptionSettings:
    """Load settings once per container."""
    global _settings
    if _settings is None:
        _settings = SubscriptionSettings.from_environment()
    return _settings


def get_lifecycle() -> SubscriptionLifecycle:
    """Build the lifecycle once per container."""
    global _lifecycle
    if _lifecycle is None:
        _lifecycle = create_subscription_lifecycle(get_settings())
    return _lifecycle


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    HTTP API Lambda handler for subscription operations.
    """
    request_id = getattr(context, 'aws_request_id', None)
    logger = get_structured_logger('SubscriptionsHandler', request_id=request_id)

    try:
        http = event.get('requestContext', {}).get('http', {})
        method = http.get('method', '')
        path = event.get('rawPath') or http.get('path', '')
        segments = _route_segments(path)

        logger.info('HTTP request received', operation='route', method=method, path=_route_name(segments))

        if method == 'POST' and segments == ['email', 'add']:
            return add_email(event)
        if method == 'GET' and len(segments) == 3 and segments[0] == 'confirm':
            return confirm_email(segments[1], segments[2])
        if method == 'GET' and len(segments) == 3 and segments[0] == 'remove':
            return remove_email(segments[1], segments[2])
        if method == 'GET' and len(segments) == 3 and segments[0] == 'flush-cache':
            return flush_cache(segments[1], segments[2])

        return redirect_response(get_settings().error_page)

    except Exception as e:
        logger.error('Unhandled error', operation='route', error=e)
        return redirect_response(_fallback_error_page())


def add_email(event: Dict[str, Any]) -> Dict[str, Any]:
    """Subscribe the submitted email to the submitted topic."""
    body = parse_body(event)
    outcome = get_lifecycle().subscribe(body.get('eml', ''), body.get('tid'))
    return redirect_response(outcome.url)


def confirm_email(subscode: str, email: str) -> Dict[str, Any]:
    """Confirm a pending subscription."""
    try:
        validate_subscode(subscode)
    except ValidationError:
        return redirect_response(get_settings().error_page)

    outcome = get_lifecycle().confirm(email, subscode)
    return redirect_response(outcome.url)


def remove_email(subscode: str, email: str) -> Dict[str, Any]:
    """Unsubscribe a confirmed subscription."""
    try:
        validate_subscode(subscode)
    except ValidationError:
        return redirect_response(get_settings().error_page)

    outcome = get_lifecycle().unsubscribe(email, subscode)
    return redirect_response(outcome.url)


def flush_cache(access_code: str, access_code2: str) -> Dict[str, Any]:
    """Flush topic and notification client caches."""
    if get_lifecycle().flush_caches(access_code, access_code2):
        return json_response(200, SUCCESS_BODY)
    return json_response(403, SERVER_ERROR_BODY)


def parse_body(event: Dict[str, Any]) -> Dict[str, str]:
    """
    Decode a form-encoded or JSON request body into a flat dict.

    Args:
        event: HTTP API event

    Returns:
        Field name to first value
    """
    raw = event.get('body') or ''
    if event.get('isBase64Encoded'):
        raw = base64.b64decode(raw).decode('utf-8')

    headers = {k.lower(): v for k, v in (event.get('headers') or {}).items()}
    content_type = headers.get('content-type', '')

    if 'application/json' in content_type:
        try:
            data = json.loads(raw or '{}')
        except json.JSONDecodeError:
            return {}
        if not isinstance(data, dict):
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    return {k: v[0] for k, v in parse_qs(raw).items() if v}


def _route_segments(path: str) -> List[str]:
    parts = [unquote(p) for p in path.split('/') if p]
    if 'subs' not in parts:
        return []
    return parts[parts.index('subs') + 1:]


def _route_name(segments: List[str]) -> str:
    # Path parameters carry emails and secrets; only log the route
    return '/subs/' + segments[0] if segments else '/'


def _fallback_error_page() -> str:
    try:
        return get_settings().error_page
    except ValueError:
        return SubscriptionSettings().error_page
