"""
Utility for building API Gateway responses.
"""
import json
from typing import Dict, Any, Optional


def redirect_response(location: str, status_code: int = 302) -> Dict[str, Any]:
    """
    Build redirect response.

    Args:
        location: Target URL
        status_code: HTTP redirect status code

    Returns:
        API Gateway response dict
    """
    return {
        'statusCode': status_code,
        'headers': {
            'Location': location,
            'Cache-Control': 'no-store',
        },
        'body': ''
    }


def json_response(
    status_code: int = 200,
    body: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """
    Build JSON response.

    Args:
        status_code: HTTP status code
        body: Response body dict

    Returns:
        API Gateway response dict
    """
    return {
        'statusCode': status_code,
        'headers': {'Content-Type': 'application/json'},
        'body': json.dumps(body or {})
    }
