"""
Client for the GC Notify email API.

API keys have the form ``{key_name}-{service_id}-{secret}`` where the last
two parts are UUIDs. Each request is authenticated with a short-lived
HS256 JWT issued by the service id and signed with the secret.
"""

import time
from typing import Any, Dict, Optional

import jwt
import requests

UUID_LENGTH = 36


class NotifyAPIError(Exception):
    """Raised when the notification API rejects or fails a request."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        errors: Optional[Any] = None
    ):
        """
        Initialize notification API error.

        Args:
            message: Error message
            status_code: HTTP status code, if a response was received
            errors: Error payload returned by the API
        """
        super().__init__(message)
        self.status_code = status_code
        self.errors = errors


def parse_api_key(api_key: str) -> tuple[str, str]:
    """
    Extract (service_id, secret) from a notification API key.

    Raises:
        ValueError: If the key is too short to contain both UUIDs
    """
    if not api_key or len(api_key) < 2 * UUID_LENGTH + 1:
        raise ValueError('Notification API key is malformed')

    secret = api_key[-UUID_LENGTH:]
    service_id = api_key[-(2 * UUID_LENGTH + 1):-(UUID_LENGTH + 1)]
    return service_id, secret


class NotifyClient:
    """
    Minimal email-sending client for the notification API.

    Construction does no network I/O.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize notification client.

        Args:
            base_url: API endpoint (e.g. https://api.notification.alpha.canada.ca)
            api_key: Per-topic API key
            timeout: Request timeout in seconds
            session: Optional requests session (for connection reuse/testing)

        Raises:
            ValueError: If the API key is malformed
        """
        self.base_url = base_url.rstrip('/')
        self.service_id, self._secret = parse_api_key(api_key)
        self.timeout = timeout
        self.session = session or requests.Session()

    def _auth_token(self) -> str:
        return jwt.encode(
            {'iss': self.service_id, 'iat': int(time.time())},
            self._secret,
            algorithm='HS256'
        )

    def _headers(self) -> Dict[str, str]:
        return {
            'Authorization': f'Bearer {self._auth_token()}',
            'Content-Type': 'application/json',
            'User-Agent': 'x-notify-subscriptions',
        }

    def send_email(
        self,
        template_id: str,
        email_address: str,
        personalisation: Optional[Dict[str, Any]] = None,
        reference: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Send an email notification.

        Args:
            template_id: Notification template
            email_address: Recipient
            personalisation: Template variables
            reference: Caller reference tag

        Returns:
            Decoded API response

        Raises:
            NotifyAPIError: On transport errors or non-2xx responses
        """
        payload: Dict[str, Any] = {
            'template_id': template_id,
            'email_address': email_address,
        }
        if personalisation:
            payload['personalisation'] = personalisation
        if reference:
            payload['reference'] = reference

        try:
            response = self.session.post(
                f'{self.base_url}/v2/notifications/email',
                json=payload,
                headers=self._headers(),
                timeout=self.timeout
            )
        except requests.RequestException as e:
            raise NotifyAPIError(f'Notification request failed: {e}') from e

        if response.status_code >= 400:
            try:
                errors = response.json().get('errors')
            except ValueError:
                errors = response.text
            raise NotifyAPIError(
                f'Notification API returned {response.status_code}',
                status_code=response.status_code,
                errors=errors
            )

        try:
            return response.json()
        except ValueError:
            return {}
