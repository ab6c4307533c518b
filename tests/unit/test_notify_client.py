"""
Unit tests for the notification API client and client cache.
"""
from unittest.mock import Mock

import jwt
import pytest
import requests

from xnotify.services.bounded_cache import BoundedCache
from xnotify.services.notify_client import NotifyAPIError, NotifyClient, parse_api_key
from xnotify.services.notify_client_cache import NotifyClientCache

SERVICE_ID = '11111111-2222-3333-4444-555555555555'
SECRET = '66666666-7777-8888-9999-000000000000'


def _response(status_code, payload=None):
    response = Mock()
    response.status_code = status_code
    response.json.return_value = payload or {}
    response.text = ''
    return response


@pytest.fixture
def session():
    return Mock(spec=requests.Session)


@pytest.fixture
def client(api_key, session):
    return NotifyClient('https://notify.test/', api_key, timeout=3, session=session)


class TestParseApiKey:
    """Test suite for API key parsing."""

    def test_extracts_service_and_secret(self, api_key):
        assert parse_api_key(api_key) == (SERVICE_ID, SECRET)

    def test_key_name_with_dashes(self):
        key = f'my-team-key-{SERVICE_ID}-{SECRET}'

        assert parse_api_key(key) == (SERVICE_ID, SECRET)

    @pytest.mark.parametrize('key', ['', 'short', SECRET])
    def test_malformed(self, key):
        with pytest.raises(ValueError, match="malformed"):
            parse_api_key(key)


class TestNotifyClient:
    """Test suite for NotifyClient."""

    def test_send_email_request(self, client, session):
        """Test payload, URL, timeout and JWT authentication."""
        session.post.return_value = _response(201, {'id': 'n-1'})

        result = client.send_email(
            'template-1',
            'alice@example.com',
            personalisation={'confirm_link': 'https://x/1/alice@example.com'},
            reference='ref'
        )

        assert result == {'id': 'n-1'}
        args, kwargs = session.post.call_args
        assert args[0] == 'https://notify.test/v2/notifications/email'
        assert kwargs['timeout'] == 3
        assert kwargs['json'] == {
            'template_id': 'template-1',
            'email_address': 'alice@example.com',
            'personalisation': {'confirm_link': 'https://x/1/alice@example.com'},
            'reference': 'ref',
        }

        scheme, token = kwargs['headers']['Authorization'].split(' ')
        assert scheme == 'Bearer'
        claims = jwt.decode(token, SECRET, algorithms=['HS256'])
        assert claims['iss'] == SERVICE_ID
        assert 'iat' in claims

    def test_error_status(self, client, session):
        """Test API errors carry status and payload."""
        session.post.return_value = _response(400, {'errors': [{'error': 'BadRequestError'}]})

        with pytest.raises(NotifyAPIError) as exc_info:
            client.send_email('template-1', 'alice@example.com')

        assert exc_info.value.status_code == 400
        assert exc_info.value.errors == [{'error': 'BadRequestError'}]

    def test_transport_error(self, client, session):
        session.post.side_effect = requests.ConnectionError('refused')

        with pytest.raises(NotifyAPIError, match="request failed"):
            client.send_email('template-1', 'alice@example.com')

    def test_malformed_key_rejected_at_construction(self, session):
        with pytest.raises(ValueError):
            NotifyClient('https://notify.test', 'bad-key', session=session)


class TestNotifyClientCache:
    """Test suite for NotifyClientCache."""

    def test_reuses_client_per_key(self, api_key):
        factory = Mock(side_effect=lambda base_url, key, timeout: object())
        cache = NotifyClientCache(BoundedCache(2), 'https://notify.test', timeout=4, client_factory=factory)

        first = cache.get_or_create(api_key)
        second = cache.get_or_create(api_key)

        assert first is second
        factory.assert_called_once_with('https://notify.test', api_key, timeout=4)

    def test_bounded(self):
        factory = Mock(side_effect=lambda base_url, key, timeout: object())
        cache = NotifyClientCache(BoundedCache(2), 'https://notify.test', client_factory=factory)

        for key in ('k1', 'k2', 'k3'):
            cache.get_or_create(key)

        assert len(cache.cache) == 2
        assert 'k1' not in cache.cache

    def test_factory_error_not_cached(self):
        factory = Mock(side_effect=ValueError('Notification API key is malformed'))
        cache = NotifyClientCache(BoundedCache(2), 'https://notify.test', client_factory=factory)

        with pytest.raises(ValueError):
            cache.get_or_create('bad')

        assert len(cache.cache) == 0

    def test_flush(self):
        factory = Mock(side_effect=lambda base_url, key, timeout: object())
        cache = NotifyClientCache(BoundedCache(2), 'https://notify.test', client_factory=factory)
        cache.get_or_create('k1')

        assert cache.flush() == 1
        cache.get_or_create('k1')
        assert factory.call_count == 2
