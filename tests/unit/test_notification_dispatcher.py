"""
Unit tests for the confirmation email dispatcher.
"""
from unittest.mock import Mock

import pytest

from xnotify.services.audit_log import AuditLogSink
from xnotify.services.background_tasks import BackgroundTasks
from xnotify.services.notification_dispatcher import (
    CONFIRM_REFERENCE,
    NotificationDispatcher,
    build_confirm_link
)
from xnotify.services.notify_client import NotifyAPIError, NotifyClient
from xnotify.services.notify_client_cache import NotifyClientCache

BASE = 'https://xnotify.test/subs/confirm/'
NOW_MS = 1_700_000_000_123


class InlineBackground:
    """Runs submitted work immediately on the calling thread."""

    def __init__(self):
        self.submitted = []

    def submit(self, name, fn, *args, **kwargs):
        self.submitted.append(name)
        fn(*args, **kwargs)


@pytest.fixture
def notify_client():
    return Mock(spec=NotifyClient)


@pytest.fixture
def clients(notify_client):
    cache = Mock(spec=NotifyClientCache)
    cache.get_or_create.return_value = notify_client
    return cache


@pytest.fixture
def audit():
    return Mock(spec=AuditLogSink)


@pytest.fixture
def background():
    return InlineBackground()


def _dispatcher(clients, background, audit, bypass=False):
    return NotificationDispatcher(
        clients, background, audit, BASE, bypass=bypass, clock=lambda: NOW_MS
    )


def test_build_confirm_link():
    assert build_confirm_link(BASE, '1234', 'a@b.ca') == BASE + '1234/a@b.ca'


class TestDispatch:
    """Test suite for NotificationDispatcher.dispatch."""

    def test_sends_confirmation(self, clients, background, audit, notify_client, api_key):
        dispatcher = _dispatcher(clients, background, audit)

        assert dispatcher.dispatch('alice@example.com', '1234', 'template-1', api_key) is True

        clients.get_or_create.assert_called_once_with(api_key)
        notify_client.send_email.assert_called_once_with(
            'template-1',
            'alice@example.com',
            personalisation={'confirm_link': BASE + '1234/alice@example.com'},
            reference=CONFIRM_REFERENCE
        )
        audit.notify_failure.assert_not_called()

    @pytest.mark.parametrize('args', [
        (None, '1234', 'template-1', 'key'),
        ('alice@example.com', '', 'template-1', 'key'),
        ('alice@example.com', '1234', None, 'key'),
        ('alice@example.com', '1234', 'template-1', ''),
    ])
    def test_missing_argument_is_noop(self, clients, background, audit, args):
        """Test nothing is resolved or sent when an input is missing."""
        dispatcher = _dispatcher(clients, background, audit)

        assert dispatcher.dispatch(*args) is False

        clients.get_or_create.assert_not_called()
        assert background.submitted == []
        audit.notify_failure.assert_not_called()

    def test_bypass_resolves_client_but_does_not_send(
        self, clients, background, audit, notify_client, api_key
    ):
        dispatcher = _dispatcher(clients, background, audit, bypass=True)

        assert dispatcher.dispatch('alice@example.com', '1234', 'template-1', api_key) is False

        clients.get_or_create.assert_called_once_with(api_key)
        notify_client.send_email.assert_not_called()
        assert background.submitted == []

    def test_malformed_key_records_failure(self, clients, background, audit):
        clients.get_or_create.side_effect = ValueError('Notification API key is malformed')
        dispatcher = _dispatcher(clients, background, audit)

        assert dispatcher.dispatch('alice@example.com', '1234', 'template-1', 'bad') is False

        audit.notify_failure.assert_called_once()
        template_id, cause, created_at = audit.notify_failure.call_args[0]
        assert template_id == 'template-1'
        assert 'malformed' in cause
        assert created_at == NOW_MS

    def test_send_failure_records_failure(self, clients, background, audit, notify_client, api_key):
        """Test an API rejection is recorded against the template."""
        notify_client.send_email.side_effect = NotifyAPIError(
            'Notification API returned 400',
            status_code=400,
            errors=[{'error': 'BadRequestError'}]
        )
        dispatcher = _dispatcher(clients, background, audit)

        # The caller still sees the send as scheduled
        assert dispatcher.dispatch('alice@example.com', '1234', 'template-1', api_key) is True

        audit.notify_failure.assert_called_once()
        template_id, cause, created_at = audit.notify_failure.call_args[0]
        assert template_id == 'template-1'
        assert '400' in cause
        assert 'BadRequestError' in cause
        assert created_at == NOW_MS

    def test_send_runs_in_background(self, clients, audit, notify_client, api_key):
        """Test the send completes on the worker pool."""
        background = BackgroundTasks(max_workers=1)
        dispatcher = _dispatcher(clients, background, audit)

        dispatcher.dispatch('alice@example.com', '1234', 'template-1', api_key)

        assert background.drain(timeout=5) is True
        notify_client.send_email.assert_called_once()
        background.shutdown()
