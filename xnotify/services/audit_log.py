"""
Best-effort audit sink for lifecycle events.

Every write is handed to the background runner; failures are logged there
and never reach the caller.
"""

from typing import Any, Callable, Dict

from .background_tasks import BackgroundTasks
from ..data_access import LogsRepository
from ..utils.structured_logger import get_structured_logger

logger = get_structured_logger('AuditLogSink')


class AuditLogSink:
    """
    Appends subscription events, notification failures and unsubscribe
    tombstones without blocking the lifecycle.

    Lifecycle audit entries (subs_logs) can be disabled; failure records
    and tombstones are always written.
    """

    def __init__(
        self,
        repository: LogsRepository,
        background: BackgroundTasks,
        enabled: bool = True
    ):
        """
        Initialize audit sink.

        Args:
            repository: Logs repository
            background: Background task runner
            enabled: Whether lifecycle audit entries are written
        """
        self.repository = repository
        self.background = background
        self.enabled = enabled

    def _submit(self, name: str, fn: Callable[..., Any], *args) -> None:
        self.background.submit(name, fn, *args)

    def _events(self, email: str, events: Dict[str, Dict[str, Any]], now_ms: int) -> None:
        if not self.enabled:
            return
        self._submit('subs_log', self.repository.append_subscription_events, email, events, now_ms)

    def subscription_confirmed(
        self,
        email: str,
        topic_id: str,
        subscode: str,
        subscribed_at: int,
        now_ms: int
    ) -> None:
        """Record the original subscription and its confirmation."""
        self._events(
            email,
            {
                'confirmEmail': {'createdAt': now_ms, 'topicId': topic_id, 'subscode': subscode},
                'subsEmail': {'createdAt': subscribed_at, 'topicId': topic_id, 'subscode': subscode},
            },
            now_ms
        )

    def resend_requested(self, email: str, topic_id: str, dispatched: bool, now_ms: int) -> None:
        """Record a duplicate subscribe and whether it produced a resend."""
        self._events(
            email,
            {'resendEmail': {'createdAt': now_ms, 'topicId': topic_id, 'withEmail': dispatched}},
            now_ms
        )

    def unsubscribed(self, email: str, topic_id: str, subscode: str, now_ms: int) -> None:
        """Record an unsubscription."""
        self._events(
            email,
            {'unsubsEmail': {'createdAt': now_ms, 'topicId': topic_id, 'subscode': subscode}},
            now_ms
        )

    def tombstone(self, email: str, topic_id: str, now_ms: int) -> None:
        """Append the standing unsubscribed record."""
        self._submit('unsubs_tombstone', self.repository.add_tombstone, email, topic_id, now_ms)

    def notify_failure(self, template_id: str, cause: str, now_ms: int) -> None:
        """Append a notification failure for ``template_id``."""
        logger.warning(
            'Notification dispatch failed',
            operation='notify_failure',
            template_id=template_id,
            cause=cause
        )
        self._submit('notify_log', self.repository.append_notify_failure, template_id, cause, now_ms)

