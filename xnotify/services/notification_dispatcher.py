"""
Notification dispatcher for subscription confirmation emails.

Sends are fire-and-forget: the caller gets control back before the
notification API answers, and failures end up in the notify_logs table.
"""

from typing import Callable, Optional

from .audit_log import AuditLogSink
from .background_tasks import BackgroundTasks
from .notify_client import NotifyAPIError, NotifyClient
from .notify_client_cache import NotifyClientCache
from ..utils.clock import epoch_ms
from ..utils.structured_logger import get_structured_logger, mask_email

logger = get_structured_logger('NotificationDispatcher')

CONFIRM_REFERENCE = 'x-notify_subs_confirm'


def build_confirm_link(base_url: str, confirmation_code: str, email: str) -> str:
    """
    Build the confirmation link: ``{base}{code}/{email}``.

    Example:
        >>> build_confirm_link('https://x/subs/confirm/', '123', 'a@b.ca')
        'https://x/subs/confirm/123/a@b.ca'
    """
    return f'{base_url}{confirmation_code}/{email}'


class NotificationDispatcher:
    """
    Sends a single confirmation message through a cached client.

    In bypass mode the send itself is skipped; client resolution and link
    building still run.
    """

    def __init__(
        self,
        clients: NotifyClientCache,
        background: BackgroundTasks,
        audit: AuditLogSink,
        confirm_base_url: str,
        bypass: bool = False,
        clock: Optional[Callable[[], int]] = None
    ):
        """
        Initialize dispatcher.

        Args:
            clients: Notification client cache
            background: Background task runner
            audit: Audit sink (receives failure records)
            confirm_base_url: Prefix of the confirmation link
            bypass: Suppress sends entirely
            clock: Returns current time in epoch ms (defaults to wall clock)
        """
        self.clients = clients
        self.background = background
        self.audit = audit
        self.confirm_base_url = confirm_base_url
        self.bypass = bypass
        self.clock = clock or epoch_ms

    def dispatch(
        self,
        email: Optional[str],
        confirmation_code: Optional[str],
        template_id: Optional[str],
        api_key: Optional[str]
    ) -> bool:
        """
        Schedule a confirmation email.

        Args:
            email: Recipient
            confirmation_code: Subscription code
            template_id: Notification template
            api_key: Notification API key

        Returns:
            True if a send was scheduled
        """
        if not (email and confirmation_code and template_id and api_key):
            return False

        try:
            client = self.clients.get_or_create(api_key)
        except ValueError as e:
            self.audit.notify_failure(template_id, str(e), self.clock())
            return False

        confirm_link = build_confirm_link(self.confirm_base_url, confirmation_code, email)

        if self.bypass:
            logger.info(
                'Send suppressed (bypass mode)',
                operation='dispatch',
                template_id=template_id,
                email=mask_email(email)
            )
            return False

        self.background.submit(
            'notify_send',
            self._send,
            client,
            email,
            template_id,
            confirm_link
        )
        return True

    def _send(
        self,
        client: NotifyClient,
        email: str,
        template_id: str,
        confirm_link: str
    ) -> None:
        try:
            client.send_email(
                template_id,
                email,
                personalisation={'confirm_link': confirm_link},
                reference=CONFIRM_REFERENCE
            )
        except NotifyAPIError as e:
            cause = str(e)
            if e.errors:
                cause = f'{cause}: {e.errors}'
            self.audit.notify_failure(template_id, cause, self.clock())
            return

        logger.debug(
            'Confirmation email sent',
            operation='dispatch',
            template_id=template_id,
            email=mask_email(email)
        )
