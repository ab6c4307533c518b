"""
Subscription lifecycle: subscribe, resend, confirm and unsubscribe.

States and stores:
- Unconfirmed: SubsUnconfirmed table (created on subscribe)
- Confirmed: SubsConfirmed table (record moved there on confirm)
- Unsubscribed: record removed, tombstone appended, marker deleted

The existence marker for (email, topic) is the only idempotency gate.
It is created with an atomic insert-if-absent on subscribe and removed
on unsubscribe; confirm leaves it in place.

Every operation resolves to a LifecycleOutcome. Subscribe answers with
the topic's thank-you page whether the pair is new or already known, so
callers cannot learn which addresses are subscribed.
"""

import hmac
import secrets
from typing import Callable, Optional

from .audit_log import AuditLogSink
from .notification_dispatcher import NotificationDispatcher
from .notify_client_cache import NotifyClientCache
from .topic_directory import TopicDirectory
from ..config import SubscriptionSettings
from ..data_access import DynamoDBError, SubscriptionsRepository
from ..models import (
    ConfirmedSubscription,
    InsertOutcome,
    LifecycleOutcome,
    RedirectTarget,
    SubscriptionRecord,
    SubscriptionState,
    Topic,
)
from ..utils.clock import epoch_ms
from ..utils.structured_logger import LoggingContext, get_structured_logger, mask_email
from ..utils.validators import ValidationError, validate_email

logger = get_structured_logger('SubscriptionLifecycle')


def generate_confirmation_code(now_ms: int) -> str:
    """
    Random six-digit-or-less number followed by the current milliseconds.

    Codes may collide; lookups always pair the code with the email.
    """
    return f'{secrets.randbelow(1000000)}{now_ms % 1000}'


class SubscriptionLifecycle:
    """
    Subscription state machine over the DynamoDB stores.
    """

    def __init__(
        self,
        settings: SubscriptionSettings,
        topics: TopicDirectory,
        subscriptions: SubscriptionsRepository,
        dispatcher: NotificationDispatcher,
        notify_clients: NotifyClientCache,
        audit: AuditLogSink,
        clock: Optional[Callable[[], int]] = None
    ):
        """
        Initialize the lifecycle.

        Args:
            settings: Service settings
            topics: Topic directory (cached)
            subscriptions: Subscription stores
            dispatcher: Confirmation email dispatcher
            notify_clients: Notification client cache (flushed with topics)
            audit: Best-effort audit sink
            clock: Returns current time in epoch ms (defaults to wall clock)
        """
        self.settings = settings
        self.topics = topics
        self.subscriptions = subscriptions
        self.dispatcher = dispatcher
        self.notify_clients = notify_clients
        self.audit = audit
        self.clock = clock or epoch_ms

    def _generic_error(self) -> LifecycleOutcome:
        return LifecycleOutcome(RedirectTarget.GENERIC_ERROR, self.settings.error_page)

    def _topic_url(self, target: RedirectTarget, url: str) -> LifecycleOutcome:
        # Topic records may omit a URL; fall back to the generic page
        return LifecycleOutcome(target, url or self.settings.error_page)

    def subscribe(self, email: Optional[str], topic_id: Optional[str]) -> LifecycleOutcome:
        """
        Request a subscription of ``email`` to ``topic_id``.

        A first request creates the existence marker and an Unconfirmed
        record, then sends the confirmation email. A repeated request for a
        pair that is already pending or confirmed triggers resend instead.

        Args:
            email: Subscriber email
            topic_id: Topic identifier

        Returns:
            THANK_YOU on both the new and the duplicate path; INPUT_ERROR
            for a malformed email; FAILURE if the store rejected a write;
            GENERIC_ERROR if the topic cannot be resolved
        """
        topic = self.topics.get(topic_id)
        if topic is None:
            logger.info('Subscribe to unknown topic', operation='subscribe', topic_id=topic_id)
            return self._generic_error()

        try:
            validate_email(email)
        except ValidationError as e:
            logger.info(
                'Subscribe with invalid email',
                operation='subscribe',
                topic_id=topic.id,
                reason=e.message
            )
            return self._topic_url(RedirectTarget.INPUT_ERROR, topic.input_err_url)

        now_ms = self.clock()

        with LoggingContext(logger, 'subscribe', topic_id=topic.id, email=mask_email(email)):
            outcome = self.subscriptions.create_marker(email, topic.id)

            if outcome is InsertOutcome.FAILED:
                return self._topic_url(RedirectTarget.FAILURE, topic.fail_url)

            if outcome is InsertOutcome.ALREADY_EXISTS:
                self.resend(email, topic.id, now_ms)
                return self._topic_url(RedirectTarget.THANK_YOU, topic.thank_url)

            if not self._create_pending(email, topic, now_ms):
                return self._topic_url(RedirectTarget.FAILURE, topic.fail_url)

        return self._topic_url(RedirectTarget.THANK_YOU, topic.thank_url)

    def _create_pending(self, email: str, topic: Topic, now_ms: int) -> bool:
        code = self.settings.bypass_subscode or generate_confirmation_code(now_ms)
        record = SubscriptionRecord(
            email=email,
            subscode=code,
            topic_id=topic.id,
            not_before=now_ms + self.settings.resend_window_ms,
            created_at=now_ms,
            template_id=topic.template_id,
            notify_key=topic.notify_key,
            confirm_url=topic.confirm_url
        )

        try:
            self.subscriptions.create_unconfirmed(record)
        except DynamoDBError as e:
            # The marker now blocks this pair with no pending record behind it
            logger.error(
                'Existence marker orphaned: pending record write failed',
                operation='subscribe',
                error=e,
                topic_id=topic.id,
                email=mask_email(email)
            )
            return False

        logger.log_state_change(
            'subscription',
            None,
            SubscriptionState.UNCONFIRMED.value,
            topic_id=topic.id
        )
        self.dispatcher.dispatch(email, code, topic.template_id, topic.notify_key)
        return True

    def resend(self, email: str, topic_id: str, now_ms: Optional[int] = None) -> bool:
        """
        Re-send the confirmation email for a pending subscription, at most
        once per resend window.

        Nothing happens when there is no pending record (already confirmed)
        or when its window has not elapsed.

        Args:
            email: Subscriber email
            topic_id: Topic identifier
            now_ms: Current time (epoch ms); defaults to the clock

        Returns:
            True if a confirmation email was re-dispatched
        """
        if now_ms is None:
            now_ms = self.clock()

        try:
            record = self.subscriptions.claim_resend(
                email,
                topic_id,
                now_ms,
                now_ms + self.settings.resend_window_ms
            )
        except DynamoDBError as e:
            logger.error('Resend lookup failed', operation='resend', error=e, topic_id=topic_id)
            return False

        dispatched = False
        if record is not None:
            dispatched = self.dispatcher.dispatch(
                email,
                record.subscode,
                record.template_id,
                record.notify_key
            )

        self.audit.resend_requested(email, topic_id, record is not None, now_ms)
        return dispatched

    def confirm(self, email: Optional[str], subscode: Optional[str]) -> LifecycleOutcome:
        """
        Confirm a pending subscription.

        Args:
            email: Subscriber email
            subscode: Confirmation code from the email link

        Returns:
            CONFIRM with the stored confirmation URL, or GENERIC_ERROR when
            no pending record matches
        """
        if not email or not subscode:
            return self._generic_error()

        now_ms = self.clock()

        try:
            record = self.subscriptions.take_unconfirmed(email, subscode)
        except DynamoDBError as e:
            logger.error('Confirm lookup failed', operation='confirm', error=e)
            return self._generic_error()

        if record is None:
            logger.info('No pending subscription for confirmation', operation='confirm')
            return self._generic_error()

        try:
            self.subscriptions.create_confirmed(
                ConfirmedSubscription(email=email, subscode=subscode, topic_id=record.topic_id)
            )
        except DynamoDBError as e:
            logger.error(
                'Confirmed record write failed',
                operation='confirm',
                error=e,
                topic_id=record.topic_id,
                email=mask_email(email)
            )
            return self._generic_error()

        logger.log_state_change(
            'subscription',
            SubscriptionState.UNCONFIRMED.value,
            SubscriptionState.CONFIRMED.value,
            topic_id=record.topic_id
        )
        self.audit.subscription_confirmed(
            email, record.topic_id, subscode, record.created_at, now_ms
        )
        return self._topic_url(RedirectTarget.CONFIRM, record.confirm_url)

    def unsubscribe(self, email: Optional[str], subscode: Optional[str]) -> LifecycleOutcome:
        """
        Remove a confirmed subscription and release the (email, topic) pair
        for future subscriptions.

        Args:
            email: Subscriber email
            subscode: Subscription code

        Returns:
            UNSUBSCRIBE with the topic's unsubscribe URL, or GENERIC_ERROR
        """
        if not email or not subscode:
            return self._generic_error()

        now_ms = self.clock()

        try:
            subscription = self.subscriptions.take_confirmed(email, subscode)
        except DynamoDBError as e:
            logger.error('Unsubscribe lookup failed', operation='unsubscribe', error=e)
            return self._generic_error()

        if subscription is None:
            logger.info('No confirmed subscription to remove', operation='unsubscribe')
            return self._generic_error()

        topic_id = subscription.topic_id
        topic = self.topics.get(topic_id)
        if topic is None:
            return self._generic_error()

        self.audit.unsubscribed(email, topic_id, subscode, now_ms)
        self.audit.tombstone(email, topic_id, now_ms)

        try:
            self.subscriptions.delete_marker(email, topic_id)
        except DynamoDBError as e:
            logger.error(
                'Existence marker delete failed',
                operation='unsubscribe',
                error=e,
                topic_id=topic_id,
                email=mask_email(email)
            )
            return self._generic_error()

        logger.log_state_change(
            'subscription',
            SubscriptionState.CONFIRMED.value,
            SubscriptionState.UNSUBSCRIBED.value,
            topic_id=topic_id
        )
        return self._topic_url(RedirectTarget.UNSUBSCRIBE, topic.unsub_url)

    def flush_caches(self, access_code: Optional[str], access_code2: Optional[str]) -> bool:
        """
        Clear the topic and notification client caches.

        Both configured access codes must be set and both must match.

        Returns:
            True if the caches were flushed
        """
        expected = self.settings.flush_access_code
        expected2 = self.settings.flush_access_code2
        if not (expected and expected2 and access_code and access_code2):
            logger.warning('Cache flush denied', operation='flush_caches')
            return False

        granted = hmac.compare_digest(access_code.encode(), expected.encode())
        granted = hmac.compare_digest(access_code2.encode(), expected2.encode()) and granted
        if not granted:
            logger.warning('Cache flush denied', operation='flush_caches')
            return False

        topics = self.topics.flush()
        clients = self.notify_clients.flush()
        logger.info(
            'Caches flushed',
            operation='flush_caches',
            topics=topics,
            clients=clients
        )
        return True
