"""
Wiring for the subscription lifecycle.

Builds every component once from a SubscriptionSettings instance. The
returned lifecycle owns its caches, so separate calls give fully
independent instances.
"""

from typing import Callable, Optional

from .audit_log import AuditLogSink
from .background_tasks import BackgroundTasks
from .bounded_cache import BoundedCache
from .notification_dispatcher import NotificationDispatcher
from .notify_client import NotifyClient
from .notify_client_cache import NotifyClientCache
from .subscription_lifecycle import SubscriptionLifecycle
from .topic_directory import TopicDirectory
from ..config import SubscriptionSettings
from ..data_access import (
    DynamoDBClient,
    LogsRepository,
    SubscriptionsRepository,
    TopicsRepository,
)
from ..models import Topic
from ..utils.clock import epoch_ms


def create_subscription_lifecycle(
    settings: SubscriptionSettings,
    dynamodb_client: Optional[DynamoDBClient] = None,
    background: Optional[BackgroundTasks] = None,
    clock: Optional[Callable[[], int]] = None,
    client_factory: Optional[Callable[..., NotifyClient]] = None
) -> SubscriptionLifecycle:
    """
    Build a SubscriptionLifecycle and its collaborators.

    Args:
        settings: Service settings
        dynamodb_client: Optional DynamoDB client (defaults to settings region)
        background: Optional background task runner
        clock: Optional epoch-ms clock
        client_factory: Optional NotifyClient constructor override

    Returns:
        Ready-to-use SubscriptionLifecycle
    """
    client = dynamodb_client or DynamoDBClient(region=settings.aws_region)
    clock = clock or epoch_ms
    background = background or BackgroundTasks(max_workers=settings.background_workers)

    topic_cache: BoundedCache[str, Topic] = BoundedCache(
        settings.topic_cache_limit, name='topic-cache'
    )
    client_cache: BoundedCache[str, NotifyClient] = BoundedCache(
        settings.notify_cache_limit, name='notify-client-cache'
    )

    topics = TopicDirectory(TopicsRepository(settings.tables.topics, client), topic_cache)
    notify_clients = NotifyClientCache(
        client_cache,
        settings.notify_end_point,
        timeout=settings.notify_timeout_seconds,
        client_factory=client_factory
    )
    audit = AuditLogSink(
        LogsRepository(settings.tables, client),
        background,
        enabled=settings.audit_enabled
    )
    dispatcher = NotificationDispatcher(
        notify_clients,
        background,
        audit,
        settings.confirm_base_url,
        bypass=settings.bypass_mode,
        clock=clock
    )

    return SubscriptionLifecycle(
        settings=settings,
        topics=topics,
        subscriptions=SubscriptionsRepository(settings.tables, client),
        dispatcher=dispatcher,
        notify_clients=notify_clients,
        audit=audit,
        clock=clock
    )
