"""
Subscription services: caches, dispatch, audit and the lifecycle.
"""

from .bounded_cache import BoundedCache
from .background_tasks import BackgroundTasks
from .topic_directory import TopicDirectory
from .notify_client import NotifyClient, NotifyAPIError
from .notify_client_cache import NotifyClientCache
from .notification_dispatcher import NotificationDispatcher, build_confirm_link
from .audit_log import AuditLogSink
from .subscription_lifecycle import SubscriptionLifecycle
from .factory import create_subscription_lifecycle

__all__ = [
    'BoundedCache',
    'BackgroundTasks',
    'TopicDirectory',
    'NotifyClient',
    'NotifyAPIError',
    'NotifyClientCache',
    'NotificationDispatcher',
    'build_confirm_link',
    'AuditLogSink',
    'SubscriptionLifecycle',
    'create_subscription_lifecycle',
]
