"""
Data models for topics and subscriptions.
"""

from .topic import Topic
from .subscription import (
    SubscriptionState,
    ExistenceMarker,
    SubscriptionRecord,
    ConfirmedSubscription,
)
from .results import InsertOutcome, RedirectTarget, LifecycleOutcome

__all__ = [
    'Topic',
    'SubscriptionState',
    'ExistenceMarker',
    'SubscriptionRecord',
    'ConfirmedSubscription',
    'InsertOutcome',
    'RedirectTarget',
    'LifecycleOutcome',
]
