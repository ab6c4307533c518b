"""
Subscription lifecycle records.

A subscription lives in exactly one of the Unconfirmed, Confirmed or
Unsubscribed stores; moving a record between stores is the state
transition.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Any


class SubscriptionState(str, Enum):
    """Lifecycle states of a subscription."""
    UNCONFIRMED = 'Unconfirmed'
    CONFIRMED = 'Confirmed'
    UNSUBSCRIBED = 'Unsubscribed'


@dataclass(frozen=True)
class ExistenceMarker:
    """Asserts that an active subscription attempt exists for (email, topic)."""
    email: str
    topic_id: str

    def to_item(self) -> Dict[str, Any]:
        return {'email': self.email, 'topicId': self.topic_id}


@dataclass(frozen=True)
class SubscriptionRecord:
    """
    Pending (Unconfirmed) subscription.

    Topic fields are denormalized at creation so confirmation and resend
    never need a second topic lookup.

    Attributes:
        email: Subscriber email address
        subscode: Confirmation code
        topic_id: Topic identifier
        not_before: Earliest time (epoch ms) a resend may be sent
        created_at: Creation time (epoch ms)
        template_id: Notification template captured at creation
        notify_key: Notification API key captured at creation
        confirm_url: Confirmation redirect captured at creation
    """
    email: str
    subscode: str
    topic_id: str
    not_before: int
    created_at: int
    template_id: str = ''
    notify_key: str = ''
    confirm_url: str = ''

    def to_item(self) -> Dict[str, Any]:
        """Convert to a DynamoDB item."""
        return {
            'email': self.email,
            'subscode': self.subscode,
            'topicId': self.topic_id,
            'notBefore': self.not_before,
            'createdAt': self.created_at,
            'templateId': self.template_id,
            'notifyKey': self.notify_key,
            'confirmURL': self.confirm_url,
        }

    @classmethod
    def from_item(cls, item: Dict[str, Any]) -> 'SubscriptionRecord':
        """
        Create SubscriptionRecord from a DynamoDB item.

        Numbers come back from DynamoDB as Decimal.
        """
        return cls(
            email=item['email'],
            subscode=item['subscode'],
            topic_id=item['topicId'],
            not_before=int(item.get('notBefore', 0)),
            created_at=int(item.get('createdAt', 0)),
            template_id=item.get('templateId', ''),
            notify_key=item.get('notifyKey', ''),
            confirm_url=item.get('confirmURL', '')
        )


@dataclass(frozen=True)
class ConfirmedSubscription:
    """Confirmed subscription for (email, topic) identified by its code."""
    email: str
    subscode: str
    topic_id: str

    def to_item(self) -> Dict[str, Any]:
        return {
            'email': self.email,
            'subscode': self.subscode,
            'topicId': self.topic_id,
        }

    @classmethod
    def from_item(cls, item: Dict[str, Any]) -> 'ConfirmedSubscription':
        return cls(
            email=item['email'],
            subscode=item['subscode'],
            topic_id=item['topicId']
        )
