"""
Topic model: an externally administered notification channel.
"""
from dataclasses import dataclass
from typing import Dict, Any


@dataclass(frozen=True)
class Topic:
    """
    Read-only topic configuration.

    Attributes:
        id: Topic identifier
        template_id: Notification template used for confirmation emails
        notify_key: Notification API key for this topic
        confirm_url: Redirect after a successful confirmation
        unsub_url: Redirect after a successful unsubscription
        thank_url: Redirect after a subscribe request
        fail_url: Redirect when storing a subscription fails
        input_err_url: Redirect when the submitted email is malformed
    """
    id: str
    template_id: str = ''
    notify_key: str = ''
    confirm_url: str = ''
    unsub_url: str = ''
    thank_url: str = ''
    fail_url: str = ''
    input_err_url: str = ''

    @classmethod
    def from_item(cls, item: Dict[str, Any]) -> 'Topic':
        """
        Create Topic from a DynamoDB item.

        Args:
            item: Item from the topics table

        Returns:
            Topic instance
        """
        return cls(
            id=item['id'],
            template_id=item.get('templateId', ''),
            notify_key=item.get('notifyKey', ''),
            confirm_url=item.get('confirmURL', ''),
            unsub_url=item.get('unsubURL', ''),
            thank_url=item.get('thankURL', ''),
            fail_url=item.get('failURL', ''),
            input_err_url=item.get('inputErrURL', '')
        )

    def to_item(self) -> Dict[str, Any]:
        """Convert to a DynamoDB item."""
        return {
            'id': self.id,
            'templateId': self.template_id,
            'notifyKey': self.notify_key,
            'confirmURL': self.confirm_url,
            'unsubURL': self.unsub_url,
            'thankURL': self.thank_url,
            'failURL': self.fail_url,
            'inputErrURL': self.input_err_url,
        }
