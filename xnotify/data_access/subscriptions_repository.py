"""
Repository for subscription lifecycle tables.

Every method is a single-item operation. There is no transaction spanning
the existence marker and the subscription record.
"""
import logging
from typing import Any, Dict, Optional

from .dynamodb_client import DynamoDBClient
from .exceptions import ConditionalCheckFailedError, DynamoDBError
from ..config import TableNames
from ..models import (
    ConfirmedSubscription,
    ExistenceMarker,
    InsertOutcome,
    SubscriptionRecord,
)

logger = logging.getLogger(__name__)


class SubscriptionsRepository:
    """
    Repository for existence markers and the unconfirmed and confirmed
    subscription stores.
    """

    def __init__(self, tables: TableNames, dynamodb_client: Optional[DynamoDBClient] = None):
        """
        Initialize Subscriptions repository.

        Args:
            tables: Table names for the subscription collections
            dynamodb_client: Optional DynamoDB client instance
        """
        self.tables = tables
        self.client = dynamodb_client or DynamoDBClient()

    # Existence markers

    def create_marker(self, email: str, topic_id: str) -> InsertOutcome:
        """
        Atomically create the existence marker for (email, topic).

        Args:
            email: Subscriber email
            topic_id: Topic identifier

        Returns:
            CREATED if no marker existed, ALREADY_EXISTS if one did,
            FAILED if the store rejected the write for another reason
        """
        try:
            self.client.put_item(
                table_name=self.tables.subs_exist,
                item=ExistenceMarker(email, topic_id).to_item(),
                condition_expression='attribute_not_exists(email)'
            )
        except ConditionalCheckFailedError:
            return InsertOutcome.ALREADY_EXISTS
        except DynamoDBError as e:
            logger.error(f"Failed to create existence marker for topic {topic_id}: {e}")
            return InsertOutcome.FAILED

        return InsertOutcome.CREATED

    def delete_marker(self, email: str, topic_id: str) -> bool:
        """
        Remove the existence marker for (email, topic).

        Returns:
            True if a marker was removed

        Raises:
            DynamoDBError: On DynamoDB errors
        """
        removed = self.client.delete_item(
            table_name=self.tables.subs_exist,
            key={'email': email, 'topicId': topic_id},
            return_values='ALL_OLD'
        )
        return removed is not None

    def marker_exists(self, email: str, topic_id: str) -> bool:
        """Check whether a marker exists for (email, topic)."""
        item = self.client.get_item(
            table_name=self.tables.subs_exist,
            key={'email': email, 'topicId': topic_id},
            consistent_read=True
        )
        return item is not None

    # Unconfirmed and confirmed subscriptions
    #
    # Both stores are keyed by (email, topicId): the existence marker allows
    # one active subscription per pair, so each pair owns exactly one record.
    # Codes are not unique, even for one email; lookups by code search the
    # email partition and then delete on the full key guarded by the code.

    def _take_by_code(self, table_name: str, email: str, subscode: str) -> Optional[Dict[str, Any]]:
        candidates = self.client.query(
            table_name=table_name,
            key_condition_expression='#email = :email',
            filter_expression='#subscode = :subscode',
            expression_attribute_names={'#email': 'email', '#subscode': 'subscode'},
            expression_attribute_values={':email': email, ':subscode': subscode},
            consistent_read=True
        )

        for candidate in sorted(candidates, key=lambda item: item['topicId']):
            try:
                item = self.client.delete_item(
                    table_name=table_name,
                    key={'email': email, 'topicId': candidate['topicId']},
                    condition_expression='#subscode = :subscode',
                    expression_attribute_names={'#subscode': 'subscode'},
                    expression_attribute_values={':subscode': subscode},
                    return_values='ALL_OLD'
                )
            except ConditionalCheckFailedError:
                # Taken by a concurrent request since the query
                continue
            if item:
                return item
        return None

    def create_unconfirmed(self, record: SubscriptionRecord) -> None:
        """
        Store a new Unconfirmed subscription.

        Raises:
            DynamoDBError: On DynamoDB errors
        """
        self.client.put_item(
            table_name=self.tables.subs_unconfirmed,
            item=record.to_item()
        )
        logger.info(f"Created unconfirmed subscription for topic {record.topic_id}")

    def find_unconfirmed(self, email: str, topic_id: str) -> Optional[SubscriptionRecord]:
        """
        Find the pending subscription for (email, topic).

        Returns:
            SubscriptionRecord or None

        Raises:
            DynamoDBError: On DynamoDB errors
        """
        item = self.client.get_item(
            table_name=self.tables.subs_unconfirmed,
            key={'email': email, 'topicId': topic_id},
            consistent_read=True
        )
        return SubscriptionRecord.from_item(item) if item else None

    def claim_resend(
        self,
        email: str,
        topic_id: str,
        now_ms: int,
        next_not_before: int
    ) -> Optional[SubscriptionRecord]:
        """
        Atomically advance notBefore on the pending record for (email, topic)
        if its resend window has elapsed.

        Args:
            email: Subscriber email
            topic_id: Topic identifier
            now_ms: Current time (epoch ms)
            next_not_before: New notBefore value (epoch ms)

        Returns:
            Updated record if the window was claimed, None if there is no
            pending record or the window has not elapsed

        Raises:
            DynamoDBError: On DynamoDB errors
        """
        try:
            attributes = self.client.update_item(
                table_name=self.tables.subs_unconfirmed,
                key={'email': email, 'topicId': topic_id},
                update_expression='SET #notBefore = :next',
                condition_expression='attribute_exists(#email) AND #notBefore < :now',
                expression_attribute_names={
                    '#email': 'email',
                    '#notBefore': 'notBefore',
                },
                expression_attribute_values={
                    ':next': next_not_before,
                    ':now': now_ms,
                },
                return_values='ALL_NEW'
            )
        except ConditionalCheckFailedError:
            return None

        return SubscriptionRecord.from_item(attributes) if attributes else None

    def take_unconfirmed(self, email: str, subscode: str) -> Optional[SubscriptionRecord]:
        """
        Atomically remove and return an Unconfirmed record for (email, code).

        When several topics share the code, the records are taken one per
        call in topic order.

        Raises:
            DynamoDBError: On DynamoDB errors
        """
        item = self._take_by_code(self.tables.subs_unconfirmed, email, subscode)
        return SubscriptionRecord.from_item(item) if item else None

    def create_confirmed(self, subscription: ConfirmedSubscription) -> None:
        """
        Store a Confirmed subscription.

        Raises:
            DynamoDBError: On DynamoDB errors
        """
        self.client.put_item(
            table_name=self.tables.subs_confirmed,
            item=subscription.to_item()
        )
        logger.info(f"Created confirmed subscription for topic {subscription.topic_id}")

    def take_confirmed(self, email: str, subscode: str) -> Optional[ConfirmedSubscription]:
        """
        Atomically remove and return a Confirmed record for (email, code).

        Raises:
            DynamoDBError: On DynamoDB errors
        """
        item = self._take_by_code(self.tables.subs_confirmed, email, subscode)
        return ConfirmedSubscription.from_item(item) if item else None
