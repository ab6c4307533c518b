"""
Repository for append-only audit and diagnostic records.

Nothing in the lifecycle reads these back.
"""
import logging
from typing import Any, Dict, Optional

from .dynamodb_client import DynamoDBClient
from ..config import TableNames

logger = logging.getLogger(__name__)


def tombstone_id(created_at: int, topic_id: str) -> str:
    """Sort key of an unsubscribe tombstone."""
    return f'{created_at:013d}#{topic_id}'


class LogsRepository:
    """
    Appends lifecycle events (keyed by email), notification failures
    (keyed by template id) and unsubscribe tombstones. Log items are
    upserted and their lists only grow.
    """

    def __init__(self, tables: TableNames, dynamodb_client: Optional[DynamoDBClient] = None):
        """
        Initialize Logs repository.

        Args:
            tables: Table names (subs_logs, notify_logs, subs_unsubs are used)
            dynamodb_client: Optional DynamoDB client instance
        """
        self.tables = tables
        self.client = dynamodb_client or DynamoDBClient()

    def _append(
        self,
        table_name: str,
        key: Dict[str, Any],
        lists: Dict[str, Dict[str, Any]],
        now_ms: int
    ) -> None:
        set_clauses = [
            'createdAt = if_not_exists(createdAt, :now)',
            'lastUpdated = :now',
        ]
        names: Dict[str, str] = {}
        values: Dict[str, Any] = {':now': now_ms, ':empty': []}

        for index, (list_name, entry) in enumerate(lists.items()):
            name_ref = f'#l{index}'
            value_ref = f':v{index}'
            names[name_ref] = list_name
            values[value_ref] = [entry]
            set_clauses.append(
                f'{name_ref} = list_append(if_not_exists({name_ref}, :empty), {value_ref})'
            )

        self.client.update_item(
            table_name=table_name,
            key=key,
            update_expression='SET ' + ', '.join(set_clauses),
            expression_attribute_names=names,
            expression_attribute_values=values
        )

    def append_subscription_events(
        self,
        email: str,
        events: Dict[str, Dict[str, Any]],
        now_ms: int
    ) -> None:
        """
        Append lifecycle entries for a subscriber.

        Args:
            email: Subscriber email (item key)
            events: Mapping of list name (e.g. 'confirmEmail') to entry
            now_ms: Current time (epoch ms)

        Raises:
            DynamoDBError: On DynamoDB errors
        """
        self._append(self.tables.subs_logs, {'email': email}, events, now_ms)

    def append_notify_failure(self, template_id: str, cause: str, now_ms: int) -> None:
        """
        Append a notification failure for a template.

        Raises:
            DynamoDBError: On DynamoDB errors
        """
        self._append(
            self.tables.notify_logs,
            {'templateId': template_id},
            {'errLogs': {'createdAt': now_ms, 'e': cause}},
            now_ms
        )
        logger.info(f"Recorded notification failure for template {template_id}")

    def add_tombstone(self, email: str, topic_id: str, now_ms: int) -> None:
        """
        Append a standing "unsubscribed" record.

        Records are keyed by (email, unsubsId) where unsubsId is
        ``{createdAt:013d}#{topicId}``, so entries for different topics in
        the same millisecond never collide and sort by time.

        Raises:
            DynamoDBError: On DynamoDB errors
        """
        self.client.put_item(
            table_name=self.tables.subs_unsubs,
            item={
                'unsubsId': tombstone_id(now_ms, topic_id),
                'createdAt': now_ms,
                'email': email,
                'topicId': topic_id,
            }
        )
