"""
Repository for Topics table operations.
"""
import logging
from typing import Optional

from .dynamodb_client import DynamoDBClient
from ..models import Topic

logger = logging.getLogger(__name__)


class TopicsRepository:
    """
    Read-only access to externally administered topic records.
    """

    def __init__(self, table_name: str, dynamodb_client: Optional[DynamoDBClient] = None):
        """
        Initialize Topics repository.

        Args:
            table_name: Name of the Topics table
            dynamodb_client: Optional DynamoDB client instance
        """
        self.table_name = table_name
        self.client = dynamodb_client or DynamoDBClient()

    def get_topic(self, topic_id: str) -> Optional[Topic]:
        """
        Get topic by ID.

        Args:
            topic_id: Topic identifier

        Returns:
            Topic or None if not found

        Raises:
            DynamoDBError: On DynamoDB errors
        """
        item = self.client.get_item(
            table_name=self.table_name,
            key={'id': topic_id}
        )
        if not item:
            logger.info(f"Topic {topic_id} not found")
            return None
        return Topic.from_item(item)
