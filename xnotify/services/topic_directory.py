"""
Topic directory: cached lookup from topic identifier to topic configuration.
"""

from typing import Optional

from .bounded_cache import BoundedCache
from ..data_access import DynamoDBError, TopicsRepository
from ..models import Topic
from ..utils.structured_logger import get_structured_logger

logger = get_structured_logger('TopicDirectory')


class TopicDirectory:
    """
    Resolves topics through a bounded cache backed by the Topics table.

    Concurrent misses for the same topic may each fetch from the store;
    the last one to finish wins the cache slot.
    """

    def __init__(self, repository: TopicsRepository, cache: BoundedCache[str, Topic]):
        """
        Initialize topic directory.

        Args:
            repository: Topics repository
            cache: Cache for resolved topics
        """
        self.repository = repository
        self.cache = cache

    def get(self, topic_id: Optional[str]) -> Optional[Topic]:
        """
        Resolve a topic.

        Args:
            topic_id: Topic identifier

        Returns:
            Topic, or None if it does not exist or could not be fetched
        """
        if not topic_id:
            return None

        topic = self.cache.get(topic_id)
        if topic is not None:
            return topic

        try:
            topic = self.repository.get_topic(topic_id)
        except DynamoDBError as e:
            logger.error(
                'Topic fetch failed',
                operation='get_topic',
                error=e,
                topic_id=topic_id
            )
            return None

        if topic is None:
            return None

        self.cache.put(topic_id, topic)
        return topic

    def flush(self) -> int:
        """Drop every cached topic."""
        return self.cache.clear()
