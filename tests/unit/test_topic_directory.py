"""
Unit tests for the cached topic directory.
"""
from unittest.mock import Mock

import pytest

from xnotify.data_access import DynamoDBError, TopicsRepository
from xnotify.models import Topic
from xnotify.services.bounded_cache import BoundedCache
from xnotify.services.topic_directory import TopicDirectory


@pytest.fixture
def repository():
    return Mock(spec=TopicsRepository)


@pytest.fixture
def directory(repository):
    return TopicDirectory(repository, BoundedCache(2, name='topic-cache'))


class TestTopicDirectory:
    """Test suite for TopicDirectory."""

    def test_hit_avoids_store(self, directory, repository):
        """Test a cached topic is served without a second fetch."""
        repository.get_topic.return_value = Topic(id='t1', template_id='tpl')

        first = directory.get('t1')
        second = directory.get('t1')

        assert first == second == Topic(id='t1', template_id='tpl')
        repository.get_topic.assert_called_once_with('t1')

    def test_unknown_topic_not_cached(self, directory, repository):
        """Test absent topics are looked up again next time."""
        repository.get_topic.return_value = None

        assert directory.get('nope') is None
        assert directory.get('nope') is None
        assert repository.get_topic.call_count == 2

    def test_store_error_returns_none(self, directory, repository):
        repository.get_topic.side_effect = DynamoDBError('down')

        assert directory.get('t1') is None
        assert 't1' not in directory.cache

    def test_empty_id(self, directory, repository):
        assert directory.get('') is None
        assert directory.get(None) is None
        repository.get_topic.assert_not_called()

    def test_flush_forces_refetch(self, directory, repository):
        """Test a flushed topic is fetched again."""
        repository.get_topic.return_value = Topic(id='t1')
        directory.get('t1')

        assert directory.flush() == 1
        directory.get('t1')

        assert repository.get_topic.call_count == 2

    def test_capacity_bound(self, directory, repository):
        """Test the oldest topic is evicted once capacity is exceeded."""
        repository.get_topic.side_effect = lambda topic_id: Topic(id=topic_id)

        for topic_id in ('t1', 't2', 't3'):
            directory.get(topic_id)

        assert len(directory.cache) == 2
        assert 't1' not in directory.cache
