"""
Data access layer for DynamoDB operations.
"""
from .dynamodb_client import DynamoDBClient
from .topics_repository import TopicsRepository
from .subscriptions_repository import SubscriptionsRepository
from .logs_repository import LogsRepository
from .exceptions import (
    DynamoDBError,
    ConditionalCheckFailedError,
)

__all__ = [
    'DynamoDBClient',
    'TopicsRepository',
    'SubscriptionsRepository',
    'LogsRepository',
    'DynamoDBError',
    'ConditionalCheckFailedError',
]
