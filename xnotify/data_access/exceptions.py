"""
Custom exceptions for data access layer.
"""


class DynamoDBError(Exception):
    """Base exception for DynamoDB operations (downstream read/write failure)."""
    pass


class ConditionalCheckFailedError(DynamoDBError):
    """Exception raised when a conditional check fails."""
    pass
