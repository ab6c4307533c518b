"""
Thin DynamoDB wrapper exposing the single-item atomic primitives the
subscription stores are built on:

- insert-if-absent: put_item with a condition
- find-and-delete: delete_item returning ALL_OLD
- find-and-update: update_item with a condition returning ALL_NEW

boto3 ClientErrors are translated into the data access exceptions so that
callers never import botocore.
"""
import logging
from typing import Any, Callable, Dict, List, Optional

import boto3
from botocore.exceptions import ClientError

from .exceptions import ConditionalCheckFailedError, DynamoDBError

logger = logging.getLogger(__name__)

CONDITIONAL_CHECK_FAILED = 'ConditionalCheckFailedException'


def _expression_kwargs(
    condition_expression: Optional[str] = None,
    expression_attribute_values: Optional[Dict[str, Any]] = None,
    expression_attribute_names: Optional[Dict[str, str]] = None,
    filter_expression: Optional[str] = None
) -> Dict[str, Any]:
    # DynamoDB rejects empty expression maps, so only pass what is set
    kwargs: Dict[str, Any] = {}
    if condition_expression:
        kwargs['ConditionExpression'] = condition_expression
    if filter_expression:
        kwargs['FilterExpression'] = filter_expression
    if expression_attribute_values:
        kwargs['ExpressionAttributeValues'] = expression_attribute_values
    if expression_attribute_names:
        kwargs['ExpressionAttributeNames'] = expression_attribute_names
    return kwargs


class DynamoDBClient:
    """
    DynamoDB access for one region, shared by every repository.
    """

    def __init__(self, region: str = 'us-east-1'):
        """
        Initialize DynamoDB client.

        Args:
            region: AWS region of the subscription tables
        """
        self.dynamodb = boto3.resource('dynamodb', region_name=region)

    def get_table(self, table_name: str):
        """Table resource for ``table_name``."""
        return self.dynamodb.Table(table_name)

    def _call(
        self,
        table_name: str,
        action: str,
        operation: Callable[..., Dict[str, Any]],
        **kwargs
    ) -> Dict[str, Any]:
        try:
            return operation(**kwargs)
        except ClientError as e:
            if e.response['Error']['Code'] == CONDITIONAL_CHECK_FAILED:
                raise ConditionalCheckFailedError(
                    f"Condition not met on {action} in {table_name}"
                ) from e
            logger.error(f"DynamoDB {action} on {table_name} failed: {e}")
            raise DynamoDBError(f"Failed to {action} on {table_name}: {e}") from e

    def get_item(
        self,
        table_name: str,
        key: Dict[str, Any],
        consistent_read: bool = False
    ) -> Optional[Dict[str, Any]]:
        """
        Read one item by primary key.

        Returns:
            Item dict or None if absent

        Raises:
            DynamoDBError: On DynamoDB errors
        """
        table = self.get_table(table_name)
        response = self._call(
            table_name, 'get_item', table.get_item,
            Key=key,
            ConsistentRead=consistent_read
        )
        return response.get('Item')

    def put_item(
        self,
        table_name: str,
        item: Dict[str, Any],
        condition_expression: Optional[str] = None,
        expression_attribute_values: Optional[Dict[str, Any]] = None,
        expression_attribute_names: Optional[Dict[str, str]] = None
    ) -> None:
        """
        Write one item, optionally only if a condition holds.

        Args:
            table_name: Name of the table
            item: Full item
            condition_expression: e.g. ``attribute_not_exists(email)``
            expression_attribute_values: Values referenced by the condition
            expression_attribute_names: Names referenced by the condition

        Raises:
            ConditionalCheckFailedError: If the condition is not met
            DynamoDBError: On other DynamoDB errors
        """
        table = self.get_table(table_name)
        self._call(
            table_name, 'put_item', table.put_item,
            Item=item,
            **_expression_kwargs(
                condition_expression,
                expression_attribute_values,
                expression_attribute_names
            )
        )

    def update_item(
        self,
        table_name: str,
        key: Dict[str, Any],
        update_expression: str,
        condition_expression: Optional[str] = None,
        expression_attribute_values: Optional[Dict[str, Any]] = None,
        expression_attribute_names: Optional[Dict[str, str]] = None,
        return_values: str = 'NONE'
    ) -> Optional[Dict[str, Any]]:
        """
        Update (or upsert) one item, optionally only if a condition holds.

        Args:
            table_name: Name of the table
            key: Primary key
            update_expression: ``SET ...`` expression
            condition_expression: Optional guard
            expression_attribute_values: Values for the expressions
            expression_attribute_names: Names for the expressions
            return_values: NONE, ALL_OLD, UPDATED_OLD, ALL_NEW or UPDATED_NEW

        Returns:
            Returned attributes, or None when return_values is NONE

        Raises:
            ConditionalCheckFailedError: If the condition is not met
            DynamoDBError: On other DynamoDB errors
        """
        table = self.get_table(table_name)
        response = self._call(
            table_name, 'update_item', table.update_item,
            Key=key,
            UpdateExpression=update_expression,
            ReturnValues=return_values,
            **_expression_kwargs(
                condition_expression,
                expression_attribute_values,
                expression_attribute_names
            )
        )
        return response.get('Attributes')

    def delete_item(
        self,
        table_name: str,
        key: Dict[str, Any],
        condition_expression: Optional[str] = None,
        expression_attribute_values: Optional[Dict[str, Any]] = None,
        expression_attribute_names: Optional[Dict[str, str]] = None,
        return_values: str = 'NONE'
    ) -> Optional[Dict[str, Any]]:
        """
        Delete one item by primary key, optionally only if a condition holds.

        With return_values='ALL_OLD' only the caller that actually removed
        the item receives it, which makes this a find-and-delete.

        Returns:
            Deleted item, or None if it did not exist or return_values is NONE

        Raises:
            ConditionalCheckFailedError: If the condition is not met
            DynamoDBError: On other DynamoDB errors
        """
        table = self.get_table(table_name)
        response = self._call(
            table_name, 'delete_item', table.delete_item,
            Key=key,
            ReturnValues=return_values,
            **_expression_kwargs(
                condition_expression,
                expression_attribute_values,
                expression_attribute_names
            )
        )
        return response.get('Attributes')

    def query(
        self,
        table_name: str,
        key_condition_expression: str,
        expression_attribute_values: Dict[str, Any],
        filter_expression: Optional[str] = None,
        expression_attribute_names: Optional[Dict[str, str]] = None,
        consistent_read: bool = False
    ) -> List[Dict[str, Any]]:
        """
        Query one partition (single page).

        Partitions here are one subscriber's records, far below the 1 MB
        page limit.

        Returns:
            Matching items after the filter

        Raises:
            DynamoDBError: On DynamoDB errors
        """
        table = self.get_table(table_name)
        response = self._call(
            table_name, 'query', table.query,
            KeyConditionExpression=key_condition_expression,
            ConsistentRead=consistent_read,
            **_expression_kwargs(
                expression_attribute_values=expression_attribute_values,
                expression_attribute_names=expression_attribute_names,
                filter_expression=filter_expression
            )
        )
        return response.get('Items', [])
