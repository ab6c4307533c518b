"""
Pytest configuration and fixtures.
"""
import pytest
import os
import sys

from moto import mock_aws

# Make the xnotify package importable without an install
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from xnotify.data_access.dynamodb_client import DynamoDBClient  # noqa: E402
from xnotify.models import Topic  # noqa: E402

TEST_API_KEY = (
    'testkey'
    '-11111111-2222-3333-4444-555555555555'
    '-66666666-7777-8888-9999-000000000000'
)


@pytest.fixture(scope="session", autouse=True)
def aws_credentials():
    """Mock AWS credentials for testing."""
    os.environ["AWS_ACCESS_KEY_ID"] = "testing"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
    os.environ["AWS_SECURITY_TOKEN"] = "testing"
    os.environ["AWS_SESSION_TOKEN"] = "testing"
    os.environ["AWS_DEFAULT_REGION"] = "us-east-1"


@pytest.fixture(scope="session", autouse=True)
def env_vars():
    """Set up environment variables for tests."""
    os.environ["AWS_REGION"] = "us-east-1"
    os.environ["ERROR_PAGE"] = "https://example.gc.ca/error"
    os.environ["NOTIFY_END_POINT"] = "https://notify.test"
    os.environ["CONFIRM_BASE_URL"] = "https://xnotify.test/subs/confirm/"
    os.environ["LOG_LEVEL"] = "DEBUG"


def _hash_table(resource, name, hash_key, hash_type='S'):
    resource.create_table(
        TableName=name,
        KeySchema=[{'AttributeName': hash_key, 'KeyType': 'HASH'}],
        AttributeDefinitions=[{'AttributeName': hash_key, 'AttributeType': hash_type}],
        BillingMode='PAY_PER_REQUEST'
    )


def _composite_table(resource, name, hash_key, range_key):
    resource.create_table(
        TableName=name,
        KeySchema=[
            {'AttributeName': hash_key, 'KeyType': 'HASH'},
            {'AttributeName': range_key, 'KeyType': 'RANGE'}
        ],
        AttributeDefinitions=[
            {'AttributeName': hash_key, 'AttributeType': 'S'},
            {'AttributeName': range_key, 'AttributeType': 'S'}
        ],
        BillingMode='PAY_PER_REQUEST'
    )


@pytest.fixture
def dynamodb_tables():
    """Create every subscription table in a mocked DynamoDB."""
    with mock_aws():
        client = DynamoDBClient()
        resource = client.dynamodb

        _hash_table(resource, 'Topics', 'id')
        _composite_table(resource, 'SubsExist', 'email', 'topicId')
        _composite_table(resource, 'SubsUnconfirmed', 'email', 'topicId')
        _composite_table(resource, 'SubsConfirmed', 'email', 'topicId')
        _composite_table(resource, 'SubsUnsubs', 'email', 'unsubsId')
        _hash_table(resource, 'SubsLogs', 'email')
        _hash_table(resource, 'NotifyLogs', 'templateId')

        yield client


@pytest.fixture
def sample_topic():
    """Topic with every redirect configured."""
    return Topic(
        id='topic-1',
        template_id='template-1',
        notify_key=TEST_API_KEY,
        confirm_url='https://example.gc.ca/confirmed',
        unsub_url='https://example.gc.ca/unsubscribed',
        thank_url='https://example.gc.ca/thanks',
        fail_url='https://example.gc.ca/failed',
        input_err_url='https://example.gc.ca/bad-email'
    )


@pytest.fixture
def seeded_tables(dynamodb_tables, sample_topic):
    """Mocked tables with the sample topic stored."""
    dynamodb_tables.get_table('Topics').put_item(Item=sample_topic.to_item())
    return dynamodb_tables


@pytest.fixture
def api_key():
    """Well-formed notification API key."""
    return TEST_API_KEY
