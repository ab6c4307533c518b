"""
Default DynamoDB table names for the subscription collections.

Deployments override any of them through the environment, e.g.
``SUBS_EXIST_TABLE_NAME=SubsExist-prod``. The shorter ``SUBS_EXIST_TABLE``
form is accepted too.
"""
import os
from typing import Optional

TOPICS_TABLE_NAME = 'Topics'
SUBS_EXIST_TABLE_NAME = 'SubsExist'
SUBS_UNCONFIRMED_TABLE_NAME = 'SubsUnconfirmed'
SUBS_CONFIRMED_TABLE_NAME = 'SubsConfirmed'
SUBS_UNSUBS_TABLE_NAME = 'SubsUnsubs'
SUBS_LOGS_TABLE_NAME = 'SubsLogs'
NOTIFY_LOGS_TABLE_NAME = 'NotifyLogs'

# Environment variable -> default table name
DEFAULT_TABLE_NAMES = {
    'TOPICS_TABLE_NAME': TOPICS_TABLE_NAME,
    'SUBS_EXIST_TABLE_NAME': SUBS_EXIST_TABLE_NAME,
    'SUBS_UNCONFIRMED_TABLE_NAME': SUBS_UNCONFIRMED_TABLE_NAME,
    'SUBS_CONFIRMED_TABLE_NAME': SUBS_CONFIRMED_TABLE_NAME,
    'SUBS_UNSUBS_TABLE_NAME': SUBS_UNSUBS_TABLE_NAME,
    'SUBS_LOGS_TABLE_NAME': SUBS_LOGS_TABLE_NAME,
    'NOTIFY_LOGS_TABLE_NAME': NOTIFY_LOGS_TABLE_NAME,
}


def get_table_name(table_key: str, default: Optional[str] = None) -> str:
    """
    Resolve a table name: ``<X>_TABLE_NAME``, then ``<X>_TABLE``, then the
    default.

    Args:
        table_key: Environment variable key (e.g. 'TOPICS_TABLE_NAME')
        default: Fallback; the built-in default for ``table_key`` if omitted

    Returns:
        Table name

    Example:
        >>> os.environ['TOPICS_TABLE'] = 'Topics-dev'
        >>> get_table_name('TOPICS_TABLE_NAME')
        'Topics-dev'
    """
    for env_key in (table_key, table_key.replace('_TABLE_NAME', '_TABLE')):
        value = os.getenv(env_key)
        if value:
            return value

    if default is not None:
        return default
    return DEFAULT_TABLE_NAMES.get(table_key, '')
