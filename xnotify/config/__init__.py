"""
Service configuration.
"""

from .settings import SubscriptionSettings, TableNames
from .table_names import get_table_name

__all__ = [
    'SubscriptionSettings',
    'TableNames',
    'get_table_name',
]
