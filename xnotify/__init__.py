"""
x-notify subscription lifecycle service.

Manages request, email confirmation and unsubscription of a subscriber to
a notification topic, backed by DynamoDB and the GC Notify email API.
"""

__version__ = '1.0.0'
