"""
Configuration for the subscription lifecycle service.

Settings are constructed once at startup (usually from environment
variables) and handed to every component.
"""

import os
from dataclasses import dataclass, field
from typing import Optional

from . import table_names
from .table_names import get_table_name


def _parse_bool(value: Optional[str]) -> bool:
    """Parse boolean value from an environment string."""
    if value is None:
        return False
    return value.strip().lower() in ('true', '1', 'yes', 'on')


@dataclass(frozen=True)
class TableNames:
    """DynamoDB table names for every collection the service touches."""

    topics: str = table_names.TOPICS_TABLE_NAME
    subs_exist: str = table_names.SUBS_EXIST_TABLE_NAME
    subs_unconfirmed: str = table_names.SUBS_UNCONFIRMED_TABLE_NAME
    subs_confirmed: str = table_names.SUBS_CONFIRMED_TABLE_NAME
    subs_unsubs: str = table_names.SUBS_UNSUBS_TABLE_NAME
    subs_logs: str = table_names.SUBS_LOGS_TABLE_NAME
    notify_logs: str = table_names.NOTIFY_LOGS_TABLE_NAME

    @classmethod
    def from_environment(cls) -> 'TableNames':
        """Resolve table names, honouring environment overrides."""
        return cls(
            topics=get_table_name('TOPICS_TABLE_NAME'),
            subs_exist=get_table_name('SUBS_EXIST_TABLE_NAME'),
            subs_unconfirmed=get_table_name('SUBS_UNCONFIRMED_TABLE_NAME'),
            subs_confirmed=get_table_name('SUBS_CONFIRMED_TABLE_NAME'),
            subs_unsubs=get_table_name('SUBS_UNSUBS_TABLE_NAME'),
            subs_logs=get_table_name('SUBS_LOGS_TABLE_NAME'),
            notify_logs=get_table_name('NOTIFY_LOGS_TABLE_NAME'),
        )


@dataclass(frozen=True)
class SubscriptionSettings:
    """
    Configuration for subscription lifecycle processing.

    Attributes:
        error_page: Generic error redirect target
        notify_end_point: Base URL of the notification API
        confirm_base_url: Prefix of the confirmation link sent by email
        resend_window_minutes: Minimum delay between confirmation emails
        bypass_subscode: Fixed confirmation code; when set, sends are suppressed
        topic_cache_limit: Capacity of the topic directory cache
        notify_cache_limit: Capacity of the notification client cache
        flush_access_code: First secret required to flush caches
        flush_access_code2: Second secret required to flush caches
        audit_enabled: Whether lifecycle audit entries are written
        notify_timeout_seconds: HTTP timeout for notification requests
        background_workers: Size of the detached task pool
        aws_region: Region of the DynamoDB tables
        tables: DynamoDB table names
    """

    error_page: str = 'https://canada.ca'
    notify_end_point: str = 'https://api.notification.alpha.canada.ca'
    confirm_base_url: str = 'https://apps.canada.ca/x-notify/subs/confirm/'
    resend_window_minutes: int = 25
    bypass_subscode: Optional[str] = None
    topic_cache_limit: int = 50
    notify_cache_limit: int = 40
    flush_access_code: Optional[str] = None
    flush_access_code2: Optional[str] = None
    audit_enabled: bool = True
    notify_timeout_seconds: float = 10.0
    background_workers: int = 4
    aws_region: str = 'us-east-1'
    tables: TableNames = field(default_factory=TableNames)

    def __post_init__(self):
        """Validate configuration on initialization."""
        self.validate()

    @property
    def resend_window_ms(self) -> int:
        """Resend window in milliseconds."""
        return self.resend_window_minutes * 60 * 1000

    @property
    def bypass_mode(self) -> bool:
        """True when sends are suppressed and a fixed code is used."""
        return bool(self.bypass_subscode)

    def validate(self) -> None:
        """
        Validate configuration parameters.

        Raises:
            ValueError: If any parameter is outside its valid range
        """
        for name in ('error_page', 'notify_end_point', 'confirm_base_url'):
            if not getattr(self, name):
                raise ValueError(f"{name} must not be empty")

        if self.resend_window_minutes < 0:
            raise ValueError(
                f"resend_window_minutes must be non-negative, "
                f"got {self.resend_window_minutes}"
            )

        if self.topic_cache_limit < 1:
            raise ValueError(
                f"topic_cache_limit must be at least 1, got {self.topic_cache_limit}"
            )

        if self.notify_cache_limit < 1:
            raise ValueError(
                f"notify_cache_limit must be at least 1, got {self.notify_cache_limit}"
            )

        if self.notify_timeout_seconds <= 0:
            raise ValueError(
                f"notify_timeout_seconds must be positive, "
                f"got {self.notify_timeout_seconds}"
            )

        if self.background_workers < 1:
            raise ValueError(
                f"background_workers must be at least 1, got {self.background_workers}"
            )

    @classmethod
    def from_environment(cls) -> 'SubscriptionSettings':
        """
        Load settings from environment variables with defaults.

        Returns:
            Validated SubscriptionSettings

        Raises:
            ValueError: If a variable cannot be parsed or is out of range
        """
        return cls(
            error_page=os.getenv('ERROR_PAGE', 'https://canada.ca'),
            notify_end_point=os.getenv(
                'NOTIFY_END_POINT', 'https://api.notification.alpha.canada.ca'
            ),
            confirm_base_url=os.getenv(
                'CONFIRM_BASE_URL', 'https://apps.canada.ca/x-notify/subs/confirm/'
            ),
            resend_window_minutes=int(os.getenv('NOT_SEND_BEFORE', '25')),
            bypass_subscode=os.getenv('SUBSCODE') or None,
            topic_cache_limit=int(os.getenv('TOPIC_CACHE_LIMIT', '50')),
            notify_cache_limit=int(os.getenv('NOTIFY_CACHE_LIMIT', '40')),
            flush_access_code=os.getenv('FLUSH_ACCESS_CODE') or None,
            flush_access_code2=os.getenv('FLUSH_ACCESS_CODE2') or None,
            audit_enabled=not _parse_bool(os.getenv('PROD_NO_LOG')),
            notify_timeout_seconds=float(os.getenv('NOTIFY_TIMEOUT_SECONDS', '10')),
            background_workers=int(os.getenv('BACKGROUND_WORKERS', '4')),
            aws_region=os.getenv('AWS_REGION', 'us-east-1'),
            tables=TableNames.from_environment(),
        )
