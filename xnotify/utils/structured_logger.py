"""
JSON log lines for the subscription service.

Every line carries the component, level and message, the topic and request
ids when known, an optional operation name and a free-form ``context``
object, so CloudWatch Logs Insights can filter on any of them.

Subscriber emails are personal data: pass them through ``mask_email``
before they reach a log call.
"""

import json
import logging
import os
import time
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional


def _json_default(value: Any) -> Any:
    # DynamoDB hands numbers back as Decimal
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    return str(value)


def mask_email(email: Optional[str]) -> Optional[str]:
    """
    Keep the first character and the domain of an address.

    Example:
        >>> mask_email('alice@example.com')
        'a***@example.com'
    """
    if not email:
        return email
    local, sep, domain = email.partition('@')
    if not sep:
        return '***'
    return f'{local[:1]}***@{domain}'


class StructuredLogger:
    """
    Component logger emitting one JSON object per line.

    Attributes:
        component: Name written to every entry (e.g. 'SubscriptionLifecycle')
        topic_id: Topic correlation id, if bound
        request_id: Lambda request id, if bound
    """

    def __init__(
        self,
        component: str,
        topic_id: Optional[str] = None,
        request_id: Optional[str] = None
    ):
        self.component = component
        self.topic_id = topic_id
        self.request_id = request_id
        self.logger = logging.getLogger(component)
        self.logger.setLevel(
            getattr(logging, os.getenv('LOG_LEVEL', 'INFO').upper(), logging.INFO)
        )

    def _format_log(
        self,
        level: str,
        message: str,
        operation: Optional[str] = None,
        **context
    ) -> str:
        entry: Dict[str, Any] = {
            'timestamp': datetime.now(timezone.utc).strftime('%Y-%m-%dT%H:%M:%S.%fZ'),
            'level': level,
            'component': self.component,
            'message': message,
        }
        for field, value in (('topicId', self.topic_id), ('requestId', self.request_id),
                             ('operation', operation)):
            if value:
                entry[field] = value
        if context:
            entry['context'] = context
        return json.dumps(entry, default=_json_default)

    def _emit(self, level: int, message: str, operation: Optional[str], context: Dict[str, Any]) -> None:
        if self.logger.isEnabledFor(level):
            self.logger.log(
                level,
                self._format_log(logging.getLevelName(level), message, operation, **context)
            )

    def debug(self, message: str, operation: Optional[str] = None, **context) -> None:
        self._emit(logging.DEBUG, message, operation, context)

    def info(self, message: str, operation: Optional[str] = None, **context) -> None:
        self._emit(logging.INFO, message, operation, context)

    def warning(self, message: str, operation: Optional[str] = None, **context) -> None:
        self._emit(logging.WARNING, message, operation, context)

    def error(
        self,
        message: str,
        operation: Optional[str] = None,
        error: Optional[BaseException] = None,
        **context
    ) -> None:
        """
        Log at ERROR, adding ``error_type`` and ``error_message`` to the
        context when an exception is given.
        """
        if error is not None:
            context['error_type'] = type(error).__name__
            context['error_message'] = str(error)
        self._emit(logging.ERROR, message, operation, context)

    def log_state_change(self, state_type: str, old_value: Any, new_value: Any, **context) -> None:
        """Log a lifecycle transition, e.g. Unconfirmed -> Confirmed."""
        self.info(
            f'State change: {state_type}',
            operation='state_change',
            state_type=state_type,
            old_value=str(old_value),
            new_value=str(new_value),
            **context
        )

    def log_performance(self, operation: str, duration_ms: float, **context) -> None:
        self.debug(
            f'Performance: {operation}',
            operation='performance',
            operation_name=operation,
            duration_ms=round(duration_ms, 3),
            **context
        )


class LoggingContext:
    """
    Times a block: logs its start at DEBUG, then its duration on success
    or an ERROR entry if it raises. Exceptions are never suppressed.

    Example:
        >>> with LoggingContext(logger, 'subscribe', topic_id='t1'):
        ...     do_work()
    """

    def __init__(self, logger: StructuredLogger, operation: str, **context):
        self.logger = logger
        self.operation = operation
        self.context = context
        self._started: Optional[float] = None

    def __enter__(self) -> 'LoggingContext':
        self._started = time.perf_counter()
        self.logger.debug(f'Starting operation: {self.operation}', operation=self.operation, **self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        duration_ms = (time.perf_counter() - (self._started or time.perf_counter())) * 1000
        if exc_type is None:
            self.logger.log_performance(self.operation, duration_ms, **self.context)
        else:
            self.logger.error(
                f'Operation failed: {self.operation}',
                operation=self.operation,
                error=exc_val,
                duration_ms=round(duration_ms, 3),
                **self.context
            )
        return False


def get_structured_logger(
    component: str,
    correlation_id: Optional[str] = None,
    topic_id: Optional[str] = None,
    request_id: Optional[str] = None
) -> StructuredLogger:
    """
    Build a StructuredLogger.

    Args:
        component: Component name
        correlation_id: Used as the request id when request_id is not given
        topic_id: Topic id to stamp on every entry
        request_id: Lambda request id

    Returns:
        StructuredLogger
    """
    return StructuredLogger(
        component=component,
        topic_id=topic_id,
        request_id=request_id or correlation_id
    )


def configure_lambda_logging() -> None:
    """
    Route the root logger to stdout with the bare message as format, since
    entries are already JSON. Call once at handler import time.
    """
    level_name = os.getenv('LOG_LEVEL', 'INFO').upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format='%(message)s',
        force=True
    )

    if level_name != 'DEBUG':
        for noisy in ('boto3', 'botocore', 'urllib3'):
            logging.getLogger(noisy).setLevel(logging.WARNING)
