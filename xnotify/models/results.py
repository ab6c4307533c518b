"""
Result types returned by store primitives and lifecycle operations.
"""
from dataclasses import dataclass
from enum import Enum


class InsertOutcome(str, Enum):
    """Result of an atomic insert-if-absent."""
    CREATED = 'created'
    ALREADY_EXISTS = 'already_exists'
    FAILED = 'failed'


class RedirectTarget(str, Enum):
    """Caller-visible redirect targets of the lifecycle."""
    THANK_YOU = 'thank_you'
    INPUT_ERROR = 'input_error'
    FAILURE = 'failure'
    GENERIC_ERROR = 'generic_error'
    CONFIRM = 'confirm'
    UNSUBSCRIBE = 'unsubscribe'


@dataclass(frozen=True)
class LifecycleOutcome:
    """
    Redirect resolved by a lifecycle operation.

    Attributes:
        target: Which of the named redirect targets applies
        url: Concrete URL to redirect the caller to
    """
    target: RedirectTarget
    url: str

    @property
    def ok(self) -> bool:
        """True for success targets."""
        return self.target in (
            RedirectTarget.THANK_YOU,
            RedirectTarget.CONFIRM,
            RedirectTarget.UNSUBSCRIBE,
        )
