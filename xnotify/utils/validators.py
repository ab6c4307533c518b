"""
Input validation utilities for subscription request parameters.
"""
import re
from typing import Optional


# something@something.tld, applied with fullmatch
EMAIL_PATTERN = re.compile(r'[^@\s]+@[^@\s]+\.[^@\s]+')
SUBSCODE_PATTERN = re.compile(r'[A-Za-z0-9_-]{1,64}')


class ValidationError(Exception):
    """Raised when input validation fails."""

    def __init__(self, message: str, field: Optional[str] = None):
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
        """
        super().__init__(message)
        self.field = field
        self.message = message


def validate_email(email: Optional[str], field_name: str = 'email') -> None:
    """
    Validate the basic local@domain.tld shape of an email address.

    Args:
        email: Email address to validate
        field_name: Name of the field for error messages

    Raises:
        ValidationError: If email is missing or malformed
    """
    if not email:
        raise ValidationError(
            f'{field_name} is required',
            field=field_name
        )

    if not EMAIL_PATTERN.fullmatch(email):
        raise ValidationError(
            f'{field_name} must look like local@domain.tld',
            field=field_name
        )


def validate_subscode(subscode: Optional[str]) -> None:
    """
    Validate subscription code format.

    Generated codes are numeric, but operators may configure an
    alphanumeric bypass code.

    Raises:
        ValidationError: If subscode is missing or malformed
    """
    if not subscode:
        raise ValidationError(
            'subscode is required',
            field='subscode'
        )

    if not SUBSCODE_PATTERN.fullmatch(subscode):
        raise ValidationError(
            'subscode must be 1-64 letters, digits, dashes or underscores',
            field='subscode'
        )
