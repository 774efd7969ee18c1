"""Shared validation utilities"""

import re
from typing import Optional

from .errors import ValidationError
from .services_per_month import MONTHS_PER_YEAR


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Args:
        email: Email address string

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()

    # Basic email validation pattern
    email_pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"

    if not re.match(email_pattern, email):
        raise ValueError("Invalid email format")

    return email


def validate_month(month, field: str = "month") -> int:
    """
    Check that ``month`` is a calendar month number.

    Raises:
        ValidationError: If month is missing, not an int, or outside 1-12
    """
    if month is None or isinstance(month, bool) or not isinstance(month, int):
        raise ValidationError(f"{field} must be an integer between 1 and 12")
    if not 1 <= month <= MONTHS_PER_YEAR:
        raise ValidationError(f"{field} must be between 1 and 12, got {month}")
    return month


def validate_monthly_counts(monthly_counts, services_per_year: int) -> list[int]:
    """
    Check a servicesPerMonth value against its annual target.

    Raises:
        ValidationError: Unless there are 12 non-negative ints summing to services_per_year
    """
    if not isinstance(monthly_counts, (list, tuple)) or len(monthly_counts) != MONTHS_PER_YEAR:
        raise ValidationError("servicesPerMonth must contain exactly 12 monthly counts")

    for count in monthly_counts:
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise ValidationError("servicesPerMonth counts must be non-negative integers")

    total = sum(monthly_counts)
    if total != services_per_year:
        raise ValidationError(
            f"Monthly services total {total} does not match servicesPerYear {services_per_year}"
        )
    return list(monthly_counts)
