"""Shared validation utilities"""

import math
import re
from typing import Optional, Union


def clean_optional_text(value: Optional[str]) -> Optional[str]:
    """Trim a free-text field; blank input is stored as NULL"""
    if value is None:
        return None
    value = value.strip()
    return value or None


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


def parse_chf_price(value: Union[str, float, int, None]) -> Optional[float]:
    """
    Parse a CHF price entered by staff.

    Accepts numbers or strings using either "." or "," as decimal separator.
    Blank input means "no price".

    Raises:
        ValueError: If the value is not a non-negative number
    """
    if value is None:
        return None

    if isinstance(value, bool):
        raise ValueError("Please enter a valid CHF price.")

    if isinstance(value, (int, float)):
        parsed = float(value)
    else:
        text = value.strip()
        if not text:
            return None
        try:
            parsed = float(text.replace(",", "."))
        except ValueError as e:
            raise ValueError("Please enter a valid CHF price.") from e

    if not math.isfinite(parsed) or parsed < 0:
        raise ValueError("Please enter a valid CHF price.")

    return parsed
