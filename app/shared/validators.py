"""Shared validation utilities"""

import re
from datetime import date
from typing import Optional


def validate_in_phone(phone: Optional[str]) -> Optional[str]:
    """
    Validate and normalize an Indian phone number to E.164 format.

    Args:
        phone: Phone number string in various formats

    Returns:
        Normalized phone number in E.164 format (+91XXXXXXXXXX)

    Raises:
        ValueError: If phone number is invalid
    """
    if not phone:
        return phone

    # Remove all non-digit characters
    digits = re.sub(r"\D", "", phone)

    # Handle +91 / 0 prefixes
    if digits.startswith("91") and len(digits) == 12:
        digits = digits[2:]
    elif digits.startswith("0") and len(digits) == 11:
        digits = digits[1:]

    if len(digits) != 10:
        raise ValueError("Phone number must be 10 digits")

    return f"+91{digits}"


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

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


def validate_media_code(code: str) -> str:
    """Media codes look like SRA-RPR-001 (letters, digits and dashes)"""
    if not code or not code.strip():
        raise ValueError("Media code is required")

    code = code.strip().upper()
    if not re.match(r"^[A-Z0-9]+(-[A-Z0-9]+)*$", code):
        raise ValueError("Media code may only contain letters, digits and dashes")

    return code


def validate_date_range(start: Optional[date], end: Optional[date]) -> None:
    """Raise ValueError unless start <= end (both bounds inclusive)"""
    if start is None or end is None:
        return
    if start > end:
        raise ValueError("Start date must be on or before end date")


def validate_amount(value: Optional[float], field: str = "Amount") -> Optional[float]:
    if value is None:
        return value
    if value < 0:
        raise ValueError(f"{field} cannot be negative")
    return round(float(value), 2)
