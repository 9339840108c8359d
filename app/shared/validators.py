"""Shared validation utilities"""

import re
from datetime import datetime, timedelta
from typing import Optional

HEX_COLOR_PATTERN = re.compile(r"^#(?:[0-9a-fA-F]{3}){1,2}$")
TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def validate_phone(phone: Optional[str], default_country_code: str = "34") -> Optional[str]:
    """
    Validate and normalize a phone number to E.164 format.

    Args:
        phone: Phone number string in various formats ("612 345 678", "+34 612-345-678")
        default_country_code: Prefix used for national numbers without one (Spain)

    Returns:
        Normalized phone number in E.164 format (+34XXXXXXXXX)

    Raises:
        ValueError: If phone number is invalid
    """
    if not phone:
        return phone

    has_prefix = phone.strip().startswith("+") or phone.strip().startswith("00")

    # Remove all non-digit characters
    digits = re.sub(r"\D", "", phone)
    if phone.strip().startswith("00"):
        digits = digits[2:]

    if not has_prefix:
        if len(digits) != 9:
            raise ValueError("Phone number must have 9 digits or include a country prefix")
        digits = f"{default_country_code}{digits}"

    # E.164 allows up to 15 digits including the country code
    if not 8 <= len(digits) <= 15:
        raise ValueError("Invalid phone number length")

    return f"+{digits}"


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


def validate_hex_color(color: Optional[str]) -> Optional[str]:
    """Accept #RGB or #RRGGBB, returned lowercase"""
    if not color:
        return color
    if not HEX_COLOR_PATTERN.match(color):
        raise ValueError("Color must be a hex value like #ff0000")
    return color.lower()


def validate_time_of_day(value: str) -> str:
    """HH:MM, 24h clock"""
    if not TIME_PATTERN.match(value or ""):
        raise ValueError("Time must use the HH:MM format")
    return value


def parse_date_param(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO date/datetime query parameter, None when absent or invalid"""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    # Stored timestamps are naive UTC
    return parsed.replace(tzinfo=None)


def parse_end_date_param(value: Optional[str]) -> Optional[datetime]:
    """Like parse_date_param, but a date-only value covers that whole day"""
    end = parse_date_param(value)
    if end is not None and len(value) == 10:
        end = end + timedelta(days=1) - timedelta(microseconds=1)
    return end
