"""Client contact validation for the booking form"""

import re
from typing import Optional

# Area code and exchange may not start with 0 or 1
NANP_PATTERN = re.compile(r"^(?:\+?1)?([2-9]\d{2}[2-9]\d{6})$")
EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")
MAX_NAME_LENGTH = 100


def validate_na_phone(phone: Optional[str]) -> Optional[str]:
    """
    Normalize a Canadian/North American phone number to E.164.

    Accepts +1XXXXXXXXXX, 1XXXXXXXXXX and XXXXXXXXXX with spaces, dashes,
    dots or parentheses in between.

    Raises:
        ValueError: If the number is not a valid NANP number
    """
    if not phone:
        return phone

    match = NANP_PATTERN.match(re.sub(r"[\s\-().]", "", phone))
    if not match:
        raise ValueError("Please enter a valid Canadian phone number")
    return f"+1{match.group(1)}"


def validate_client_email(email: Optional[str]) -> Optional[str]:
    """Trimmed, lowercased address; confirmations are sent here"""
    if not email:
        return email

    normalized = email.strip().lower()
    if not EMAIL_PATTERN.match(normalized):
        raise ValueError("Please enter a valid email")
    return normalized


def validate_person_name(name: str) -> str:
    normalized = " ".join(name.split())
    if not normalized:
        raise ValueError("Name is required")
    if len(normalized) > MAX_NAME_LENGTH:
        raise ValueError(f"Name must be at most {MAX_NAME_LENGTH} characters")
    return normalized
