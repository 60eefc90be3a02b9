import re
from typing import Optional

from supplier_auth.core.errors import InvalidInput

MIN_PHONE_DIGITS = 10
_NON_DIGITS = re.compile(r'\D')


def phone_digits(phone: Optional[str]) -> str:
    return _NON_DIGITS.sub('', phone or '')


def normalize_phone(phone: str) -> str:
    """Canonical form used as the join key everywhere: '+' followed by digits only."""
    return f"+{phone_digits(phone)}"


def validate_phone_number(phone: Optional[str]) -> str:
    """
    Validate a human-entered phone number and return its canonical form.

    Raises:
        InvalidInput: phone missing or fewer than 10 digits once non-digits are stripped
    """
    if not phone or len(phone_digits(phone)) < MIN_PHONE_DIGITS:
        raise InvalidInput("Valid phone number is required")
    return normalize_phone(phone)
