# khanya/utils/phone.py
"""
South African phone number helpers shared by SMS delivery and order lookup.
"""

import re
from typing import List

from ..errors import InvalidPhoneFormat

COUNTRY_CODE = "27"
TRUNK_PREFIX = "0"
SMS_NUMBER_LENGTH = 11


def normalize_phone(raw: str) -> str:
    """
    Reduce a phone number to its ``27XXXXXXXXX`` form.

    Non-digits are stripped; a leading trunk ``0`` is replaced by the
    country code, numbers already starting with ``27`` are kept and
    anything else gets ``27`` prepended. Length is not checked here.
    """
    digits = re.sub(r"\D+", "", raw or "")
    if not digits:
        return ""
    if digits.startswith(TRUNK_PREFIX):
        return COUNTRY_CODE + digits[1:]
    if digits.startswith(COUNTRY_CODE):
        return digits
    return COUNTRY_CODE + digits


def to_sms_destination(raw: str) -> str:
    """Normalized number ready for the SMS provider; raises on a bad length."""
    formatted = normalize_phone(raw)
    if len(formatted) != SMS_NUMBER_LENGTH:
        raise InvalidPhoneFormat(
            f"Invalid phone number format. Expected {SMS_NUMBER_LENGTH} digits, got {len(formatted)}"
        )
    return formatted


def phone_lookup_candidates(raw: str) -> List[str]:
    """Stored formats a customer's number may have been saved in: +27..., 27..., 0..."""
    normalized = normalize_phone(raw)
    if not normalized:
        return []
    local = TRUNK_PREFIX + normalized[len(COUNTRY_CODE):]
    return [f"+{normalized}", normalized, local]
