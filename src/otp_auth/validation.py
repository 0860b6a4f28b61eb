"""Structural checks for phone numbers and OTP codes."""

import re

from otp_auth.errors import ValidationError

# Iranian mobile numbers: +989XXXXXXXXX, 989XXXXXXXXX or 09XXXXXXXXX
_PHONE_PATTERN = re.compile(r"(?:\+98[0-9]{10}|98[0-9]{10}|09[0-9]{9})")
_DIGITS = re.compile(r"[0-9]+")


def validate_phone_number(phone_number: str) -> str:
    """Return *phone_number* unchanged if well-formed, else raise ``ValidationError``."""
    if not phone_number:
        raise ValidationError("Phone number cannot be empty")
    if not _PHONE_PATTERN.fullmatch(phone_number):
        raise ValidationError(
            "Invalid Iranian phone number format. "
            "Use +989XXXXXXXXX, 989XXXXXXXXX, or 09XXXXXXXXX"
        )
    return phone_number


def validate_code(code: str, length: int) -> str:
    if not code or len(code) != length:
        raise ValidationError(f"OTP must be exactly {length} digits")
    if not _DIGITS.fullmatch(code):
        raise ValidationError("OTP must contain only numbers")
    return code
