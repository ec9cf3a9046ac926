"""
Input validators shared by the services.

Each validator returns the normalized value or raises one of the
400-class portal exceptions.
"""

import re

from constants import ADDRESS_MAX_LENGTH, PHONE_MAX_LENGTH
from exceptions import MissingFieldException, InvalidFormatException
from utils import clean_text

UUID_PATTERN = re.compile(r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}", re.IGNORECASE)
SHAREHOLDER_CODE_PATTERN = re.compile(r"[0-9]{6}")
FOUR_DIGITS_PATTERN = re.compile(r"[0-9]{4}")
PHONE_SEPARATORS = re.compile(r"[\s-]")
DIGITS_PATTERN = re.compile(r"[0-9]+")


def _require(value, label):
    if value is None or (isinstance(value, str) and not value.strip()):
        raise MissingFieldException(f"{label} is required")
    return value


def validate_identifier(identifier):
    """QR identifier in canonical UUID form, returned lower-case."""
    _require(identifier, "QR code identifier")
    if not isinstance(identifier, str) or not UUID_PATTERN.fullmatch(identifier.strip()):
        raise InvalidFormatException("QR code identifier must be a UUID")
    return identifier.strip().lower()


def validate_shareholder_code(code):
    _require(code, "Shareholder code")
    if not isinstance(code, str) or not SHAREHOLDER_CODE_PATTERN.fullmatch(code):
        raise InvalidFormatException("Shareholder code must be 6 digits")
    return code


def validate_four_digits(value, label):
    """Phone code or ID suffix: trimmed, exactly four digits."""
    _require(value, label)
    text = str(value).strip()
    if not FOUR_DIGITS_PATTERN.fullmatch(text):
        raise InvalidFormatException(f"{label} must be 4 digits")
    return text


def _contact_text(value, label):
    """Trimmed text or None; anything but a string or null is rejected."""
    if value is not None and not isinstance(value, str):
        raise InvalidFormatException(f"{label} must be a string")
    return clean_text(value)


def validate_address(value):
    address = _contact_text(value, "Address")
    if address is not None and len(address) > ADDRESS_MAX_LENGTH:
        raise InvalidFormatException(f"Address cannot exceed {ADDRESS_MAX_LENGTH} characters")
    return address


def _validate_phone(value, label, lengths):
    phone = _contact_text(value, label)
    if phone is None:
        return None
    if len(phone) > PHONE_MAX_LENGTH:
        raise InvalidFormatException(f"{label} cannot exceed {PHONE_MAX_LENGTH} characters")
    digits = PHONE_SEPARATORS.sub("", phone)
    if not DIGITS_PATTERN.fullmatch(digits):
        raise InvalidFormatException(f"{label} may only contain digits, spaces and hyphens")
    if len(digits) not in lengths:
        raise InvalidFormatException(f"{label} must have {' or '.join(str(n) for n in lengths)} digits")
    return phone


def validate_mobile_phone(value):
    return _validate_phone(value, "Mobile phone", (10,))


def validate_home_phone(value):
    return _validate_phone(value, "Home phone", (9, 10))


# Contact column suffix -> validator
CONTACT_VALIDATORS = {
    "address": validate_address,
    "home_phone": validate_home_phone,
    "mobile_phone": validate_mobile_phone,
}


def validate_page_args(page, per_page, max_per_page=100):
    try:
        page = int(page)
        per_page = int(per_page)
    except (TypeError, ValueError):
        raise InvalidFormatException("page and per_page must be integers")
    if page < 1 or per_page < 1:
        raise InvalidFormatException("page and per_page must be positive")
    return page, min(per_page, max_per_page)
