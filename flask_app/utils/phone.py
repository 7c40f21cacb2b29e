# flask_app/utils/phone.py
"""
Phone number normalization shared by contact storage and check-in lookup.

The country code and number length come from ``DEFAULT_COUNTRY_CODE`` and
``PHONE_NUMBER_LENGTH`` in the app config when an app context is active.
"""

import re

from flask import current_app, has_app_context

PHONE_NUMBER_LENGTH = 10
DEFAULT_COUNTRY_CODE = "91"

_NON_DIGITS = re.compile(r"\D")


def phone_settings():
    """(country_code, length) from the app config, falling back to the module defaults"""
    if not has_app_context():
        return DEFAULT_COUNTRY_CODE, PHONE_NUMBER_LENGTH
    config = current_app.config
    country_code = config.get("DEFAULT_COUNTRY_CODE") or DEFAULT_COUNTRY_CODE
    length = int(config.get("PHONE_NUMBER_LENGTH") or PHONE_NUMBER_LENGTH)
    return country_code, length


def digits_only(value):
    """Strip every non-digit character; None becomes an empty string."""
    if value is None:
        return ""
    return _NON_DIGITS.sub("", str(value))


def normalize_phone(value, country_code=None, length=None):
    """
    Reduce a stored phone value to its lookup key.

    Digits only; a number carrying the country code prefix (e.g. ``+91 98765 43210``)
    is reduced to its national part. Returns None when the result is not
    exactly ``length`` digits.
    """
    configured_code, configured_length = phone_settings()
    if country_code is None:
        country_code = configured_code
    if length is None:
        length = configured_length

    digits = digits_only(value)
    prefix = digits_only(country_code)
    if prefix and len(digits) == length + len(prefix) and digits.startswith(prefix):
        digits = digits[len(prefix):]
    if len(digits) != length:
        return None
    return digits


def is_valid_lookup_phone(value, length=None):
    """Check-in input must be exactly ``length`` digits once formatting is removed."""
    if length is None:
        length = phone_settings()[1]
    return len(digits_only(value)) == length
