"""Phone number helpers for the hand-off link target."""

import re

import phonenumbers

_NON_DIGITS = re.compile(r"\D+")


def normalize_phone(raw: str) -> str | None:
    """Parse and return E.164 form of the number, or None if invalid.

    Stored contacts carry the country code with or without a leading "+"
    (e.g. "919876543210"), so input without "+" is read as international.
    """
    if not raw or not str(raw).strip():
        return None
    raw = str(raw).strip()
    if not raw.startswith("+"):
        raw = "+" + raw
    try:
        parsed = phonenumbers.parse(raw, None)
    except phonenumbers.NumberParseException:
        return None
    if not phonenumbers.is_valid_number(parsed):
        return None
    return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)


def whatsapp_id(raw: str) -> str:
    """Return the click-to-chat identifier for a stored phone string.

    Only formatting ("+", spaces, dashes, brackets) is removed; the digits are
    the stored ones, unchanged.
    """
    raw = (raw or "").strip()
    digits = _NON_DIGITS.sub("", raw)
    return digits or raw


def mask_phone(raw: str) -> str:
    """Return the phone with all but the last four digits hidden, for logs."""
    digits = _NON_DIGITS.sub("", raw or "")
    if len(digits) <= 4:
        return "*" * len(digits)
    return "*" * (len(digits) - 4) + digits[-4:]
