"""Tests for phone number normalization and the click-to-chat identifier."""


from sosalert.infrastructure.phone import mask_phone, normalize_phone, whatsapp_id


def test_normalize_with_country_code_returns_e164():
    assert normalize_phone("+39 312 345 6789") == "+393123456789"
    assert normalize_phone("+1 202 555 1234") == "+12025551234"


def test_normalize_reads_stored_digits_as_international():
    assert normalize_phone("919876543210") == "+919876543210"
    assert normalize_phone("12025551234") == "+12025551234"


def test_normalize_invalid_returns_none():
    assert normalize_phone("") is None
    assert normalize_phone("   ") is None
    assert normalize_phone("abc") is None
    assert normalize_phone("+1") is None


def test_whatsapp_id_strips_formatting():
    assert whatsapp_id("+1 202 555 1234") == "12025551234"
    assert whatsapp_id("12025551234") == "12025551234"


def test_whatsapp_id_keeps_stored_digits_unchanged():
    # A national trunk zero after the country code is not "corrected" away.
    assert whatsapp_id("4402079460000") == "4402079460000"
    assert whatsapp_id("+44 020 7946 0000") == "4402079460000"


def test_whatsapp_id_never_rejects_non_empty_input():
    assert whatsapp_id("15551234567") == "15551234567"
    assert whatsapp_id("(555) 123") == "555123"
    assert whatsapp_id("  ") == ""


def test_mask_phone_keeps_last_four_digits():
    assert mask_phone("919876543210") == "********3210"
    assert mask_phone("123") == "***"
