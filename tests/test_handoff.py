"""Tests for the WhatsApp channel hand-off."""

from urllib.parse import parse_qs, unquote, urlsplit

import pytest

from sosalert.application import HandoffRequested
from sosalert.domain import FormatError
from sosalert.infrastructure import ChannelHandoff, RecordingOpener, build_uri

MESSAGE = "🚨 EMERGENCY! I need help.\n\nCar broke down"


def test_build_uri_encodes_like_encode_uri_component():
    assert build_uri("15551234567", "a b\nc&d=e") == (
        "https://wa.me/15551234567?text=a%20b%0Ac%26d%3De"
    )
    assert build_uri("1", "it's (ok)!") == "https://wa.me/1?text=it's%20(ok)!"


def test_build_uri_decodes_back_to_message_with_newlines():
    uri = build_uri("15551234567", MESSAGE)
    parts = urlsplit(uri)
    assert parts.netloc == "wa.me"
    assert parts.path == "/15551234567"
    assert unquote(parts.query[len("text="):]) == MESSAGE
    assert parse_qs(parts.query)["text"] == [MESSAGE]


def test_open_requests_link():
    opener = RecordingOpener()
    result = ChannelHandoff(opener).open("15551234567", MESSAGE)
    assert isinstance(result, HandoffRequested)
    assert result.opened is True
    assert opener.opened == [result.uri]


def test_open_reports_host_refusal():
    result = ChannelHandoff(RecordingOpener(accept=False)).open("15551234567", MESSAGE)
    assert result.opened is False


@pytest.mark.parametrize("destination", ["", "   ", None])
def test_open_empty_destination_is_format_error(destination):
    opener = RecordingOpener()
    with pytest.raises(FormatError):
        ChannelHandoff(opener).open(destination, MESSAGE)
    assert opener.opened == []


def test_open_embeds_stored_digits_in_link():
    opener = RecordingOpener()
    result = ChannelHandoff(opener).open("4402079460000", MESSAGE)
    assert urlsplit(result.uri).path == "/4402079460000"


def test_open_unparseable_number_is_still_opened(caplog):
    opener = RecordingOpener()
    with caplog.at_level("WARNING", logger="sosalert.infrastructure.whatsapp"):
        result = ChannelHandoff(opener).open("123", MESSAGE)
    assert result.opened is True
    assert urlsplit(result.uri).path == "/123"
    assert "does not parse as a phone number" in caplog.text
