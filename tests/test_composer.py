"""Tests for alert text composition."""

from sosalert.application import PREAMBLE, compose, map_link
from sosalert.domain import Coordinates

MAP_URL = "https://maps.example.com/?q="


def test_preamble_only():
    assert compose("", None) == "🚨 EMERGENCY! I need help."
    assert compose("   \n ", None) == PREAMBLE


def test_note_is_second_paragraph_verbatim():
    assert compose("Car broke down", None) == "🚨 EMERGENCY! I need help.\n\nCar broke down"
    # Checked trimmed, appended as typed
    assert compose("  Bleeding <knee> & arm  ", None) == PREAMBLE + "\n\n  Bleeding <knee> & arm  "


def test_location_is_last_paragraph():
    text = compose("", Coordinates(lat=12.9, lng=77.6), map_url=MAP_URL)
    assert text == PREAMBLE + "\n\nMy location:\nhttps://maps.example.com/?q=12.9,77.6"
    assert "\n\nMy location:" in text


def test_order_preamble_note_location():
    text = compose("Chest pain", Coordinates(lat=-33.8688, lng=151.2093), map_url=MAP_URL)
    paragraphs = text.split("\n\n")
    assert paragraphs[0] == PREAMBLE
    assert paragraphs[1] == "Chest pain"
    assert paragraphs[2] == "My location:\nhttps://maps.example.com/?q=-33.8688,151.2093"


def test_compose_is_deterministic():
    coords = Coordinates(lat=48.858370, lng=2.294481)
    assert compose("x", coords) == compose("x", coords)


def test_map_link_keeps_input_precision():
    coords = Coordinates(lat=12.97159876, lng=77.594566)
    assert map_link(coords, MAP_URL) == f"{MAP_URL}12.97159876,77.594566"


def test_default_map_url_is_google_maps():
    assert map_link(Coordinates(lat=1.5, lng=-2.25)) == "https://maps.google.com/?q=1.5,-2.25"


def test_map_link_has_no_exponent_or_trailing_zero():
    assert map_link(Coordinates(lat=1e-07, lng=12.0), MAP_URL) == f"{MAP_URL}0.0000001,12"
    assert map_link(Coordinates(lat=-0.00001, lng=-0.0), MAP_URL) == f"{MAP_URL}-0.00001,0"
    assert map_link(Coordinates(lat=90.0, lng=-180.0), MAP_URL) == f"{MAP_URL}90,-180"
