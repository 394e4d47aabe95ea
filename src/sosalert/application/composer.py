"""Alert text composition. Pure: same (note, coordinates) always give the same text."""

from decimal import Decimal

from sosalert.domain import Coordinates

PREAMBLE = "🚨 EMERGENCY! I need help."
LOCATION_HEADER = "My location:"
DEFAULT_MAP_URL = "https://maps.google.com/?q="


def format_degrees(value: float) -> str:
    """Shortest exact decimal for a coordinate, without exponent or trailing ".0".

    12.0 -> "12", 1e-07 -> "0.0000001", 12.97159876 -> "12.97159876".
    """
    if value == 0:
        return "0"
    text = repr(float(value))
    if "e" in text:
        text = format(Decimal(text), "f")
    if text.endswith(".0"):
        text = text[:-2]
    return text


def map_link(coordinates: Coordinates, map_url: str = DEFAULT_MAP_URL) -> str:
    """Return the map URL for coordinates."""
    return f"{map_url}{format_degrees(coordinates.lat)},{format_degrees(coordinates.lng)}"


def compose(
    note: str,
    coordinates: Coordinates | None,
    *,
    map_url: str = DEFAULT_MAP_URL,
) -> str:
    """Build the alert: preamble, then note (if any), then location (if any)."""
    paragraphs = [PREAMBLE]
    if (note or "").strip():
        paragraphs.append(note)
    if coordinates is not None:
        paragraphs.append(f"{LOCATION_HEADER}\n{map_link(coordinates, map_url)}")
    return "\n\n".join(paragraphs)
