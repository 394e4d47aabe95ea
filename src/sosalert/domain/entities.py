"""Domain entities: Contact, Coordinates, and AlertDraft."""

from dataclasses import dataclass, field

from sosalert.domain.errors import InvalidInput


@dataclass(frozen=True)
class Contact:
    """
    The primary emergency contact. Only the phone string is kept; it is used
    as-is as the hand-off destination (no format validation beyond presence).
    """

    phone: str = field(default="")

    def __post_init__(self):
        phone = (self.phone or "").strip()
        if not phone:
            raise InvalidInput("Contact phone must be non-empty.")
        object.__setattr__(self, "phone", phone)


@dataclass(frozen=True)
class Coordinates:
    """A single position fix in IEEE-754 degrees."""

    lat: float
    lng: float

    def __post_init__(self):
        lat = float(self.lat)
        lng = float(self.lng)
        if not -90.0 <= lat <= 90.0:
            raise ValueError(f"Latitude out of range: {lat}")
        if not -180.0 <= lng <= 180.0:
            raise ValueError(f"Longitude out of range: {lng}")
        object.__setattr__(self, "lat", lat)
        object.__setattr__(self, "lng", lng)


@dataclass
class AlertDraft:
    """
    Working data for one alert flow instance.
    Mutated only by the dispatch flow; reset to defaults when the flow closes.
    """

    share_location: bool = True
    note: str = ""
    resolved_contact: Contact | None = None
    resolved_coordinates: Coordinates | None = None

    def reset(self) -> None:
        self.share_location = True
        self.note = ""
        self.resolved_contact = None
        self.resolved_coordinates = None
