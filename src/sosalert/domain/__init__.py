"""Domain layer: entities, value objects and errors. No dependencies on outer layers."""

from sosalert.domain.entities import AlertDraft, Contact, Coordinates
from sosalert.domain.errors import (
    FormatError,
    InvalidInput,
    LocationDenied,
    LocationError,
    LocationTimeout,
    LocationUnsupported,
)

__all__ = [
    "AlertDraft",
    "Contact",
    "Coordinates",
    "FormatError",
    "InvalidInput",
    "LocationDenied",
    "LocationError",
    "LocationTimeout",
    "LocationUnsupported",
]
