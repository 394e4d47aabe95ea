"""Error taxonomy shared by the domain, the ports and their adapters."""


class InvalidInput(ValueError):
    """Rejected user input (e.g. an empty emergency contact)."""


class FormatError(ValueError):
    """The hand-off destination cannot be embedded in a link (empty identifier)."""


class LocationError(Exception):
    """Base for location acquisition failures. Never fatal to an alert."""

    kind = "unavailable"


class LocationUnsupported(LocationError):
    """The host environment offers no location capability."""

    kind = "unsupported"


class LocationDenied(LocationError):
    """The user or platform refused the location request."""

    kind = "denied"


class LocationTimeout(LocationError):
    """No position fix arrived before the timeout elapsed."""

    kind = "timeout"
