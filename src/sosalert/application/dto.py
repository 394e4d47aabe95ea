"""Result types returned by the dispatch flow and the hand-off."""

from dataclasses import dataclass

# --- notifications ---

CONTACT_UPDATED = "contact_updated"
LOCATION_UNAVAILABLE = "location_unavailable"
HANDOFF_OPENED = "handoff_opened"
HANDOFF_FAILED = "handoff_failed"
INVALID_DESTINATION = "invalid_destination"


@dataclass(frozen=True)
class Notify:
    """Transient success/error signal for the presentation layer."""

    kind: str
    text: str
    level: str = "success"


@dataclass(frozen=True)
class RequestContact:
    """No contact is stored; the caller must supply one (or cancel) to continue."""

    prompt: str


@dataclass(frozen=True)
class HandoffOpened:
    """The external messaging application was asked to open this URI."""

    uri: str


FlowAction = Notify | RequestContact | HandoffOpened


# --- hand-off ---


@dataclass(frozen=True)
class HandoffRequested:
    """
    Hand-off was requested. opened is the host's answer; delivery itself is
    never confirmed (the user still presses send in the external app).
    """

    uri: str
    opened: bool = True
