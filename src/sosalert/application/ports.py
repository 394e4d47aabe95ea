"""Application ports (interfaces). Implemented by infrastructure adapters."""

from typing import Protocol

from sosalert.domain import Contact, Coordinates


class ContactStore(Protocol):
    """Persists the single primary emergency contact."""

    def get(self) -> Contact | None:
        """Return the stored contact, or None if absent or unreadable."""
        ...

    def set(self, phone: str) -> Contact:
        """Store phone as the contact. Raises InvalidInput if phone is empty."""
        ...


class LocationSource(Protocol):
    """One-shot current-position capability of the host environment."""

    async def current_position(self) -> Coordinates:
        """Return a fix, or raise LocationUnsupported / LocationDenied."""
        ...


class UriOpener(Protocol):
    """Asks the host environment to open a URI in a new context."""

    def open(self, uri: str) -> bool:
        """Return True if the host accepted the request."""
        ...
