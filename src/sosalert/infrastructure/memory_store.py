"""In-memory implementation of ContactStore (no persistence)."""

from sosalert.domain import Contact


class InMemoryContactStore:
    """Holds the contact for the lifetime of the object. Used in tests and ephemeral runs."""

    def __init__(self, contact: Contact | None = None) -> None:
        self._contact = contact

    def get(self) -> Contact | None:
        return self._contact

    def set(self, phone: str) -> Contact:
        contact = Contact(phone=phone)
        self._contact = contact
        return contact
