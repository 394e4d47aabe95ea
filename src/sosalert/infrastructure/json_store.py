"""File-backed ContactStore: a JSON object of key -> record, one record per logical slot."""

import json
import logging
import os
import tempfile
from pathlib import Path

from sosalert.domain import Contact, InvalidInput

logger = logging.getLogger(__name__)

PRIMARY_CONTACT_KEY = "primary_emergency_contact"


def contact_from_record(value: object) -> Contact | None:
    """Return a Contact for a stored {"phone": str} record, or None if it is malformed."""
    if not isinstance(value, dict):
        return None
    phone = value.get("phone")
    if not isinstance(phone, str):
        return None
    try:
        return Contact(phone=phone)
    except InvalidInput:
        return None


class JsonFileContactStore:
    """Stores the primary emergency contact in a JSON file, durable across restarts.

    Other keys in the file are preserved, so one file can hold several scoped
    slots (pass key="primary_emergency_contact:<user>" to scope per user).
    Missing or corrupt data reads as absent.
    """

    def __init__(self, path: Path | str, key: str = PRIMARY_CONTACT_KEY) -> None:
        self._path = Path(path)
        self._key = key

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict:
        try:
            if not self._path.exists():
                return {}
            obj = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Contact store %s unreadable, treating as empty: %s", self._path, e)
            return {}
        return obj if isinstance(obj, dict) else {}

    def get(self) -> Contact | None:
        return contact_from_record(self._load().get(self._key))

    def set(self, phone: str) -> Contact:
        contact = Contact(phone=phone)
        obj = self._load()
        obj[self._key] = {"phone": contact.phone}
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self._path.parent, prefix=".contact-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(obj, f, ensure_ascii=False)
            os.replace(tmp, self._path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise
        return contact
