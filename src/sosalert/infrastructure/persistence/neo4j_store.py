"""Neo4j implementation of ContactStore.
The record lives as a JSON string property on the owner Person node:
(owner:Person {id: user_id, registered: true, primary_emergency_contact: '{"phone": ...}'}).
"""

import json
import logging

from sosalert.domain import Contact
from sosalert.infrastructure.json_store import PRIMARY_CONTACT_KEY, contact_from_record

logger = logging.getLogger(__name__)

_GET_QUERY = """
MATCH (owner:Person {id: $user_id, registered: true})
RETURN owner[$key] AS value
"""

_SET_QUERY = """
MERGE (owner:Person {id: $user_id, registered: true})
SET owner += $props
"""


class Neo4jContactStore:
    """Stores the primary emergency contact in Neo4j, scoped by user_id."""

    def __init__(
        self,
        driver: object,
        user_id: str = "default",
        key: str = PRIMARY_CONTACT_KEY,
    ) -> None:
        self._driver = driver
        self._user_id = user_id
        self._key = key

    def get(self) -> Contact | None:
        with self._driver.session() as session:
            record = session.run(_GET_QUERY, user_id=self._user_id, key=self._key).single()
        if record is None or record["value"] is None:
            return None
        try:
            value = json.loads(record["value"])
        except (TypeError, ValueError):
            logger.warning("Corrupt %s for user %s, treating as absent", self._key, self._user_id)
            return None
        return contact_from_record(value)

    def set(self, phone: str) -> Contact:
        contact = Contact(phone=phone)
        value = json.dumps({"phone": contact.phone}, ensure_ascii=False)
        with self._driver.session() as session:
            session.run(_SET_QUERY, user_id=self._user_id, props={self._key: value})
        return contact
