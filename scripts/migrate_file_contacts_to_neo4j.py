#!/usr/bin/env python3
"""One-off migration: copy emergency contacts from the JSON contact file into Neo4j.

Reads every "primary_emergency_contact[:<user>]" record from SOS_CONTACT_STORE_PATH
and writes it to the owner Person node for that user ("default" for the plain
key). Malformed records are skipped. Run from repo root with .env
(NEO4J_URI, NEO4J_USER, NEO4J_PASSWORD). Idempotent.
"""
import json
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(REPO_ROOT / "src"))

from dotenv import load_dotenv  # noqa: E402

load_dotenv(REPO_ROOT / ".env")

from sosalert.config import AlertSettings  # noqa: E402
from sosalert.infrastructure import PRIMARY_CONTACT_KEY, Neo4jContactStore  # noqa: E402
from sosalert.infrastructure.factory import DEFAULT_USER_ID, create_neo4j_driver  # noqa: E402
from sosalert.infrastructure.json_store import contact_from_record  # noqa: E402


def _user_for_key(key: str) -> str | None:
    """Return the user id a storage key belongs to, or None for foreign keys."""
    if key == PRIMARY_CONTACT_KEY:
        return DEFAULT_USER_ID
    prefix = PRIMARY_CONTACT_KEY + ":"
    if key.startswith(prefix) and key[len(prefix):]:
        return key[len(prefix):]
    return None


def main() -> int:
    settings = AlertSettings.from_env()
    path = settings.contact_store_path
    if not path.exists():
        print(f"No contact file at {path}; nothing to migrate.")
        return 0
    try:
        records = json.loads(path.read_text(encoding="utf-8"))
    except ValueError as e:
        print(f"Contact file {path} is not valid JSON: {e}", file=sys.stderr)
        return 1
    if not isinstance(records, dict):
        print(f"Contact file {path} must hold a JSON object", file=sys.stderr)
        return 1

    driver = create_neo4j_driver(settings)
    try:
        migrated = []
        for key, value in records.items():
            user_id = _user_for_key(key)
            contact = contact_from_record(value)
            if user_id is None or contact is None:
                continue
            Neo4jContactStore(driver, user_id=user_id).set(contact.phone)
            migrated.append(user_id)
        print(f"Migrated {len(migrated)} contact(s) to Neo4j: {migrated}")
        return 0
    finally:
        driver.close()


if __name__ == "__main__":
    sys.exit(main())
