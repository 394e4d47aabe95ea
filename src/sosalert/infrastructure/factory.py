"""Build infrastructure adapters from AlertSettings."""

import logging

from neo4j import GraphDatabase

from sosalert.application.ports import ContactStore, LocationSource
from sosalert.config import STORE_MEMORY, STORE_NEO4J, AlertSettings
from sosalert.infrastructure.json_store import PRIMARY_CONTACT_KEY, JsonFileContactStore
from sosalert.infrastructure.location_sources import (
    IpGeolocationSource,
    StaticLocationSource,
)
from sosalert.infrastructure.memory_store import InMemoryContactStore
from sosalert.infrastructure.persistence.neo4j_store import Neo4jContactStore

logger = logging.getLogger(__name__)

DEFAULT_USER_ID = "default"


def scoped_key(user_id: str) -> str:
    """Storage key for a user's slot. The default user keeps the plain key."""
    if not user_id or user_id == DEFAULT_USER_ID:
        return PRIMARY_CONTACT_KEY
    return f"{PRIMARY_CONTACT_KEY}:{user_id}"


def create_neo4j_driver(settings: AlertSettings):
    return GraphDatabase.driver(
        settings.neo4j_uri, auth=(settings.neo4j_user, settings.neo4j_password)
    )


def build_contact_store(
    settings: AlertSettings,
    user_id: str = DEFAULT_USER_ID,
    *,
    driver: object | None = None,
) -> ContactStore:
    """Return the configured store for user_id. Neo4j needs a driver (see create_neo4j_driver)."""
    if settings.contact_store == STORE_MEMORY:
        return InMemoryContactStore()
    if settings.contact_store == STORE_NEO4J:
        if driver is None:
            raise ValueError("Neo4j contact store needs a driver")
        return Neo4jContactStore(driver, user_id=user_id or DEFAULT_USER_ID)
    return JsonFileContactStore(settings.contact_store_path, key=scoped_key(user_id))


def build_location_source(settings: AlertSettings) -> LocationSource | None:
    """Return the server-side location source, or None when the host has none configured."""
    if settings.fixed_location is not None:
        return StaticLocationSource(settings.fixed_location)
    if settings.ip_geolocation_url:
        return IpGeolocationSource(settings.ip_geolocation_url)
    return None
