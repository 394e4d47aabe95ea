"""Infrastructure layer: concrete implementations of application ports."""

from sosalert.infrastructure.json_store import PRIMARY_CONTACT_KEY, JsonFileContactStore
from sosalert.infrastructure.location_sources import (
    ClientReportedLocationSource,
    IpGeolocationSource,
    StaticLocationSource,
    UnsupportedLocationSource,
)
from sosalert.infrastructure.memory_store import InMemoryContactStore
from sosalert.infrastructure.persistence.neo4j_store import Neo4jContactStore
from sosalert.infrastructure.whatsapp import (
    BrowserOpener,
    ChannelHandoff,
    RecordingOpener,
    build_uri,
)

__all__ = [
    "PRIMARY_CONTACT_KEY",
    "BrowserOpener",
    "ChannelHandoff",
    "ClientReportedLocationSource",
    "InMemoryContactStore",
    "IpGeolocationSource",
    "JsonFileContactStore",
    "Neo4jContactStore",
    "RecordingOpener",
    "StaticLocationSource",
    "UnsupportedLocationSource",
    "build_uri",
]
