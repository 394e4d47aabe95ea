"""
SOS alert core: clean-architecture layout.

- domain: entities (Contact, Coordinates, AlertDraft) and errors. No outer dependencies.
- application: composer, location provider adapter, ports, DTOs.
- infrastructure: contact stores (memory, JSON file, Neo4j), location sources, WhatsApp hand-off.
"""

from sosalert.application import (
    ContactStore,
    HandoffOpened,
    HandoffRequested,
    LocationProvider,
    LocationSource,
    Notify,
    RequestContact,
    UriOpener,
    compose,
)
from sosalert.domain import (
    AlertDraft,
    Contact,
    Coordinates,
    FormatError,
    InvalidInput,
    LocationDenied,
    LocationError,
    LocationTimeout,
    LocationUnsupported,
)
from sosalert.infrastructure import (
    ChannelHandoff,
    InMemoryContactStore,
    JsonFileContactStore,
    Neo4jContactStore,
)

__all__ = [
    "AlertDraft",
    "ChannelHandoff",
    "Contact",
    "ContactStore",
    "Coordinates",
    "FormatError",
    "HandoffOpened",
    "HandoffRequested",
    "InMemoryContactStore",
    "InvalidInput",
    "JsonFileContactStore",
    "LocationDenied",
    "LocationError",
    "LocationProvider",
    "LocationSource",
    "LocationTimeout",
    "LocationUnsupported",
    "Neo4jContactStore",
    "Notify",
    "RequestContact",
    "UriOpener",
    "compose",
]
