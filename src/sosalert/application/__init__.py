"""Application layer: composition, location adapter, ports and DTOs. Depends only on domain."""

from sosalert.application.composer import PREAMBLE, compose, map_link
from sosalert.application.dto import (
    FlowAction,
    HandoffOpened,
    HandoffRequested,
    Notify,
    RequestContact,
)
from sosalert.application.location import LocationProvider
from sosalert.application.ports import ContactStore, LocationSource, UriOpener

__all__ = [
    "PREAMBLE",
    "ContactStore",
    "FlowAction",
    "HandoffOpened",
    "HandoffRequested",
    "LocationProvider",
    "LocationSource",
    "Notify",
    "RequestContact",
    "UriOpener",
    "compose",
    "map_link",
]
