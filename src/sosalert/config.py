"""Runtime settings read from the environment (.env is loaded by the entry points)."""

import os
from dataclasses import dataclass
from pathlib import Path

from sosalert.application.composer import DEFAULT_MAP_URL
from sosalert.domain import Coordinates
from sosalert.infrastructure.whatsapp import DEFAULT_CHANNEL_URL

STORE_FILE = "file"
STORE_MEMORY = "memory"
STORE_NEO4J = "neo4j"


def _repo_root() -> Path:
    return Path(__file__).resolve().parent.parent.parent


def _env(name: str, default: str = "") -> str:
    return os.environ.get(name, default).strip()


def _env_float(name: str, default: float) -> float:
    raw = _env(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got {raw!r}") from e


@dataclass(frozen=True)
class AlertSettings:
    contact_store: str = STORE_FILE
    contact_store_path: Path = Path(".sos") / "contacts.json"
    location_timeout: float = 10.0
    settle_delay: float = 1.2
    channel_url: str = DEFAULT_CHANNEL_URL
    map_url: str = DEFAULT_MAP_URL
    fixed_location: Coordinates | None = None
    ip_geolocation_url: str | None = None
    neo4j_uri: str = "bolt://localhost:7687"
    neo4j_user: str = "neo4j"
    neo4j_password: str = "password"

    def __post_init__(self):
        if self.contact_store not in (STORE_FILE, STORE_MEMORY, STORE_NEO4J):
            raise ValueError(f"Unknown contact store: {self.contact_store!r}")
        if self.location_timeout <= 0:
            raise ValueError("Location timeout must be positive.")
        if self.settle_delay < 0:
            raise ValueError("Settle delay must not be negative.")

    @classmethod
    def from_env(cls) -> "AlertSettings":
        store_path = _env("SOS_CONTACT_STORE_PATH")
        fixed = None
        if _env("SOS_FIXED_LAT") or _env("SOS_FIXED_LNG"):
            fixed = Coordinates(
                lat=_env_float("SOS_FIXED_LAT", 0.0),
                lng=_env_float("SOS_FIXED_LNG", 0.0),
            )
        return cls(
            contact_store=_env("SOS_CONTACT_STORE", STORE_FILE).lower(),
            contact_store_path=(
                Path(store_path) if store_path else _repo_root() / ".sos" / "contacts.json"
            ),
            location_timeout=_env_float("SOS_LOCATION_TIMEOUT", 10.0),
            settle_delay=_env_float("SOS_SETTLE_DELAY", 1.2),
            channel_url=_env("SOS_CHANNEL_URL") or DEFAULT_CHANNEL_URL,
            map_url=_env("SOS_MAP_URL") or DEFAULT_MAP_URL,
            fixed_location=fixed,
            ip_geolocation_url=_env("SOS_IP_GEOLOCATION_URL") or None,
            neo4j_uri=_env("NEO4J_URI", "bolt://localhost:7687"),
            neo4j_user=_env("NEO4J_USER", "neo4j"),
            neo4j_password=_env("NEO4J_PASSWORD", "password"),
        )
