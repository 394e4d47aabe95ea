"""Load and validate the YAML flow definition (prompts and notification texts)."""

import os
from pathlib import Path

import yaml

REQUIRED_MESSAGES = (
    "contact_prompt",
    "contact_updated",
    "location_unsupported",
    "location_denied",
    "location_timeout",
    "handoff_opened",
    "handoff_failed",
    "invalid_destination",
)


def _repo_root() -> Path:
    """Return repo root (parent of src)."""
    return Path(__file__).resolve().parent.parent.parent


def get_flow_path() -> Path:
    """Return path to the SOS flow YAML (FLOW_PATH env or flows/sos.yaml)."""
    default = _repo_root() / "flows" / "sos.yaml"
    path = os.environ.get("FLOW_PATH", "").strip()
    if path:
        return Path(path).resolve()
    return default


def load_flow(path: Path | None = None) -> dict:
    """Load flow YAML and return the flow dict. Validates that every message is present."""
    if path is None:
        path = get_flow_path()
    raw = path.read_text(encoding="utf-8")
    flow = yaml.safe_load(raw)
    if not isinstance(flow, dict):
        raise ValueError("Flow YAML must be a dict")
    messages = flow.get("messages")
    if not isinstance(messages, dict):
        raise ValueError("Flow must have a 'messages' mapping")
    missing = [k for k in REQUIRED_MESSAGES if not str(messages.get(k) or "").strip()]
    if missing:
        raise ValueError(f"Flow messages missing: {', '.join(missing)}")
    return flow


# Module-level cache for loaded flow
_flow_cache: dict | None = None


def get_flow(cache: bool = True) -> dict:
    """Load flow (cached by default). Pass cache=False to reload."""
    global _flow_cache
    if cache and _flow_cache is not None:
        return _flow_cache
    _flow_cache = load_flow()
    return _flow_cache
