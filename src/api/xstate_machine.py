"""
SOS dispatch lifecycle as an XState machine (xstate-python).

flows/sos_machine.json is standard XState JSON (id, initial, states with
on: { EVENT: target }), so the same file opens in Stately Studio. Only flat
machines are accepted: the dispatch lifecycle has no nested or parallel states.
"""

import json
import os
from pathlib import Path

from xstate.machine import Machine


def _repo_root() -> Path:
    return Path(__file__).resolve().parent.parent.parent


def get_machine_path() -> Path:
    """Return path to the machine JSON (XSTATE_MACHINE_PATH env or flows/sos_machine.json)."""
    path = os.environ.get("XSTATE_MACHINE_PATH", "").strip()
    if path:
        return Path(path).resolve()
    return _repo_root() / "flows" / "sos_machine.json"


def _target(spec) -> str | None:
    if isinstance(spec, str):
        return spec
    if isinstance(spec, dict):
        return spec.get("target")
    return None


class DispatchMachine:
    """A validated machine config plus the xstate Machine built from it."""

    def __init__(self, config: dict) -> None:
        states = config.get("states")
        if not isinstance(states, dict) or "initial" not in config:
            raise ValueError("Machine must have 'initial' and 'states'")
        if config["initial"] not in states:
            raise ValueError(f"initial state '{config['initial']}' must be a state")
        for name, state in states.items():
            if "states" in (state or {}):
                raise ValueError(f"state '{name}': nested states are not supported")
            for event, spec in (state or {}).get("on", {}).items():
                if _target(spec) not in states:
                    raise ValueError(f"state '{name}': {event} targets an unknown state")
        self.config = config
        self._machine = Machine(config)

    @property
    def initial(self) -> str:
        return self.config["initial"]

    @property
    def states(self) -> list[str]:
        return list(self.config["states"])

    def handles(self, state_value: str, event: str) -> bool:
        state = self.config["states"].get(state_value) or {}
        return event in state.get("on", {})

    def transition(self, state_value: str, event: str) -> str | None:
        """
        Return next state value for (state_value, event), or None if no transition.
        Self-transitions count as no transition.
        """
        if not self.handles(state_value, event):
            return None
        next_state = self._machine.transition(self._machine.state_from(state_value), event)
        if next_state.value == state_value:
            return None
        return next_state.value


def load_machine(path: Path | None = None) -> DispatchMachine:
    if path is None:
        path = get_machine_path()
    return DispatchMachine(json.loads(path.read_text(encoding="utf-8")))


_machine_cache: DispatchMachine | None = None


def get_machine(cache: bool = True) -> DispatchMachine:
    global _machine_cache
    if cache and _machine_cache is not None:
        return _machine_cache
    _machine_cache = load_machine()
    return _machine_cache
