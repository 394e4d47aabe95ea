"""
Adapter: drive the SOS dispatch lifecycle on the XState machine and run its effects.

The machine (flows/sos_machine.json) owns which transitions exist; this module
owns what happens inside them: contact resolution, location acquisition,
message composition and the channel hand-off. Every operation returns the
actions (notifications, contact requests, opened links) for the presentation
layer to render.
"""

import asyncio
import enum
import logging
from collections.abc import Awaitable, Callable

from api.flow_loader import get_flow
from api.xstate_machine import DispatchMachine, get_machine
from sosalert.application import (
    ContactStore,
    FlowAction,
    HandoffOpened,
    LocationProvider,
    Notify,
    RequestContact,
    compose,
)
from sosalert.application.composer import DEFAULT_MAP_URL
from sosalert.application.dto import (
    CONTACT_UPDATED,
    HANDOFF_FAILED,
    HANDOFF_OPENED,
    INVALID_DESTINATION,
    LOCATION_UNAVAILABLE,
)
from sosalert.domain import AlertDraft, Contact, FormatError, LocationError
from sosalert.infrastructure.whatsapp import ChannelHandoff

logger = logging.getLogger(__name__)

AWAITING_CONTACT = "awaiting_contact"

_LOCATION_MESSAGES = {
    "unsupported": "location_unsupported",
    "denied": "location_denied",
    "timeout": "location_timeout",
}


class DispatchState(enum.Enum):
    CONFIRM = "confirm"
    SENDING = "sending"
    SENT = "sent"


# Machine state value -> public state. awaiting_contact is a pause inside sending.
_PUBLIC_STATE = {
    "confirm": DispatchState.CONFIRM,
    AWAITING_CONTACT: DispatchState.SENDING,
    "sending": DispatchState.SENDING,
    "sent": DispatchState.SENT,
}


class DispatchFlow:
    """One alert flow instance: confirm -> sending -> sent, reset by close()."""

    def __init__(
        self,
        store: ContactStore,
        location: LocationProvider,
        handoff: ChannelHandoff,
        *,
        location_timeout: float = 10.0,
        settle_delay: float = 1.2,
        map_url: str = DEFAULT_MAP_URL,
        machine: DispatchMachine | None = None,
        messages: dict | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if location_timeout <= 0:
            raise ValueError("Location timeout must be positive.")
        self._store = store
        self._location = location
        self._handoff = handoff
        self._location_timeout = location_timeout
        self._settle_delay = settle_delay
        self._map_url = map_url
        self._machine = machine if machine is not None else get_machine()
        unknown = set(self._machine.states) - set(_PUBLIC_STATE)
        if unknown:
            raise ValueError(f"Machine has states with no dispatch meaning: {sorted(unknown)}")
        self._messages = messages if messages is not None else get_flow()["messages"]
        self._sleep = sleep
        self._state_value = self._machine.initial
        # Bumped by close(); steps started under an older generation are discarded.
        self._generation = 0
        self.draft = AlertDraft()
        self.last_message: str | None = None

    @property
    def state_value(self) -> str:
        return self._state_value

    @property
    def state(self) -> DispatchState:
        return _PUBLIC_STATE[self._state_value]

    @property
    def awaiting_contact(self) -> bool:
        return self._state_value == AWAITING_CONTACT

    def _fire(self, event: str) -> bool:
        next_state = self._machine.transition(self._state_value, event)
        if next_state is None:
            return False
        logger.debug("Dispatch %s --%s--> %s", self._state_value, event, next_state)
        self._state_value = next_state
        return True

    def _text(self, message_id: str) -> str:
        return self._messages.get(message_id) or message_id

    def _is_stale(self, generation: int) -> bool:
        return generation != self._generation

    # --- draft editing ---

    def set_share_location(self, enabled: bool) -> None:
        """Toggle location sharing. Read again at composition time, so a late toggle wins."""
        if self.state is DispatchState.SENT:
            return
        self.draft.share_location = bool(enabled)

    def set_note(self, note: str) -> None:
        if self.state is DispatchState.SENT:
            return
        self.draft.note = note or ""

    def stored_contact(self) -> Contact | None:
        return self._store.get()

    def edit_contact(self, phone: str) -> list[FlowAction]:
        """Explicit contact edit. Raises InvalidInput for an empty phone (stored contact untouched)."""
        self._store.set(phone)
        return [Notify(kind=CONTACT_UPDATED, text=self._text("contact_updated"))]

    # --- lifecycle ---

    async def send(self) -> list[FlowAction]:
        """Start dispatch. A no-op unless the flow is in confirm."""
        if not self._fire("SEND"):
            logger.info("Send ignored in state %s", self._state_value)
            return []
        generation = self._generation
        contact = self._store.get()
        if contact is None:
            self._fire("CONTACT_MISSING")
            return [RequestContact(prompt=self._text("contact_prompt"))]
        self.draft.resolved_contact = contact
        return await self._dispatch(generation)

    async def supply_contact(self, phone: str) -> list[FlowAction]:
        """Continue a dispatch paused for a contact. Blank input counts as cancellation."""
        if not self.awaiting_contact:
            return []
        if not (phone or "").strip():
            return self.cancel_contact()
        self.draft.resolved_contact = self._store.set(phone)
        self._fire("CONTACT_SUPPLIED")
        return await self._dispatch(self._generation)

    def cancel_contact(self) -> list[FlowAction]:
        """User abandoned contact entry: back to confirm, silently."""
        if self._fire("CONTACT_CANCELLED"):
            logger.info("Contact entry cancelled, dispatch aborted")
        return []

    def close(self) -> None:
        """Discard the draft and return to confirm. In-flight steps are abandoned."""
        self._generation += 1
        self._fire("CLOSE")
        self._state_value = self._machine.initial
        self.draft.reset()
        self.last_message = None

    async def _dispatch(self, generation: int) -> list[FlowAction]:
        actions: list[FlowAction] = []
        draft = self.draft

        if draft.share_location and draft.resolved_coordinates is None:
            try:
                coordinates = await self._location.acquire(self._location_timeout)
            except Exception as e:
                if self._is_stale(generation):
                    return []
                if isinstance(e, LocationError):
                    kind = e.kind
                    logger.info("Location unavailable (%s), sending without it", kind)
                else:
                    kind = LocationError.kind
                    logger.warning("Location source failed, sending without it: %s", e, exc_info=True)
                message_id = _LOCATION_MESSAGES.get(kind, "location_denied")
                actions.append(
                    Notify(kind=LOCATION_UNAVAILABLE, text=self._text(message_id), level="error")
                )
            else:
                if self._is_stale(generation):
                    return []
                draft.resolved_coordinates = coordinates

        coordinates = draft.resolved_coordinates if draft.share_location else None
        message = compose(draft.note, coordinates, map_url=self._map_url)
        contact = draft.resolved_contact

        try:
            requested = self._handoff.open(contact.phone if contact else "", message)
        except FormatError as e:
            logger.warning("Hand-off rejected: %s", e)
            self._fire("INVALID_DESTINATION")
            actions.append(
                Notify(kind=INVALID_DESTINATION, text=self._text("invalid_destination"), level="error")
            )
            return actions

        self.last_message = message
        actions.append(HandoffOpened(uri=requested.uri))

        if self._settle_delay > 0:
            await self._sleep(self._settle_delay)
        if self._is_stale(generation):
            return actions

        self._fire("HANDOFF_REQUESTED")
        if requested.opened:
            actions.append(Notify(kind=HANDOFF_OPENED, text=self._text("handoff_opened")))
        else:
            actions.append(
                Notify(kind=HANDOFF_FAILED, text=self._text("handoff_failed"), level="error")
            )
        return actions
