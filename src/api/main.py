"""
FastAPI backend: emergency contact and SOS alert flows over REST.
Run with uvicorn: uvicorn api.main:app --reload

The client (browser or app) renders the returned actions: it shows the
notifications, asks the user for a number on request_contact, and opens the
hand-off link. Location comes from the client through POST /alerts/{id}/location
unless the server has its own source configured.
"""

import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv

# Load .env from repo root (when run from repo root or from Docker)
for path in (
    Path(__file__).resolve().parent.parent.parent / ".env",
    Path.cwd() / ".env",
):
    if path.exists():
        load_dotenv(path)
        break

from contextlib import asynccontextmanager

from fastapi import FastAPI, Header, HTTPException, Request
from pydantic import BaseModel

from api.flow_adapter import DispatchFlow
from api.flow_loader import get_flow
from sosalert.application import (
    ContactStore,
    FlowAction,
    HandoffOpened,
    LocationProvider,
    Notify,
    RequestContact,
)
from sosalert.application.dto import CONTACT_UPDATED
from sosalert.config import STORE_NEO4J, AlertSettings
from sosalert.domain import Coordinates, InvalidInput
from sosalert.infrastructure import (
    ChannelHandoff,
    ClientReportedLocationSource,
    RecordingOpener,
)
from sosalert.infrastructure.factory import (
    DEFAULT_USER_ID,
    build_contact_store,
    build_location_source,
    create_neo4j_driver,
)

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)
logger = logging.getLogger(__name__)

USER_ID_HEADER = "X-User-Id"
# Open alert flows kept per process; the oldest is dropped beyond this.
MAX_OPEN_ALERTS = 1000


@dataclass
class AlertSession:
    """One flow instance plus the host-side collaborators it was built with."""

    user_id: str
    flow: DispatchFlow
    opener: RecordingOpener
    client_location: ClientReportedLocationSource | None


def _get_settings(app: FastAPI) -> AlertSettings:
    if getattr(app.state, "settings", None) is None:
        app.state.settings = AlertSettings.from_env()
    return app.state.settings


def _get_cached_driver(app: FastAPI):
    if getattr(app.state, "driver", None) is None:
        app.state.driver = create_neo4j_driver(_get_settings(app))
    return app.state.driver


def _alerts(app: FastAPI) -> dict[str, AlertSession]:
    if getattr(app.state, "alerts", None) is None:
        app.state.alerts = {}
    return app.state.alerts


def get_store(user_id: str, app: FastAPI) -> ContactStore:
    """Per-user store, cached so in-memory stores keep their value between requests."""
    if getattr(app.state, "stores", None) is None:
        app.state.stores = {}
    stores: dict[str, ContactStore] = app.state.stores
    if user_id not in stores:
        settings = _get_settings(app)
        driver = _get_cached_driver(app) if settings.contact_store == STORE_NEO4J else None
        stores[user_id] = build_contact_store(settings, user_id, driver=driver)
    return stores[user_id]


def _user_id(x_user_id: str | None) -> str:
    return (x_user_id or "").strip() or DEFAULT_USER_ID


def _discard_session(session: AlertSession) -> None:
    session.flow.close()
    if session.client_location is not None:
        session.client_location.reset()


def _get_session(alert_id: str, user_id: str, app: FastAPI) -> AlertSession:
    session = _alerts(app).get(alert_id)
    if session is None or session.user_id != user_id:
        raise HTTPException(status_code=404, detail="Alert not found")
    return session


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.driver = None
    settings = _get_settings(app)
    logger.info("SOS API ready (contact store: %s)", settings.contact_store)
    try:
        yield
    finally:
        if getattr(app.state, "driver", None) is not None:
            app.state.driver.close()


app = FastAPI(title="SOS Alert API", lifespan=lifespan)


# --- serialization ---


class ContactBody(BaseModel):
    phone: str


class DraftBody(BaseModel):
    share_location: bool | None = None
    note: str | None = None


class LocationBody(BaseModel):
    lat: float | None = None
    lng: float | None = None
    error: Literal["denied", "unsupported"] | None = None


def _action_to_dict(action: FlowAction) -> dict:
    if isinstance(action, Notify):
        return {"type": "notify", "kind": action.kind, "text": action.text, "level": action.level}
    if isinstance(action, RequestContact):
        return {"type": "request_contact", "prompt": action.prompt}
    if isinstance(action, HandoffOpened):
        return {"type": "handoff", "uri": action.uri}
    return {"type": "unknown"}


def _alert_response(alert_id: str, session: AlertSession, actions: list[FlowAction]) -> dict:
    flow = session.flow
    contact = flow.stored_contact()
    return {
        "alert_id": alert_id,
        "state": flow.state.value,
        "awaiting_contact": flow.awaiting_contact,
        "share_location": flow.draft.share_location,
        "note": flow.draft.note,
        "contact": contact.phone if contact else None,
        "actions": [_action_to_dict(a) for a in actions],
    }


# --- REST: health ---


@app.get("/health")
def health():
    return {"status": "ok"}


# --- REST: primary emergency contact ---


@app.get("/contact")
def get_contact(
    request: Request,
    x_user_id: str | None = Header(None, alias=USER_ID_HEADER),
):
    contact = get_store(_user_id(x_user_id), request.app).get()
    if contact is None:
        raise HTTPException(status_code=404, detail="No emergency contact set")
    return {"phone": contact.phone}


@app.put("/contact")
def put_contact(
    body: ContactBody,
    request: Request,
    x_user_id: str | None = Header(None, alias=USER_ID_HEADER),
):
    store = get_store(_user_id(x_user_id), request.app)
    try:
        contact = store.set(body.phone)
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    text = get_flow()["messages"]["contact_updated"]
    return {
        "phone": contact.phone,
        "actions": [_action_to_dict(Notify(kind=CONTACT_UPDATED, text=text))],
    }


# --- REST: alert flows ---


@app.post("/alerts", status_code=201)
async def create_alert(
    request: Request,
    x_user_id: str | None = Header(None, alias=USER_ID_HEADER),
):
    user_id = _user_id(x_user_id)
    settings = _get_settings(request.app)
    source = build_location_source(settings)
    client_location = None
    if source is None:
        client_location = ClientReportedLocationSource()
        source = client_location
    opener = RecordingOpener()
    flow = DispatchFlow(
        get_store(user_id, request.app),
        LocationProvider(source),
        ChannelHandoff(opener, base_url=settings.channel_url),
        location_timeout=settings.location_timeout,
        settle_delay=settings.settle_delay,
        map_url=settings.map_url,
    )
    alert_id = str(uuid.uuid4())
    session = AlertSession(
        user_id=user_id, flow=flow, opener=opener, client_location=client_location
    )
    alerts = _alerts(request.app)
    alerts[alert_id] = session
    while len(alerts) > MAX_OPEN_ALERTS:
        oldest = next(iter(alerts))
        logger.info("Dropping oldest open alert %s", oldest)
        _discard_session(alerts.pop(oldest))
    return _alert_response(alert_id, session, [])


@app.get("/alerts/{alert_id}")
async def get_alert(
    alert_id: str,
    request: Request,
    x_user_id: str | None = Header(None, alias=USER_ID_HEADER),
):
    session = _get_session(alert_id, _user_id(x_user_id), request.app)
    return _alert_response(alert_id, session, [])


@app.patch("/alerts/{alert_id}")
async def update_alert(
    alert_id: str,
    body: DraftBody,
    request: Request,
    x_user_id: str | None = Header(None, alias=USER_ID_HEADER),
):
    session = _get_session(alert_id, _user_id(x_user_id), request.app)
    if body.share_location is not None:
        session.flow.set_share_location(body.share_location)
    if body.note is not None:
        session.flow.set_note(body.note)
    return _alert_response(alert_id, session, [])


@app.post("/alerts/{alert_id}/send")
async def send_alert(
    alert_id: str,
    request: Request,
    x_user_id: str | None = Header(None, alias=USER_ID_HEADER),
):
    session = _get_session(alert_id, _user_id(x_user_id), request.app)
    actions = await session.flow.send()
    return _alert_response(alert_id, session, actions)


@app.post("/alerts/{alert_id}/contact")
async def supply_contact(
    alert_id: str,
    body: ContactBody,
    request: Request,
    x_user_id: str | None = Header(None, alias=USER_ID_HEADER),
):
    session = _get_session(alert_id, _user_id(x_user_id), request.app)
    if not session.flow.awaiting_contact:
        raise HTTPException(status_code=409, detail="Alert is not waiting for a contact")
    actions = await session.flow.supply_contact(body.phone)
    return _alert_response(alert_id, session, actions)


@app.post("/alerts/{alert_id}/contact/cancel")
async def cancel_contact(
    alert_id: str,
    request: Request,
    x_user_id: str | None = Header(None, alias=USER_ID_HEADER),
):
    session = _get_session(alert_id, _user_id(x_user_id), request.app)
    actions = session.flow.cancel_contact()
    return _alert_response(alert_id, session, actions)


@app.post("/alerts/{alert_id}/location")
async def report_location(
    alert_id: str,
    body: LocationBody,
    request: Request,
    x_user_id: str | None = Header(None, alias=USER_ID_HEADER),
):
    session = _get_session(alert_id, _user_id(x_user_id), request.app)
    source = session.client_location
    if source is None:
        raise HTTPException(status_code=409, detail="Server location source in use")
    if body.error == "denied":
        source.deny()
    elif body.error == "unsupported":
        source.unsupported()
    else:
        if body.lat is None or body.lng is None:
            raise HTTPException(status_code=400, detail="lat and lng are required")
        try:
            source.report(Coordinates(lat=body.lat, lng=body.lng))
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
    return _alert_response(alert_id, session, [])


@app.post("/alerts/{alert_id}/close")
async def close_alert(
    alert_id: str,
    request: Request,
    x_user_id: str | None = Header(None, alias=USER_ID_HEADER),
):
    session = _get_session(alert_id, _user_id(x_user_id), request.app)
    _alerts(request.app).pop(alert_id, None)
    _discard_session(session)
    return _alert_response(alert_id, session, [])
