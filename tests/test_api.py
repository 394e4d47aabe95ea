"""API tests with an in-memory contact store and client-reported location."""

from urllib.parse import parse_qs, urlsplit

import pytest
from fastapi.testclient import TestClient

import api.main as main_module
from api.main import app
from sosalert.config import AlertSettings


@pytest.fixture
def client():
    app.state.settings = AlertSettings(
        contact_store="memory", settle_delay=0, location_timeout=0.05
    )
    app.state.stores = {}
    app.state.alerts = {}
    return TestClient(app)


def _new_alert(client, **headers) -> str:
    r = client.post("/alerts", headers=headers)
    assert r.status_code == 201
    body = r.json()
    assert body["state"] == "confirm"
    return body["alert_id"]


def _handoff_text(body) -> str:
    uris = [a["uri"] for a in body["actions"] if a["type"] == "handoff"]
    assert len(uris) == 1
    return parse_qs(urlsplit(uris[0]).query)["text"][0]


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_contact_put_get(client):
    assert client.get("/contact").status_code == 404
    r = client.put("/contact", json={"phone": "919876543210"})
    assert r.status_code == 200
    assert r.json()["actions"][0]["kind"] == "contact_updated"
    assert client.get("/contact").json() == {"phone": "919876543210"}


def test_contact_put_empty_is_rejected(client):
    client.put("/contact", json={"phone": "919876543210"})
    r = client.put("/contact", json={"phone": "  "})
    assert r.status_code == 400
    assert client.get("/contact").json() == {"phone": "919876543210"}


def test_contact_is_scoped_by_user_header(client):
    client.put("/contact", json={"phone": "111"}, headers={"X-User-Id": "alice"})
    assert client.get("/contact").status_code == 404
    assert client.get("/contact", headers={"X-User-Id": "alice"}).json() == {"phone": "111"}


def test_alert_asks_for_contact_then_sends(client):
    alert_id = _new_alert(client)
    r = client.patch(
        f"/alerts/{alert_id}", json={"share_location": False, "note": "Car broke down"}
    )
    assert r.json()["note"] == "Car broke down"

    r = client.post(f"/alerts/{alert_id}/send")
    body = r.json()
    assert body["state"] == "sending"
    assert body["awaiting_contact"] is True
    assert body["actions"][0]["type"] == "request_contact"

    r = client.post(f"/alerts/{alert_id}/contact", json={"phone": "15551234567"})
    body = r.json()
    assert body["state"] == "sent"
    assert body["contact"] == "15551234567"
    assert _handoff_text(body) == "🚨 EMERGENCY! I need help.\n\nCar broke down"
    assert urlsplit(body["actions"][0]["uri"]).path == "/15551234567"


def test_alert_cancel_contact_entry(client):
    alert_id = _new_alert(client)
    client.post(f"/alerts/{alert_id}/send")
    r = client.post(f"/alerts/{alert_id}/contact/cancel")
    body = r.json()
    assert body["state"] == "confirm"
    assert body["actions"] == []
    assert client.post(
        f"/alerts/{alert_id}/contact", json={"phone": "1"}
    ).status_code == 409


def test_alert_with_reported_location(client):
    client.put("/contact", json={"phone": "919876543210"})
    alert_id = _new_alert(client)
    r = client.post(f"/alerts/{alert_id}/location", json={"lat": 12.9, "lng": 77.6})
    assert r.status_code == 200
    body = client.post(f"/alerts/{alert_id}/send").json()
    assert body["state"] == "sent"
    assert _handoff_text(body).endswith("My location:\nhttps://maps.google.com/?q=12.9,77.6")


def test_alert_location_timeout_still_sends(client):
    client.put("/contact", json={"phone": "919876543210"})
    alert_id = _new_alert(client)
    body = client.post(f"/alerts/{alert_id}/send").json()
    assert body["state"] == "sent"
    kinds = [a.get("kind") for a in body["actions"] if a["type"] == "notify"]
    assert kinds.count("location_unavailable") == 1
    assert "My location" not in _handoff_text(body)


def test_alert_location_denied(client):
    client.put("/contact", json={"phone": "919876543210"})
    alert_id = _new_alert(client)
    client.post(f"/alerts/{alert_id}/location", json={"error": "denied"})
    body = client.post(f"/alerts/{alert_id}/send").json()
    texts = [a["text"] for a in body["actions"] if a.get("kind") == "location_unavailable"]
    assert texts == ["Could not get location"]


def test_alert_location_requires_coordinates(client):
    alert_id = _new_alert(client)
    assert client.post(f"/alerts/{alert_id}/location", json={}).status_code == 400
    assert client.post(
        f"/alerts/{alert_id}/location", json={"lat": 95.0, "lng": 0.0}
    ).status_code == 400


def test_alert_close_resets(client):
    client.put("/contact", json={"phone": "1"})
    alert_id = _new_alert(client)
    client.patch(f"/alerts/{alert_id}", json={"share_location": False, "note": "x"})
    assert client.post(f"/alerts/{alert_id}/send").json()["state"] == "sent"
    body = client.post(f"/alerts/{alert_id}/close").json()
    assert body["state"] == "confirm"
    assert body["note"] == ""
    assert body["contact"] == "1"


def test_closed_alert_is_forgotten(client):
    alert_id = _new_alert(client)
    assert client.post(f"/alerts/{alert_id}/close").status_code == 200
    assert alert_id not in app.state.alerts
    assert client.get(f"/alerts/{alert_id}").status_code == 404
    assert client.post(f"/alerts/{alert_id}/send").status_code == 404


def test_open_alerts_are_bounded(client, monkeypatch):
    monkeypatch.setattr(main_module, "MAX_OPEN_ALERTS", 2)
    first = _new_alert(client)
    second = _new_alert(client)
    third = _new_alert(client)
    assert list(app.state.alerts) == [second, third]
    assert client.get(f"/alerts/{first}").status_code == 404
    assert client.get(f"/alerts/{third}").status_code == 200



def test_unknown_alert_is_404(client):
    assert client.get("/alerts/nope").status_code == 404
    alert_id = _new_alert(client)
    assert client.get(f"/alerts/{alert_id}", headers={"X-User-Id": "bob"}).status_code == 404
