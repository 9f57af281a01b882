"""Tests for the REST API."""

import tempfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from modreg.bootstrap import build_services
from modreg.core.config import Settings
from web.backend.app.main import app
from web.backend.app.state import get_services

OWNER = {"X-Identity": "owner"}


def _as(identity: str) -> dict:
    return {"X-Identity": identity}


@pytest.fixture
def client():
    with tempfile.TemporaryDirectory() as tmpdir:
        settings = Settings(data_dir=Path(tmpdir), owner="owner", webhooks_enabled=False)
        services = build_services(settings)
        app.dependency_overrides[get_services] = lambda: services
        yield TestClient(app)
        app.dependency_overrides.clear()


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_submit_and_get(client):
    resp = client.post("/api/contents", json={"content_hash": "QmAbc"}, headers=_as("alice"))
    assert resp.status_code == 201
    body = resp.json()
    assert body["id"] == 1
    assert body["author"] == "alice"
    assert body["status"] == "Active"
    assert body["is_active"] is True

    assert client.get("/api/contents/1").json()["content_hash"] == "QmAbc"
    assert client.get("/api/contents/2").status_code == 404


def test_identity_required(client):
    resp = client.post("/api/contents", json={"content_hash": "QmAbc"})
    assert resp.status_code == 401

    resp = client.post("/api/contents", json={"content_hash": "QmAbc"}, headers=_as("   "))
    assert resp.status_code == 401


def test_empty_hash_is_invalid(client):
    resp = client.post("/api/contents", json={"content_hash": ""}, headers=_as("alice"))
    assert resp.status_code == 422
    assert resp.json()["kind"] == "invalid_input"


def test_report_flow_and_threshold(client):
    client.post("/api/contents", json={"content_hash": "QmAbc"}, headers=_as("alice"))
    for reporter in ("bob", "carol", "dave"):
        resp = client.post("/api/contents/1/reports", json={"reason": "spam"}, headers=_as(reporter))
        assert resp.status_code == 201

    content = client.get("/api/contents/1").json()
    assert content["status"] == "UnderReview"
    assert content["report_count"] == 3
    assert content["needs_moderation"] is True
    assert client.get("/api/contents/1/needs-moderation").json()["needs_moderation"] is True
    assert [c["id"] for c in client.get("/api/moderation/queue").json()] == [1]

    reports = client.get("/api/contents/1/reports").json()
    assert [r["reporter"] for r in reports] == ["bob", "carol", "dave"]
    assert client.get("/api/reports/2").json()["reporter"] == "carol"
    assert client.get("/api/reports/9").status_code == 404


def test_report_conflicts(client):
    client.post("/api/contents", json={"content_hash": "QmAbc"}, headers=_as("alice"))
    assert client.post("/api/contents/1/reports", json={"reason": "x"}, headers=_as("alice")).status_code == 409
    client.post("/api/contents/1/reports", json={"reason": "x"}, headers=_as("bob"))
    assert client.post("/api/contents/1/reports", json={"reason": "x"}, headers=_as("bob")).status_code == 409


def test_moderation_roles(client):
    client.post("/api/contents", json={"content_hash": "QmAbc"}, headers=_as("alice"))

    resp = client.post("/api/contents/1/moderate", json={"status": "Flagged"}, headers=_as("mod"))
    assert resp.status_code == 403

    resp = client.post("/api/moderators", json={"address": "mod"}, headers=OWNER)
    assert resp.status_code == 201
    assert "mod" in resp.json()["moderators"]

    resp = client.post("/api/contents/1/moderate", json={"status": "Removed"}, headers=_as("mod"))
    assert resp.status_code == 200
    assert resp.json()["is_active"] is False

    resp = client.post("/api/contents/1/moderate", json={"status": "Active"}, headers=_as("mod"))
    assert resp.status_code == 409


def test_unknown_status_rejected(client):
    client.post("/api/contents", json={"content_hash": "QmAbc"}, headers=_as("alice"))
    resp = client.post("/api/contents/1/moderate", json={"status": "Hidden"}, headers=OWNER)
    assert resp.status_code == 422


def test_moderator_management(client):
    assert client.post("/api/moderators", json={"address": "x"}, headers=_as("bob")).status_code == 403
    assert client.post("/api/moderators", json={"address": ""}, headers=OWNER).status_code == 422
    assert client.delete("/api/moderators/owner", headers=OWNER).status_code == 409
    assert client.delete("/api/moderators/ghost", headers=OWNER).status_code == 409

    listing = client.get("/api/moderators").json()
    assert listing == {"owner": "owner", "moderators": ["owner"]}


def test_events_endpoint(client):
    client.post("/api/contents", json={"content_hash": "QmAbc"}, headers=_as("alice"))
    client.post("/api/contents/1/reports", json={"reason": "spam"}, headers=_as("bob"))

    events = client.get("/api/events").json()
    assert [e["event"] for e in events] == ["ContentReported", "ContentSubmitted"]
    assert events[0]["payload"] == {"contentId": 1, "reporter": "bob", "reason": "spam"}

    filtered = client.get("/api/events", params={"event": "ContentSubmitted"}).json()
    assert len(filtered) == 1

    export = client.get("/api/events/export", params={"fmt": "csv"}).json()
    assert export["count"] == 2
    assert export["data"].startswith("sequence,")


def test_webhook_endpoints(client):
    resp = client.post("/api/webhooks", json={"url": "https://indexer.example/hook", "secret": "s"})
    assert resp.status_code == 201
    wh = resp.json()
    assert wh["has_secret"] is True
    assert "secret" not in wh

    assert client.post("/api/webhooks", json={"url": "nope"}).status_code == 422

    resp = client.put(f"/api/webhooks/{wh['id']}/toggle", json={"active": False})
    assert resp.json()["active"] is False
    assert client.get(f"/api/webhooks/{wh['id']}/deliveries").json() == []
    assert client.delete(f"/api/webhooks/{wh['id']}").json() == {"ok": True}
    assert client.delete(f"/api/webhooks/{wh['id']}").status_code == 404
