"""
HTTP API tests.

The app runs through its real lifespan against a temporary sqlite file;
outbound Gemini and spreadsheet traffic goes to an httpx.MockTransport.
"""

import asyncio

import httpx
import pytest
from fastapi.testclient import TestClient
from socketio import exceptions as sio_exceptions

from timeline_pro.app import create_app
from timeline_pro.config import settings
from tests.fixtures import SAMPLE_CSV, gemini_payload

SHEET_URL = "https://docs.google.com/spreadsheets/d/sheet123/edit#gid=0"
MISSING_SHEET_URL = "https://docs.google.com/spreadsheets/d/missing/edit"

GENERATED = {
    "date": "1961-04-12",
    "title": "Vostok 1",
    "description": "First human in orbit",
    "absImp": 90,
}


def outbound(request: httpx.Request) -> httpx.Response:
    if request.url.host == "docs.google.com":
        if "/d/missing/" in request.url.path:
            return httpx.Response(404)
        return httpx.Response(200, text=SAMPLE_CSV)
    if request.url.path.endswith(":generateContent"):
        return httpx.Response(200, json=gemini_payload([GENERATED]))
    return httpx.Response(404)


@pytest.fixture
def app(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "DATABASE_PATH", str(tmp_path / "api.db"))
    monkeypatch.setattr(settings, "GEMINI_API_KEY", "test-key")
    monkeypatch.setattr(settings, "DATABASE_CONFIG", "")
    monkeypatch.setattr(settings, "APP_ID", "")
    monkeypatch.setattr(settings, "SANDBOX_DATABASE_CONFIG", "")
    monkeypatch.setattr(settings, "SANDBOX_AUTH_TOKEN", "")

    return create_app(http_transport=httpx.MockTransport(outbound))


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth(client):
    response = client.post("/api/auth/anonymous")
    assert response.status_code == 201
    return {"Authorization": f"Bearer {response.json()['token']}"}


class TestAuth:

    def test_requests_without_token_are_rejected(self, client):
        response = client.get("/api/workspace")

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    def test_unknown_token_is_rejected(self, client):
        response = client.get("/api/library", headers={"Authorization": "Bearer nope"})

        assert response.status_code == 401

    def test_me(self, client, auth):
        response = client.get("/api/auth/me", headers=auth)

        assert response.status_code == 200
        assert response.json()["is_anonymous"] is True

    def test_custom_token_without_provisioning(self, client):
        response = client.post("/api/auth/token", json={"token": "guess"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Database restricted."


class TestWorkspaceEndpoints:

    def test_import_then_layout(self, client, auth):
        response = client.post("/api/workspace/import", json={"url": SHEET_URL}, headers=auth)

        assert response.status_code == 200
        body = response.json()
        assert [e["title"] for e in body["events"]] == ["Moon landing", "Fall of the Berlin Wall"]
        assert [e["displayTier"] for e in body["events"]] == [10, 5]
        assert body["zoomLevel"] == 5

        items = client.get("/api/workspace/layout", params={"zoom_level": 10}, headers=auth).json()
        assert [item["kind"] for item in items] == ["event", "marker", "marker", "marker", "event"]
        assert [item["year"] for item in items[1:4]] == [1974, 1979, 1984]
        assert items[0]["event"]["rawImportance"] == 95
        assert items[1]["key"] == "m-1974-1"

    def test_zoom_filters_layout(self, client, auth):
        client.post("/api/workspace/import", json={"url": SHEET_URL}, headers=auth)

        response = client.put("/api/workspace/zoom", json={"zoomLevel": 1}, headers=auth)
        items = client.get("/api/workspace/layout", headers=auth).json()

        assert response.json()["zoomLevel"] == 1
        assert [item["event"]["title"] for item in items] == ["Moon landing"]

    @pytest.mark.parametrize("params", [{"zoom_level": 0}, {"zoom_level": 11}])
    def test_layout_rejects_bad_zoom(self, client, auth, params):
        assert client.get("/api/workspace/layout", params=params, headers=auth).status_code == 422

    def test_generate_merges_events(self, client, auth):
        client.post("/api/workspace/import", json={"url": SHEET_URL}, headers=auth)

        response = client.post("/api/workspace/generate", json={"count": 1}, headers=auth)

        assert response.status_code == 200
        titles = [e["title"] for e in response.json()["events"]]
        assert titles == ["Vostok 1", "Moon landing", "Fall of the Berlin Wall"]

    def test_generate_rejects_bad_count(self, client, auth):
        response = client.post("/api/workspace/generate", json={"count": 11}, headers=auth)

        assert response.status_code == 422

    def test_research_replaces_events(self, client, auth):
        client.post("/api/workspace/import", json={"url": SHEET_URL}, headers=auth)

        response = client.post("/api/workspace/research", json={"topic": "Space Race"}, headers=auth)

        body = response.json()
        assert [e["title"] for e in body["events"]] == ["Vostok 1"]
        assert body["topic"] == "Space Race"

    def test_unreachable_sheet(self, client, auth):
        response = client.post("/api/workspace/import", json={"url": MISSING_SHEET_URL}, headers=auth)

        assert response.status_code == 502
        assert response.json()["detail"] == "Could not load sheet. Is it public?"

    def test_manual_events(self, client, auth):
        created = client.post(
            "/api/workspace/events",
            json={"date": "1492-10-12", "title": "Columbus lands", "rawImportance": 70},
            headers=auth,
        )
        [event] = created.json()["events"]

        assert created.status_code == 201
        assert event["displayTier"] == 10
        assert event["source"] == "user"

        removed = client.delete(f"/api/workspace/events/{event['id']}", headers=auth)
        assert removed.json()["events"] == []
        assert client.delete("/api/workspace/events/gone", headers=auth).status_code == 404

    def test_new_workspace(self, client, auth):
        response = client.post("/api/workspace/new", json={"title": "Rome"}, headers=auth)

        assert response.json()["title"] == "Rome"
        assert response.json()["events"] == []


class TestLibraryEndpoints:

    def test_save_list_load_delete(self, client, auth):
        client.post("/api/workspace/import", json={"url": SHEET_URL}, headers=auth)
        client.post("/api/workspace/generate", json={"count": 1}, headers=auth)

        saved = client.post("/api/library", headers=auth)
        assert saved.status_code == 201
        doc_id = saved.json()["id"]
        assert doc_id.startswith("timeline-")

        [entry] = client.get("/api/library", headers=auth).json()
        assert entry["id"] == doc_id
        assert entry["eventCount"] == 3

        client.post("/api/workspace/new", json={}, headers=auth)
        loaded = client.post(f"/api/library/{doc_id}/load", headers=auth)
        assert len(loaded.json()["events"]) == 3

        deleted = client.delete(f"/api/library/{doc_id}", headers=auth)
        assert deleted.json() == {"status": "deleted", "timeline_id": doc_id}
        assert client.get(f"/api/library/{doc_id}", headers=auth).status_code == 404
        assert client.post(f"/api/library/{doc_id}/load", headers=auth).status_code == 404

    def test_save_empty_workspace(self, client, auth):
        assert client.post("/api/library", headers=auth).status_code == 400

    def test_libraries_are_private(self, client, auth):
        client.post("/api/workspace/import", json={"url": SHEET_URL}, headers=auth)
        doc_id = client.post("/api/library", headers=auth).json()["id"]
        other = {"Authorization": f"Bearer {client.post('/api/auth/anonymous').json()['token']}"}

        assert client.get("/api/library", headers=other).json() == []
        assert client.get(f"/api/library/{doc_id}", headers=other).status_code == 404


class TestLibrarySocket:

    @pytest.fixture
    def emitted(self, client):
        sent = []

        async def record(event, data, to=None, **kwargs):
            sent.append((event, data, to))

        client.app.state.sio.emit = record
        return sent

    def test_connection_receives_snapshots(self, client, auth, emitted):
        handlers = client.app.state.sio.handlers["/"]
        token = auth["Authorization"].split()[1]

        client.portal.call(handlers["connect"], "sid-1", {"QUERY_STRING": f"token={token}"}, None)
        client.portal.call(asyncio.sleep, 0.05)
        assert emitted == [("library_snapshot", [], "sid-1")]

        client.post("/api/workspace/import", json={"url": SHEET_URL}, headers=auth)
        client.post("/api/library", headers=auth)
        client.portal.call(asyncio.sleep, 0.05)
        event, [entry], to = emitted[-1]
        assert (event, to) == ("library_snapshot", "sid-1")
        assert entry["eventCount"] == 2

        uid = client.get("/api/auth/me", headers=auth).json()["uid"]
        assert client.app.state.library_service.subscriber_count(uid) == 1
        client.portal.call(handlers["disconnect"], "sid-1")
        assert client.app.state.library_service.subscriber_count(uid) == 0

    def test_shutdown_stops_open_feeds(self, app):
        app.state.sio.emit = lambda *args, **kwargs: asyncio.sleep(0)
        connect = app.state.sio.handlers["/"]["connect"]

        with TestClient(app) as client:
            token = client.post("/api/auth/anonymous").json()["token"]
            client.portal.call(connect, "sid-3", {"QUERY_STRING": f"token={token}"}, None)
            relays = [task for _, task in app.state.socket_feeds.values()]
            assert len(relays) == 1

        assert app.state.socket_feeds == {}
        assert all(task.done() for task in relays)

    def test_unknown_token_is_refused(self, client, emitted):
        connect = client.app.state.sio.handlers["/"]["connect"]

        with pytest.raises(sio_exceptions.ConnectionRefusedError):
            client.portal.call(connect, "sid-2", {"QUERY_STRING": ""}, {"token": "nope"})
        assert emitted == []


class TestHealth:

    def test_health(self, client):
        body = client.get("/health").json()

        assert body["status"] == "healthy"
        assert body["ai_available"] is True
        assert body["sandbox_mode"] is False
