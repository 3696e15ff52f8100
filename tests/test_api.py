from __future__ import annotations

import base64

import httpx
import pytest
from fastapi.testclient import TestClient

from tarjeta.app import create_app
from tarjeta.core import config as core_config
from tarjeta.repositories.sql_repository import SQLRepository
from tarjeta.services import vcard_service
from tarjeta.services.ghl_client import ConnectionResult, UpsertResult


class FakeClient:
    def __init__(self, result: UpsertResult):
        self.result = result
        self.calls = 0

    def upsert_contact(self, contact):
        self.calls += 1
        return self.result


@pytest.fixture()
def app(db_env):
    return create_app()


@pytest.fixture()
def client(app):
    return TestClient(app)


@pytest.fixture()
def repo():
    return SQLRepository()


def _profile(repo, **fields):
    data = {"email": "ana@example.com", "full_name": "Ana Lopez", "username": "ana"}
    data.update(fields)
    return repo.upsert_profile("p-1", **data)


def test_health(client):
    assert client.get("/health").json() == {"ok": True}


def test_vcard_download(client, repo):
    _profile(repo, job_title="CEO", phone="+1 555 0100")

    resp = client.get("/c/ana/vcard")

    assert resp.status_code == 200
    assert resp.headers["content-type"] == "text/vcard; charset=utf-8"
    assert resp.headers["content-disposition"] == 'attachment; filename="ana_lopez.vcf"'
    assert resp.headers["cache-control"] == "no-cache, no-store, must-revalidate"
    body = resp.content.decode("utf-8")
    assert body.startswith("BEGIN:VCARD\r\nVERSION:3.0\r\nFN:Ana Lopez\r\n")
    assert "TITLE:CEO" in body
    assert "TEL;TYPE=CELL:+15550100" in body
    assert body.endswith("END:VCARD")


def test_vcard_embeds_photo_when_fetch_succeeds(app, client, repo):
    _profile(repo, photo_url="/uploads/ana.jpg")
    app.state.vcard_service.photo_fetcher = lambda url: "QUJD"

    body = client.get("/c/ana/vcard").text

    assert "PHOTO;ENCODING=b;TYPE=JPEG:QUJD" in body


def test_vcard_omits_photo_when_fetch_fails(app, client, repo):
    _profile(repo, photo_url="https://cdn.test/ana.jpg")
    app.state.vcard_service.photo_fetcher = lambda url: None

    resp = client.get("/c/ana/vcard")

    assert resp.status_code == 200
    assert "PHOTO" not in resp.text


def test_vcard_served_without_photo_when_photo_url_is_malformed(client, repo):
    _profile(repo, photo_url="http://[::1/ana.jpg")

    resp = client.get("/c/ana/vcard")

    assert resp.status_code == 200
    assert "PHOTO" not in resp.text
    assert resp.text.endswith("END:VCARD")


def test_vcard_unknown_profile(client):
    assert client.get("/c/nobody/vcard").status_code == 404


def test_vcard_rejects_profile_without_name(client, repo):
    _profile(repo, full_name="")
    assert client.get("/c/ana/vcard").status_code == 422


def test_vcard_qr_png(client, repo):
    _profile(repo)
    resp = client.get("/c/ana/qr.png")
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "image/png"
    assert resp.content.startswith(b"\x89PNG")


def test_fetch_photo_base64_resolves_relative_urls():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        return httpx.Response(200, content=b"\xff\xd8jpeg")

    result = vcard_service.fetch_photo_base64("/uploads/ana.jpg", transport=httpx.MockTransport(handler))

    assert seen["url"] == "https://cards.test/uploads/ana.jpg"
    assert result == base64.b64encode(b"\xff\xd8jpeg").decode("ascii")


def test_fetch_photo_base64_is_best_effort():
    def not_found(request):
        return httpx.Response(404)

    def offline(request):
        raise httpx.ConnectError("offline", request=request)

    assert vcard_service.fetch_photo_base64("https://cdn.test/a.jpg", transport=httpx.MockTransport(not_found)) is None
    assert vcard_service.fetch_photo_base64("https://cdn.test/a.jpg", transport=httpx.MockTransport(offline)) is None
    assert vcard_service.fetch_photo_base64("") is None
    assert vcard_service.fetch_photo_base64("http://[::1/a.jpg", transport=httpx.MockTransport(not_found)) is None


def _submission(**overrides):
    data = {
        "profile_id": "p-1",
        "full_name": "Visitor Person",
        "email": "visitor@example.com",
        "interest_type": "networking",
        "phone": "+15550100",
        "message": "Nice to meet you",
    }
    data.update(overrides)
    return data


def test_contact_submission_syncs_to_crm(app, client, repo):
    _profile(repo, ghl_api_key="key", ghl_location_id="loc", ghl_connected=True)
    fake = FakeClient(UpsertResult(success=True, ghl_contact_id="ghl-1", is_new=True))
    app.state.sync_service.client_factory = lambda profile: fake

    resp = client.post("/api/contacts", json=_submission(), headers={"x-forwarded-for": "10.0.0.1, 10.0.0.2"})

    assert resp.status_code == 200
    data = resp.json()
    assert data["success"] is True
    assert data["ghl_sync"] == {"success": True}
    contact = repo.get_contact(data["contact_id"])
    assert contact.ghl_sync_status == "synced"
    assert contact.ghl_contact_id == "ghl-1"
    assert contact.ip_address == "10.0.0.1"
    assert contact.source == "direct_link"
    assert fake.calls == 1


def test_contact_submission_without_crm_stays_pending(client, repo):
    _profile(repo)

    resp = client.post("/api/contacts", json=_submission(source="qr_scan"))

    assert resp.status_code == 200
    data = resp.json()
    assert data["ghl_sync"]["success"] is False
    contact = repo.get_contact(data["contact_id"])
    assert contact.ghl_sync_status == "pending"
    assert contact.source == "qr_scan"


def test_contact_submission_keeps_contact_when_crm_fails(app, client, repo):
    _profile(repo, ghl_api_key="key", ghl_location_id="loc", ghl_connected=True)
    app.state.sync_service.client_factory = lambda profile: FakeClient(UpsertResult(success=False, error="GHL API error: 503"))

    data = client.post("/api/contacts", json=_submission()).json()

    assert data["success"] is True
    assert data["ghl_sync"] == {"success": False, "error": "GHL API error: 503"}
    assert repo.get_contact(data["contact_id"]).ghl_sync_status == "failed"


def test_contact_submission_survives_unexpected_sync_crash(app, client, repo):
    class ExplodingSync:
        def sync_contact(self, contact_id):
            raise RuntimeError("database went away")

    _profile(repo, ghl_api_key="key", ghl_location_id="loc", ghl_connected=True)
    app.state.contact_service.sync_service = ExplodingSync()

    resp = client.post("/api/contacts", json=_submission())

    assert resp.status_code == 200
    data = resp.json()
    assert data["success"] is True
    assert data["ghl_sync"] == {"success": False, "error": "database went away"}
    assert repo.get_contact(data["contact_id"]).email == "visitor@example.com"


@pytest.mark.parametrize(
    "overrides",
    [
        {"full_name": ""},
        {"email": None},
        {"email": "not-an-email"},
        {"interest_type": "astrology"},
    ],
)
def test_contact_submission_validation(client, repo, overrides):
    _profile(repo)
    assert client.post("/api/contacts", json=_submission(**overrides)).status_code == 400


def test_contact_submission_unknown_profile(client):
    assert client.post("/api/contacts", json=_submission(profile_id="missing")).status_code == 404


def test_contact_submission_is_rate_limited(client, repo, monkeypatch):
    _profile(repo)
    monkeypatch.setenv("CONTACT_RATE_LIMIT", "2")
    core_config.get_settings.cache_clear()
    codes = [client.post("/api/contacts", json=_submission()).status_code for _ in range(3)]
    assert codes == [200, 200, 429]


def test_sync_endpoint(app, client, repo):
    _profile(repo, ghl_api_key="key", ghl_location_id="loc", ghl_connected=True, ghl_auto_sync=False)
    contact = repo.create_contact("p-1", full_name="Visitor", email="v@example.com", interest_type="podcast")

    assert client.post("/api/ghl/sync", json={}).status_code == 400
    assert client.post("/api/ghl/sync", json={"contact_id": "missing"}).status_code == 404

    data = client.post("/api/ghl/sync", json={"contact_id": contact.id}).json()
    assert data["success"] is False
    assert data["status"] == "disabled"

    repo.upsert_profile("p-1", ghl_auto_sync=True)
    app.state.sync_service.client_factory = lambda profile: FakeClient(
        UpsertResult(success=True, ghl_contact_id="ghl-9", is_new=False)
    )
    data = client.post("/api/ghl/sync", json={"contact_id": contact.id}).json()
    assert data == {
        "success": True,
        "status": "synced",
        "ghl_contact_id": "ghl-9",
        "is_new": False,
        "error": None,
    }


def test_settings_connection_test(app, client):
    class FakeGHL:
        def __init__(self, api_key, location_id):
            self.api_key = api_key

        def test_connection(self):
            if self.api_key == "good":
                return ConnectionResult(success=True)
            return ConnectionResult(success=False, error="Invalid API Key")

    app.state.settings_service.client_class = FakeGHL

    missing = client.post("/api/settings/ghl/test", json={"ghl_api_key": "good"})
    assert missing.status_code == 400

    ok = client.post("/api/settings/ghl/test", json={"ghl_api_key": "good", "ghl_location_id": "loc"})
    assert ok.json() == {"success": True, "message": "Connection successful!"}

    bad = client.post("/api/settings/ghl/test", json={"ghl_api_key": "bad", "ghl_location_id": "loc"})
    assert bad.status_code == 400
    assert bad.json()["detail"] == "Invalid API Key"
