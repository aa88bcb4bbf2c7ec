import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from stylesnap.api.v1.endpoints import trial_endpoints
from stylesnap.core.config import settings
from stylesnap.models import TrialRecord

from conftest import fetch_trial, make_trial


def test_register_new_trial_reports_successful(client: TestClient, db):
    response = client.post("/api/v1/trial", json={"trialId": "trial-new"})

    assert response.status_code == 200
    payload = response.json()
    assert payload["success"] is True
    assert payload["status"] == "successful"
    assert payload["statusCode"] == 200
    assert payload["data"]["id"] == "trial-new"
    assert payload["data"]["free_used"] is False
    assert payload["data"]["paid_credits"] == 0
    assert "trialId=trial-new" in response.headers["set-cookie"]


def test_register_same_trial_twice_never_duplicates(client: TestClient, db):
    first = client.post("/api/v1/trial", json={"trialId": "trial-dup"})
    second = client.post("/api/v1/trial", json={"trialId": "trial-dup"})

    assert first.json()["status"] == "successful"
    assert second.status_code == 200
    assert second.json()["status"] == "already_exists"
    assert db.query(TrialRecord).filter(TrialRecord.id == "trial-dup").count() == 1


def test_register_existing_trial_keeps_entitlements(client: TestClient, db, session_factory):
    make_trial(db, "trial-paid", free_used=True, paid_credits=3)

    response = client.post("/api/v1/trial", json={"trialId": "trial-paid"})

    assert response.json()["status"] == "already_exists"
    trial = fetch_trial(session_factory, "trial-paid")
    assert trial.free_used is True
    assert trial.paid_credits == 3


def test_register_rejects_missing_trial_id(client: TestClient):
    response = client.post("/api/v1/trial", json={})

    assert response.status_code == 400
    payload = response.json()
    assert payload["success"] is False
    assert payload["status"] == "failed"
    assert payload["kind"] == "validation"


def test_get_unknown_trial_is_not_found(client: TestClient):
    response = client.get("/api/v1/trial", params={"trialId": "nobody"})

    assert response.status_code == 404
    payload = response.json()
    assert payload["status"] == "not_found"
    assert payload["kind"] == "not_found"


def test_get_known_trial_returns_record(client: TestClient, db):
    make_trial(db, "trial-known", free_used=True, paid_credits=1)

    response = client.get("/api/v1/trial", params={"trialId": "trial-known"})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["free_used"] is True
    assert data["paid_credits"] == 1
    assert data["user_metadata"] == {"ua": "pytest"}


def test_delete_trial_then_not_found(client: TestClient, db, session_factory):
    make_trial(db, "trial-gone")

    response = client.request("DELETE", "/api/v1/trial", json={"trialId": "trial-gone"})
    assert response.status_code == 200
    assert response.json()["status"] == "successful"
    assert fetch_trial(session_factory, "trial-gone") is None

    again = client.request("DELETE", "/api/v1/trial", json={"trialId": "trial-gone"})
    assert again.status_code == 404
    assert again.json()["status"] == "not_found"


def test_status_of_unknown_identity_reads_as_fresh(client: TestClient, session_factory):
    response = client.get("/api/v1/trial/status", params={"trialId": "never-seen"})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data == {
        "trialId": "never-seen",
        "registered": False,
        "hasUsedFreeTrial": False,
        "paidCredits": 0,
        "isPaidUser": False,
        "canGenerate": True,
    }
    # Status queries never create rows
    assert fetch_trial(session_factory, "never-seen") is None


def test_status_reports_paid_user(client: TestClient, db):
    make_trial(db, "trial-status", free_used=True, paid_credits=2)

    data = client.get("/api/v1/trial/status", params={"trialId": "trial-status"}).json()["data"]

    assert data["registered"] is True
    assert data["hasUsedFreeTrial"] is True
    assert data["isPaidUser"] is True
    assert data["canGenerate"] is True


def test_status_blocked_when_free_used_and_no_credits(client: TestClient, db):
    make_trial(db, "trial-blocked", free_used=True, paid_credits=0)

    data = client.get("/api/v1/trial/status", params={"trialId": "trial-blocked"}).json()["data"]

    assert data["canGenerate"] is False
    assert data["isPaidUser"] is False


def test_cors_allows_configured_origin_with_credentials(client: TestClient):
    origin = settings.CORS_ORIGINS[0]

    response = client.options(
        "/api/v1/trial",
        headers={"Origin": origin, "Access-Control-Request-Method": "POST"},
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == origin
    assert response.headers["access-control-allow-credentials"] == "true"


def test_cors_rejects_unlisted_origin(client: TestClient):
    response = client.options(
        "/api/v1/trial",
        headers={"Origin": "https://evil.example", "Access-Control-Request-Method": "POST"},
    )

    assert response.status_code == 400
    assert "access-control-allow-origin" not in response.headers


def test_datastore_failure_is_reported_as_upstream(client: TestClient, monkeypatch: pytest.MonkeyPatch):
    def unavailable(*args, **kwargs):
        raise OperationalError("SELECT trial_records", {}, Exception("connection refused"))

    monkeypatch.setattr(trial_endpoints, "get_entitlement", unavailable)

    response = client.get("/api/v1/trial/status", params={"trialId": "db-down"})

    assert response.status_code == 500
    payload = response.json()
    assert payload["kind"] == "upstream"
    assert "connection refused" not in payload["message"]
