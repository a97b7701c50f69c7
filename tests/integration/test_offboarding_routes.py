"""
Cognitive offboarding routes over a test orchestrator.
"""

import pytest
from fastapi.testclient import TestClient

from keeper.features.cognitive_offboarding.api import get_gap_scanner, get_orchestrator
from keeper.features.cognitive_offboarding.domain.errors import (
    GENERIC_PERMISSION_MESSAGE,
    PermissionDeniedError,
)
from keeper.features.cognitive_offboarding.domain.models import ActiveUser
from keeper.features.cognitive_offboarding.pipeline.scanner.service import GapScanner
from keeper.features.cognitive_offboarding.pipeline.scoring.service import (
    IntensityScoringService,
)
from keeper.main import app


@pytest.fixture
def client(orchestrator, seeded_source, notifier):
    scanner = GapScanner(seeded_source, IntensityScoringService(seeded_source), notifier)
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    app.dependency_overrides[get_gap_scanner] = lambda: scanner
    yield TestClient(app)
    app.dependency_overrides.clear()


def _trigger(client, employee_id="user123", **extra):
    response = client.post("/offboarding/sessions", json={"employee_id": employee_id, **extra})
    assert response.status_code == 201
    return response.json()["session_id"]


def test_trigger_creates_session(client):
    response = client.post(
        "/offboarding/sessions",
        json={
            "employee_id": "user123",
            "triggered_by": "hr-portal",
            "department": "Payments",
            "offboarding_date": "2024-09-30",
        },
    )

    assert response.status_code == 201
    data = response.json()
    assert data["state"] == "TRIGGERED"
    assert data["progress_percentage"] == 0
    assert data["triggered_by"] == "hr-portal"
    assert data["progress"]["offboarding_date"] == "2024-09-30"
    assert data["progress"]["role"] == "Unknown"


def test_trigger_rejects_missing_employee(client):
    assert client.post("/offboarding/sessions", json={"employee_id": ""}).status_code == 422

    response = client.post("/offboarding/sessions", json={"employee_id": "   "})
    assert response.status_code == 422
    assert response.json()["detail"]["code"] == "VALIDATION_ERROR"


def test_phases_run_in_order(client):
    session_id = _trigger(client, role="Staff Engineer")

    scan = client.post(f"/offboarding/sessions/{session_id}/scan")
    assert scan.status_code == 200
    assert scan.json()["undocumented_intensity_score"] == 3.0
    assert scan.json()["specific_artifacts"] == ["PAY-101", "PAY-102", "PR #42"]

    interview = client.post(f"/offboarding/sessions/{session_id}/interview")
    assert interview.status_code == 200
    assert interview.json()["questions_generated"] == 4
    assert "opening" in interview.json()["interview_flow"]

    archive = client.post(
        f"/offboarding/sessions/{session_id}/archive",
        json={
            "responses": [
                {
                    "question": "Why does PAY-101 retry?",
                    "answer": "It is a temporary workaround for late settlement files.",
                    "artifact_id": "PAY-101",
                }
            ]
        },
    )
    assert archive.status_code == 200
    assert archive.json()["page_url"].startswith("https://example.atlassian.net/wiki/pages/")
    assert archive.json()["title"] == "Cognitive Offboarding - Staff Engineer"

    session = client.get(f"/offboarding/sessions/{session_id}").json()
    assert session["state"] == "ARCHIVED"
    assert session["progress_percentage"] == 100

    validation = client.get(f"/offboarding/sessions/{session_id}/validation").json()
    assert validation == {"is_valid": True, "errors": []}


def test_out_of_order_phase_is_conflict(client):
    session_id = _trigger(client)

    response = client.post(f"/offboarding/sessions/{session_id}/archive")

    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "PHASE_ORDER_ERROR"
    assert client.get(f"/offboarding/sessions/{session_id}").json()["state"] == "TRIGGERED"


def test_unknown_session_is_not_found(client):
    assert client.get("/offboarding/sessions/nope").status_code == 404
    assert client.post("/offboarding/sessions/nope/scan").status_code == 404


def test_permission_denied_returns_generic_message(client, seeded_source):
    seeded_source.failing_users["user123"] = PermissionDeniedError("bitbucket")
    session_id = _trigger(client)

    response = client.post(f"/offboarding/sessions/{session_id}/scan")

    assert response.status_code == 403
    assert response.json()["detail"]["message"] == GENERIC_PERMISSION_MESSAGE
    session = client.get(f"/offboarding/sessions/{session_id}").json()
    assert session["state"] == "FAILED"
    assert session["errors"][0]["code"] == "PERMISSION_DENIED"


def test_scan_failure_is_bad_gateway(client, seeded_source):
    seeded_source.failing_users["user123"] = RuntimeError("jira returned 500")
    session_id = _trigger(client)

    response = client.post(f"/offboarding/sessions/{session_id}/scan")

    assert response.status_code == 502
    assert response.json()["detail"]["code"] == "SCAN_FAILED"


def test_complete_workflow_and_listing(client):
    response = client.post("/offboarding/workflows", json={"employee_id": "user123", "role": "SRE"})

    assert response.status_code == 200
    assert response.json()["state"] == "ARCHIVED"
    assert response.json()["archive"]["confidence"] == 0.5

    listing = client.get("/offboarding/sessions").json()
    assert listing["total_count"] == 1


def test_organization_scan(client, seeded_source):
    seeded_source.users = [ActiveUser("user123", "User 123"), ActiveUser("idle")]

    response = client.post("/offboarding/scan")

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert [r["user_id"] for r in data["reports"]] == ["user123"]
    assert data["summary"]["total_users_scanned"] == 2


def test_routes_unavailable_without_orchestrator(monkeypatch):
    monkeypatch.delattr(app.state, "orchestrator", raising=False)

    response = TestClient(app).get("/offboarding/sessions")

    assert response.status_code == 503
