import pytest
from fastapi.testclient import TestClient

from fakes import FakeGateway
from gbp_pulse.app import create_app
from gbp_pulse.config import PulseSettings
from gbp_pulse.store import ContextStore


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def client(gateway: FakeGateway) -> TestClient:
    app = create_app(PulseSettings(state_dir=None, submit_delay=0.0), gateway=gateway, store=ContextStore())
    return TestClient(app)


DIAGNOSIS = {"name": "Acme Plumbing", "industry": "Plumbing", "issueDescription": "Listing suspended"}


def test_healthcheck(client: TestClient) -> None:
    response = client.get("/pulse/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_session_snapshot_uses_camel_case(client: TestClient) -> None:
    body = client.get("/pulse/session").json()

    assert body["view"] == "DASHBOARD"
    assert body["sessionGeneration"] == 0
    assert body["hasIdentity"] is False


def test_navigate_rejects_unknown_view(client: TestClient) -> None:
    assert client.post("/pulse/navigate", json={"view": "SETTINGS"}).status_code == 422


def test_navigate_blocked_while_reset_pending(client: TestClient) -> None:
    client.post("/pulse/reset/request")

    response = client.post("/pulse/navigate", json={"view": "PLAN"})

    assert response.status_code == 409
    assert client.post("/pulse/reset/cancel").json()["resetPending"] is False


def test_focus_mode_requires_writer(client: TestClient) -> None:
    assert client.post("/pulse/focus").status_code == 409
    client.post("/pulse/navigate", json={"view": "WRITER"})
    assert client.post("/pulse/focus").json()["focusMode"] is True


def test_diagnosis_builds_plan_and_opens_it(client: TestClient) -> None:
    response = client.post("/pulse/diagnosis", json=DIAGNOSIS)

    assert response.status_code == 200
    body = response.json()
    assert body["progress"] == 0
    assert body["context"]["detectedCategory"] == "SUSPENSION"
    assert body["steps"][0]["status"] == "pending"
    assert client.get("/pulse/session").json()["view"] == "PLAN"


def test_diagnosis_validation_and_failure(client: TestClient, gateway: FakeGateway) -> None:
    blank = dict(DIAGNOSIS, issueDescription=" ")
    assert client.post("/pulse/diagnosis", json=blank).status_code == 422

    gateway.fail.add("diagnose")
    response = client.post("/pulse/diagnosis", json=DIAGNOSIS)
    assert response.status_code == 502


def test_toggle_guide_and_export(client: TestClient) -> None:
    step_id = client.post("/pulse/diagnosis", json=DIAGNOSIS).json()["steps"][0]["id"]

    toggled = client.post(f"/pulse/plan/steps/{step_id}/toggle").json()
    assert toggled["progress"] == 100

    guide = client.get(f"/pulse/plan/steps/{step_id}/guide").json()
    assert guide["bigPicture"].startswith("Reinstatement")
    assert client.get("/pulse/plan/steps/missing/guide").status_code == 404

    export = client.get("/pulse/plan/export")
    assert export.status_code == 200
    assert "- [x] **Appeal**" in export.text


def test_export_without_plan_is_404(client: TestClient) -> None:
    assert client.get("/pulse/plan/export").status_code == 404


def test_reset_confirm_requires_request(client: TestClient) -> None:
    client.post("/pulse/diagnosis", json=DIAGNOSIS)
    assert client.post("/pulse/reset/confirm").status_code == 409

    client.post("/pulse/reset/request")
    body = client.post("/pulse/reset/confirm").json()

    assert body["view"] == "DASHBOARD"
    assert body["sessionGeneration"] == 1
    assert body["context"]["name"] == ""
    assert client.get("/pulse/plan").json()["steps"] == []


def test_studio_generate_requires_identity(client: TestClient) -> None:
    client.put("/pulse/studio/post/input", json={"text": "Promo"})

    response = client.post("/pulse/studio/post/generate")

    assert response.status_code == 422
    assert response.json()["detail"]["reason"] == "identity_required"


def test_studio_generate_and_copy(client: TestClient) -> None:
    client.post("/pulse/identity", json={"name": "Acme Plumbing", "industry": "Plumbing"})
    client.put("/pulse/studio/post/input", json={"text": "Promo"})
    assert client.post("/pulse/studio/post/copy").status_code == 409

    body = client.post("/pulse/studio/post/generate").json()

    assert body["entries"]["post"]["output"] == "Generated copy"
    assert body["entries"]["blog"]["output"] == ""
    assert body["inFlight"] == []
    assert client.post("/pulse/studio/post/copy").json()["copied"] is True


def test_identity_requires_both_fields(client: TestClient) -> None:
    assert client.post("/pulse/identity", json={"name": "Acme", "industry": "  "}).status_code == 422


def test_wizard_flow(client: TestClient) -> None:
    assert client.post("/pulse/wizard/next").status_code == 409
    client.patch("/pulse/wizard", json={"businessName": "Sunrise Bakery", "category": "Bakery"})

    for expected in ("location", "contact", "audit", "completed"):
        assert client.post("/pulse/wizard/next").json()["phase"] == expected

    checklist = client.get("/pulse/wizard/checklist").json()
    assert checklist[0]["value"] == "Sunrise Bakery"


def test_wizard_audit_failure_is_502(client: TestClient, gateway: FakeGateway) -> None:
    gateway.fail.add("validate_profile")
    client.patch("/pulse/wizard", json={"businessName": "Sunrise Bakery"})
    client.post("/pulse/wizard/next")
    client.post("/pulse/wizard/next")

    assert client.post("/pulse/wizard/next").status_code == 502
    assert client.get("/pulse/wizard").json()["phase"] == "contact"


def test_assistant_chat(client: TestClient) -> None:
    messages = client.post("/pulse/assistant/messages", json={"text": "Help"}).json()

    assert [m["role"] for m in messages] == ["model", "user", "model"]
    assert messages[-1]["text"] == "Happy to help."


def test_claim_scenarios(client: TestClient) -> None:
    scenarios = client.get("/pulse/claim").json()
    assert scenarios[-1]["suggestsCreate"] is True

    assert client.post("/pulse/claim/OWNED").json()["headline"] == "It's Owned by Someone Else"
    assert client.get("/pulse/session").json()["claimScenario"] == "OWNED"
    assert client.post("/pulse/claim/NOWHERE").status_code == 422
