import asyncio

import pytest

from fakes import FakeGateway
from gbp_pulse.diagnosis import DiagnosisPipeline
from gbp_pulse.errors import DiagnosisFailedError, DiagnosisInputError
from gbp_pulse.schemas import BusinessContext, FixStep, IssueCategory, StepStatus
from gbp_pulse.session import SessionState
from gbp_pulse.store import ContextStore

ISSUE = "Listing suspended for duplicate content"


@pytest.fixture
def session() -> SessionState:
    return SessionState(ContextStore())


def _run(pipeline: DiagnosisPipeline, name: str = "Acme Plumbing", industry: str = "Plumbing", issue: str = ISSUE):
    return asyncio.run(pipeline.run(name, industry, issue))


def test_successful_diagnosis_updates_context_and_plan(session: SessionState) -> None:
    gateway = FakeGateway()

    result = _run(DiagnosisPipeline(session, gateway))

    assert session.context.detected_category is IssueCategory.SUSPENSION
    assert session.context.issue_description == ISSUE
    assert session.context.analysis == "The listing duplicates another profile's content."
    assert len(session.plan) == 1
    step = session.plan[0]
    assert step.id and step.status is StepStatus.PENDING
    assert step.title == "Appeal"
    assert result.steps == session.plan
    assert session.store.load() == session.context


def test_gateway_ids_and_statuses_are_not_trusted(session: SessionState) -> None:
    gateway = FakeGateway()
    gateway.diagnosis_payload = {
        "category": "verification",
        "analysis": "Video verification pending.",
        "steps": [
            {"id": "1", "title": "Film signage", "description": "", "status": "completed"},
            {"id": "1", "title": "Show tools", "description": "", "status": "completed"},
        ],
    }

    _run(DiagnosisPipeline(session, gateway))

    ids = [step.id for step in session.plan]
    assert len(set(ids)) == 2 and "1" not in ids
    assert all(step.status is StepStatus.PENDING for step in session.plan)
    assert session.context.detected_category is IssueCategory.VERIFICATION


def test_ids_are_unique_across_repeated_runs(session: SessionState) -> None:
    pipeline = DiagnosisPipeline(session, FakeGateway())

    first = _run(pipeline).steps[0].id
    second = _run(pipeline).steps[0].id

    assert first != second


def test_unknown_category_maps_to_other(session: SessionState) -> None:
    gateway = FakeGateway()
    gateway.diagnosis_payload = {**gateway.diagnosis_payload, "category": "SPAM"}

    _run(DiagnosisPipeline(session, gateway))

    assert session.context.detected_category is IssueCategory.OTHER


@pytest.mark.parametrize(
    ("name", "industry", "issue", "missing"),
    [("", "Plumbing", ISSUE, ["name"]), ("Acme", " ", "", ["industry", "issue_description"])],
)
def test_blank_input_is_rejected_without_a_call(
    session: SessionState, name: str, industry: str, issue: str, missing: list[str]
) -> None:
    gateway = FakeGateway()

    with pytest.raises(DiagnosisInputError) as excinfo:
        _run(DiagnosisPipeline(session, gateway), name, industry, issue)

    assert excinfo.value.missing == missing
    assert gateway.calls == []


def _seed(session: SessionState) -> tuple[BusinessContext, list[FixStep]]:
    context = BusinessContext(name="Old Co", industry="Retail", analysis="Earlier result")
    plan = [FixStep(id="keep", title="Earlier step", description="")]
    session.apply_diagnosis(context, plan)
    return context, plan


@pytest.mark.parametrize(
    "payload",
    [
        "not a dict",
        {"category": "SUSPENSION", "analysis": "x", "steps": []},
        {"category": "SUSPENSION", "steps": [{"title": "A", "description": ""}]},
        {"category": "SUSPENSION", "analysis": "x", "steps": [{"description": "no title"}]},
        {"category": "SUSPENSION", "analysis": "x", "steps": "nope"},
    ],
)
def test_malformed_response_leaves_state_untouched(session: SessionState, payload: object) -> None:
    context, plan = _seed(session)
    gateway = FakeGateway()
    gateway.diagnosis_payload = payload

    with pytest.raises(DiagnosisFailedError):
        _run(DiagnosisPipeline(session, gateway))

    assert session.context == context
    assert session.plan == plan


def test_gateway_failure_leaves_state_untouched(session: SessionState) -> None:
    context, plan = _seed(session)
    gateway = FakeGateway()
    gateway.fail.add("diagnose")

    with pytest.raises(DiagnosisFailedError, match="Please try again"):
        _run(DiagnosisPipeline(session, gateway))

    assert session.context == context
    assert session.plan == plan
    assert session.store.load_plan() == plan
