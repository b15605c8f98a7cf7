"""Session, navigation, diagnosis and plan endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse

from ..errors import (
    DiagnosisFailedError,
    DiagnosisInputError,
    FocusModeError,
    IdentityInputError,
    NavigationBlockedError,
)
from ..journey import RecoveryJourney
from ..schemas import (
    DiagnosisRequest,
    FixStep,
    IdentityRequest,
    NavigateRequest,
    NavItem,
    PlanSnapshot,
    SessionSnapshot,
    StepGuide,
)
from ..views import AppView, list_nav_items
from .deps import get_journey


router = APIRouter(prefix="/pulse", tags=["workflow"])


@router.get("/health")
async def healthcheck() -> dict[str, str]:
    """Simple health check endpoint."""

    return {"status": "ok"}


@router.get("/views", response_model=list[NavItem])
async def list_views() -> list[NavItem]:
    """Expose the navigation menu to the UI."""

    return list_nav_items()


@router.get("/session", response_model=SessionSnapshot)
async def fetch_session(journey: RecoveryJourney = Depends(get_journey)) -> SessionSnapshot:
    return journey.snapshot()


@router.post("/navigate", response_model=SessionSnapshot)
async def navigate(payload: NavigateRequest, journey: RecoveryJourney = Depends(get_journey)) -> SessionSnapshot:
    try:
        target = AppView(payload.view)
    except ValueError:
        raise HTTPException(status_code=422, detail=f"Unknown view '{payload.view}'.")
    try:
        journey.navigate(target)
    except NavigationBlockedError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    return journey.snapshot()


@router.post("/identity", response_model=SessionSnapshot)
async def set_identity(payload: IdentityRequest, journey: RecoveryJourney = Depends(get_journey)) -> SessionSnapshot:
    """Quick start, in-studio prompt and "switch business" all land here."""

    try:
        journey.set_identity(payload.name, payload.industry)
    except IdentityInputError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return journey.snapshot()


@router.post("/focus", response_model=SessionSnapshot)
async def toggle_focus(journey: RecoveryJourney = Depends(get_journey)) -> SessionSnapshot:
    try:
        journey.views.toggle_focus_mode()
    except FocusModeError as exc:
        raise HTTPException(status_code=409, detail=str(exc))
    return journey.snapshot()


@router.post("/reset/request", response_model=SessionSnapshot)
async def request_reset(journey: RecoveryJourney = Depends(get_journey)) -> SessionSnapshot:
    journey.request_reset()
    return journey.snapshot()


@router.post("/reset/cancel", response_model=SessionSnapshot)
async def cancel_reset(journey: RecoveryJourney = Depends(get_journey)) -> SessionSnapshot:
    journey.cancel_reset()
    return journey.snapshot()


@router.post("/reset/confirm", response_model=SessionSnapshot)
async def confirm_reset(journey: RecoveryJourney = Depends(get_journey)) -> SessionSnapshot:
    if not journey.views.reset_pending:
        raise HTTPException(status_code=409, detail="Request a reset before confirming it.")
    journey.reset()
    return journey.snapshot()


@router.post("/diagnosis", response_model=PlanSnapshot)
async def run_diagnosis(payload: DiagnosisRequest, journey: RecoveryJourney = Depends(get_journey)) -> PlanSnapshot:
    if journey.views.reset_pending:
        raise HTTPException(status_code=409, detail="Resolve the pending reset first.")
    try:
        await journey.run_diagnosis(payload.name, payload.industry, payload.issue_description)
    except DiagnosisInputError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    except DiagnosisFailedError as exc:
        raise HTTPException(status_code=502, detail=str(exc))
    return _plan_snapshot(journey)


@router.get("/plan", response_model=PlanSnapshot)
async def fetch_plan(journey: RecoveryJourney = Depends(get_journey)) -> PlanSnapshot:
    return _plan_snapshot(journey)


@router.post("/plan/steps/{step_id}/toggle", response_model=PlanSnapshot)
async def toggle_step(step_id: str, journey: RecoveryJourney = Depends(get_journey)) -> PlanSnapshot:
    """Unknown step ids are ignored, matching the tracker contract."""

    journey.plan.toggle(step_id)
    return _plan_snapshot(journey)


@router.get("/plan/steps/{step_id}/guide", response_model=StepGuide)
async def fetch_step_guide(step_id: str, journey: RecoveryJourney = Depends(get_journey)) -> StepGuide:
    step: FixStep | None = journey.plan.get(step_id)
    if step is None:
        raise HTTPException(status_code=404, detail=f"No step '{step_id}' in the current plan.")
    guide = await journey.plan.load_guide(step_id)
    if guide is None:
        raise HTTPException(status_code=502, detail="Failed to load guide. Please try again.")
    return guide


@router.get("/plan/export", response_class=PlainTextResponse)
async def export_plan(journey: RecoveryJourney = Depends(get_journey)) -> str:
    if not journey.plan.steps:
        raise HTTPException(status_code=404, detail="Run the diagnostic tool to generate a plan first.")
    return journey.plan.export_markdown()


def _plan_snapshot(journey: RecoveryJourney) -> PlanSnapshot:
    return PlanSnapshot(steps=journey.plan.steps, progress=journey.plan.progress(), context=journey.context)
