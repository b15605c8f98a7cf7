"""Profile creation wizard and claim guide endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ..claim import ClaimScenario, describe, list_scenarios
from ..journey import RecoveryJourney
from ..schemas import ClaimScenarioView, WizardSnapshot, WizardUpdateRequest
from .deps import get_journey


router = APIRouter(prefix="/pulse", tags=["wizard"])


@router.get("/wizard", response_model=WizardSnapshot)
async def fetch_wizard(journey: RecoveryJourney = Depends(get_journey)) -> WizardSnapshot:
    return journey.wizard.snapshot()


@router.patch("/wizard", response_model=WizardSnapshot)
async def update_wizard(payload: WizardUpdateRequest, journey: RecoveryJourney = Depends(get_journey)) -> WizardSnapshot:
    journey.wizard.update(**payload.model_dump(exclude_none=True))
    return journey.wizard.snapshot()


@router.post("/wizard/next", response_model=WizardSnapshot)
async def wizard_next(journey: RecoveryJourney = Depends(get_journey)) -> WizardSnapshot:
    """Advance one stage; the Contact to Audit step runs the compliance audit."""

    wizard = journey.wizard
    if not wizard.can_advance:
        raise HTTPException(status_code=409, detail="The wizard cannot advance from its current state.")
    await wizard.next()
    if wizard.error:
        raise HTTPException(status_code=502, detail=wizard.error)
    return wizard.snapshot()


@router.post("/wizard/back", response_model=WizardSnapshot)
async def wizard_back(journey: RecoveryJourney = Depends(get_journey)) -> WizardSnapshot:
    journey.wizard.back()
    return journey.wizard.snapshot()


@router.get("/wizard/checklist")
async def wizard_checklist(journey: RecoveryJourney = Depends(get_journey)) -> list[dict[str, str]]:
    wizard = journey.wizard
    if not wizard.completed:
        raise HTTPException(status_code=409, detail="Complete the wizard first.")
    return wizard.launch_checklist()


@router.get("/claim", response_model=list[ClaimScenarioView])
async def claim_scenarios() -> list[ClaimScenarioView]:
    return list_scenarios()


@router.post("/claim/{scenario}", response_model=ClaimScenarioView)
async def select_claim_scenario(
    scenario: ClaimScenario, journey: RecoveryJourney = Depends(get_journey)
) -> ClaimScenarioView:
    path = journey.claim.select(scenario)
    return describe(path)
