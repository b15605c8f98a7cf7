"""Content studio and assistant chat endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ..errors import StudioPreconditionError
from ..journey import RecoveryJourney
from ..schemas import ChatMessage, ChatRequest, StudioSnapshot, ToolId, ToolInputRequest, ToolSelectRequest
from .deps import get_journey


router = APIRouter(prefix="/pulse", tags=["studio"])


@router.get("/studio", response_model=StudioSnapshot)
async def fetch_studio(journey: RecoveryJourney = Depends(get_journey)) -> StudioSnapshot:
    return journey.studio.snapshot()


@router.post("/studio/tool", response_model=StudioSnapshot)
async def select_tool(payload: ToolSelectRequest, journey: RecoveryJourney = Depends(get_journey)) -> StudioSnapshot:
    journey.studio.select_tool(payload.tool)
    return journey.studio.snapshot()


@router.put("/studio/{tool}/input", response_model=StudioSnapshot)
async def set_tool_input(
    tool: ToolId,
    payload: ToolInputRequest,
    journey: RecoveryJourney = Depends(get_journey),
) -> StudioSnapshot:
    journey.studio.set_input(tool, payload.text)
    return journey.studio.snapshot()


@router.post("/studio/{tool}/generate", response_model=StudioSnapshot)
async def generate_content(tool: ToolId, journey: RecoveryJourney = Depends(get_journey)) -> StudioSnapshot:
    """Generate for *tool*; the studio that issued the call receives the result."""

    studio = journey.studio
    try:
        await studio.generate(tool)
    except StudioPreconditionError as exc:
        raise HTTPException(status_code=422, detail={"reason": exc.reason, "message": str(exc)})
    return studio.snapshot()


@router.delete("/studio/{tool}", response_model=StudioSnapshot)
async def clear_tool(tool: ToolId, journey: RecoveryJourney = Depends(get_journey)) -> StudioSnapshot:
    journey.studio.clear(tool)
    return journey.studio.snapshot()


@router.post("/studio/{tool}/copy", response_model=StudioSnapshot)
async def copy_output(tool: ToolId, journey: RecoveryJourney = Depends(get_journey)) -> StudioSnapshot:
    if not journey.studio.mark_copied(tool):
        raise HTTPException(status_code=409, detail="Nothing to copy yet.")
    return journey.studio.snapshot()


@router.post("/studio/publish", response_model=StudioSnapshot)
async def open_publish_guide(journey: RecoveryJourney = Depends(get_journey)) -> StudioSnapshot:
    if not journey.studio.open_publish_guide():
        raise HTTPException(status_code=409, detail="Generate content before publishing.")
    return journey.studio.snapshot()


@router.get("/assistant", response_model=list[ChatMessage])
async def fetch_messages(journey: RecoveryJourney = Depends(get_journey)) -> list[ChatMessage]:
    return journey.assistant.messages


@router.post("/assistant/messages", response_model=list[ChatMessage])
async def send_message(payload: ChatRequest, journey: RecoveryJourney = Depends(get_journey)) -> list[ChatMessage]:
    assistant = journey.assistant
    await assistant.send(payload.text)
    return assistant.messages
