"""In-memory stand-in for the generation gateway."""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Sequence, Tuple

from gbp_pulse.errors import GatewayError
from gbp_pulse.schemas import BusinessContext, NewProfileData, ToolId


def sample_diagnosis() -> Dict[str, Any]:
    return {
        "category": "SUSPENSION",
        "analysis": "The listing duplicates another profile's content.",
        "steps": [{"title": "Appeal", "description": "Submit the reinstatement form."}],
    }


class FakeGateway:
    """Scriptable gateway; set ``fail`` to make a named call raise."""

    def __init__(self) -> None:
        self.diagnosis_payload: Any = sample_diagnosis()
        self.content_text = "Generated copy"
        self.validation_payload: Any = {"isValid": True, "issues": []}
        self.guide_payload: Any = {
            "title": "Appeal",
            "bigPicture": "Reinstatement depends on proving the business is real.",
            "steps": ["Collect documents"],
            "pitfalls": ["Creating a second listing"],
            "proTips": ["Photograph your signage"],
        }
        self.chat_reply = "Happy to help."
        self.fail: set[str] = set()
        self.hold_content = False
        self.pending: List[Tuple[ToolId, asyncio.Future]] = []
        self.calls: List[Tuple[str, Any]] = []

    def _check(self, name: str) -> None:
        if name in self.fail:
            raise GatewayError(f"{name} unavailable")

    async def diagnose(self, context: BusinessContext) -> Dict[str, Any]:
        self.calls.append(("diagnose", context))
        self._check("diagnose")
        return self.diagnosis_payload

    async def generate_content(self, tool: ToolId, context: BusinessContext, details: str) -> str:
        self.calls.append(("generate_content", (tool, context.name, details)))
        if self.hold_content:
            future: asyncio.Future = asyncio.get_running_loop().create_future()
            self.pending.append((tool, future))
            return await future
        self._check("generate_content")
        return self.content_text

    async def validate_profile(self, draft: NewProfileData) -> Dict[str, Any]:
        self.calls.append(("validate_profile", draft))
        self._check("validate_profile")
        return self.validation_payload

    async def generate_guide(self, step_title: str, step_description: str, context: BusinessContext) -> Dict[str, Any]:
        self.calls.append(("generate_guide", step_title))
        self._check("generate_guide")
        return self.guide_payload

    async def chat(
        self,
        history: Sequence[Dict[str, str]],
        message: str,
        context: BusinessContext | None = None,
    ) -> str:
        self.calls.append(("chat", (list(history), message, context)))
        self._check("chat")
        return self.chat_reply

    def call_names(self) -> List[str]:
        return [name for name, _ in self.calls]
