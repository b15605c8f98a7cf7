"""Action plan tracking, step guides and the printable plan export."""

from __future__ import annotations

import logging
import math
from datetime import date
from typing import Iterable, List

from pydantic import ValidationError

from .errors import GatewayError
from .llm import GenerationGateway
from .schemas import BusinessContext, FixStep, StepGuide, StepStatus
from .session import SessionState

logger = logging.getLogger(__name__)


def compute_progress(steps: List[FixStep]) -> int:
    """Percentage of completed steps, rounded half up; 0 for an empty plan."""

    if not steps:
        return 0
    completed = sum(1 for step in steps if step.status is StepStatus.COMPLETED)
    return int(math.floor(100 * completed / len(steps) + 0.5))


class ActionPlanTracker:
    """Own completion state of the remediation steps."""

    def __init__(self, session: SessionState, gateway: GenerationGateway) -> None:
        self._session = session
        self._gateway = gateway

    @property
    def steps(self) -> List[FixStep]:
        return self._session.plan

    def get(self, step_id: str) -> FixStep | None:
        return next((step for step in self._session.plan if step.id == step_id), None)

    def toggle(self, step_id: str) -> FixStep | None:
        """Flip one step between pending and completed; unknown ids are ignored."""

        plan = self._session.plan
        toggled: FixStep | None = None
        updated: List[FixStep] = []
        for step in plan:
            if step.id == step_id:
                toggled = step.model_copy(update={"status": step.status.flipped()})
                updated.append(toggled)
            else:
                updated.append(step)
        if toggled is None:
            logger.debug("Ignoring toggle for unknown step %s", step_id)
            return None
        self._session.replace_plan(updated)
        return toggled

    def progress(self) -> int:
        return compute_progress(self._session.plan)

    async def load_guide(self, step_id: str) -> StepGuide | None:
        """Fetch the deep-dive guide for a step; failures yield ``None``."""

        step = self.get(step_id)
        if step is None:
            return None
        try:
            raw = await self._gateway.generate_guide(step.title, step.description, self._session.context)
            return StepGuide.model_validate(raw)
        except (GatewayError, ValidationError):
            logger.exception("Failed to load guide for step %s", step_id)
            return None

    def export_markdown(self, today: date | None = None) -> str:
        return format_plan_markdown(self._session.context, self._session.plan, today=today)


# ---------------------------------------------------------------------------
# Markdown formatter
# ---------------------------------------------------------------------------


def _bullet_list(items: Iterable[str]) -> str:
    return "\n".join(f"- {item}" for item in items if item)


def format_plan_markdown(context: BusinessContext, steps: List[FixStep], *, today: date | None = None) -> str:
    """Render the recovery plan the way it is printed for the owner."""

    stamp = (today or date.today()).isoformat()
    category = context.detected_category.value if context.detected_category else "Optimization"
    step_lines = [
        f"[{'x' if step.status is StepStatus.COMPLETED else ' '}] **{step.title}** — {step.description}"
        for step in steps
    ]

    return "\n\n".join(
        section
        for section in [
            "# GBP Pulse - Recovery Plan",
            f"Generated for: {context.name} ({context.industry})\n\nDate: {stamp}",
            f"## Category\n\n{category}",
            f"## Analysis\n\n{context.analysis}" if context.analysis else "",
            f"## Progress\n\n{compute_progress(steps)}% complete",
            f"## Steps\n\n{_bullet_list(step_lines)}" if step_lines else "",
        ]
        if section
    )
