"""Turn an issue description into a categorized diagnosis and a fix plan."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Dict, List

from .errors import DiagnosisFailedError, DiagnosisInputError, GatewayError, ResponseShapeError
from .llm import GenerationGateway
from .schemas import BusinessContext, FixStep, IssueCategory, StepStatus
from .session import SessionState

logger = logging.getLogger(__name__)

FAILURE_MESSAGE = "Something went wrong with the AI diagnosis. Please try again."


@dataclass(frozen=True)
class DiagnosisResult:
    context: BusinessContext
    steps: List[FixStep]


def _new_step_id() -> str:
    return uuid.uuid4().hex


def _parse_steps(raw_steps: Any) -> List[FixStep]:
    """Build plan steps from gateway output, ignoring any ids or statuses it sent."""

    if not isinstance(raw_steps, list) or not raw_steps:
        raise ResponseShapeError("Diagnosis did not include any steps")

    steps: List[FixStep] = []
    for item in raw_steps:
        if not isinstance(item, dict):
            raise ResponseShapeError("Diagnosis step is not an object")
        title = item.get("title")
        description = item.get("description")
        if not isinstance(title, str) or not title.strip():
            raise ResponseShapeError("Diagnosis step is missing a title")
        if not isinstance(description, str):
            description = ""
        steps.append(
            FixStep(
                id=_new_step_id(),
                title=title.strip(),
                description=description.strip(),
                status=StepStatus.PENDING,
            )
        )
    return steps


def assemble_diagnosis(request: BusinessContext, payload: Dict[str, Any]) -> DiagnosisResult:
    """Merge the gateway payload into a new context and plan without side effects."""

    if not isinstance(payload, dict):
        raise ResponseShapeError("Diagnosis response is not an object")
    analysis = payload.get("analysis")
    if not isinstance(analysis, str) or not analysis.strip():
        raise ResponseShapeError("Diagnosis did not include an analysis")
    steps = _parse_steps(payload.get("steps"))
    context = request.model_copy(
        update={
            "detected_category": IssueCategory.parse(payload.get("category")),
            "analysis": analysis.strip(),
        }
    )
    return DiagnosisResult(context=context, steps=steps)


class DiagnosisPipeline:
    """Run a diagnosis and commit its result to the session in one step."""

    def __init__(self, session: SessionState, gateway: GenerationGateway) -> None:
        self._session = session
        self._gateway = gateway

    async def diagnose(self, name: str, industry: str, issue_description: str) -> DiagnosisResult:
        """Call the gateway and assemble a result without touching the session."""

        fields = {"name": name, "industry": industry, "issue_description": issue_description}
        missing = [key for key, value in fields.items() if not (value or "").strip()]
        if missing:
            raise DiagnosisInputError(missing)

        request = BusinessContext(
            name=name.strip(),
            industry=industry.strip(),
            issue_description=issue_description.strip(),
        )
        try:
            payload = await self._gateway.diagnose(request)
            return assemble_diagnosis(request, payload)
        except GatewayError as exc:
            logger.exception("Diagnosis failed for %s", request.name)
            raise DiagnosisFailedError(FAILURE_MESSAGE) from exc

    def commit(self, result: DiagnosisResult) -> None:
        self._session.apply_diagnosis(result.context, result.steps)
        logger.info(
            "Diagnosis for %s: %s with %d steps",
            result.context.name,
            result.context.detected_category.value if result.context.detected_category else "?",
            len(result.steps),
        )

    async def run(self, name: str, industry: str, issue_description: str) -> DiagnosisResult:
        result = await self.diagnose(name, industry, issue_description)
        self.commit(result)
        return result
