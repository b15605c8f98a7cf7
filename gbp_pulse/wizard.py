"""Four-stage profile creation wizard with an audit gate before the last stage."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Dict, List

from pydantic import ValidationError

from .errors import GatewayError, ResponseShapeError
from .llm import GenerationGateway
from .schemas import NewProfileData, ValidationResult, WizardSnapshot

logger = logging.getLogger(__name__)

VALIDATION_FAILED_MESSAGE = "Failed to validate profile. Please try again."


class WizardPhase(str, Enum):
    """Explicit wizard states, including the transient busy ones."""

    INFO = "info"
    LOCATION = "location"
    CONTACT = "contact"
    AUDIT = "audit"
    VALIDATING = "validating"
    SUBMITTING = "submitting"
    COMPLETED = "completed"

    @property
    def stage(self) -> int | None:
        """Ordinal stage shown in the step indicator; ``None`` when off the sequence."""

        return _STAGE_NUMBERS.get(self)


_STAGE_NUMBERS: Dict[WizardPhase, int] = {
    WizardPhase.INFO: 1,
    WizardPhase.LOCATION: 2,
    WizardPhase.CONTACT: 3,
    # Busy phases keep showing the stage they started from.
    WizardPhase.VALIDATING: 3,
    WizardPhase.AUDIT: 4,
    WizardPhase.SUBMITTING: 4,
}

_FORWARD: Dict[WizardPhase, WizardPhase] = {
    WizardPhase.INFO: WizardPhase.LOCATION,
    WizardPhase.LOCATION: WizardPhase.CONTACT,
}

_BACKWARD: Dict[WizardPhase, WizardPhase] = {
    WizardPhase.LOCATION: WizardPhase.INFO,
    WizardPhase.CONTACT: WizardPhase.LOCATION,
    WizardPhase.AUDIT: WizardPhase.CONTACT,
}

_BUSY = {WizardPhase.VALIDATING, WizardPhase.SUBMITTING}


def parse_validation(raw: Any) -> ValidationResult:
    """Validate the audit payload, enforcing that failures list their issues."""

    try:
        result = ValidationResult.model_validate(raw)
    except ValidationError as exc:
        raise ResponseShapeError("Profile audit response has the wrong shape") from exc
    if not result.is_valid and not result.issues:
        raise ResponseShapeError("Profile audit failed without listing issues")
    if result.optimized_description is not None and not result.optimized_description.strip():
        result = result.model_copy(update={"optimized_description": None})
    return result


class ProfileWizard:
    """Collect a new profile draft: Info, Location, Contact, then Audit."""

    def __init__(self, gateway: GenerationGateway, *, submit_delay: float = 2.0) -> None:
        self._gateway = gateway
        self._submit_delay = submit_delay
        self.phase = WizardPhase.INFO
        self.data = NewProfileData()
        self.validation: ValidationResult | None = None
        self.error: str | None = None

    @property
    def stage(self) -> int | None:
        return self.phase.stage

    @property
    def busy(self) -> bool:
        return self.phase in _BUSY

    @property
    def completed(self) -> bool:
        return self.phase is WizardPhase.COMPLETED

    @property
    def can_advance(self) -> bool:
        if self.busy or self.completed:
            return False
        if self.phase is WizardPhase.INFO and not self.data.business_name.strip():
            return False
        return True

    def update(self, **fields: Any) -> NewProfileData:
        if self.completed:
            return self.data
        self.data = self.data.model_copy(update={key: value for key, value in fields.items() if value is not None})
        return self.data

    def back(self) -> WizardPhase:
        """Step back one stage. Never re-runs the audit."""

        previous = _BACKWARD.get(self.phase)
        if previous is not None:
            self.phase = previous
            self.error = None
        return self.phase

    async def next(self) -> WizardPhase:
        if not self.can_advance:
            return self.phase
        self.error = None

        if self.phase in _FORWARD:
            self.phase = _FORWARD[self.phase]
        elif self.phase is WizardPhase.CONTACT:
            await self._run_audit()
        elif self.phase is WizardPhase.AUDIT:
            await self._submit()
        return self.phase

    async def _run_audit(self) -> None:
        self.phase = WizardPhase.VALIDATING
        draft = self.data.model_copy()
        try:
            result = parse_validation(await self._gateway.validate_profile(draft))
        except GatewayError:
            logger.exception("Profile audit failed for %s", draft.business_name)
            self.error = VALIDATION_FAILED_MESSAGE
            self.phase = WizardPhase.CONTACT
            return

        self.validation = result
        if result.optimized_description:
            self.data = self.data.model_copy(update={"description": result.optimized_description})
        self.phase = WizardPhase.AUDIT
        logger.info("Profile audit for %s: valid=%s", draft.business_name, result.is_valid)

    async def _submit(self) -> None:
        self.phase = WizardPhase.SUBMITTING
        if self._submit_delay:
            await asyncio.sleep(self._submit_delay)
        self.phase = WizardPhase.COMPLETED
        logger.info("Profile preparation completed for %s", self.data.business_name)

    def launch_checklist(self) -> List[Dict[str, str]]:
        """Fields the owner copies into Google once the wizard is complete."""

        return [
            {"label": "Business Name", "value": self.data.business_name},
            {"label": "Category", "value": self.data.category},
            {"label": "Description", "value": self.data.description},
            {"label": "Phone", "value": self.data.phone},
            {"label": "Website", "value": self.data.website},
        ]

    def snapshot(self) -> WizardSnapshot:
        return WizardSnapshot(
            phase=self.phase.value,
            stage=self.stage,
            data=self.data,
            validation=self.validation,
            error=self.error,
            can_advance=self.can_advance,
            completed=self.completed,
        )
