"""Top-level controller wiring the session, views and stage components."""

from __future__ import annotations

import logging
from typing import Callable, Generic, TypeVar

from .assistant import AssistantSession
from .claim import ClaimGuideSession
from .diagnosis import DiagnosisPipeline, DiagnosisResult
from .llm import GenerationGateway
from .plan import ActionPlanTracker
from .schemas import BusinessContext, SessionSnapshot
from .session import SessionState
from .store import ContextStore
from .studio import ContentStudioSession
from .views import AppView, ViewStateMachine
from .wizard import ProfileWizard

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _GenerationScoped(Generic[T]):
    """Hold a component that is rebuilt whenever the session generation changes."""

    def __init__(self, factory: Callable[[], T]) -> None:
        self._factory = factory
        self._generation: int | None = None
        self._instance: T | None = None

    def get(self, generation: int) -> T:
        if self._instance is None or self._generation != generation:
            self._instance = self._factory()
            self._generation = generation
        return self._instance


class RecoveryJourney:
    """One user's recovery and onboarding session.

    Transient per-screen components (studio drafts, wizard, chat, claim guide)
    are keyed on the view machine's session generation, so a reset discards
    all of them at once without tearing each one down.
    """

    def __init__(
        self,
        store: ContextStore,
        gateway: GenerationGateway,
        *,
        submit_delay: float = 2.0,
    ) -> None:
        self.gateway = gateway
        self.session = SessionState(store)
        self.session.init()
        self.views = ViewStateMachine()
        self.diagnosis = DiagnosisPipeline(self.session, gateway)
        self.plan = ActionPlanTracker(self.session, gateway)
        self._studio = _GenerationScoped(lambda: ContentStudioSession(self.session, gateway))
        self._wizard = _GenerationScoped(lambda: ProfileWizard(gateway, submit_delay=submit_delay))
        self._assistant = _GenerationScoped(lambda: AssistantSession(self.session, gateway))
        self._claim = _GenerationScoped(ClaimGuideSession)
        # Set when a diagnosis commits behind the reset modal.
        self._plan_awaiting_view = False

    # -- generation-scoped components -----------------------------------------

    @property
    def studio(self) -> ContentStudioSession:
        return self._studio.get(self.views.session_generation)

    @property
    def wizard(self) -> ProfileWizard:
        return self._wizard.get(self.views.session_generation)

    @property
    def assistant(self) -> AssistantSession:
        return self._assistant.get(self.views.session_generation)

    @property
    def claim(self) -> ClaimGuideSession:
        return self._claim.get(self.views.session_generation)

    # -- workflow --------------------------------------------------------------

    @property
    def context(self) -> BusinessContext:
        return self.session.context

    def set_identity(self, name: str, industry: str) -> BusinessContext:
        """Single entry point for quick start, in-studio prompt and "switch business"."""

        context = self.session.set_identity(name, industry)
        logger.info("Business identity set to %s (%s)", context.name, context.industry)
        return context

    async def run_diagnosis(self, name: str, industry: str, issue_description: str) -> DiagnosisResult | None:
        """Diagnose and, on success, advance from the diagnostic view to the plan.

        A result that arrives after a reset belongs to a discarded session and
        is dropped; ``None`` is returned in that case. A result that arrives
        while the reset modal is open is committed, and the plan opens once
        the reset is cancelled.
        """

        generation = self.views.session_generation
        result = await self.diagnosis.diagnose(name, industry, issue_description)
        if generation != self.views.session_generation:
            logger.warning("Dropping diagnosis for %s issued before a reset", result.context.name)
            return None
        self.diagnosis.commit(result)
        if self.views.reset_pending:
            self._plan_awaiting_view = True
        else:
            self.views.complete_diagnosis()
        return result

    def navigate(self, target: AppView) -> AppView:
        view = self.views.navigate(target)
        self._plan_awaiting_view = False
        return view

    def request_reset(self) -> None:
        self.views.request_reset()

    def cancel_reset(self) -> None:
        self.views.cancel_reset()
        if self._plan_awaiting_view:
            self._plan_awaiting_view = False
            self.views.complete_diagnosis()

    def reset(self) -> None:
        """Clear store, plan and context, then return to the dashboard."""

        self._plan_awaiting_view = False
        self.session.clear()
        self.views.reset()
        logger.info("Session reset (generation %d)", self.views.session_generation)

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            view=self.views.current.value,
            focus_mode=self.views.focus_mode,
            reset_pending=self.views.reset_pending,
            session_generation=self.views.session_generation,
            context=self.session.context,
            has_identity=self.session.has_identity,
            has_active_session=self.session.has_active_session,
            claim_scenario=self.claim.scenario.value if self.claim.scenario else None,
        )
