"""Process-wide session state shared by every component."""

from __future__ import annotations

import logging
from typing import List

from .errors import IdentityInputError
from .schemas import BusinessContext, FixStep
from .store import ContextStore

logger = logging.getLogger(__name__)


class SessionState:
    """Own the in-memory business context and plan, written through to the store.

    Lifecycle: :meth:`init` loads from the store when the journey starts and
    :meth:`clear` empties both memory and store on reset. Every writer builds
    the complete next value before handing it over, so the store never sees a
    partial patch.
    """

    def __init__(self, store: ContextStore) -> None:
        self.store = store
        self._context = BusinessContext()
        self._plan: List[FixStep] = []

    @property
    def context(self) -> BusinessContext:
        return self._context

    @property
    def plan(self) -> List[FixStep]:
        return list(self._plan)

    @property
    def has_identity(self) -> bool:
        return self._context.has_identity

    @property
    def has_active_session(self) -> bool:
        return self.has_identity and bool(self._plan)

    def init(self) -> None:
        self._context = self.store.load()
        self._plan = self.store.load_plan()
        logger.info(
            "Session loaded (identity=%s, steps=%d)", self._context.name or "<unset>", len(self._plan)
        )

    def set_identity(self, name: str, industry: str) -> BusinessContext:
        """Update name and industry, keeping any diagnosis already recorded."""

        clean_name = name.strip()
        clean_industry = industry.strip()
        if not clean_name or not clean_industry:
            raise IdentityInputError("Business name and industry are both required.")
        updated = self._context.model_copy(update={"name": clean_name, "industry": clean_industry})
        self.replace_context(updated)
        return updated

    def replace_context(self, context: BusinessContext) -> None:
        self._context = context
        self.store.save(context)

    def replace_plan(self, plan: List[FixStep]) -> None:
        self._plan = list(plan)
        self.store.save_plan(self._plan)

    def apply_diagnosis(self, context: BusinessContext, plan: List[FixStep]) -> None:
        """Commit a diagnosis result; context and plan change together."""

        self._context = context
        self._plan = list(plan)
        self.store.save_all(context, self._plan)

    def clear(self) -> None:
        self.store.clear()
        self._context = BusinessContext()
        self._plan = []
