"""View state machine selecting the active stage of the workflow.

Every view is reachable from every other by explicit navigation. The one
programmatic transition is DIAGNOSTIC to PLAN after a successful diagnosis.
Focus mode belongs to the content studio and is switched off on entry to
any other view. While a reset confirmation is pending, navigation is inert.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List

from .errors import FocusModeError, NavigationBlockedError
from .schemas import NavItem

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 50


class AppView(str, Enum):
    DASHBOARD = "DASHBOARD"
    DIAGNOSTIC = "DIAGNOSTIC"
    PLAN = "PLAN"
    WRITER = "WRITER"
    CREATE_WIZARD = "CREATE_WIZARD"
    CLAIM_GUIDE = "CLAIM_GUIDE"


@dataclass(frozen=True)
class ViewInfo:
    """Runtime definition used by the navigation menu."""

    view: AppView
    label: str
    description: str


NAV_ITEMS: Dict[AppView, ViewInfo] = {
    AppView.DASHBOARD: ViewInfo(
        view=AppView.DASHBOARD,
        label="Dashboard",
        description="Unified command for Google Business Profiles.",
    ),
    AppView.CREATE_WIZARD: ViewInfo(
        view=AppView.CREATE_WIZARD,
        label="Create Profile",
        description="Build a profile from scratch with an AI compliance audit.",
    ),
    AppView.CLAIM_GUIDE: ViewInfo(
        view=AppView.CLAIM_GUIDE,
        label="Claim Business",
        description="Find the right path to take ownership of a listing.",
    ),
    AppView.DIAGNOSTIC: ViewInfo(
        view=AppView.DIAGNOSTIC,
        label="Diagnostic Tool",
        description="Diagnose suspensions, verification issues and ranking drops.",
    ),
    AppView.PLAN: ViewInfo(
        view=AppView.PLAN,
        label="Action Plan",
        description="Work through the recovery plan step by step.",
    ),
    AppView.WRITER: ViewInfo(
        view=AppView.WRITER,
        label="Content Studio",
        description="Generate profile content, replies and appeals.",
    ),
}


def list_nav_items() -> List[NavItem]:
    """Return the navigation menu in display order."""

    return [NavItem(id=info.view.value, label=info.label, description=info.description) for info in NAV_ITEMS.values()]


class ViewStateMachine:
    """Track the active view, the focus sub-mode and the reset modal."""

    def __init__(self) -> None:
        self.current = AppView.DASHBOARD
        self.focus_mode = False
        self.reset_pending = False
        self.session_generation = 0
        self.history: List[Dict[str, str]] = []

    def navigate(self, target: AppView) -> AppView:
        """Explicit user navigation to any view."""

        self._ensure_unblocked(target)
        self._enter(target)
        return self.current

    def complete_diagnosis(self) -> AppView:
        self._ensure_unblocked(AppView.PLAN)
        self._enter(AppView.PLAN)
        return self.current

    def toggle_focus_mode(self) -> bool:
        if self.current is not AppView.WRITER:
            raise FocusModeError("Focus mode is only available in the content studio.")
        self.focus_mode = not self.focus_mode
        return self.focus_mode

    def request_reset(self) -> None:
        self.reset_pending = True

    def cancel_reset(self) -> None:
        self.reset_pending = False

    def reset(self) -> int:
        """Return to the dashboard and start a new session generation."""

        self.reset_pending = False
        self._enter(AppView.DASHBOARD)
        self.session_generation += 1
        return self.session_generation

    def _ensure_unblocked(self, target: AppView) -> None:
        if self.reset_pending:
            raise NavigationBlockedError(
                f"Cannot open {target.value} while the reset confirmation is pending."
            )

    def _enter(self, target: AppView) -> None:
        previous = self.current
        self.current = target
        if target is not AppView.WRITER:
            self.focus_mode = False
        self.history.append(
            {"from": previous.value, "to": target.value, "at": datetime.now(timezone.utc).isoformat()}
        )
        del self.history[:-HISTORY_LIMIT]
        logger.info("View %s -> %s", previous.value, target.value)
