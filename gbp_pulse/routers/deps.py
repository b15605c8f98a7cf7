"""Shared FastAPI dependencies."""

from __future__ import annotations

from fastapi import Request

from ..journey import RecoveryJourney


def get_journey(request: Request) -> RecoveryJourney:
    """Return the single session owned by the running application."""

    return request.app.state.journey
