"""Application factory for the GBP Pulse FastAPI backend."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import PulseSettings, configure_logging, get_settings
from .journey import RecoveryJourney
from .llm import GenerationGateway, OpenAIGateway
from .routers import studio, wizard, workflow
from .store import ContextStore


def create_app(
    settings: PulseSettings | None = None,
    *,
    gateway: GenerationGateway | None = None,
    store: ContextStore | None = None,
) -> FastAPI:
    """Create and configure a FastAPI application driving one session."""

    resolved = settings or get_settings()
    configure_logging(resolved)

    app = FastAPI(
        title="GBP Pulse Backend",
        version="0.1.0",
        description="Recovery and onboarding workflow for Google Business Profiles.",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=resolved.allowed_origins,
        allow_origin_regex=r"http://localhost:\d+$",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.settings = resolved
    app.state.journey = RecoveryJourney(
        store or ContextStore(resolved.state_file),
        gateway or OpenAIGateway(resolved),
        submit_delay=resolved.submit_delay,
    )
    app.include_router(workflow.router)
    app.include_router(studio.router)
    app.include_router(wizard.router)
    return app
