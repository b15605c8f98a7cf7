"""Configuration helpers for the GBP Pulse backend."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import List, Mapping

from dotenv import load_dotenv

ENV_PREFIX = "GBP_PULSE_"
DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_REASONING_MODEL = "gpt-4o"
DEFAULT_STATE_DIR = Path.home() / ".gbp_pulse"
DEFAULT_SUBMIT_DELAY = 2.0
DEFAULT_ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]

load_dotenv(override=False)


@dataclass(frozen=True)
class PulseSettings:
    """Settings container for the gateway, persistence and HTTP surface.

    ``reasoning_model`` is used for the structured calls (diagnosis and
    profile audit); the lighter ``model`` covers content, guides and chat.
    """

    openai_api_key: str | None = None
    model: str = DEFAULT_MODEL
    reasoning_model: str = DEFAULT_REASONING_MODEL
    # None keeps the session in memory only.
    state_dir: Path | None = DEFAULT_STATE_DIR
    submit_delay: float = DEFAULT_SUBMIT_DELAY
    allowed_origins: List[str] = field(default_factory=lambda: list(DEFAULT_ALLOWED_ORIGINS))
    log_level: str = "INFO"

    @property
    def has_api_key(self) -> bool:
        """True when live generation is possible."""

        return bool(self.openai_api_key)

    @property
    def state_file(self) -> Path | None:
        """Return the JSON document backing the context store."""

        if self.state_dir is None:
            return None
        return self.state_dir / "session.json"


def _env(environ: Mapping[str, str], name: str) -> str | None:
    value = environ.get(f"{ENV_PREFIX}{name}")
    if value is None:
        return None
    return value.strip()


def _resolve_state_dir(raw: str | None) -> Path | None:
    """An explicitly empty value disables on-disk persistence."""

    if raw is None:
        return DEFAULT_STATE_DIR
    if not raw:
        return None
    return Path(raw).expanduser()


def _resolve_submit_delay(raw: str | None) -> float:
    if not raw:
        return DEFAULT_SUBMIT_DELAY
    try:
        return max(0.0, float(raw))
    except ValueError:
        return DEFAULT_SUBMIT_DELAY


def _resolve_allowed_origins(raw: str | None) -> List[str]:
    if raw:
        return [origin.strip() for origin in raw.split(",") if origin.strip()]
    return list(DEFAULT_ALLOWED_ORIGINS)


@lru_cache(maxsize=1)
def get_settings() -> PulseSettings:
    """Read environment variables and return cached settings."""

    environ = os.environ
    return PulseSettings(
        openai_api_key=environ.get("OPENAI_API_KEY") or None,
        model=_env(environ, "MODEL") or DEFAULT_MODEL,
        reasoning_model=_env(environ, "REASONING_MODEL") or DEFAULT_REASONING_MODEL,
        state_dir=_resolve_state_dir(_env(environ, "STATE_DIR")),
        submit_delay=_resolve_submit_delay(_env(environ, "SUBMIT_DELAY")),
        allowed_origins=_resolve_allowed_origins(_env(environ, "ALLOWED_ORIGINS")),
        log_level=(_env(environ, "LOG_LEVEL") or "INFO").upper(),
    )


def configure_logging(settings: PulseSettings | None = None) -> None:
    """Apply the configured log level to the package logger."""

    resolved = settings or get_settings()
    level = logging.getLevelName(resolved.log_level)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger("gbp_pulse").setLevel(level)
