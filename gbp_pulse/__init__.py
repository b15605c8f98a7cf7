"""GBP Pulse backend package."""

from .app import create_app
from .config import get_settings
from .journey import RecoveryJourney

__all__ = ["create_app", "get_settings", "RecoveryJourney"]
