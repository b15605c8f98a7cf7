"""Exception hierarchy shared by the GBP Pulse components."""

from __future__ import annotations


class PulseError(Exception):
    """Base class for every error raised by the package."""


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------


class IdentityInputError(PulseError, ValueError):
    """Raised when identity setup is missing a name or industry."""


class DiagnosisInputError(PulseError, ValueError):
    """Raised when a diagnosis is requested with a blank required field."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(f"Missing required fields: {', '.join(missing)}")


class StudioPreconditionError(PulseError):
    """Raised when content generation is requested before it can run."""

    def __init__(self, reason: str, message: str) -> None:
        self.reason = reason
        super().__init__(message)


# ---------------------------------------------------------------------------
# Gateway
# ---------------------------------------------------------------------------


class GatewayError(PulseError):
    """The generation service failed or is not configured."""


class ResponseShapeError(GatewayError):
    """The generation service answered with data of the wrong shape."""


class DiagnosisFailedError(PulseError):
    """User-visible diagnosis failure; no state was changed."""


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


class StoreCorruptionError(PulseError):
    """A persisted record is missing or cannot be parsed."""


# ---------------------------------------------------------------------------
# Navigation
# ---------------------------------------------------------------------------


class NavigationBlockedError(PulseError):
    """Navigation attempted while the reset confirmation is pending."""


class FocusModeError(PulseError):
    """Focus mode toggled outside of the content studio."""
