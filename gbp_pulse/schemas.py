"""Pydantic models and enums for the GBP Pulse session."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class PulseModel(BaseModel):
    """Base model serialising to camelCase, the persisted record layout."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Business identity and diagnosis
# ---------------------------------------------------------------------------


class IssueCategory(str, Enum):
    """Closed set of categories a diagnosis can land in."""

    SUSPENSION = "SUSPENSION"
    VERIFICATION = "VERIFICATION"
    RANKING = "RANKING"
    REVIEWS = "REVIEWS"
    OTHER = "OTHER"

    @classmethod
    def parse(cls, raw: object) -> "IssueCategory":
        """Map free-form gateway output onto the closed set."""

        if isinstance(raw, str):
            candidate = raw.strip().upper()
            if candidate in cls._value2member_map_:
                return cls(candidate)
        return cls.OTHER


class BusinessContext(PulseModel):
    """Identity and diagnosis result for the active session."""

    name: str = ""
    industry: str = ""
    issue_description: str = ""
    detected_category: Optional[IssueCategory] = None
    analysis: Optional[str] = None

    @property
    def has_identity(self) -> bool:
        return bool(self.name.strip())


class StepStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"

    def flipped(self) -> "StepStatus":
        return StepStatus.PENDING if self is StepStatus.COMPLETED else StepStatus.COMPLETED


class FixStep(PulseModel):
    """One remediation action in the plan."""

    id: str
    title: str
    description: str
    status: StepStatus = StepStatus.PENDING


class StepGuide(PulseModel):
    """Deep-dive guide for a single plan step."""

    title: str
    big_picture: str
    steps: List[str] = Field(default_factory=list)
    pitfalls: List[str] = Field(default_factory=list)
    pro_tips: List[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Content studio
# ---------------------------------------------------------------------------


class ToolId(str, Enum):
    """Content generation tools offered by the studio."""

    DESCRIPTION = "description"
    POST = "post"
    REPLY = "reply"
    CHALLENGE = "challenge"
    BLOG = "blog"
    REVIEW_REMOVAL = "review_removal"
    Q_AND_A = "q_and_a"
    PHOTO_IDEAS = "photo_ideas"


class ToolEntry(PulseModel):
    input: str = ""
    output: str = ""


class ReplyRecord(PulseModel):
    """A generated review reply kept for the current session."""

    original: str
    generated: str
    timestamp: float


# ---------------------------------------------------------------------------
# Profile creation
# ---------------------------------------------------------------------------


class NewProfileData(PulseModel):
    """Draft for a profile that does not exist yet."""

    business_name: str = ""
    category: str = ""
    is_service_area: bool = False
    address: str = ""
    phone: str = ""
    website: str = ""
    description: str = ""


class VerificationAdvice(PulseModel):
    method: str
    tips: List[str] = Field(default_factory=list)


class ValidationResult(PulseModel):
    """Outcome of the compliance audit run before the final wizard stage."""

    is_valid: bool
    issues: List[str] = Field(default_factory=list)
    suggestions: Optional[List[str]] = None
    optimized_description: Optional[str] = None
    verification_advice: Optional[VerificationAdvice] = None


# ---------------------------------------------------------------------------
# Assistant chat
# ---------------------------------------------------------------------------


class ChatRole(str, Enum):
    USER = "user"
    MODEL = "model"


class ChatMessage(PulseModel):
    id: str
    role: ChatRole
    text: str
    timestamp: float


# ---------------------------------------------------------------------------
# HTTP payloads
# ---------------------------------------------------------------------------


class IdentityRequest(PulseModel):
    """Identity setup from the quick start prompt or "switch business"."""

    name: str = Field(..., min_length=1)
    industry: str = Field(..., min_length=1)


class DiagnosisRequest(PulseModel):
    name: str
    industry: str
    issue_description: str


class NavigateRequest(PulseModel):
    view: str


class ToolSelectRequest(PulseModel):
    tool: ToolId


class ToolInputRequest(PulseModel):
    text: str


class WizardUpdateRequest(PulseModel):
    business_name: Optional[str] = None
    category: Optional[str] = None
    is_service_area: Optional[bool] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    description: Optional[str] = None


class ChatRequest(PulseModel):
    text: str


class NavItem(PulseModel):
    """Describe one entry of the navigation menu."""

    id: str
    label: str
    description: str


class SessionSnapshot(PulseModel):
    view: str
    focus_mode: bool
    reset_pending: bool
    session_generation: int
    context: BusinessContext
    has_identity: bool
    has_active_session: bool
    claim_scenario: Optional[str] = None


class PlanSnapshot(PulseModel):
    steps: List[FixStep]
    progress: int
    context: BusinessContext


class StudioSnapshot(PulseModel):
    active_tool: ToolId
    entries: Dict[ToolId, ToolEntry]
    in_flight: List[ToolId]
    copied: bool
    show_publish_guide: bool
    reply_history: List[ReplyRecord]


class WizardSnapshot(PulseModel):
    phase: str
    stage: Optional[int]
    data: NewProfileData
    validation: Optional[ValidationResult]
    error: Optional[str]
    can_advance: bool
    completed: bool


class ClaimScenarioView(PulseModel):
    id: str
    headline: str
    summary: str
    steps: List[Dict[str, Any]]
    suggests_create: bool = False
