"""Static decision guide for claiming an existing listing."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Tuple

from .schemas import ClaimScenarioView


class ClaimScenario(str, Enum):
    UNCLAIMED = "UNCLAIMED"
    OWNED = "OWNED"
    MISSING = "MISSING"


@dataclass(frozen=True)
class ClaimPath:
    scenario: ClaimScenario
    headline: str
    summary: str
    steps: Tuple[Tuple[str, str], ...] = ()
    suggests_create: bool = False


CLAIM_PATHS: Dict[ClaimScenario, ClaimPath] = {
    ClaimScenario.UNCLAIMED: ClaimPath(
        scenario=ClaimScenario.UNCLAIMED,
        headline="Great! It's Unclaimed.",
        summary="This is the easiest scenario. It means no one else has verified the business yet.",
        steps=(
            ("Go to Google Maps", "Find your business listing."),
            (
                'Click "Own this business?"',
                'It\'s usually located in the "About" section or near the suggest an edit button.',
            ),
            ("Follow the Verification Steps", "Google will ask you to verify via Phone, Text, Email, or Video."),
        ),
    ),
    ClaimScenario.OWNED: ClaimPath(
        scenario=ClaimScenario.OWNED,
        headline="It's Owned by Someone Else",
        summary=(
            'You saw a message like "This profile is managed by x...@gmail.com". '
            "You can still get it back."
        ),
        steps=(
            ('Click "Request Access"', 'Fill out the form. Choose "Ownership" as the access level.'),
            (
                "Wait Exactly 3 Days",
                "The current owner has 3 days to respond. If they ignore it, Google will release the profile to you.",
            ),
            (
                "Check Your Email",
                "If rejected, you may need to appeal. If ignored, you'll get a link to claim it yourself.",
            ),
        ),
    ),
    ClaimScenario.MISSING: ClaimPath(
        scenario=ClaimScenario.MISSING,
        headline="Business Not Found?",
        summary=(
            "If searching for your business name yields no results on Google Maps, "
            "a profile likely doesn't exist yet. Create a new profile instead."
        ),
        suggests_create=True,
    ),
}


def describe(path: ClaimPath) -> ClaimScenarioView:
    return ClaimScenarioView(
        id=path.scenario.value,
        headline=path.headline,
        summary=path.summary,
        steps=[
            {"order": index, "title": title, "detail": detail}
            for index, (title, detail) in enumerate(path.steps, start=1)
        ],
        suggests_create=path.suggests_create,
    )


def list_scenarios() -> List[ClaimScenarioView]:
    return [describe(path) for path in CLAIM_PATHS.values()]


class ClaimGuideSession:
    """Remember which claim scenario the owner picked."""

    def __init__(self) -> None:
        self.scenario: ClaimScenario | None = None

    def select(self, scenario: ClaimScenario) -> ClaimPath:
        self.scenario = scenario
        return CLAIM_PATHS[scenario]
