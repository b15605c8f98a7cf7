"""Content studio: isolated input/output drafts per generation tool."""

from __future__ import annotations

import itertools
import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Set

from .errors import GatewayError, StudioPreconditionError
from .llm import GenerationGateway
from .schemas import ReplyRecord, StudioSnapshot, ToolEntry, ToolId
from .session import SessionState

logger = logging.getLogger(__name__)

NO_RESPONSE_MESSAGE = "No response received from AI."
FAILURE_MESSAGE = "Generation failed. Please try again."


@dataclass(frozen=True)
class ToolInfo:
    """Describe one tool tab of the studio."""

    id: ToolId
    label: str
    placeholder: str
    input_label: str = "Input Prompt"


TOOLS: Dict[ToolId, ToolInfo] = {
    ToolId.DESCRIPTION: ToolInfo(
        id=ToolId.DESCRIPTION,
        label="Bio",
        placeholder="List your history, services, and unique value proposition...",
    ),
    ToolId.POST: ToolInfo(
        id=ToolId.POST,
        label="Post",
        placeholder="What's the update or offer? (e.g., '10% off plumbing this week')...",
    ),
    ToolId.REPLY: ToolInfo(
        id=ToolId.REPLY,
        label="Reply",
        placeholder="Paste the customer review here...",
    ),
    ToolId.CHALLENGE: ToolInfo(
        id=ToolId.CHALLENGE,
        label="Challenge",
        placeholder="e.g. Family owned since 1990, specializing in emergency plumbing...",
        input_label="Unique Selling Points & History",
    ),
    ToolId.BLOG: ToolInfo(
        id=ToolId.BLOG,
        label="Blog",
        placeholder="What topic should the post cover? (e.g., 'Maintaining your AC in Summer')...",
    ),
    ToolId.REVIEW_REMOVAL: ToolInfo(
        id=ToolId.REVIEW_REMOVAL,
        label="Flag",
        placeholder="Why should this be removed? (e.g. Off-topic, spam)...",
    ),
    ToolId.Q_AND_A: ToolInfo(
        id=ToolId.Q_AND_A,
        label="FAQ",
        placeholder="Enter common questions or topics...",
    ),
    ToolId.PHOTO_IDEAS: ToolInfo(
        id=ToolId.PHOTO_IDEAS,
        label="Photos",
        placeholder="Describe your workspace or location...",
    ),
}

_unregistered = set(ToolId) - set(TOOLS)
if _unregistered:
    raise RuntimeError(f"Studio tools without registry entries: {sorted(t.value for t in _unregistered)}")


class ContentStudioSession:
    """Per-tool drafts and generations for one studio session.

    Every generation captures its target tool and a request token when it
    starts. On completion the result is written to that tool only, and only
    if no newer request was issued for the same tool in the meantime.
    """

    def __init__(
        self,
        session: SessionState,
        gateway: GenerationGateway,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._session = session
        self._gateway = gateway
        self._clock = clock
        self._entries: Dict[ToolId, ToolEntry] = {tool: ToolEntry() for tool in ToolId}
        self._tokens = itertools.count(1)
        self._latest_token: Dict[ToolId, int] = {}
        self._pending: Dict[ToolId, Set[int]] = {tool: set() for tool in ToolId}
        self.active_tool = ToolId.DESCRIPTION
        self.copied = False
        self.show_publish_guide = False
        self._reply_history: List[ReplyRecord] = []

    # -- reads ---------------------------------------------------------------

    def entry(self, tool: ToolId) -> ToolEntry:
        return self._entries[tool].model_copy()

    def is_in_flight(self, tool: ToolId) -> bool:
        return bool(self._pending[tool])

    @property
    def reply_history(self) -> List[ReplyRecord]:
        return list(self._reply_history)

    def snapshot(self) -> StudioSnapshot:
        return StudioSnapshot(
            active_tool=self.active_tool,
            entries={tool: entry.model_copy() for tool, entry in self._entries.items()},
            in_flight=[tool for tool in ToolId if self.is_in_flight(tool)],
            copied=self.copied,
            show_publish_guide=self.show_publish_guide,
            reply_history=self.reply_history,
        )

    # -- edits ---------------------------------------------------------------

    def select_tool(self, tool: ToolId) -> None:
        self.active_tool = tool
        self.copied = False
        self.show_publish_guide = False

    def set_input(self, tool: ToolId, text: str) -> None:
        self._entries[tool] = self._entries[tool].model_copy(update={"input": text})

    def set_output(self, tool: ToolId, text: str) -> None:
        self._entries[tool] = self._entries[tool].model_copy(update={"output": text})

    def clear(self, tool: ToolId) -> None:
        self._entries[tool] = ToolEntry()
        self.copied = False
        self.show_publish_guide = False

    def mark_copied(self, tool: ToolId) -> bool:
        """Record a clipboard copy; nothing to copy means no affordance."""

        if not self._entries[tool].output:
            return False
        self.copied = True
        return True

    def open_publish_guide(self) -> bool:
        if not self._entries[self.active_tool].output:
            return False
        self.show_publish_guide = True
        return True

    # -- generation ------------------------------------------------------------

    async def generate(self, tool: ToolId) -> str | None:
        """Generate content for *tool*.

        Returns the text written to the tool's output, or ``None`` when the
        response was superseded by a newer request for the same tool.
        """

        context = self._session.context
        if not context.has_identity:
            raise StudioPreconditionError(
                "identity_required", "Set your business name before generating content."
            )
        details = self._entries[tool].input
        if not details.strip():
            raise StudioPreconditionError("input_required", "Enter some details for this tool first.")

        token = next(self._tokens)
        self._latest_token[tool] = token
        self._pending[tool].add(token)
        self.copied = False
        self.show_publish_guide = False

        succeeded = False
        try:
            text = await self._gateway.generate_content(tool, context, details)
            if text and text.strip():
                output = text
                succeeded = True
            else:
                output = NO_RESPONSE_MESSAGE
        except GatewayError:
            logger.exception("Content generation failed for %s", tool.value)
            output = FAILURE_MESSAGE
        finally:
            self._pending[tool].discard(token)

        if self._latest_token.get(tool) != token:
            logger.warning("Discarding superseded %s response (request %d)", tool.value, token)
            return None

        self.set_output(tool, output)
        if succeeded and tool is ToolId.REPLY:
            self._reply_history.append(
                ReplyRecord(original=details, generated=output, timestamp=self._clock())
            )
        return output
