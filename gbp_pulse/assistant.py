"""Session-scoped assistant chat."""

from __future__ import annotations

import logging
import time
import uuid
from typing import Callable, List

from .errors import GatewayError
from .llm import GenerationGateway
from .schemas import ChatMessage, ChatRole
from .session import SessionState

logger = logging.getLogger(__name__)

GREETING = (
    "Hi! I'm your GBP Assistant. I can help with suspension appeals, verification questions, "
    "or general optimization tips. What's on your mind?"
)
NO_REPLY_MESSAGE = "I'm having trouble connecting right now."
FAILURE_MESSAGE = "Sorry, I encountered an error processing your request."


class AssistantSession:
    def __init__(
        self,
        session: SessionState,
        gateway: GenerationGateway,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._session = session
        self._gateway = gateway
        self._clock = clock
        self.thinking = False
        self._messages: List[ChatMessage] = [self._message(ChatRole.MODEL, GREETING)]

    @property
    def messages(self) -> List[ChatMessage]:
        return list(self._messages)

    def _message(self, role: ChatRole, text: str) -> ChatMessage:
        return ChatMessage(id=uuid.uuid4().hex, role=role, text=text, timestamp=self._clock())

    async def send(self, text: str) -> ChatMessage | None:
        """Send a user message and append the model's reply; blank input is ignored."""

        if not text.strip():
            return None

        history = [{"role": message.role.value, "text": message.text} for message in self._messages]
        self._messages.append(self._message(ChatRole.USER, text))
        self.thinking = True
        try:
            reply_text = await self._gateway.chat(history, text, self._session.context)
            reply = self._message(ChatRole.MODEL, reply_text or NO_REPLY_MESSAGE)
        except GatewayError:
            logger.exception("Assistant chat failed")
            reply = self._message(ChatRole.MODEL, FAILURE_MESSAGE)
        finally:
            self.thinking = False
        self._messages.append(reply)
        return reply
