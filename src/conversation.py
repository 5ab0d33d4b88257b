"""In-memory conversation history for one dashboard session."""

from __future__ import annotations

import threading
from typing import List

from assistant import Assistant
from schemas import AssistantMessage


class TurnInProgressError(RuntimeError):
    """Raised when a message is submitted before the previous turn resolved."""


class ConversationSession:
    """Append-only message list with at most one turn in flight."""

    def __init__(self, assistant: Assistant, first_name: str, store_id: str):
        self._assistant = assistant
        self.first_name = first_name
        self.store_id = store_id
        self._turn = threading.Lock()
        self._messages: List[AssistantMessage] = []

    @property
    def messages(self) -> List[AssistantMessage]:
        return list(self._messages)

    @property
    def busy(self) -> bool:
        return self._turn.locked()

    def submit(self, text: str) -> AssistantMessage:
        text = (text or "").strip()
        if not text:
            raise ValueError("message must not be blank")
        if not self._turn.acquire(blocking=False):
            raise TurnInProgressError("wait for the current reply before sending another message")

        try:
            self._messages.append(AssistantMessage(type="user", content=text))
            reply = self._assistant.reply(text, self.first_name, self.store_id)
            message = AssistantMessage.from_reply(reply)
            self._messages.append(message)
            return message
        finally:
            self._turn.release()
