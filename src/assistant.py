"""Entry point the dashboard calls for each assistant message."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Protocol

import router
from config import ConfigurationError
from groq_client import fallback_reply
from schemas import AssistantReply, MessageReply, RouteHandler
from store_commands import StoreCommandHandler, StoreQueries

logger = logging.getLogger(__name__)


class ReplyGenerator(Protocol):
    def respond(self, message: str, first_name: str) -> str: ...


def smart_quick_replies(text: str) -> List[str]:
    """Follow-up suggestions for generated replies, picked by topic keywords."""
    lowered = (text or "").lower()
    if any(word in lowered for word in ("business", "sales", "performance")):
        return ["Store performance", "Today orders", "Best sellers", "Help"]
    if any(word in lowered for word in ("product", "selling", "inventory")):
        return ["Best sellers", "Low stock", "Add product", "Store analytics"]
    if any(word in lowered for word in ("order", "customer", "shipping")):
        return ["Today orders", "Pending orders", "Recent customers", "Help"]
    return ["Store performance", "Best sellers", "Today orders", "Help"]


class Assistant:
    """Routes a message to store commands or the reply generator.

    Pass ``generator_factory`` to defer building the generator until a
    message actually needs it; store commands never touch it.
    """

    def __init__(
        self,
        queries: StoreQueries,
        generator: Optional[ReplyGenerator] = None,
        *,
        generator_factory: Optional[Callable[[], ReplyGenerator]] = None,
    ):
        if generator is None and generator_factory is None:
            raise ValueError("generator or generator_factory is required")
        self._commands = StoreCommandHandler(queries)
        self._generator = generator
        self._generator_factory = generator_factory

    def _reply_generator(self) -> ReplyGenerator:
        if self._generator is None:
            self._generator = self._generator_factory()
        return self._generator

    def _generated_content(self, text: str, first_name: str) -> str:
        try:
            generator = self._reply_generator()
        except ConfigurationError as exc:
            logger.error("generator_unavailable", extra={"error": str(exc)})
            return fallback_reply(first_name)
        return generator.respond(text, first_name)

    def reply(self, text: str, first_name: str, store_id: str) -> AssistantReply:
        decision = router.route(text, first_name)
        logger.info(
            "assistant_routed",
            extra={
                "category": decision.category.value,
                "handler": decision.handler.value,
                "intent": decision.intent.value if decision.intent else None,
                "store_id": store_id,
            },
        )

        if decision.handler is RouteHandler.PREDEFINED:
            return self._commands.handle(text, first_name, store_id, decision.intent)

        content = self._generated_content(text, first_name)
        return MessageReply(content=content, quick_replies=smart_quick_replies(text))

    def process(self, text: str, first_name: str, store_id: str) -> Dict[str, Any]:
        """Public payload form: ``{type, content, quickReplies, action?}``."""
        return self.reply(text, first_name, store_id).to_payload()
