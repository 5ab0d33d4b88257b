"""Decide whether a message gets a canned store answer or a generated one."""

from __future__ import annotations

import logging
import re
from typing import Optional

from intents import detect_intent, normalize
from schemas import Intent, RouteCategory, RouteDecision, RouteHandler

logger = logging.getLogger(__name__)

CASUAL_PATTERNS = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"^(hi|hello|hey|howdy|sup|yo)",
        r"how are you|hows it going|whats up|how do you do",
        r"good morning|good afternoon|good evening|good night",
        r"thank you|thanks|thx|ty",
        r"you're welcome|no problem|anytime",
        r"how was your day|how's your day",
        r"^(yes|no|yup|nope|maybe)$",
        r"how are things|what's new",
        r"nice to see you|good to see you",
        r"what's happening|whats going on",
        r"how's life|how have you been",
    )
)

# Older store-command phrasing that predates the intent table. Kept as its
# own list; it overlaps the intent patterns but is not identical to them.
LEGACY_COMMAND_PATTERNS = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"how.*store.*doing|store.*performance|store.*analytics|how.*sales|business.*performance",
        r"how are we doing|how's business|sales report|revenue.*today",
        r"best.*selling|top.*products|what.*selling|popular.*products|what's hot",
        r"which products.*popular|our best products|most sold",
        r"low.*stock|running.*out|need.*restock|almost.*out|stock.*alert",
        r"what.*need.*restock|inventory.*low|which.*out of stock",
        r"today.*orders|orders.*today|recent.*orders|new.*orders",
        r"any.*orders.*today|how many.*orders.*today|what.*orders.*today",
        r"recent.*customers|new.*customers|who.*shopping|customer.*activity",
        r"any.*new.*customers|who.*bought.*recently",
        r"pending.*orders|orders.*pending|need.*shipping|unfulfilled",
        r"what.*needs.*shipping|orders.*waiting",
        r"add.*product|create.*product|new.*product",
        r"show.*products|view.*products|see.*products|my products",
        r"orders$|^orders$|view.*orders|see.*orders",
        r"write.*description|generate.*description|help.*description",
        r"product.*description|describe.*product",
        r"help|what can you do|what.*help|how.*you.*help",
    )
)


def is_casual_message(text: str) -> bool:
    normalized = normalize(text)
    return any(pattern.search(normalized) for pattern in CASUAL_PATTERNS)


def is_store_command(text: str) -> bool:
    normalized = normalize(text)
    return any(pattern.search(normalized) for pattern in LEGACY_COMMAND_PATTERNS)


def route(text: str, first_name: Optional[str] = None) -> RouteDecision:
    """Classify a message into a routing decision."""
    intent = detect_intent(text)
    if intent is not Intent.UNKNOWN:
        decision = RouteDecision(
            category=RouteCategory.COMMAND, handler=RouteHandler.PREDEFINED, intent=intent
        )
    elif is_casual_message(text):
        decision = RouteDecision(category=RouteCategory.CASUAL, handler=RouteHandler.GROQ)
    elif is_store_command(text):
        decision = RouteDecision(category=RouteCategory.COMMAND, handler=RouteHandler.PREDEFINED)
    else:
        decision = RouteDecision(category=RouteCategory.GENERAL, handler=RouteHandler.GROQ)

    logger.debug(
        "route_decided",
        extra={
            "category": decision.category.value,
            "handler": decision.handler.value,
            "intent": decision.intent.value if decision.intent else None,
            "has_name": bool(first_name),
        },
    )
    return decision
