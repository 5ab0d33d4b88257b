"""Rule-based intent detection for store assistant messages."""

from __future__ import annotations

import re
from typing import List, NamedTuple, Sequence, Tuple

from schemas import Intent


class IntentRule(NamedTuple):
    intent: Intent
    priority: int
    patterns: Tuple[re.Pattern[str], ...]


def _rule(intent: Intent, priority: int, patterns: Sequence[str]) -> IntentRule:
    return IntentRule(intent, priority, tuple(re.compile(p, re.IGNORECASE) for p in patterns))


# Lower priority wins when a message matches several intents.
INTENT_RULES: Tuple[IntentRule, ...] = (
    _rule(
        Intent.PERFORMANCE,
        10,
        (
            r"how.*(store|business|sales|performance)",
            r"(store|business).*(doing|performance|analytics)",
            r"how.*we.*doing|how.*things.*going",
            r"what.*(happening|going on).*store",
            r"(check|see|look).*store",
            r"how.*today.*(sales|business)",
            r"business.*update|sales.*update",
        ),
    ),
    _rule(
        Intent.BEST_SELLERS,
        20,
        (
            r"what.*selling|best.*selling|top.*product",
            r"(selling|sales).*(well|good|best)",
            r"popular.*products|what.*hot",
            r"which.*products.*popular",
            r"our.*best.*products",
        ),
    ),
    _rule(
        Intent.INVENTORY,
        30,
        (
            r"low.*stock|running.*out|running.*low|need.*restock",
            r"stock.*alert|inventory.*low",
            r"what.*need.*restock|almost.*out",
            r"which.*out.*of.*stock",
            r"what.*need.*attention",
            r"which.*product.*attention",
            r"what.*should.*restock",
            r"need.*attention",
            r"product.*attention",
        ),
    ),
    _rule(
        Intent.ORDERS,
        40,
        (
            r"today.*orders|orders.*today",
            r"recent.*orders|new.*orders",
            r"any.*orders.*today",
            r"pending.*orders|unfulfilled",
            r"what.*needs.*shipping",
        ),
    ),
    _rule(
        Intent.CUSTOMERS,
        50,
        (
            r"recent.*customers|new.*customers",
            r"who.*shopping|customer.*activity",
            r"who.*bought.*recently",
        ),
    ),
    _rule(
        Intent.CONTENT_HELP,
        60,
        (
            r"write.*description|generate.*description",
            r"help.*description|product.*description",
            r"describe.*product|create.*description",
            r"need.*description.*for",
        ),
    ),
    _rule(
        Intent.NAVIGATION,
        70,
        (
            r"go.*to.*(products|orders|customers|analytics)",
            r"show.*me.*(products|orders|customers)",
            r"take.*me.*to.*(products|orders)",
            r"open.*(products|orders|customers)",
            r"where.*(products|orders|customers)",
        ),
    ),
    _rule(
        Intent.HELP,
        80,
        (
            r"what.*can.*you.*do",
            r"how.*can.*you.*help",
            r"what.*commands",
            r"show.*commands",
            r"help.*menu",
        ),
    ),
    _rule(
        Intent.SETTINGS,
        90,
        (
            r"change.*(store|whatsapp|number|name)",
            r"update.*(store|whatsapp|profile)",
            r"edit.*(store|settings)",
            r"my.*settings",
            r"store.*settings",
        ),
    ),
    _rule(
        Intent.ORDER_MANAGEMENT,
        100,
        (
            r"mark.*shipped|ship.*order",
            r"update.*order.*status",
            r"order.*shipped|shipped.*order",
            r"fulfill.*order",
            r"complete.*order",
        ),
    ),
    _rule(
        Intent.PRICING,
        110,
        (
            r"update.*price|change.*price",
            r"set.*price|price.*to",
            r"how.*much.*charge",
            r"pricing.*suggest",
            r"adjust.*price",
        ),
    ),
    _rule(
        Intent.MARKETING,
        120,
        (
            r"create.*sale|run.*promotion",
            r"discount|promotion|sale",
            r"marketing|campaign",
            r"boost.*sales",
            r"flash.*sale",
        ),
    ),
    _rule(
        Intent.CUSTOMER_COMMS,
        130,
        (
            r"message.*customer|contact.*customer",
            r"send.*message.*to",
            r"notify.*customer",
            r"email.*customer",
            r"whatsapp.*customer",
        ),
    ),
    _rule(
        Intent.FINANCIAL,
        140,
        (
            r"revenue|profit|earnings",
            r"how.*much.*made|how.*much.*earned",
            r"total.*sales|income",
            r"money.*made",
            r"financial.*report",
        ),
    ),
)


def normalize(text: str) -> str:
    return (text or "").strip().lower()


def _ranked(rules: Sequence[IntentRule]) -> List[IntentRule]:
    # sorted() is stable, so equal priorities keep table order
    return sorted(rules, key=lambda rule: rule.priority)


def matching_intents(text: str, rules: Sequence[IntentRule] = INTENT_RULES) -> List[Intent]:
    """Return every intent whose patterns match, highest precedence first."""
    normalized = normalize(text)
    return [
        rule.intent
        for rule in _ranked(rules)
        if any(pattern.search(normalized) for pattern in rule.patterns)
    ]


def detect_intent(text: str, rules: Sequence[IntentRule] = INTENT_RULES) -> Intent:
    """Classify the user text into a single intent, or UNKNOWN."""
    normalized = normalize(text)
    for rule in _ranked(rules):
        if any(pattern.search(normalized) for pattern in rule.patterns):
            return rule.intent
    return Intent.UNKNOWN
