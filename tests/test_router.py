import pytest
from pydantic import ValidationError

import router
from schemas import Intent, RouteCategory, RouteDecision, RouteHandler


def test_detected_intent_routes_to_predefined_handler():
    decision = router.route("How's my store doing?", "Ada")
    assert decision.category is RouteCategory.COMMAND
    assert decision.handler is RouteHandler.PREDEFINED
    assert decision.intent is Intent.PERFORMANCE


@pytest.mark.parametrize("text", ["hello", "Hey there", "good morning!", "thanks a lot", "yes"])
def test_casual_messages_go_to_groq(text):
    decision = router.route(text)
    assert decision.category is RouteCategory.CASUAL
    assert decision.handler is RouteHandler.GROQ
    assert decision.intent is None


@pytest.mark.parametrize("text", ["add product", "orders", "most sold", "help"])
def test_legacy_store_commands_route_without_intent(text):
    decision = router.route(text)
    assert decision.category is RouteCategory.COMMAND
    assert decision.handler is RouteHandler.PREDEFINED
    assert decision.intent is None


def test_everything_else_is_general():
    decision = router.route("tell me a joke about lagos")
    assert decision.category is RouteCategory.GENERAL
    assert decision.handler is RouteHandler.GROQ


@pytest.mark.parametrize(
    "text",
    ["hello", "add product", "what's low on stock", "random musings", "", "thanks", "orders"],
)
def test_general_and_casual_never_use_predefined_handler(text):
    decision = router.route(text)
    if decision.category is not RouteCategory.COMMAND:
        assert decision.handler is RouteHandler.GROQ


def test_route_decision_rejects_invalid_pairings():
    with pytest.raises(ValidationError):
        RouteDecision(category=RouteCategory.GENERAL, handler=RouteHandler.PREDEFINED)
    with pytest.raises(ValidationError):
        RouteDecision(category=RouteCategory.CASUAL, handler=RouteHandler.GROQ, intent=Intent.HELP)
    with pytest.raises(ValidationError):
        RouteDecision(
            category=RouteCategory.COMMAND, handler=RouteHandler.PREDEFINED, intent=Intent.UNKNOWN
        )
