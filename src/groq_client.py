"""Wrapper around the Groq chat completions API."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List, Optional

import requests

import config
from schemas import Amount, ProductDetails

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a friendly AI assistant for Nigerian e-commerce sellers. "
    "Keep responses casual, brief (1-2 lines), and encouraging. "
    "User's name is {first_name}. Respond like a helpful friend."
)

DESCRIPTION_PROMPT = """You are an ecommerce expert for Nigerian SMEs. Generate product details in EXACT JSON format:

{
  "description": "Compelling 2-3 line description focusing on benefits for Nigerian customers",
  "category": "Single relevant category name like Electronics, Audio, Gadgets"
}

Rules:
- Description: 2-3 lines max, persuasive, highlight durability, battery life, sound quality
- Category: Simple, standard ecommerce category (no creative names)
- Be practical and relevant to Nigerian market"""

CATEGORY_KEYWORDS = (
    (("speaker", "audio"), "Electronics"),
    (("phone", "mobile"), "Mobile Phones"),
    (("shoe", "footwear"), "Fashion"),
    (("shirt", "cloth"), "Fashion"),
    (("bag", "purse"), "Accessories"),
    (("watch",), "Accessories"),
    (("laptop", "computer"), "Computing"),
)

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


class GroqError(RuntimeError):
    """Raised when a completion cannot be obtained or parsed."""


def fallback_reply(first_name: str) -> str:
    return f"Hey {first_name}! I'm doing great. What would you like to work on in your store today?"


def empty_reply(first_name: str) -> str:
    return f"Hi {first_name}! 😊 How can I help with your store?"


def default_category(product_name: str) -> str:
    name = product_name.lower()
    for keywords, category in CATEGORY_KEYWORDS:
        if any(keyword in name for keyword in keywords):
            return category
    return "General"


def parse_product_details(content: str, product_name: str) -> ProductDetails:
    """Pull description/category out of a model reply.

    Prefers the first JSON object in the text; a brace block that is not
    valid JSON yields empty details. Without braces, looks for
    ``description:`` and ``category:`` lines and guesses the category from
    the product name when none is given.
    """
    match = _JSON_OBJECT.search(content or "")
    if match:
        try:
            parsed = json.loads(match.group(0))
        except json.JSONDecodeError as exc:
            logger.error("groq_parse_error", extra={"error": str(exc)})
            return ProductDetails()
        return ProductDetails(
            description=str(parsed.get("description") or ""),
            category=str(parsed.get("category") or ""),
        )

    description = ""
    category = ""
    for line in (content or "").splitlines():
        stripped = line.strip()
        lowered = stripped.lower()
        if "description:" in lowered and not description:
            description = re.sub(r"description:\s*", "", stripped, count=1, flags=re.IGNORECASE).strip()
        elif "category:" in lowered and not category:
            category = re.sub(r"category:\s*", "", stripped, count=1, flags=re.IGNORECASE).strip()

    if not category:
        category = default_category(product_name)
    return ProductDetails(description=description, category=category)


def _format_price(price: Optional[Amount]) -> str:
    if price is None:
        return "not set"
    if isinstance(price, float) and price.is_integer():
        price = int(price)
    return f"₦{price}"


class GroqClient:
    """Chat completion client. ``respond`` and ``generate_product_description``
    never raise; ``chat`` does."""

    def __init__(
        self,
        api_key: str,
        model: str,
        api_url: str = config.DEFAULT_GROQ_API_URL,
        max_tokens: int = 50,
        temperature: float = 0.7,
        timeout: float = 10.0,
        description_max_tokens: int = 150,
    ):
        if not api_key:
            raise config.ConfigurationError("Groq API key must be provided")
        if not model:
            raise config.ConfigurationError("GROQ_MODEL must be provided")

        self.api_key = api_key
        self.model = model
        self.api_url = api_url
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.timeout = timeout
        self.description_max_tokens = description_max_tokens

    @classmethod
    def from_settings(cls) -> "GroqClient":
        settings = config.get_settings()
        return cls(
            api_key=config.get_groq_api_key(),
            model=settings.groq_model,
            api_url=settings.groq_api_url,
            max_tokens=settings.groq_max_tokens,
            temperature=settings.groq_temperature,
            timeout=settings.groq_timeout_seconds,
            description_max_tokens=settings.groq_description_max_tokens,
        )

    def _complete(self, messages: List[Dict[str, str]], max_tokens: int) -> str:
        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": self.temperature,
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            response = requests.post(self.api_url, json=payload, headers=headers, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.error("groq_request_error", extra={"error": str(exc)})
            raise GroqError("Groq request failed") from exc

        if response.status_code >= 300:
            logger.error(
                "groq_bad_status",
                extra={"status": response.status_code, "body": response.text[:200]},
            )
            raise GroqError(f"Groq returned HTTP {response.status_code}")

        try:
            data = response.json()
            choices = data.get("choices") or []
            content = (choices[0].get("message") or {}).get("content") if choices else None
        except (ValueError, AttributeError, TypeError) as exc:
            logger.error("groq_parse_error", extra={"error": str(exc)})
            raise GroqError("Groq response was not understood") from exc

        return (content or "").strip()

    def chat(self, message: str, first_name: str) -> str:
        """Return the raw completion for a user message (may be empty)."""
        messages = [
            {"role": "system", "content": SYSTEM_PROMPT.format(first_name=first_name)},
            {"role": "user", "content": message},
        ]
        return self._complete(messages, self.max_tokens)

    def respond(self, message: str, first_name: str) -> str:
        """Generated reply for messages no store command covers."""
        try:
            reply = self.chat(message, first_name)
        except GroqError:
            return fallback_reply(first_name)
        except Exception as exc:
            logger.error("groq_unexpected_error", extra={"error": str(exc)})
            return fallback_reply(first_name)
        return reply or empty_reply(first_name)

    def generate_product_description(self, product_name: str, price: Optional[Amount] = None) -> ProductDetails:
        messages = [
            {"role": "system", "content": DESCRIPTION_PROMPT},
            {"role": "user", "content": f"Product: {product_name}, Price: {_format_price(price)}"},
        ]
        try:
            content = self._complete(messages, self.description_max_tokens)
        except GroqError:
            return ProductDetails()
        except Exception as exc:
            logger.error("groq_unexpected_error", extra={"error": str(exc)})
            return ProductDetails()
        return parse_product_details(content, product_name)
