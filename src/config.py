"""Application configuration and secrets loading."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

import boto3
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)

GROQ_API_KEY_NAME = "GROQ_API_KEY"
DEFAULT_GROQ_API_URL = "https://api.groq.com/openai/v1/chat/completions"


class ConfigurationError(RuntimeError):
    """Raised when required configuration is missing or invalid."""


def _require_env(name: str, *, default: Optional[str] = None) -> str:
    """Fetch an environment variable or raise if it is missing."""
    value = os.getenv(name, default)
    if value is None or value == "":
        raise ConfigurationError(f"Environment variable {name} is required")
    return value


def _int_env(name: str, default: int, *, minimum: int = 0) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return max(minimum, int(raw))
    except (TypeError, ValueError):
        return default


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class Settings:
    """In-memory representation of runtime settings."""

    app_env: str
    aws_region: str
    dynamodb_table: str
    log_level: str
    # Groq chat completions (generative fallback)
    groq_secret_name: Optional[str]
    groq_api_url: str
    groq_model: str
    groq_max_tokens: int
    groq_description_max_tokens: int
    groq_temperature: float
    groq_timeout_seconds: float
    # Store queries
    store_timezone: str
    low_stock_threshold: int
    best_sellers_limit: int
    recent_customers_limit: int


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load and cache application settings from the environment."""
    return Settings(
        app_env=os.getenv("APP_ENV", "dev"),
        aws_region=_require_env("AWS_REGION"),
        dynamodb_table=_require_env("DDB_TABLE"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        groq_secret_name=os.getenv("GROQ_SECRET_NAME") or None,
        groq_api_url=os.getenv("GROQ_API_URL", DEFAULT_GROQ_API_URL),
        groq_model=os.getenv("GROQ_MODEL", "llama-3.1-8b-instant"),
        groq_max_tokens=_int_env("GROQ_MAX_TOKENS", 50, minimum=1),
        groq_description_max_tokens=_int_env("GROQ_DESCRIPTION_MAX_TOKENS", 150, minimum=1),
        groq_temperature=_float_env("GROQ_TEMPERATURE", 0.7),
        groq_timeout_seconds=_float_env("GROQ_TIMEOUT_SECONDS", 10.0),
        store_timezone=os.getenv("STORE_TIMEZONE", "Africa/Lagos"),
        low_stock_threshold=_int_env("LOW_STOCK_THRESHOLD", 5),
        best_sellers_limit=_int_env("BEST_SELLERS_LIMIT", 5, minimum=1),
        recent_customers_limit=_int_env("RECENT_CUSTOMERS_LIMIT", 10, minimum=1),
    )


@lru_cache(maxsize=1)
def _boto_session():
    """Create and cache a boto3 session bound to the configured region."""
    settings = get_settings()
    return boto3.session.Session(region_name=settings.aws_region)


def get_dynamodb_resource():
    """Return a boto3 DynamoDB resource."""
    return _boto_session().resource("dynamodb")


def get_secrets_manager_client():
    """Return a boto3 Secrets Manager client."""
    return _boto_session().client("secretsmanager")


@lru_cache(maxsize=1)
def get_groq_api_key() -> str:
    """
    Fetch the Groq API key from AWS Secrets Manager.

    The ``GROQ_API_KEY`` environment variable takes precedence when present,
    which keeps local development free of AWS calls.
    """
    override = os.getenv(GROQ_API_KEY_NAME)
    if override:
        logger.debug("Using Groq API key from environment override")
        return override

    settings = get_settings()
    if not settings.groq_secret_name:
        raise ConfigurationError("Set GROQ_API_KEY or GROQ_SECRET_NAME for the Groq client")

    client = get_secrets_manager_client()
    try:
        response = client.get_secret_value(SecretId=settings.groq_secret_name)
    except ClientError as exc:
        raise ConfigurationError("Failed to fetch Groq secret") from exc

    secret_string = response.get("SecretString")
    if not secret_string:
        raise ConfigurationError("Secrets Manager returned empty Groq secret")

    try:
        payload = json.loads(secret_string)
    except json.JSONDecodeError as exc:
        raise ConfigurationError("Secrets Manager Groq secret is not valid JSON") from exc

    api_key = payload.get(GROQ_API_KEY_NAME) if isinstance(payload, dict) else None
    if not api_key:
        raise ConfigurationError(f"Groq secret missing key: {GROQ_API_KEY_NAME}")
    return api_key


def configure_logging():
    """Configure the root logger once using settings from the environment."""
    settings = get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
