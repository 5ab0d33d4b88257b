import json

import boto3
import pytest

import config


def test_settings_defaults():
    settings = config.get_settings()

    assert settings.dynamodb_table == "test-store-data"
    assert settings.groq_model == "llama-3.1-8b-instant"
    assert settings.groq_max_tokens == 50
    assert settings.groq_temperature == 0.7
    assert settings.low_stock_threshold == 5
    assert settings.best_sellers_limit == 5
    assert settings.recent_customers_limit == 10


def test_settings_require_table(monkeypatch):
    monkeypatch.delenv("DDB_TABLE")
    config.get_settings.cache_clear()
    with pytest.raises(config.ConfigurationError):
        config.get_settings()


def test_invalid_numbers_fall_back_to_defaults(monkeypatch):
    monkeypatch.setenv("GROQ_MAX_TOKENS", "lots")
    monkeypatch.setenv("GROQ_TEMPERATURE", "warm")
    monkeypatch.setenv("LOW_STOCK_THRESHOLD", "-3")
    config.get_settings.cache_clear()

    settings = config.get_settings()

    assert settings.groq_max_tokens == 50
    assert settings.groq_temperature == 0.7
    assert settings.low_stock_threshold == 0


def test_groq_key_prefers_environment():
    assert config.get_groq_api_key() == "gsk-test"


def test_groq_key_loaded_from_secrets_manager(monkeypatch, aws_mock):
    monkeypatch.delenv("GROQ_API_KEY")
    monkeypatch.setenv("GROQ_SECRET_NAME", "storefront/groq")
    config.get_settings.cache_clear()

    client = boto3.session.Session(region_name="us-east-1").client("secretsmanager")
    client.create_secret(Name="storefront/groq", SecretString=json.dumps({"GROQ_API_KEY": "gsk-secret"}))

    assert config.get_groq_api_key() == "gsk-secret"


def test_groq_key_missing_everywhere(monkeypatch):
    monkeypatch.delenv("GROQ_API_KEY")
    config.get_settings.cache_clear()
    with pytest.raises(config.ConfigurationError):
        config.get_groq_api_key()


def test_groq_secret_without_key_is_rejected(monkeypatch, aws_mock):
    monkeypatch.delenv("GROQ_API_KEY")
    monkeypatch.setenv("GROQ_SECRET_NAME", "storefront/groq")
    config.get_settings.cache_clear()

    client = boto3.session.Session(region_name="us-east-1").client("secretsmanager")
    client.create_secret(Name="storefront/groq", SecretString=json.dumps({"OTHER": "x"}))

    with pytest.raises(config.ConfigurationError):
        config.get_groq_api_key()
