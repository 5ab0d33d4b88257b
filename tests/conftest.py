import os
import sys
from importlib import reload
from typing import Generator

import boto3
import pytest
from moto import mock_aws

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC_ROOT = os.path.join(PROJECT_ROOT, "src")

if SRC_ROOT not in sys.path:
    sys.path.insert(0, SRC_ROOT)


REQUIRED_ENV = {
    "APP_ENV": "test",
    "AWS_REGION": "us-east-1",
    "AWS_ACCESS_KEY_ID": "testing",
    "AWS_SECRET_ACCESS_KEY": "testing",
    "AWS_SESSION_TOKEN": "testing",
    "DDB_TABLE": "test-store-data",
    "GROQ_API_KEY": "gsk-test",
    "STORE_TIMEZONE": "UTC",
}


@pytest.fixture(autouse=True)
def _env_vars(monkeypatch) -> Generator[None, None, None]:
    import config

    for key, value in REQUIRED_ENV.items():
        monkeypatch.setenv(key, value)

    config.get_settings.cache_clear()
    config.get_groq_api_key.cache_clear()
    config._boto_session.cache_clear()
    yield
    config.get_settings.cache_clear()
    config.get_groq_api_key.cache_clear()
    config._boto_session.cache_clear()


@pytest.fixture
def aws_mock() -> Generator[None, None, None]:
    with mock_aws():
        yield


@pytest.fixture
def dynamodb_table(aws_mock) -> boto3.resources.base.ServiceResource:
    session = boto3.session.Session(region_name=REQUIRED_ENV["AWS_REGION"])
    dynamodb = session.resource("dynamodb")
    dynamodb.create_table(
        TableName=REQUIRED_ENV["DDB_TABLE"],
        KeySchema=[
            {"AttributeName": "pk", "KeyType": "HASH"},
            {"AttributeName": "sk", "KeyType": "RANGE"},
        ],
        AttributeDefinitions=[
            {"AttributeName": "pk", "AttributeType": "S"},
            {"AttributeName": "sk", "AttributeType": "S"},
        ],
        BillingMode="PAY_PER_REQUEST",
    )
    return dynamodb


@pytest.fixture
def store_table(dynamodb_table):
    return dynamodb_table.Table(REQUIRED_ENV["DDB_TABLE"])


@pytest.fixture
def app_module(monkeypatch, dynamodb_table):
    import app
    import config

    monkeypatch.setattr(config, "get_dynamodb_resource", lambda: dynamodb_table)
    return reload(app)
