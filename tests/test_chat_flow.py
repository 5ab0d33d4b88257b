import json
from datetime import datetime, timezone
from typing import Dict

import config
import groq_client
from schemas import ProductDetails
from store_data import PRODUCT, item_key


def chat_event(body, path: str = "/chat") -> Dict[str, object]:
    return {
        "requestContext": {"http": {"method": "POST", "path": path}},
        "headers": {"host": "example.com", "content-type": "application/json"},
        "body": json.dumps(body),
        "isBase64Encoded": False,
    }


def test_low_stock_question_reads_store_table(app_module, dynamodb_table):
    table = dynamodb_table.Table("test-store-data")
    table.put_item(Item={**item_key("store-1", PRODUCT, "p1"), "id": "p1", "name": "Widget", "stock": 2})
    table.put_item(Item={**item_key("store-1", PRODUCT, "p2"), "id": "p2", "name": "Plenty", "stock": 50})

    response = app_module.lambda_handler(
        chat_event({"text": "what's low on stock", "firstName": "Ada", "storeId": "store-1"}), None
    )

    assert response["statusCode"] == 200
    assert response["headers"]["Access-Control-Allow-Origin"] == "*"
    body = json.loads(response["body"])
    assert body["type"] == "ai"
    assert "Widget: 2 left" in body["content"]
    assert "Plenty" not in body["content"]


def test_greeting_uses_generated_reply(monkeypatch, app_module):
    seen = {}

    def fake_respond(self, message, first_name):
        seen["message"] = message
        seen["first_name"] = first_name
        return f"Hey {first_name}! How's the shop?"

    monkeypatch.setattr(groq_client.GroqClient, "respond", fake_respond)

    response = app_module.lambda_handler(
        chat_event({"text": "hello", "firstName": "Ada", "storeId": "store-1"}), None
    )

    body = json.loads(response["body"])
    assert response["statusCode"] == 200
    assert body["content"] == "Hey Ada! How's the shop?"
    assert seen == {"message": "hello", "first_name": "Ada"}


def test_add_product_returns_navigation_action(app_module):
    response = app_module.lambda_handler(
        chat_event({"text": "add product", "storeId": "store-1"}), None
    )
    body = json.loads(response["body"])
    assert body["action"] == "navigate:/dashboard/products"


def test_chat_requires_text_and_store(app_module):
    missing_text = app_module.lambda_handler(chat_event({"storeId": "store-1"}), None)
    assert missing_text["statusCode"] == 400
    assert json.loads(missing_text["body"]) == {"error": "text is required"}

    missing_store = app_module.lambda_handler(chat_event({"text": "hello"}), None)
    assert missing_store["statusCode"] == 400
    assert "storeId" in json.loads(missing_store["body"])["error"]


def test_describe_endpoint_returns_product_details(monkeypatch, app_module):
    def fake_generate(self, product_name, price=None):
        return ProductDetails(description=f"A great {product_name}", category="Electronics")

    monkeypatch.setattr(groq_client.GroqClient, "generate_product_description", fake_generate)

    response = app_module.lambda_handler(
        chat_event({"productName": "Speaker", "price": 15000}, path="/describe"), None
    )

    assert response["statusCode"] == 200
    assert json.loads(response["body"]) == {"description": "A great Speaker", "category": "Electronics"}


def test_get_method_not_allowed(app_module):
    event: Dict[str, object] = {"requestContext": {"http": {"method": "GET", "path": "/chat"}}}
    assert app_module.lambda_handler(event, None)["statusCode"] == 405


def test_get_ui_serves_test_page(app_module):
    event: Dict[str, object] = {"requestContext": {"http": {"method": "GET", "path": "/ui"}}}
    response = app_module.lambda_handler(event, None)
    assert response["statusCode"] == 200
    assert response["headers"]["Content-Type"] == "text/html"


def test_unknown_post_path_is_not_found(app_module):
    response = app_module.lambda_handler(chat_event({"text": "hi"}, path="/webhook"), None)
    assert response["statusCode"] == 404


def test_today_orders_window_is_respected(monkeypatch, app_module, dynamodb_table):
    table = dynamodb_table.Table("test-store-data")
    now = int(datetime.now(timezone.utc).timestamp())
    table.put_item(
        Item={
            **item_key("store-1", "order", "order-0042"),
            "id": "order-0042",
            "total": 7000,
            "status": "completed",
            "created_at": now,
        }
    )

    response = app_module.lambda_handler(
        chat_event({"text": "any orders today?", "firstName": "Ada", "storeId": "store-1"}), None
    )

    body = json.loads(response["body"])
    assert "Order #0042: ₦7000" in body["content"]


def test_store_command_works_without_groq_key(monkeypatch, app_module):
    monkeypatch.delenv("GROQ_API_KEY")
    config.get_groq_api_key.cache_clear()

    response = app_module.lambda_handler(chat_event({"text": "add product", "storeId": "s"}), None)

    assert response["statusCode"] == 200
    assert json.loads(response["body"])["action"] == "navigate:/dashboard/products"


def test_missing_groq_key_falls_back_to_friendly_reply(monkeypatch, app_module):
    monkeypatch.delenv("GROQ_API_KEY")
    config.get_groq_api_key.cache_clear()

    chat = app_module.lambda_handler(
        chat_event({"text": "hello", "firstName": "Ada", "storeId": "s"}), None
    )
    describe = app_module.lambda_handler(chat_event({"productName": "Speaker"}, path="/describe"), None)

    assert chat["statusCode"] == 200
    assert json.loads(chat["body"])["content"] == groq_client.fallback_reply("Ada")
    assert describe["statusCode"] == 200
    assert json.loads(describe["body"]) == {"description": "", "category": ""}


def test_assistant_is_reused_across_requests(app_module):
    assert app_module._get_assistant() is app_module._get_assistant()
