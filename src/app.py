"""AWS Lambda entry point for the storefront dashboard assistant."""

from __future__ import annotations

import base64
import json
import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

import config
from assistant import Assistant
from groq_client import GroqClient
from schemas import ChatRequest, DescribeRequest, ProductDetails
from store_data import StoreDataQueries

config.configure_logging()
logger = logging.getLogger(__name__)

TEST_PAGE = (
    "<!doctype html><meta charset='utf-8'><title>Assistant Test</title>"
    "<style>body{font-family:sans-serif;max-width:680px;margin:40px auto;}input,textarea{width:100%}"
    "textarea{height:100px}pre{background:#111;color:#0f0;padding:12px;white-space:pre-wrap}</style>"
    "<h2>Assistant Test</h2><p>Send a message to the JSON chat endpoint.</p>"
    "<input id=s placeholder='store id'><input id=n placeholder='first name'>"
    "<textarea id=q placeholder=\"How's my store doing?\"></textarea><br><button onclick=send()>Send</button>"
    "<pre id=o></pre>"
    "<script>async function send(){const r=await fetch('./chat',{method:'POST',"
    "headers:{'Content-Type':'application/json'},body:JSON.stringify({text:document.getElementById('q').value,"
    "storeId:document.getElementById('s').value,firstName:document.getElementById('n').value})});"
    "document.getElementById('o').textContent=await r.text();}</script>"
)


def _method_from_event(event: Dict[str, Any]) -> str:
    """Extract HTTP method from API Gateway event."""
    if "requestContext" in event:
        http = event["requestContext"].get("http", {})
        if "method" in http:
            return http["method"]
    return event.get("httpMethod", "")


def _path_from_event(event: Dict[str, Any]) -> str:
    return event.get("requestContext", {}).get("http", {}).get("path", "") or event.get("path", "")


def _response(body: str, status: int = 200) -> Dict[str, Any]:
    return {"statusCode": status, "headers": {"Content-Type": "text/plain"}, "body": body}


def _json_response_cors(body: Dict[str, Any], status: int = 200) -> Dict[str, Any]:
    return {
        "statusCode": status,
        "headers": {
            "Content-Type": "application/json",
            "Access-Control-Allow-Origin": "*",
        },
        "body": json.dumps(body, ensure_ascii=False),
    }


def _decode_body(event: Dict[str, Any]) -> str:
    body = event.get("body") or ""
    if event.get("isBase64Encoded"):
        body = base64.b64decode(body).decode("utf-8")
    return body


def _parse_json(event: Dict[str, Any]) -> Dict[str, Any]:
    raw = _decode_body(event)
    if not raw:
        return {}
    try:
        parsed = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return {}
    return parsed if isinstance(parsed, dict) else {}


def _validation_message(exc: ValidationError) -> str:
    fields = sorted({str(error["loc"][0]) for error in exc.errors() if error.get("loc")})
    return f"invalid fields: {', '.join(fields)}" if fields else "invalid request"


def _get_groq_client() -> GroqClient:
    return GroqClient.from_settings()


ASSISTANT: Optional[Assistant] = None


def _get_assistant() -> Assistant:
    global ASSISTANT
    if ASSISTANT is None:
        ASSISTANT = Assistant(queries=StoreDataQueries(), generator_factory=_get_groq_client)
    return ASSISTANT


def lambda_handler(event: Dict[str, Any], _: Any) -> Dict[str, Any]:
    """Entrypoint for AWS Lambda."""
    method = _method_from_event(event)
    path = _path_from_event(event)
    logger.debug("incoming_event", extra={"method": method, "path": path})

    if method == "OPTIONS":
        return {
            "statusCode": 204,
            "headers": {
                "Access-Control-Allow-Origin": "*",
                "Access-Control-Allow-Methods": "POST, OPTIONS",
                "Access-Control-Allow-Headers": "Content-Type",
            },
            "body": "",
        }

    if method != "POST":
        if path.endswith("/ui") and method == "GET":
            return {
                "statusCode": 200,
                "headers": {"Content-Type": "text/html", "Access-Control-Allow-Origin": "*"},
                "body": TEST_PAGE,
            }
        return _response("Method Not Allowed", status=405)

    if path.endswith("/chat"):
        return _handle_chat(_parse_json(event))
    if path.endswith("/describe"):
        return _handle_describe(_parse_json(event))
    return _json_response_cors({"error": "not found"}, status=404)


def _handle_chat(body: Dict[str, Any]) -> Dict[str, Any]:
    if not str(body.get("text") or "").strip():
        return _json_response_cors({"error": "text is required"}, status=400)
    try:
        request = ChatRequest.model_validate(body)
    except ValidationError as exc:
        return _json_response_cors({"error": _validation_message(exc)}, status=400)

    payload = _get_assistant().process(request.text, request.first_name, request.store_id)
    logger.info(
        "assistant_replied",
        extra={"store_id": request.store_id, "has_action": "action" in payload},
    )
    return _json_response_cors(payload, status=200)


def _handle_describe(body: Dict[str, Any]) -> Dict[str, Any]:
    try:
        request = DescribeRequest.model_validate(body)
    except ValidationError as exc:
        return _json_response_cors({"error": _validation_message(exc)}, status=400)

    try:
        client = _get_groq_client()
    except config.ConfigurationError as exc:
        logger.error("generator_unavailable", extra={"error": str(exc)})
        return _json_response_cors(ProductDetails().model_dump(), status=200)

    details = client.generate_product_description(request.product_name, request.price)
    return _json_response_cors(details.model_dump(), status=200)
