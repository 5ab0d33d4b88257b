"""Read-only DynamoDB queries over a store's orders, products and customers."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone, tzinfo
from decimal import Decimal
from typing import Any, Callable, Dict, List, NamedTuple, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from boto3.dynamodb.conditions import Attr, Key
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import ValidationError

import config
from schemas import (
    CustomerSummary,
    LowStockProduct,
    OrderSummary,
    PendingOrder,
    ProductSales,
    SaleRecord,
    StorePerformance,
)

logger = logging.getLogger(__name__)

ORDER = "order"
PRODUCT = "product"
CUSTOMER = "customer"

STORAGE_ERRORS = (ClientError, BotoCoreError)
# malformed stored items surface as one of these while mapping records
RECORD_ERRORS = (ValidationError, TypeError, ValueError)
QUERY_ERRORS = STORAGE_ERRORS + RECORD_ERRORS


def item_key(store_id: str, kind: str, item_id: str) -> Dict[str, str]:
    """Construct the DynamoDB key for a store record."""
    return {"pk": f"store#{store_id}", "sk": f"{kind}#{item_id}"}


def to_dynamodb(value: Any) -> Any:
    """Convert Python values to DynamoDB compatible formats."""
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, dict):
        return {key: to_dynamodb(val) for key, val in value.items()}
    if isinstance(value, list):
        return [to_dynamodb(item) for item in value]
    return value


def _from_dynamodb(value: Any) -> Any:
    """Convert DynamoDB types back to native Python types."""
    if isinstance(value, Decimal):
        return float(value) if value % 1 else int(value)
    if isinstance(value, dict):
        return {key: _from_dynamodb(val) for key, val in value.items()}
    if isinstance(value, list):
        return [_from_dynamodb(item) for item in value]
    return value


def resolve_timezone(name: Optional[str]) -> tzinfo:
    if not name or name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise config.ConfigurationError(f"Unknown STORE_TIMEZONE {name!r}") from exc


class TimeRanges(NamedTuple):
    start_of_today: datetime
    start_of_week: datetime
    start_of_month: datetime


def time_ranges(now: datetime) -> TimeRanges:
    """Window starts relative to ``now``: local midnight, last Sunday, the 1st."""
    start_of_today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    days_since_sunday = (now.weekday() + 1) % 7
    return TimeRanges(
        start_of_today=start_of_today,
        start_of_week=start_of_today - timedelta(days=days_since_sunday),
        start_of_month=start_of_today.replace(day=1),
    )


def _epoch(moment: datetime) -> int:
    return int(moment.timestamp())


def _as_datetime(value: Any) -> Optional[datetime]:
    if value in (None, ""):
        return None
    return datetime.fromtimestamp(int(value), tz=timezone.utc)


def _record_id(item: Dict[str, Any]) -> str:
    if item.get("id"):
        return str(item["id"])
    return str(item.get("sk", "")).split("#", 1)[-1]


def _sum_totals(items: List[Dict[str, Any]]) -> Any:
    return sum(item.get("total") or 0 for item in items)


def _log_query_error(query: str, store_id: str, exc: Exception, **extra: Any) -> None:
    logger.error(
        "store_query_error",
        extra={"query": query, "store_id": store_id, "error": str(exc), **extra},
    )


class StoreDataQueries:
    """Store collaborator used by the assistant. Every query returns an empty
    default instead of raising when DynamoDB is unavailable or a stored
    item is malformed."""

    def __init__(
        self,
        table=None,
        *,
        tz: Optional[tzinfo] = None,
        low_stock_threshold: Optional[int] = None,
        best_sellers_limit: Optional[int] = None,
        recent_customers_limit: Optional[int] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        settings = config.get_settings()
        self._table = table if table is not None else config.get_dynamodb_resource().Table(
            settings.dynamodb_table
        )
        self._tz = tz or resolve_timezone(settings.store_timezone)
        self._low_stock_threshold = (
            settings.low_stock_threshold if low_stock_threshold is None else low_stock_threshold
        )
        self._best_sellers_limit = best_sellers_limit or settings.best_sellers_limit
        self._recent_customers_limit = recent_customers_limit or settings.recent_customers_limit
        self._clock = clock or (lambda: datetime.now(self._tz))

    def _ranges(self) -> TimeRanges:
        return time_ranges(self._clock().astimezone(self._tz))

    def _query_items(self, store_id: str, kind: str, filter_expression=None) -> List[Dict[str, Any]]:
        kwargs: Dict[str, Any] = {
            "KeyConditionExpression": Key("pk").eq(f"store#{store_id}")
            & Key("sk").begins_with(f"{kind}#"),
        }
        if filter_expression is not None:
            kwargs["FilterExpression"] = filter_expression

        items: List[Dict[str, Any]] = []
        while True:
            response = self._table.query(**kwargs)
            items.extend(_from_dynamodb(item) for item in response.get("Items", []))
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                return items
            kwargs["ExclusiveStartKey"] = last_key

    def _completed_since(self, store_id: str, start: datetime) -> List[Dict[str, Any]]:
        return self._query_items(
            store_id,
            ORDER,
            Attr("created_at").gte(_epoch(start)) & Attr("status").eq("completed"),
        )

    def get_store_performance(self, store_id: str) -> StorePerformance:
        try:
            ranges = self._ranges()
            today = self._completed_since(store_id, ranges.start_of_today)
            week = self._completed_since(store_id, ranges.start_of_week)
            return StorePerformance(
                today_orders=len(today),
                today_revenue=_sum_totals(today),
                week_revenue=_sum_totals(week),
                total_orders=len(week),
            )
        except QUERY_ERRORS as exc:
            _log_query_error("store_performance", store_id, exc)
            return StorePerformance()

    def get_best_selling_products(self, store_id: str) -> List[ProductSales]:
        try:
            items = self._query_items(store_id, PRODUCT)
            items.sort(key=lambda item: item.get("sales_count") or 0, reverse=True)
            return [
                ProductSales(
                    id=_record_id(item),
                    name=item.get("name") or "Unnamed Product",
                    sales=item.get("sales_count") or 0,
                    revenue=item.get("revenue") or 0,
                )
                for item in items[: self._best_sellers_limit]
            ]
        except QUERY_ERRORS as exc:
            _log_query_error("best_sellers", store_id, exc)
            return []

    def get_low_stock_products(self, store_id: str) -> List[LowStockProduct]:
        threshold = self._low_stock_threshold
        try:
            items = self._query_items(store_id, PRODUCT, Attr("stock").lte(threshold))
            return [
                LowStockProduct(
                    id=_record_id(item),
                    name=item.get("name") or "Unnamed Product",
                    stock=item.get("stock") or 0,
                    threshold=threshold,
                )
                for item in items
            ]
        except QUERY_ERRORS as exc:
            _log_query_error("low_stock", store_id, exc)
            return []

    def get_todays_orders(self, store_id: str) -> List[OrderSummary]:
        try:
            start = self._ranges().start_of_today
            items = self._query_items(store_id, ORDER, Attr("created_at").gte(_epoch(start)))
            items.sort(key=lambda item: item.get("created_at") or 0, reverse=True)
            return [
                OrderSummary(
                    id=_record_id(item),
                    customer_name=item.get("customer_name") or "Customer",
                    total=item.get("total") or 0,
                    status=item.get("status") or "pending",
                    items=item.get("items") or [],
                )
                for item in items
            ]
        except QUERY_ERRORS as exc:
            _log_query_error("todays_orders", store_id, exc)
            return []

    def get_recent_customers(self, store_id: str) -> List[CustomerSummary]:
        try:
            start = self._ranges().start_of_week
            items = self._query_items(store_id, CUSTOMER, Attr("first_seen").gte(_epoch(start)))
            items.sort(key=lambda item: item.get("first_seen") or 0, reverse=True)
            return [
                CustomerSummary(
                    id=_record_id(item),
                    name=item.get("name") or "Customer",
                    email=item.get("email") or "",
                    orders=item.get("order_count") or 0,
                    total_spent=item.get("total_spent") or 0,
                )
                for item in items[: self._recent_customers_limit]
            ]
        except QUERY_ERRORS as exc:
            _log_query_error("recent_customers", store_id, exc)
            return []

    def get_pending_orders(self, store_id: str) -> List[PendingOrder]:
        try:
            items = self._query_items(store_id, ORDER, Attr("status").eq("pending"))
            items.sort(key=lambda item: item.get("created_at") or 0, reverse=True)
            return [
                PendingOrder(
                    id=_record_id(item),
                    customer_name=item.get("customer_name") or "Customer",
                    total=item.get("total") or 0,
                    created_at=_as_datetime(item.get("created_at")),
                )
                for item in items
            ]
        except QUERY_ERRORS as exc:
            _log_query_error("pending_orders", store_id, exc)
            return []

    def get_sales_data(self, store_id: str, period: str = "week") -> List[SaleRecord]:
        """Completed orders since the start of this week, or this month for ``period="month"``."""
        try:
            ranges = self._ranges()
            start = ranges.start_of_month if period == "month" else ranges.start_of_week
            items = self._completed_since(store_id, start)
            return [
                SaleRecord(
                    id=_record_id(item),
                    total=item.get("total") or 0,
                    created_at=_as_datetime(item.get("created_at")),
                )
                for item in items
            ]
        except QUERY_ERRORS as exc:
            _log_query_error("sales_data", store_id, exc, period=period)
            return []
