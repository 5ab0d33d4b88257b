"""Canned answers for store questions, built from live store data."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional, Protocol, Sequence, Union

from schemas import (
    AssistantReply,
    CustomerSummary,
    Intent,
    LowStockProduct,
    MessageReply,
    NavigateReply,
    OrderSummary,
    PendingOrder,
    ProductSales,
    SaleRecord,
    StorePerformance,
)

logger = logging.getLogger(__name__)

PRODUCTS_PATH = "/dashboard/products"
ORDERS_PATH = "/dashboard/orders"

MAIN_MENU_REPLIES = ["Store performance", "Best sellers", "Today orders", "Low stock"]

HELP_MESSAGE = (
    "I can help you with store analytics, products, orders, and customers. "
    "Try \"How's business today?\" or \"What's selling well?\""
)


class StoreQueries(Protocol):
    def get_store_performance(self, store_id: str) -> StorePerformance: ...

    def get_best_selling_products(self, store_id: str) -> Sequence[ProductSales]: ...

    def get_low_stock_products(self, store_id: str) -> Sequence[LowStockProduct]: ...

    def get_todays_orders(self, store_id: str) -> Sequence[OrderSummary]: ...

    def get_recent_customers(self, store_id: str) -> Sequence[CustomerSummary]: ...

    def get_pending_orders(self, store_id: str) -> Sequence[PendingOrder]: ...

    def get_sales_data(self, store_id: str, period: str = "week") -> Sequence[SaleRecord]: ...


def naira(amount: Union[int, float]) -> str:
    if isinstance(amount, float) and amount.is_integer():
        amount = int(amount)
    return f"₦{amount}"


def help_reply() -> MessageReply:
    return MessageReply(content=HELP_MESSAGE, quick_replies=list(MAIN_MENU_REPLIES))


class StoreCommandHandler:
    """Answers store commands. Always returns a reply, even when store data
    cannot be read."""

    def __init__(self, queries: StoreQueries):
        self._queries = queries
        self._intent_handlers: Dict[Intent, Callable[[str], AssistantReply]] = {
            Intent.PERFORMANCE: self._performance,
            Intent.BEST_SELLERS: self._best_sellers,
            Intent.INVENTORY: self._inventory,
            Intent.ORDERS: self._todays_orders,
            Intent.CUSTOMERS: self._recent_customers,
        }

    def handle(
        self,
        text: str,
        first_name: str,
        store_id: str,
        intent: Optional[Intent] = None,
    ) -> AssistantReply:
        handler = self._intent_handlers.get(intent) if intent else None
        try:
            if handler is not None:
                return handler(store_id)
            return self._legacy_command((text or "").lower(), store_id)
        except Exception as exc:
            logger.error(
                "store_command_error",
                extra={
                    "intent": intent.value if intent else None,
                    "store_id": store_id,
                    "error": str(exc),
                },
            )
            return help_reply()

    # Intent handlers

    def _performance(self, store_id: str) -> AssistantReply:
        performance = self._queries.get_store_performance(store_id)
        return MessageReply(
            content=(
                "📊 Your store performance:\n\n"
                f"• Today's Orders: {performance.today_orders}\n"
                f"• Today's Revenue: {naira(performance.today_revenue)}\n"
                f"• Weekly Revenue: {naira(performance.week_revenue)}"
            ),
            quick_replies=["Best sellers", "Today orders", "Low stock", "Help"],
        )

    def _best_sellers(self, store_id: str) -> AssistantReply:
        products = list(self._queries.get_best_selling_products(store_id))[:5]
        if not products:
            return MessageReply(
                content="No sales data yet. Start adding products and making sales!",
                quick_replies=["Add product", "Store performance", "Today orders"],
            )
        lines = "\n".join(f"• {product.name}: {product.sales} sold" for product in products)
        return MessageReply(
            content=f"🏆 Your best-selling products:\n\n{lines}",
            quick_replies=["Add product", "View inventory", "Store analytics"],
        )

    def _inventory(self, store_id: str) -> AssistantReply:
        products = self._queries.get_low_stock_products(store_id)
        if not products:
            return MessageReply(
                content="✅ All products are well stocked!",
                quick_replies=["Add product", "Best sellers", "Store analytics"],
            )
        lines = "\n".join(f"• {product.name}: {product.stock} left" for product in products)
        return MessageReply(
            content=f"⚠️ Low stock alerts:\n\n{lines}",
            quick_replies=["Add product", "View inventory", "Store analytics"],
        )

    def _todays_orders(self, store_id: str) -> AssistantReply:
        orders = self._queries.get_todays_orders(store_id)
        if not orders:
            return MessageReply(
                content="No orders today yet. Let's promote your store!",
                quick_replies=["Add product", "Store performance", "Best sellers"],
            )
        lines = "\n".join(f"• Order #{order.id[-4:]}: {naira(order.total)}" for order in orders)
        return MessageReply(
            content=f"📦 Today's orders ({len(orders)}):\n\n{lines}",
            quick_replies=["Store performance", "Best sellers", "Low stock"],
        )

    def _recent_customers(self, store_id: str) -> AssistantReply:
        customers = self._queries.get_recent_customers(store_id)
        if not customers:
            return MessageReply(
                content="No recent customers yet. Your first customer is on the way!",
                quick_replies=["Add product", "Store performance", "Best sellers"],
            )
        lines = "\n".join(f"• {customer.name}: {customer.orders} orders" for customer in customers)
        return MessageReply(
            content=f"👥 Recent customers:\n\n{lines}",
            quick_replies=["Store performance", "Best sellers", "Today orders"],
        )

    # Substring matching for phrasing without a dedicated intent handler

    def _legacy_command(self, command: str, store_id: str) -> AssistantReply:
        if any(phrase in command for phrase in ("add product", "create product", "new product")):
            return NavigateReply(
                content="I'll help you add a new product! Let me take you to the products page.",
                path=PRODUCTS_PATH,
                quick_replies=["Best sellers", "Low stock", "Store analytics", "Back to main"],
            )

        if any(phrase in command for phrase in ("show products", "view products", "see products", "my products")):
            return NavigateReply(
                content="Here are your current products. Taking you to the products page.",
                path=PRODUCTS_PATH,
                quick_replies=["Add product", "Best sellers", "Low stock", "Back to main"],
            )

        if any(phrase in command for phrase in ("pending orders", "orders pending", "orders waiting", "need shipping")):
            return self._pending_orders(store_id)

        if command.strip() == "orders" or any(phrase in command for phrase in ("view orders", "see orders")):
            return NavigateReply(
                content="Opening your orders page.",
                path=ORDERS_PATH,
                quick_replies=["Pending orders", "Today orders", "Store performance"],
            )

        if "description" in command:
            return NavigateReply(
                content=(
                    "I can write product descriptions for you! Open a product and tap "
                    "\"Generate with AI\" to get a description and category."
                ),
                path=PRODUCTS_PATH,
                quick_replies=["Add product", "Best sellers", "Help"],
            )

        if any(word in command for word in ("revenue", "earnings", "profit", "income")):
            return self._monthly_sales(store_id)

        return help_reply()

    def _pending_orders(self, store_id: str) -> AssistantReply:
        orders = self._queries.get_pending_orders(store_id)
        if not orders:
            return MessageReply(
                content="Nothing waiting to ship. You're all caught up!",
                quick_replies=["Add product", "Today orders", "Store performance"],
            )
        lines = "\n".join(
            f"• Order #{order.id[-4:]} for {order.customer_name}: {naira(order.total)}" for order in orders
        )
        return MessageReply(
            content=f"🚚 Pending orders ({len(orders)}):\n\n{lines}",
            quick_replies=["Today orders", "Recent customers", "Help"],
        )

    def _monthly_sales(self, store_id: str) -> AssistantReply:
        sales = self._queries.get_sales_data(store_id, period="month")
        if not sales:
            return MessageReply(
                content="No completed sales this month yet. Let's get your first one!",
                quick_replies=["Add product", "Store performance", "Best sellers"],
            )
        total: Any = sum(sale.total for sale in sales)
        return MessageReply(
            content=(
                "💰 This month so far:\n\n"
                f"• Completed Orders: {len(sales)}\n"
                f"• Revenue: {naira(total)}"
            ),
            quick_replies=["Store performance", "Best sellers", "Today orders"],
        )
