"""Pydantic models for assistant routing, store snapshots and replies."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

Amount = Union[int, float]


class Intent(str, Enum):
    PERFORMANCE = "PERFORMANCE"
    BEST_SELLERS = "BEST_SELLERS"
    INVENTORY = "INVENTORY"
    ORDERS = "ORDERS"
    CUSTOMERS = "CUSTOMERS"
    CONTENT_HELP = "CONTENT_HELP"
    NAVIGATION = "NAVIGATION"
    HELP = "HELP"
    SETTINGS = "SETTINGS"
    ORDER_MANAGEMENT = "ORDER_MANAGEMENT"
    PRICING = "PRICING"
    MARKETING = "MARKETING"
    CUSTOMER_COMMS = "CUSTOMER_COMMS"
    FINANCIAL = "FINANCIAL"
    UNKNOWN = "UNKNOWN"


class RouteCategory(str, Enum):
    COMMAND = "COMMAND"
    CASUAL = "CASUAL"
    GENERAL = "GENERAL"


class RouteHandler(str, Enum):
    PREDEFINED = "PREDEFINED"
    GROQ = "GROQ"


class RouteDecision(BaseModel):
    """Outcome of routing a single user message."""

    model_config = ConfigDict(frozen=True)

    category: RouteCategory
    handler: RouteHandler
    intent: Optional[Intent] = None

    @model_validator(mode="after")
    def _check_pairing(self) -> "RouteDecision":
        if self.category is not RouteCategory.COMMAND and self.handler is RouteHandler.PREDEFINED:
            raise ValueError(f"{self.category.value} messages must be handled by GROQ")
        if self.intent is not None and self.category is not RouteCategory.COMMAND:
            raise ValueError("Only COMMAND decisions carry an intent")
        if self.intent is Intent.UNKNOWN:
            raise ValueError("UNKNOWN is not a routable intent")
        return self


# Store snapshot records. Defaults match what the dashboard shows for
# documents with missing fields.


class StorePerformance(BaseModel):
    today_orders: int = 0
    today_revenue: Amount = 0
    week_revenue: Amount = 0
    total_orders: int = 0


class ProductSales(BaseModel):
    id: str
    name: str = "Unnamed Product"
    sales: int = 0
    revenue: Amount = 0


class LowStockProduct(BaseModel):
    id: str
    name: str = "Unnamed Product"
    stock: int = 0
    threshold: int = 5


class OrderSummary(BaseModel):
    id: str
    customer_name: str = "Customer"
    total: Amount = 0
    status: str = "pending"
    items: List[Any] = Field(default_factory=list)


class PendingOrder(BaseModel):
    id: str
    customer_name: str = "Customer"
    total: Amount = 0
    created_at: Optional[datetime] = None


class CustomerSummary(BaseModel):
    id: str
    name: str = "Customer"
    email: str = ""
    orders: int = 0
    total_spent: Amount = 0


class SaleRecord(BaseModel):
    id: str
    total: Amount = 0
    created_at: Optional[datetime] = None


# Assistant replies


class MessageReply(BaseModel):
    """Plain text reply with suggested follow-ups."""

    kind: Literal["message"] = "message"
    content: str
    quick_replies: List[str] = Field(default_factory=list)

    def to_payload(self) -> Dict[str, Any]:
        return {"type": "ai", "content": self.content, "quickReplies": list(self.quick_replies)}


class NavigateReply(BaseModel):
    """Reply that also asks the dashboard to change route."""

    kind: Literal["navigate"] = "navigate"
    content: str
    path: str
    quick_replies: List[str] = Field(default_factory=list)

    @field_validator("path")
    @classmethod
    def _absolute_path(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError("navigation path must start with '/'")
        return value

    @property
    def action(self) -> str:
        return f"navigate:{self.path}"

    def to_payload(self) -> Dict[str, Any]:
        return {
            "type": "ai",
            "content": self.content,
            "quickReplies": list(self.quick_replies),
            "action": self.action,
        }


AssistantReply = Annotated[Union[MessageReply, NavigateReply], Field(discriminator="kind")]


class AssistantMessage(BaseModel):
    """One side of a conversation turn as kept in the session history."""

    id: str = Field(default_factory=lambda: uuid4().hex)
    type: Literal["user", "ai"]
    content: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    quick_replies: Optional[List[str]] = None
    action: Optional[str] = None

    @classmethod
    def from_reply(cls, reply: Union[MessageReply, NavigateReply]) -> "AssistantMessage":
        return cls(
            type="ai",
            content=reply.content,
            quick_replies=list(reply.quick_replies) or None,
            action=reply.action if isinstance(reply, NavigateReply) else None,
        )


class ProductDetails(BaseModel):
    """Generated copy for a product listing."""

    description: str = ""
    category: str = ""


# HTTP request bodies


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    text: str
    first_name: str = Field(default="there", alias="firstName")
    store_id: str = Field(alias="storeId")

    @field_validator("text", "store_id")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("first_name", mode="before")
    @classmethod
    def _default_first_name(cls, value: Any) -> str:
        if value in (None, ""):
            return "there"
        return str(value).strip() or "there"


class DescribeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    product_name: str = Field(alias="productName")
    price: Optional[Amount] = None

    @field_validator("product_name")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value
