"""
Domain records for the storefront.
All records persist to the JSON snapshot using camelCase aliases.
"""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel


ORDER_ID_PREFIX = "WD"
ORDER_ID_WIDTH = 4


def format_order_id(order_id: int) -> str:
    """Format a numeric order id as its external form, e.g. 7 -> "WD0007"."""
    return f"{ORDER_ID_PREFIX}{order_id:0{ORDER_ID_WIDTH}d}"


class StoreRecord(BaseModel):
    """Base for records stored in the snapshot (camelCase on the wire)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class ImageRecord(StoreRecord):
    """
    One uploaded gallery image.
    Only views changes after creation.
    """
    id: int
    filename: str
    original_name: str
    uploaded_by: str
    size: int
    mime_type: str
    uploaded_at: datetime
    url: str
    views: int = 0
    is_public: bool = True
    width: Optional[int] = None
    height: Optional[int] = None


class AnalyticsEvent(StoreRecord):
    id: int
    type: str
    data: Dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime


class OrderStatus(str, Enum):
    PENDING = "pending"


class OrderItem(StoreRecord):
    name: str
    price: float = Field(ge=0)
    quantity: int = Field(default=1, ge=1)


class Order(StoreRecord):
    """
    Customer order.
    total_amount is computed once when the order is placed and never recomputed.
    """
    id: int
    customer_name: str
    email: str
    phone: str
    items: List[OrderItem] = Field(default_factory=list)
    total_amount: float
    status: OrderStatus = OrderStatus.PENDING
    reference_image: Optional[str] = None
    special_requests: Optional[str] = None
    delivery_date: Optional[str] = None
    created_at: datetime

    @computed_field(alias="orderId")
    @property
    def order_id(self) -> str:
        return format_order_id(self.id)


class CacheEntry(StoreRecord):
    data: Any
    timestamp: datetime
    expires: datetime


class AdminSession(StoreRecord):
    session_id: str
    username: str
    login_time: datetime
    ip: Optional[str] = None
    user_agent: Optional[str] = None
