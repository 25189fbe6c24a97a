"""
Pydantic schemas for request and response data validation.
Defines data structures for API endpoints; JSON uses camelCase field names.
"""
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Any, Dict, Optional, List

from bakery.models import AnalyticsEvent, ImageRecord, Order
from bakery.storage.analytics import AnalyticsStats


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class LoginRequest(ApiModel):
    """
    Request schema for admin login.
    Fields are optional so missing credentials produce a 400 with a clear message.
    """
    username: Optional[str] = None
    password: Optional[str] = None


class LoginResponse(ApiModel):
    success: bool = True
    token: str
    expires_in: str


class MessageResponse(ApiModel):
    success: bool = True
    message: str


class VerifyResponse(ApiModel):
    success: bool = True
    username: str


class PaginationMetadata(ApiModel):
    """
    Pagination metadata for offset-cursor pagination.
    next_cursor is the offset to pass as cursor for the following page.
    """
    next_cursor: Optional[int] = None
    has_more: bool
    total_count: int


class GalleryResponse(ApiModel):
    """
    Public gallery response.
    pagination is only present when the request asked for a page (limit given).
    """
    success: bool = True
    images: List[ImageRecord]
    pagination: Optional[PaginationMetadata] = None


class UploadResponse(ApiModel):
    success: bool = True
    message: str = "Image uploaded successfully"
    image: ImageRecord


class DeleteImageResponse(ApiModel):
    success: bool = True
    message: str = "Image deleted"
    deleted_image: ImageRecord


class ViewResponse(ApiModel):
    success: bool = True
    views: int


class TrackEventRequest(ApiModel):
    event_type: Optional[str] = None
    data: Optional[Dict[str, Any]] = None


class TrackEventResponse(ApiModel):
    success: bool = True
    event_id: int


class AnalyticsResponse(ApiModel):
    success: bool = True
    stats: AnalyticsStats
    recent_events: List[AnalyticsEvent]


class OrderCreatedResponse(ApiModel):
    success: bool = True
    message: str = "Order placed successfully"
    order_id: str
    total_amount: float


class OrderResponse(ApiModel):
    success: bool = True
    order: Order


class OrderListResponse(ApiModel):
    success: bool = True
    orders: List[Order]
    total_orders: int


class ContactRequest(ApiModel):
    """
    Request schema for the contact form.
    phone is optional; name, email and message are required (checked in the route).
    """
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    message: Optional[str] = None
