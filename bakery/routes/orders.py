"""
Order routes: order placement (multipart form) and lookup by external id.
"""
from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, HTTPException, Request, UploadFile, status
from pydantic import TypeAdapter, ValidationError
from typing import List, Optional
import json
import logging

from bakery.config import Settings
from bakery.models import OrderItem
from bakery.schemas import OrderCreatedResponse, OrderResponse
from bakery.services.mail_service import notify_order
from bakery.services.upload_service import UploadError, save_upload, validate_upload
from bakery.storage.analytics import ORDER_PLACED
from bakery.storage.container import Storage, get_app_settings, get_storage
from bakery.storage.orders import OrderValidationError, check_required_fields
from bakery.utils.rate_limit import get_client_identifier

logger = logging.getLogger(__name__)

router = APIRouter(tags=["orders"])

_items_adapter = TypeAdapter(List[OrderItem])


def parse_items(raw_items: Optional[str]) -> List[OrderItem]:
    """
    Parse the items form field (a JSON array of {name, price, quantity}).

    Raises:
        OrderValidationError: If the field is not valid JSON or not a list of items
    """
    if not raw_items:
        return []

    try:
        return _items_adapter.validate_python(json.loads(raw_items))
    except json.JSONDecodeError:
        raise OrderValidationError("Items must be a valid JSON array")
    except ValidationError as e:
        raise OrderValidationError(f"Invalid items: {e.error_count()} validation error(s)")


def _bad_request(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"success": False, "error": "Validation error", "message": message}
    )


@router.post("/orders", response_model=OrderCreatedResponse, status_code=status.HTTP_201_CREATED)
async def place_order(
    request: Request,
    background_tasks: BackgroundTasks,
    customer_name: Optional[str] = Form(None, alias="customerName"),
    email: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    items: Optional[str] = Form(None),
    special_requests: Optional[str] = Form(None, alias="specialRequests"),
    delivery_date: Optional[str] = Form(None, alias="deliveryDate"),
    reference_image: Optional[UploadFile] = File(None, alias="referenceImage"),
    storage: Storage = Depends(get_storage),
    settings: Settings = Depends(get_app_settings)
):
    """
    Place an order.

    Everything is validated before anything is stored, so a rejected order
    leaves no reference image or record behind. The notification email is
    sent after the response.

    Raises:
        HTTPException: 400 if required fields are missing, items are malformed
            or the reference image is rejected; 500 if the image cannot be stored
    """
    try:
        check_required_fields(customer_name, email, phone)
        order_items = parse_items(items)
    except OrderValidationError as e:
        raise _bad_request(str(e))

    stored_reference = None
    if reference_image is not None and reference_image.filename:
        content = await reference_image.read()
        try:
            validate_upload(reference_image.content_type or "", len(content), settings)
        except UploadError as e:
            raise _bad_request(str(e))

        try:
            stored_reference = save_upload(content, reference_image.filename, settings)
        except OSError as e:
            logger.error(f"Error storing order reference image: {str(e)}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail={"success": False, "error": "Upload failed", "message": "Could not store the reference image"}
            )

    order = storage.orders.add_order(
        customer_name=customer_name,
        email=email,
        phone=phone,
        items=order_items,
        reference_image=stored_reference,
        special_requests=special_requests,
        delivery_date=delivery_date,
    )
    storage.analytics.track_event(ORDER_PLACED, {
        "orderId": order.order_id,
        "amount": order.total_amount,
        "items": len(order.items),
        "ip": get_client_identifier(request),
    })

    background_tasks.add_task(notify_order, order, settings)

    return OrderCreatedResponse(order_id=order.order_id, total_amount=order.total_amount)


@router.get("/orders/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, storage: Storage = Depends(get_storage)):
    """
    Look up an order by its external id (e.g. WD0007).

    Raises:
        HTTPException: 404 if no order matches
    """
    order = storage.orders.get_order(order_id)
    if order is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"success": False, "error": "Order not found", "message": f"Order {order_id} does not exist"}
        )
    return OrderResponse(order=order)
