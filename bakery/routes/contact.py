"""
Contact form and client-side analytics tracking routes.
"""
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, status
import logging

from bakery.config import Settings
from bakery.schemas import ContactRequest, MessageResponse, TrackEventRequest, TrackEventResponse
from bakery.services.mail_service import notify_contact
from bakery.storage.analytics import CONTACT_SUBMIT
from bakery.storage.container import Storage, get_app_settings, get_storage
from bakery.utils.rate_limit import get_client_identifier

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/contact", response_model=MessageResponse)
async def submit_contact(
    form: ContactRequest,
    request: Request,
    background_tasks: BackgroundTasks,
    storage: Storage = Depends(get_storage),
    settings: Settings = Depends(get_app_settings)
):
    """
    Accept a contact form message.

    Raises:
        HTTPException: 400 if name, email or message is missing
    """
    missing = [field for field in ("name", "email", "message") if not (getattr(form, field) or "").strip()]
    if missing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"success": False, "error": "Missing fields", "message": f"Missing required fields: {', '.join(missing)}"}
        )

    storage.analytics.track_event(CONTACT_SUBMIT, {
        "email": form.email,
        "ip": get_client_identifier(request),
    })
    background_tasks.add_task(notify_contact, form.name, form.email, form.phone or "", form.message, settings)

    return MessageResponse(message="Message received! We will get back to you soon.")


@router.post("/analytics/track", response_model=TrackEventResponse)
async def track_event(
    payload: TrackEventRequest,
    request: Request,
    storage: Storage = Depends(get_storage)
):
    """
    Record a client-side analytics event (page visit, cart add, ...).

    Raises:
        HTTPException: 400 if eventType is missing
    """
    if not payload.event_type or not payload.event_type.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"success": False, "error": "Missing event type", "message": "eventType is required"}
        )

    data = dict(payload.data or {})
    data.setdefault("ip", get_client_identifier(request))
    data.setdefault("userAgent", request.headers.get("user-agent"))

    event = storage.analytics.track_event(payload.event_type.strip(), data)
    return TrackEventResponse(event_id=event.id)
