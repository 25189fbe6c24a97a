"""
Admin API routes with JWT authentication.
Login issues a bearer token tied to a server-side admin session; every other
endpoint here requires that token.
"""
from fastapi import APIRouter, Depends, HTTPException, status, UploadFile, File, Query, Request
from typing import Optional
import logging

from bakery.config import Settings
from bakery.schemas import (
    AnalyticsResponse,
    DeleteImageResponse,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    OrderListResponse,
    UploadResponse,
    VerifyResponse,
)
from bakery.services.upload_service import UploadError, delete_upload, save_upload, validate_upload
from bakery.storage.analytics import (
    ADMIN_LOGIN_FAILURE,
    ADMIN_LOGIN_SUCCESS,
    UPLOAD_FAILURE,
    UPLOAD_SUCCESS,
)
from bakery.storage.container import Storage, get_app_settings, get_storage
from bakery.storage.gallery import parse_image_id
from bakery.utils.auth import verify_admin_credentials
from bakery.utils.image_info import get_image_info
from bakery.utils.jwt_auth import create_access_token, format_expires_in, require_admin
from bakery.utils.rate_limit import get_client_identifier, limiter, login_rate_limit

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/login", response_model=LoginResponse)
@limiter.limit(login_rate_limit)
async def login(
    request: Request,
    credentials: LoginRequest,
    storage: Storage = Depends(get_storage),
    settings: Settings = Depends(get_app_settings)
):
    """
    Authenticate the admin and issue a bearer token.

    Raises:
        HTTPException: 400 if username or password is missing, 401 if they are wrong,
            500 if admin credentials are not configured
    """
    if not credentials.username or not credentials.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"success": False, "error": "Missing credentials", "message": "Username and password are required"}
        )

    ip = get_client_identifier(request)
    user_agent = request.headers.get("user-agent")

    try:
        is_valid = verify_admin_credentials(credentials.username, credentials.password, settings)
    except ValueError as e:
        # ADMIN_PASSWORD_HASH not configured
        logger.error(f"Admin login unavailable: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"success": False, "error": "Authentication not configured", "message": "Admin login is unavailable"}
        )

    if not is_valid:
        storage.analytics.track_event(ADMIN_LOGIN_FAILURE, {"username": credentials.username, "ip": ip})
        logger.warning(f"Failed admin login for {credentials.username!r} from {ip}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"success": False, "error": "Invalid credentials", "message": "Invalid username or password"}
        )

    session_id = storage.sessions.create(credentials.username, ip=ip, user_agent=user_agent)
    token = create_access_token(
        {"username": credentials.username, "isAdmin": True, "sessionId": session_id},
        settings
    )
    storage.analytics.track_event(ADMIN_LOGIN_SUCCESS, {"username": credentials.username, "ip": ip})

    return LoginResponse(token=token, expires_in=format_expires_in(settings))


@router.post("/logout", response_model=MessageResponse)
async def logout(
    admin: dict = Depends(require_admin),
    storage: Storage = Depends(get_storage)
):
    """End the admin session behind the presented token."""
    storage.sessions.revoke(admin["sessionId"])
    logger.info(f"Admin {admin.get('username')} logged out")
    return MessageResponse(message="Logout successful")


@router.get("/verify", response_model=VerifyResponse)
async def verify(admin: dict = Depends(require_admin)):
    """Check that the presented token still belongs to an active admin session."""
    return VerifyResponse(username=admin.get("username", ""))


@router.post("/gallery/upload", response_model=UploadResponse)
async def upload_gallery_image(
    request: Request,
    image: Optional[UploadFile] = File(None),
    admin: dict = Depends(require_admin),
    storage: Storage = Depends(get_storage),
    settings: Settings = Depends(get_app_settings)
):
    """
    Upload one gallery image (multipart field "image").

    Returns:
        UploadResponse: The created image record

    Raises:
        HTTPException: 400 if no file, a disallowed type or too large,
            500 if the file cannot be stored
    """
    if image is None or not image.filename:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"success": False, "error": "No file uploaded", "message": "An image file is required"}
        )

    content = await image.read()
    ip = get_client_identifier(request)

    try:
        validate_upload(image.content_type or "", len(content), settings)
    except UploadError as e:
        storage.analytics.track_event(UPLOAD_FAILURE, {"filename": image.filename, "reason": str(e), "ip": ip})
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"success": False, "error": "Invalid file", "message": str(e)}
        )

    try:
        filename = save_upload(content, image.filename, settings)
    except OSError as e:
        logger.error(f"Error storing upload {image.filename}: {str(e)}", exc_info=True)
        storage.analytics.track_event(UPLOAD_FAILURE, {"filename": image.filename, "reason": "storage error", "ip": ip})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"success": False, "error": "Upload failed", "message": "Could not store the uploaded file"}
        )

    info = get_image_info(content) or {}
    record = storage.gallery.add_image(
        filename=filename,
        original_name=image.filename,
        uploaded_by=admin.get("username", ""),
        size=len(content),
        mime_type=image.content_type or "",
        width=info.get("width"),
        height=info.get("height"),
    )
    storage.analytics.track_event(UPLOAD_SUCCESS, {"filename": filename, "size": len(content), "ip": ip})

    return UploadResponse(image=record)


@router.delete("/gallery/{image_id}", response_model=DeleteImageResponse)
async def delete_gallery_image(
    image_id: str,
    admin: dict = Depends(require_admin),
    storage: Storage = Depends(get_storage),
    settings: Settings = Depends(get_app_settings)
):
    """
    Delete a gallery image.
    Metadata is removed first; a failure to remove the file is logged and ignored.

    Raises:
        HTTPException: 404 if image not found
    """
    parsed_id = parse_image_id(image_id)
    removed = storage.gallery.remove_image(parsed_id) if parsed_id is not None else None
    if removed is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"success": False, "error": "Image not found", "message": f"Image ID {image_id} does not exist"}
        )

    delete_upload(removed.filename, settings)
    logger.info(f"Admin {admin.get('username')} deleted image ID {image_id}")

    return DeleteImageResponse(deleted_image=removed)


@router.get("/analytics", response_model=AnalyticsResponse)
async def get_analytics(
    recent: int = Query(50, ge=0, le=1000),
    admin: dict = Depends(require_admin),
    storage: Storage = Depends(get_storage)
):
    """Counters over the retained analytics window plus the most recent events."""
    return AnalyticsResponse(
        stats=storage.analytics.get_stats(),
        recent_events=storage.analytics.recent_events(recent),
    )


@router.get("/orders", response_model=OrderListResponse)
async def list_orders(
    limit: int = Query(50, ge=1, le=500),
    admin: dict = Depends(require_admin),
    storage: Storage = Depends(get_storage)
):
    """Most recent orders first."""
    return OrderListResponse(
        orders=storage.orders.list_orders(limit),
        total_orders=len(storage.orders),
    )
