"""
Gallery routes for public gallery image retrieval.
Provides endpoints for listing gallery images and counting image views.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from typing import List, Optional
import logging

from bakery.schemas import GalleryResponse, PaginationMetadata, ViewResponse
from bakery.storage.analytics import IMAGE_VIEW
from bakery.storage.container import Storage, get_storage

logger = logging.getLogger(__name__)

# Create router instance
router = APIRouter()


@router.get("/gallery", response_model=GalleryResponse)
async def get_gallery(
    limit: Optional[int] = None,
    cursor: int = 0,
    storage: Storage = Depends(get_storage)
):
    """
    Get public gallery images, newest first.

    Without limit, every public image is returned. With limit, one page is
    returned starting at offset cursor, plus pagination metadata.

    Args:
        limit: Page size (1-100), optional
        cursor: Offset returned as next_cursor by the previous page
        storage: Storage services (injected by FastAPI dependency)

    Returns:
        GalleryResponse: Images and optional pagination metadata

    Raises:
        HTTPException: 400 if invalid parameters, 500 if the gallery cannot be read
    """
    if limit is not None and (limit < 1 or limit > 100):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"success": False, "error": "Invalid limit", "message": "Limit must be between 1 and 100"}
        )
    if cursor < 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"success": False, "error": "Invalid cursor", "message": "Cursor must not be negative"}
        )

    try:
        images = storage.gallery.list_public_images()
    except Exception as e:
        logger.error(f"Failed to retrieve gallery images: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"success": False, "error": "Failed to retrieve gallery images", "message": "Please try again later"}
        )

    if limit is None:
        return GalleryResponse(images=images)

    page = images[cursor:cursor + limit]
    has_more = cursor + limit < len(images)
    next_cursor = cursor + limit if has_more else None

    logger.info(
        f"Retrieved {len(page)} gallery images "
        f"(cursor: {cursor}, next: {next_cursor}, has_more: {has_more})"
    )

    return GalleryResponse(
        images=page,
        pagination=PaginationMetadata(
            next_cursor=next_cursor,
            has_more=has_more,
            total_count=len(images)
        )
    )


@router.get("/images", response_model=List[str])
async def list_image_filenames(storage: Storage = Depends(get_storage)):
    """Filenames of the public gallery images, newest first."""
    try:
        return storage.gallery.list_filenames()
    except Exception as e:
        logger.error(f"Failed to list image filenames: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"success": False, "error": "Failed to list images", "message": "Please try again later"}
        )


@router.post("/images/{filename}/view", response_model=ViewResponse)
async def record_image_view(filename: str, storage: Storage = Depends(get_storage)):
    """
    Count one view of a gallery image.
    Unknown filenames report 0 views and change nothing.
    """
    try:
        views = storage.gallery.increment_image_views(filename)
    except Exception as e:
        logger.error(f"Failed to record view for {filename}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"success": False, "error": "Failed to record view", "message": "Please try again later"}
        )

    if views:
        storage.analytics.track_event(IMAGE_VIEW, {"filename": filename})

    return ViewResponse(views=views)
