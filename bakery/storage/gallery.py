"""
Gallery registry: image metadata backed by the snapshot store.
The public gallery view is cached under GALLERY_CACHE_KEY and refreshed on every change.
"""
import logging
import re
from typing import List, Optional

from bakery.models import ImageRecord
from bakery.storage.session_cache import SessionCache
from bakery.storage.snapshot import SnapshotStore, next_time_id

logger = logging.getLogger(__name__)

GALLERY_CACHE_KEY = "gallery"

_IMAGE_ID_PATTERN = re.compile(r"^\d{1,18}$", re.ASCII)


def parse_image_id(value: str) -> Optional[int]:
    """Parse an image id from a path segment. Returns None for anything else."""
    if not _IMAGE_ID_PATTERN.match(value.strip()):
        return None
    return int(value.strip())


class GalleryRegistry:
    """
    CRUD and query surface over gallery images.

    Args:
        store: Snapshot store holding the image list
        cache: Cache used for the public gallery view (None disables caching)
        url_prefix: Public URL prefix the upload directory is served under
    """

    def __init__(
        self,
        store: SnapshotStore,
        cache: Optional[SessionCache] = None,
        url_prefix: str = "/uploads",
    ) -> None:
        self.store = store
        self.cache = cache
        self.url_prefix = url_prefix.rstrip("/")
        # Highest id handed out so far; deleted ids are never reused
        self._last_id = max((image.id for image in store.images), default=0)

    def __len__(self) -> int:
        return len(self.store.images)

    def refresh_cache(self) -> List[ImageRecord]:
        images = self.get_public_images()
        if self.cache is not None:
            self.cache.set(GALLERY_CACHE_KEY, [image.to_json() for image in images])
        return images

    def add_image(
        self,
        filename: str,
        original_name: str,
        uploaded_by: str,
        size: int,
        mime_type: str,
        width: Optional[int] = None,
        height: Optional[int] = None,
    ) -> ImageRecord:
        now = self.store.clock()
        image = ImageRecord(
            id=next_time_id(self._last_id, now),
            filename=filename,
            original_name=original_name,
            uploaded_by=uploaded_by,
            size=size,
            mime_type=mime_type,
            uploaded_at=now,
            url=f"{self.url_prefix}/{filename}",
            width=width,
            height=height,
        )
        self._last_id = image.id
        self.store.images.append(image)
        self.store.save()
        self.refresh_cache()

        logger.info(f"Added gallery image: ID {image.id}, filename={filename}")
        return image

    def get_image(self, image_id: int) -> Optional[ImageRecord]:
        for image in self.store.images:
            if image.id == image_id:
                return image
        return None

    def has_filename(self, filename: str) -> bool:
        return any(image.filename == filename for image in self.store.images)

    def remove_image(self, image_id: int) -> Optional[ImageRecord]:
        """
        Remove an image record by id.

        The stored file is left alone; deleting it is up to the caller.

        Returns:
            The removed record, or None if no image has this id
        """
        for index, image in enumerate(self.store.images):
            if image.id == image_id:
                break
        else:
            return None

        removed = self.store.images.pop(index)
        self.store.save()
        self.refresh_cache()

        logger.info(f"Removed gallery image: ID {image_id}, filename={removed.filename}")
        return removed

    def get_public_images(self) -> List[ImageRecord]:
        """Public images, newest first. Equal upload times keep insertion order."""
        public = [image for image in self.store.images if image.is_public]
        # sorted() is stable, so ties stay in insertion order
        return sorted(public, key=lambda image: image.uploaded_at, reverse=True)

    def list_public_images(self, use_cache: bool = True) -> List[ImageRecord]:
        """Read-through view of get_public_images()."""
        if use_cache and self.cache is not None:
            cached = self.cache.get(GALLERY_CACHE_KEY)
            if cached is not None:
                return [ImageRecord.model_validate(item) for item in cached]
            logger.debug("Gallery cache miss, recomputing public images")
            return self.refresh_cache()

        return self.get_public_images()

    def list_filenames(self) -> List[str]:
        return [image.filename for image in self.list_public_images()]

    def increment_image_views(self, filename: str) -> int:
        """
        Increment the view counter for the image stored under filename.

        Returns:
            int: The new view count, or 0 if no image has this filename
        """
        for image in self.store.images:
            if image.filename == filename:
                image.views += 1
                self.store.save()
                self.refresh_cache()
                return image.views

        logger.debug(f"View tick for unknown image: {filename}")
        return 0
