"""
Process-wide storage services.
Built once at startup and handed to route handlers through FastAPI dependencies.
"""
import logging
from dataclasses import dataclass
from datetime import timedelta

from fastapi import Request

from bakery.config import Settings
from bakery.storage.admin_sessions import AdminSessionManager
from bakery.storage.analytics import AnalyticsRecorder
from bakery.storage.gallery import GALLERY_CACHE_KEY, GalleryRegistry
from bakery.storage.orders import OrderLedger
from bakery.storage.session_cache import SessionCache
from bakery.storage.snapshot import Clock, SnapshotStore, utc_now

logger = logging.getLogger(__name__)


@dataclass
class Storage:
    store: SnapshotStore
    cache: SessionCache
    gallery: GalleryRegistry
    analytics: AnalyticsRecorder
    orders: OrderLedger
    sessions: AdminSessionManager


def build_storage(settings: Settings, clock: Clock = utc_now) -> Storage:
    """
    Create the storage services and load the snapshot from disk.

    Args:
        settings: Application settings (paths, limits, TTLs)
        clock: Time source shared by every service
    """
    store = SnapshotStore(
        settings.data_path,
        analytics_persist_limit=settings.ANALYTICS_PERSIST_LIMIT,
        clock=clock,
    )
    store.load()

    cache = SessionCache(
        settings.cache_path,
        ttl=timedelta(minutes=settings.CACHE_TTL_MINUTES),
        clock=clock,
    )

    storage = Storage(
        store=store,
        cache=cache,
        gallery=GalleryRegistry(store, cache, url_prefix=settings.UPLOAD_URL_PREFIX),
        analytics=AnalyticsRecorder(store, memory_limit=settings.ANALYTICS_MEMORY_LIMIT),
        orders=OrderLedger(store),
        sessions=AdminSessionManager(
            max_age=timedelta(minutes=settings.SESSION_MAX_AGE_MINUTES),
            clock=clock,
        ),
    )
    # The cache file may predate the snapshot; the next read rebuilds the public view
    cache.delete(GALLERY_CACHE_KEY)
    logger.info(f"Storage initialized (data file: {settings.data_path}, cache file: {settings.cache_path})")
    return storage


def get_storage(request: Request) -> Storage:
    """
    FastAPI dependency returning the application's storage services.

    Usage:
        @router.get("/endpoint")
        async def my_endpoint(storage: Storage = Depends(get_storage)):
            ...
    """
    return request.app.state.storage


def get_app_settings(request: Request) -> Settings:
    """FastAPI dependency returning the settings the application was built with."""
    return request.app.state.settings
