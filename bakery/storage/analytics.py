"""
Analytics recorder: bounded append-only event log with counters computed on demand.
"""
import logging
from collections import Counter
from datetime import datetime
from typing import Any, Dict, List, Optional

from bakery.models import AnalyticsEvent, StoreRecord
from bakery.storage.snapshot import SnapshotStore, next_time_id

logger = logging.getLogger(__name__)

# Event types recorded by the application
PAGE_VISIT = "page_visit"
CART_ADD = "cart_add"
CONTACT_SUBMIT = "contact_submit"
ORDER_PLACED = "order_placed"
UPLOAD_SUCCESS = "upload_success"
UPLOAD_FAILURE = "upload_failure"
ADMIN_LOGIN_SUCCESS = "admin_login_success"
ADMIN_LOGIN_FAILURE = "admin_login_failure"
IMAGE_VIEW = "image_view"
ROUTE_NOT_FOUND = "route_not_found"
SERVER_ERROR = "server_error"


class AnalyticsStats(StoreRecord):
    total_page_visits: int
    today_page_visits: int
    total_cart_adds: int
    contact_submissions: int
    total_orders: int
    today_orders: int
    gallery_uploads: int
    failed_uploads: int
    image_views: int
    admin_logins: int
    failed_logins: int
    not_found_requests: int
    server_errors: int
    total_events: int
    events_by_type: Dict[str, int]


def _local_day(value: datetime):
    return value.astimezone().date()


class AnalyticsRecorder:
    def __init__(self, store: SnapshotStore, memory_limit: int = 10000) -> None:
        self.store = store
        self.memory_limit = memory_limit

    def __len__(self) -> int:
        return len(self.store.analytics)

    def track_event(self, event_type: str, data: Optional[Dict[str, Any]] = None) -> AnalyticsEvent:
        now = self.store.clock()
        last_id = self.store.analytics[-1].id if self.store.analytics else 0
        event = AnalyticsEvent(
            id=next_time_id(last_id, now),
            type=event_type,
            data=data or {},
            timestamp=now,
        )
        self.store.analytics.append(event)
        if len(self.store.analytics) > self.memory_limit:
            del self.store.analytics[:len(self.store.analytics) - self.memory_limit]
        self.store.save()

        logger.debug(f"Tracked analytics event: {event_type}")
        return event

    def count(self, event_type: str, today: bool = False) -> int:
        events = self.store.analytics
        if not today:
            return sum(1 for event in events if event.type == event_type)

        current_day = _local_day(self.store.clock())
        return sum(
            1 for event in events
            if event.type == event_type and _local_day(event.timestamp) == current_day
        )

    def get_stats(self) -> AnalyticsStats:
        """Counters over the retained event window (full scan)."""
        by_type = Counter(event.type for event in self.store.analytics)
        return AnalyticsStats(
            total_page_visits=by_type[PAGE_VISIT],
            today_page_visits=self.count(PAGE_VISIT, today=True),
            total_cart_adds=by_type[CART_ADD],
            contact_submissions=by_type[CONTACT_SUBMIT],
            total_orders=by_type[ORDER_PLACED],
            today_orders=self.count(ORDER_PLACED, today=True),
            gallery_uploads=by_type[UPLOAD_SUCCESS],
            failed_uploads=by_type[UPLOAD_FAILURE],
            image_views=by_type[IMAGE_VIEW],
            admin_logins=by_type[ADMIN_LOGIN_SUCCESS],
            failed_logins=by_type[ADMIN_LOGIN_FAILURE],
            not_found_requests=by_type[ROUTE_NOT_FOUND],
            server_errors=by_type[SERVER_ERROR],
            total_events=len(self.store.analytics),
            events_by_type=dict(by_type),
        )

    def recent_events(self, limit: int = 50) -> List[AnalyticsEvent]:
        if limit <= 0:
            return []
        return list(reversed(self.store.analytics[-limit:]))
