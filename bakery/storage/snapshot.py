"""
JSON snapshot persistence for the storefront collections.

The store keeps images, the analytics log, orders and the order id counter in
memory and writes the whole payload back to one JSON file after every change.
The in-memory collections stay authoritative for the life of the process; the
file is only read at startup.
"""
import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional

from pydantic import ValidationError

from bakery.models import AnalyticsEvent, ImageRecord, Order

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def next_time_id(last_id: int, now: datetime) -> int:
    """
    Allocate a time-based id (milliseconds since epoch).

    Ids are strictly increasing: when two inserts land in the same millisecond
    the second one gets last_id + 1.
    """
    return max(int(now.timestamp() * 1000), last_id + 1)


class SnapshotStore:
    """
    Holds the mutable collections and mirrors them to a JSON file.

    Args:
        path: Snapshot file location, or None for an in-memory-only store
        analytics_persist_limit: Number of most recent analytics events written to disk
        clock: Returns the current aware datetime
    """

    def __init__(
        self,
        path: Optional[Path],
        analytics_persist_limit: int = 5000,
        clock: Clock = utc_now,
    ) -> None:
        self.path = Path(path) if path is not None else None
        self.analytics_persist_limit = analytics_persist_limit
        self.clock = clock
        self.images: List[ImageRecord] = []
        self.analytics: List[AnalyticsEvent] = []
        self.orders: List[Order] = []
        self.order_id_counter: int = 1

    def reset(self) -> None:
        self.images = []
        self.analytics = []
        self.orders = []
        self.order_id_counter = 1

    def load(self) -> None:
        """
        Load collections from the snapshot file.

        A missing file leaves the store empty. Unreadable or invalid files are
        logged and also leave the store empty, so startup never fails here.
        """
        self.reset()
        if self.path is None or not self.path.exists():
            logger.info("No snapshot file found, starting with empty store")
            return

        try:
            with self.path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)

            images = [ImageRecord.model_validate(item) for item in payload.get("images", [])]
            analytics = [AnalyticsEvent.model_validate(item) for item in payload.get("analytics", [])]
            orders = [Order.model_validate(item) for item in payload.get("orders", [])]
            counter = int(payload.get("orderIdCounter", 1))
        except (OSError, ValueError, TypeError, AttributeError, ValidationError) as e:
            logger.error(
                f"Failed to load snapshot from {self.path}: {str(e)}. Starting with empty store",
                exc_info=True
            )
            return

        # Never hand out an id that is already taken
        if orders:
            counter = max(counter, max(order.id for order in orders) + 1)

        self.images = images
        self.analytics = analytics
        self.orders = orders
        self.order_id_counter = counter

        logger.info(
            f"Loaded snapshot: {len(images)} images, {len(orders)} orders, "
            f"{len(analytics)} analytics events (next order id: {counter})"
        )

    def to_payload(self) -> dict:
        tail = self.analytics[-self.analytics_persist_limit:] if self.analytics_persist_limit > 0 else []
        return {
            "images": [image.to_json() for image in self.images],
            "analytics": [event.to_json() for event in tail],
            "orders": [order.to_json() for order in self.orders],
            "orderIdCounter": self.order_id_counter,
            "lastUpdated": self.clock().isoformat(),
        }

    def save(self) -> bool:
        """
        Write the full snapshot to disk.

        Returns:
            bool: True if the file was written, False if writing failed.
            Failures are logged and never raised.
        """
        if self.path is None:
            return True

        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("w", encoding="utf-8") as handle:
                json.dump(self.to_payload(), handle, indent=2)
            os.replace(tmp_path, self.path)
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to save snapshot to {self.path}: {str(e)}", exc_info=True)
            return False
