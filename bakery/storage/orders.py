"""
Order ledger: append-only orders with ids from a persisted counter.
"""
import logging
import re
from typing import Any, Dict, Iterable, List, Optional, Union

from bakery.models import Order, OrderItem, OrderStatus
from bakery.storage.snapshot import SnapshotStore

logger = logging.getLogger(__name__)

_ORDER_ID_PATTERN = re.compile(r"^(?:WD)?(\d{1,18})$", re.IGNORECASE | re.ASCII)

REQUIRED_FIELDS = ("customer_name", "email", "phone")


class OrderValidationError(ValueError):
    """Raised when an order is missing required data."""


def check_required_fields(customer_name: Optional[str], email: Optional[str], phone: Optional[str]) -> None:
    """
    Raises:
        OrderValidationError: If any of the contact fields is missing or blank
    """
    values = {"customer_name": customer_name, "email": email, "phone": phone}
    missing = [name for name in REQUIRED_FIELDS if not (values[name] or "").strip()]
    if missing:
        raise OrderValidationError(f"Missing required fields: {', '.join(missing)}")


def parse_order_id(external_id: str) -> Optional[int]:
    """Parse "WD0007" (or "7") into 7. Returns None for anything else."""
    match = _ORDER_ID_PATTERN.match(external_id.strip())
    if not match:
        return None
    return int(match.group(1))


class OrderLedger:
    def __init__(self, store: SnapshotStore) -> None:
        self.store = store

    def __len__(self) -> int:
        return len(self.store.orders)

    def add_order(
        self,
        customer_name: str,
        email: str,
        phone: str,
        items: Iterable[Union[OrderItem, Dict[str, Any]]] = (),
        reference_image: Optional[str] = None,
        special_requests: Optional[str] = None,
        delivery_date: Optional[str] = None,
    ) -> Order:
        """
        Record a new pending order.

        Raises:
            OrderValidationError: If customer_name, email or phone is blank
        """
        check_required_fields(customer_name, email, phone)

        order_items = [
            item if isinstance(item, OrderItem) else OrderItem.model_validate(item)
            for item in items
        ]
        total_amount = sum(item.price * item.quantity for item in order_items)

        order = Order(
            id=self.store.order_id_counter,
            customer_name=customer_name.strip(),
            email=email.strip(),
            phone=phone.strip(),
            items=order_items,
            total_amount=total_amount,
            status=OrderStatus.PENDING,
            reference_image=reference_image,
            special_requests=special_requests,
            delivery_date=delivery_date,
            created_at=self.store.clock(),
        )
        self.store.order_id_counter += 1
        self.store.orders.append(order)
        self.store.save()

        logger.info(f"Order placed: {order.order_id}, total={total_amount:.2f}, items={len(order_items)}")
        return order

    def get_order(self, external_id: str) -> Optional[Order]:
        order_id = parse_order_id(external_id)
        if order_id is None:
            return None

        for order in self.store.orders:
            if order.id == order_id:
                return order
        return None

    def has_reference_image(self, filename: str) -> bool:
        return any(order.reference_image == filename for order in self.store.orders)

    def list_orders(self, limit: int = 50) -> List[Order]:
        """Most recent orders first."""
        if limit <= 0:
            return []
        return list(reversed(self.store.orders[-limit:]))
