"""Order aggregate — an immutable snapshot of a committed cart plus its status.

State Machine:
    PENDING → CONFIRMED → SHIPPED
    PENDING → CANCELLED

Order lines are denormalized snapshots taken at commit time. They carry the
title, author, category and effective unit price of the item as it was, and
stay valid after the catalogue item changes or is deleted.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, Float, HasMany, Integer, String

from bookstore.domain import bookstore
from bookstore.exceptions import InvalidStateError

ORDER_ID_PREFIX = "ORD"
FIRST_ORDER_NUMBER = 1000


class OrderStatus(Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    SHIPPED = "SHIPPED"
    CANCELLED = "CANCELLED"


# State machine transition map
_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.SHIPPED},
    OrderStatus.SHIPPED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

# Orders that count towards revenue and sales statistics
REVENUE_STATES = frozenset({OrderStatus.CONFIRMED, OrderStatus.SHIPPED})


def format_order_id(number):
    return f"{ORDER_ID_PREFIX}{number}"


def parse_order_number(order_id):
    """Numeric suffix of a generated order id, or None for any other id."""
    suffix = order_id[len(ORDER_ID_PREFIX) :] if order_id.startswith(ORDER_ID_PREFIX) else ""
    return int(suffix) if suffix.isdigit() else None


@bookstore.entity(part_of="Order")
class OrderItemSnapshot:
    """One order line, captured when the cart was committed."""

    item_id = String(required=True, max_length=50)
    title_at_purchase = String(required=True, max_length=255)
    author_at_purchase = String(max_length=255)
    category_at_purchase = String(max_length=100)
    quantity = Integer(required=True, min_value=1)
    unit_price_at_purchase = Float(required=True, min_value=0.0)

    @classmethod
    def capture(cls, item, quantity):
        return cls(
            item_id=item.item_id,
            title_at_purchase=item.title,
            author_at_purchase=item.author,
            category_at_purchase=item.category,
            quantity=quantity,
            unit_price_at_purchase=item.effective_price(),
        )

    @property
    def subtotal(self):
        return self.unit_price_at_purchase * self.quantity


@bookstore.aggregate
class Order:
    order_id = String(identifier=True, required=True, max_length=50)
    customer_ref = String(required=True, max_length=100)
    items = HasMany(OrderItemSnapshot)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    created_at = DateTime()

    @classmethod
    def place(cls, order_id, customer_ref, snapshots, created_at=None):
        order = cls(
            order_id=order_id,
            customer_ref=customer_ref,
            status=OrderStatus.PENDING.value,
            created_at=created_at or datetime.now(UTC),
        )
        order.items = list(snapshots)
        return order

    @property
    def total_amount(self):
        return sum(snapshot.subtotal for snapshot in self.items)

    def item_count(self):
        return sum(snapshot.quantity for snapshot in self.items)

    def is_pending(self):
        return OrderStatus(self.status) == OrderStatus.PENDING

    def counts_as_revenue(self):
        return OrderStatus(self.status) in REVENUE_STATES

    # -------------------------------------------------------------------
    # State transitions
    # -------------------------------------------------------------------
    def _transition(self, target_status):
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS[current]:
            raise InvalidStateError(
                f"Cannot move order {self.order_id} from {current.value} to {target_status.value}"
            )
        self.status = target_status.value

    def confirm(self):
        self._transition(OrderStatus.CONFIRMED)

    def ship(self):
        self._transition(OrderStatus.SHIPPED)

    def cancel(self):
        self._transition(OrderStatus.CANCELLED)
