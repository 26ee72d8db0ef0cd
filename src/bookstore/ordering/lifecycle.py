"""Order lifecycle — turns carts into orders and moves orders through their states.

Stock and popularity move together with order status:

    commit   stock -= qty, popularity += qty   (order PENDING)
    cancel   stock += qty, popularity -= qty   (PENDING -> CANCELLED, floor 0)
    confirm  no counter changes                (PENDING -> CONFIRMED)
    ship     no counter changes                (CONFIRMED -> SHIPPED)
"""

from protean.exceptions import ValidationError

from bookstore.ordering.order import Order, OrderItemSnapshot
from bookstore.utils.logging import get_logger

logger = get_logger(__name__)


class OrderLifecycle:
    def __init__(self, ledger):
        self.ledger = ledger

    def _validate_cart(self, cart):
        """Check every line against live stock before anything is mutated."""
        shortages = []
        for item_id, quantity in cart.lines():
            stock = self.ledger.stock_of(item_id)
            if quantity > stock:
                shortages.append(f"{item_id}: requested {quantity}, available {stock}")

        if shortages:
            raise ValidationError({"items": [f"Insufficient stock for {s}" for s in shortages]})

    def commit(self, cart, customer_ref):
        """Place an order for the cart's contents and empty the cart.

        All lines are validated and the order id is reserved before anything
        else changes; a single short line rejects the whole cart and leaves
        the ledger untouched.
        """
        if cart.is_empty():
            raise ValidationError({"cart": ["Cannot place an order for an empty cart"]})

        self._validate_cart(cart)
        order_id = self.ledger.next_order_id()

        snapshots = [
            OrderItemSnapshot.capture(self.ledger.by_id(item_id), quantity) for item_id, quantity in cart.lines()
        ]
        for snapshot in snapshots:
            self.ledger.adjust_stock(snapshot.item_id, -snapshot.quantity)
            self.ledger.adjust_popularity(snapshot.item_id, snapshot.quantity)

        order = Order.place(
            order_id=order_id,
            customer_ref=customer_ref,
            snapshots=snapshots,
        )
        self.ledger.record_order(order)
        cart.clear()

        logger.info(
            "order.committed",
            order_id=order.order_id,
            customer_ref=customer_ref,
            lines=len(snapshots),
            total=order.total_amount,
        )
        return order

    def cancel(self, order_id):
        """Cancel a pending order and put its quantities back.

        A line whose catalogue item has since been deleted cannot be
        restocked; it is skipped with a warning.
        """
        order = self.ledger.order(order_id)
        order.cancel()

        for snapshot in order.items:
            if snapshot.item_id not in self.ledger:
                logger.warning(
                    "order.restock_skipped",
                    order_id=order_id,
                    item_id=snapshot.item_id,
                    quantity=snapshot.quantity,
                )
                continue
            self.ledger.adjust_stock(snapshot.item_id, snapshot.quantity)
            self.ledger.adjust_popularity(snapshot.item_id, -snapshot.quantity)

        logger.info("order.cancelled", order_id=order_id)
        return order

    def confirm(self, order_id):
        order = self.ledger.order(order_id)
        order.confirm()
        logger.info("order.confirmed", order_id=order_id)
        return order

    def ship(self, order_id):
        order = self.ledger.order(order_id)
        order.ship()
        logger.info("order.shipped", order_id=order_id)
        return order
