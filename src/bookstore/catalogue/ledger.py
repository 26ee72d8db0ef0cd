"""Inventory ledger — the authoritative catalogue and order collection.

The ledger owns every CatalogItem and Order in the process. Items only
change through ledger operations; queries hand out detached copies so that
callers can never mutate catalogue state behind the ledger's back.
"""

from protean.exceptions import ValidationError

from bookstore.exceptions import InvalidStateError, NotFoundError
from bookstore.ordering.order import FIRST_ORDER_NUMBER, OrderStatus, format_order_id, parse_order_number
from bookstore.utils.logging import get_logger

logger = get_logger(__name__)


class InventoryLedger:
    def __init__(self, order_counter=FIRST_ORDER_NUMBER):
        self._items = {}  # item_id -> CatalogItem, in catalogue order
        self._categories = set()
        self._orders = {}  # order_id -> Order, in placement order
        self._order_counter = order_counter

    # -------------------------------------------------------------------
    # Catalogue mutations
    # -------------------------------------------------------------------
    def _live(self, item_id):
        try:
            return self._items[item_id]
        except KeyError:
            raise NotFoundError({"_entity": f"Item {item_id} not found"}) from None

    def add_item(self, item):
        if item.item_id in self._items:
            raise ValidationError({"item_id": [f"Item {item.item_id} already exists"]})

        self._items[item.item_id] = item.clone()
        if item.category:
            self._categories.add(item.category)
        logger.info("item.added", item_id=item.item_id, category=item.category)

    def remove_item(self, item_id):
        """Delete an item. Orders keep their own snapshots of it."""
        self._live(item_id)
        del self._items[item_id]
        logger.info("item.removed", item_id=item_id)

    def update_item(self, item):
        """Replace the item with the same id, keeping its catalogue position."""
        self._live(item.item_id)
        self._items[item.item_id] = item.clone()
        if item.category:
            self._categories.add(item.category)
        logger.info("item.updated", item_id=item.item_id)

    def adjust_stock(self, item_id, delta):
        item = self._live(item_id)
        new_stock = item.stock + delta
        if new_stock < 0:
            raise InvalidStateError(f"Stock for {item_id} cannot go below zero (stock {item.stock}, change {delta})")
        item.set_stock(new_stock)
        logger.debug("item.stock_adjusted", item_id=item_id, delta=delta, stock=new_stock)

    def set_stock(self, item_id, quantity):
        item = self._live(item_id)
        item.set_stock(quantity)
        logger.info("item.stock_set", item_id=item_id, stock=quantity)

    def adjust_popularity(self, item_id, delta):
        """Shift popularity by ``delta``, flooring at zero."""
        item = self._live(item_id)
        if delta >= 0:
            item.increment_popularity(delta)
        else:
            item.decrement_popularity(-delta)
        logger.debug("item.popularity_adjusted", item_id=item_id, delta=delta, popularity=item.popularity)

    def promote(self, item_id, featured=None, discount_fraction=None):
        """Change an item's promotion; ``None`` leaves that part as it is."""
        item = self._live(item_id)
        if featured is None:
            featured = item.is_featured()
        if discount_fraction is None:
            discount_fraction = item.discount_fraction
        elif discount_fraction <= 0:
            discount_fraction = 0.0
        item.set_promotion(featured=featured, discount_fraction=discount_fraction)
        logger.info(
            "item.promotion_changed",
            item_id=item_id,
            featured=item.is_featured(),
            discount_fraction=item.discount_fraction,
        )

    # -------------------------------------------------------------------
    # Catalogue queries
    # -------------------------------------------------------------------
    def __contains__(self, item_id):
        return item_id in self._items

    def __len__(self):
        return len(self._items)

    def stock_of(self, item_id):
        return self._live(item_id).stock

    def by_id(self, item_id):
        return self._live(item_id).clone()

    def find(self, item_id):
        item = self._items.get(item_id)
        return item.clone() if item is not None else None

    def all_items(self):
        return [item.clone() for item in self._items.values()]

    def search(self, text):
        """Items whose title or author contains ``text``, ignoring case."""
        needle = text.lower()
        return [
            item.clone()
            for item in self._items.values()
            if needle in (item.title or "").lower() or needle in (item.author or "").lower()
        ]

    def by_category(self, category):
        wanted = category.lower()
        return [item.clone() for item in self._items.values() if (item.category or "").lower() == wanted]

    def sort_by_price(self, ascending=True):
        return sorted(self.all_items(), key=lambda item: item.effective_price(), reverse=not ascending)

    def sort_by_popularity(self):
        return sorted(self.all_items(), key=lambda item: item.popularity, reverse=True)

    def top_n(self, limit):
        return self.sort_by_popularity()[:limit]

    # -------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------
    def categories(self):
        return sorted(self._categories)

    def add_category(self, name):
        if not name or not name.strip():
            raise ValidationError({"category": ["Category name cannot be blank"]})
        self._categories.add(name.strip())

    # -------------------------------------------------------------------
    # Orders
    # -------------------------------------------------------------------
    @property
    def order_counter(self):
        """Numeric suffix the next order id will get."""
        return self._order_counter

    def restore_order_counter(self, counter):
        if counter < FIRST_ORDER_NUMBER:
            raise ValidationError({"order_counter": [f"Order counter cannot be below {FIRST_ORDER_NUMBER}"]})
        self._order_counter = counter

    def highest_order_number(self):
        """Largest numeric suffix among recorded order ids, or None."""
        numbers = [n for n in map(parse_order_number, self._orders) if n is not None]
        return max(numbers, default=None)

    def next_order_id(self):
        """Reserve the next unused order id and advance the counter past it."""
        order_id = format_order_id(self._order_counter)
        while order_id in self._orders:
            logger.warning("order.id_taken", order_id=order_id)
            self._order_counter += 1
            order_id = format_order_id(self._order_counter)
        self._order_counter += 1
        return order_id

    def record_order(self, order):
        if order.order_id in self._orders:
            raise ValidationError({"order_id": [f"Order {order.order_id} already exists"]})
        self._orders[order.order_id] = order

    def order(self, order_id):
        try:
            return self._orders[order_id]
        except KeyError:
            raise NotFoundError({"_entity": f"Order {order_id} not found"}) from None

    def orders(self):
        return list(self._orders.values())

    def pending_orders(self):
        return [order for order in self._orders.values() if OrderStatus(order.status) == OrderStatus.PENDING]

    def orders_for(self, customer_ref):
        return [order for order in self._orders.values() if order.customer_ref == customer_ref]
