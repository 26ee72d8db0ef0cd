"""Shopping cart aggregate — transient per-customer selection of catalogue items.

The cart holds item ids and quantities only. Prices are looked up in the
live catalogue whenever a total is asked for, and stock is re-validated
when the cart is committed to an order.
"""

from protean.exceptions import ValidationError
from protean.fields import HasMany, Integer, String

from bookstore.domain import bookstore


@bookstore.entity(part_of="ShoppingCart")
class CartLine:
    item_id = String(required=True, max_length=50)
    quantity = Integer(required=True, min_value=1)


@bookstore.aggregate
class ShoppingCart:
    customer_ref = String(required=True, max_length=100)
    items = HasMany(CartLine)

    @classmethod
    def create(cls, customer_ref):
        return cls(customer_ref=customer_ref)

    def _line(self, item_id):
        return next((line for line in self.items if line.item_id == item_id), None)

    def add(self, item, quantity):
        """Add ``quantity`` of a catalogue item, merging with an existing line.

        Only the requested quantity is checked against the item's current
        stock; the merged total is checked at commit time.
        """
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        if quantity > item.stock:
            raise ValidationError(
                {"quantity": [f"Not enough stock for {item.item_id}: requested {quantity}, available {item.stock}"]}
            )

        existing = self._line(item.item_id)
        if existing:
            existing.quantity += quantity
        else:
            self.add_items(CartLine(item_id=item.item_id, quantity=quantity))

    def remove(self, item_id):
        line = self._line(item_id)
        if line is not None:
            self.remove_items(line)

    def set_quantity(self, item_id, quantity):
        """Overwrite a line's quantity; zero or less removes the line."""
        line = self._line(item_id)
        if line is None:
            return
        if quantity <= 0:
            self.remove_items(line)
        else:
            line.quantity = quantity

    def clear(self):
        for line in list(self.items):
            self.remove_items(line)

    def is_empty(self):
        return not self.items

    def lines(self):
        """(item_id, quantity) pairs in the order they were first added."""
        return [(line.item_id, line.quantity) for line in self.items]

    def quantity_of(self, item_id):
        line = self._line(item_id)
        return line.quantity if line else 0

    def item_count(self):
        return sum(line.quantity for line in self.items)

    def total(self, catalogue):
        """Sum of quantity times the current effective price of each line.

        Lines whose item is no longer in the catalogue contribute nothing.
        """
        total = 0.0
        for line in self.items:
            item = catalogue.find(line.item_id)
            if item is not None:
                total += item.effective_price() * line.quantity
        return total
