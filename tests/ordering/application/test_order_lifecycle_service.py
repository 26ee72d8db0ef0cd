"""Application tests for committing carts and moving orders through their states."""

import pytest
from bookstore.catalogue.item import CatalogItem
from bookstore.exceptions import InvalidStateError, NotFoundError
from bookstore.ordering.cart import ShoppingCart
from bookstore.ordering.lifecycle import OrderLifecycle
from bookstore.ordering.order import Order, OrderItemSnapshot, OrderStatus
from protean.exceptions import ValidationError


def _make_item(item_id, stock, base_price=10.0, category="Fiction", discount_fraction=0.0):
    return CatalogItem.create(
        item_id=item_id,
        title=f"Book {item_id}",
        author="Author",
        base_price=base_price,
        category=category,
        stock=stock,
        discount_fraction=discount_fraction,
    )


@pytest.fixture()
def lifecycle(ledger):
    ledger.add_item(_make_item("A", stock=5, base_price=50.0, discount_fraction=0.2))
    ledger.add_item(_make_item("B", stock=2, base_price=10.0, category="Science"))
    return OrderLifecycle(ledger)


def _cart_with(ledger, *lines):
    cart = ShoppingCart.create(customer_ref="alice")
    for item_id, quantity in lines:
        cart.add(ledger.by_id(item_id), quantity)
    return cart


class TestCommit:
    def test_commit_moves_stock_and_popularity(self, lifecycle, ledger):
        cart = _cart_with(ledger, ("A", 3))
        order = lifecycle.commit(cart, "alice")

        assert ledger.stock_of("A") == 2
        assert ledger.by_id("A").popularity == 3
        assert order.status == OrderStatus.PENDING.value
        assert order.order_id == "ORD1000"
        assert order.customer_ref == "alice"

    def test_commit_snapshots_effective_price(self, lifecycle, ledger):
        order = lifecycle.commit(_cart_with(ledger, ("A", 2)), "alice")
        snapshot = order.items[0]
        assert snapshot.unit_price_at_purchase == pytest.approx(40.0)
        assert snapshot.title_at_purchase == "Book A"
        assert snapshot.category_at_purchase == "Fiction"
        assert order.total_amount == pytest.approx(80.0)

    def test_snapshot_survives_price_change(self, lifecycle, ledger):
        order = lifecycle.commit(_cart_with(ledger, ("A", 1)), "alice")
        ledger.promote("A", discount_fraction=0.5)
        assert order.items[0].unit_price_at_purchase == pytest.approx(40.0)

    def test_commit_clears_cart(self, lifecycle, ledger):
        cart = _cart_with(ledger, ("A", 1))
        lifecycle.commit(cart, "alice")
        assert cart.is_empty()

    def test_commit_records_order_in_ledger(self, lifecycle, ledger):
        order = lifecycle.commit(_cart_with(ledger, ("A", 1)), "alice")
        assert ledger.order(order.order_id) is order
        assert ledger.orders_for("alice") == [order]

    def test_order_ids_increase(self, lifecycle, ledger):
        first = lifecycle.commit(_cart_with(ledger, ("A", 1)), "alice")
        second = lifecycle.commit(_cart_with(ledger, ("A", 1)), "alice")
        assert (first.order_id, second.order_id) == ("ORD1000", "ORD1001")

    def test_empty_cart_is_rejected(self, lifecycle):
        with pytest.raises(ValidationError) as exc_info:
            lifecycle.commit(ShoppingCart.create(customer_ref="alice"), "alice")
        assert "cart" in exc_info.value.messages

    def test_one_short_line_rejects_the_whole_cart(self, lifecycle, ledger):
        cart = _cart_with(ledger, ("A", 3), ("B", 2))
        ledger.set_stock("B", 1)

        with pytest.raises(ValidationError):
            lifecycle.commit(cart, "alice")

        assert ledger.stock_of("A") == 5
        assert ledger.by_id("A").popularity == 0
        assert ledger.stock_of("B") == 1
        assert ledger.orders() == []
        assert cart.lines() == [("A", 3), ("B", 2)]
        assert ledger.order_counter == 1000

    def test_merged_quantity_is_checked_at_commit(self, lifecycle, ledger):
        cart = _cart_with(ledger, ("B", 2), ("B", 1))
        with pytest.raises(ValidationError):
            lifecycle.commit(cart, "alice")
        assert ledger.stock_of("B") == 2

    def test_line_for_deleted_item(self, lifecycle, ledger):
        cart = _cart_with(ledger, ("A", 1), ("B", 1))
        ledger.remove_item("B")
        with pytest.raises(NotFoundError):
            lifecycle.commit(cart, "alice")
        assert ledger.stock_of("A") == 5


    def test_commit_skips_an_order_id_already_in_use(self, lifecycle, ledger):
        taken = Order.place(
            order_id="ORD1000",
            customer_ref="bob",
            snapshots=[OrderItemSnapshot.capture(ledger.by_id("B"), 1)],
        )
        ledger.record_order(taken)

        order = lifecycle.commit(_cart_with(ledger, ("A", 3)), "alice")

        assert order.order_id == "ORD1001"
        assert ledger.stock_of("A") == 2
        assert ledger.by_id("A").popularity == 3
        assert ledger.order("ORD1000") is taken


class TestCancel:
    def test_cancel_restores_stock_and_popularity(self, lifecycle, ledger):
        ledger.adjust_popularity("A", 4)
        order = lifecycle.commit(_cart_with(ledger, ("A", 3)), "alice")

        lifecycle.cancel(order.order_id)

        assert order.status == OrderStatus.CANCELLED.value
        assert ledger.stock_of("A") == 5
        assert ledger.by_id("A").popularity == 4

    def test_cancel_floors_popularity_at_zero(self, lifecycle, ledger):
        order = lifecycle.commit(_cart_with(ledger, ("A", 3)), "alice")
        ledger.adjust_popularity("A", -10)

        lifecycle.cancel(order.order_id)

        assert ledger.by_id("A").popularity == 0
        assert ledger.stock_of("A") == 5

    def test_second_cancel_raises(self, lifecycle, ledger):
        order = lifecycle.commit(_cart_with(ledger, ("A", 3)), "alice")
        lifecycle.cancel(order.order_id)

        with pytest.raises(InvalidStateError):
            lifecycle.cancel(order.order_id)

        assert order.status == OrderStatus.CANCELLED.value
        assert ledger.stock_of("A") == 5

    def test_cannot_cancel_confirmed_order(self, lifecycle, ledger):
        order = lifecycle.commit(_cart_with(ledger, ("A", 1)), "alice")
        lifecycle.confirm(order.order_id)
        with pytest.raises(InvalidStateError):
            lifecycle.cancel(order.order_id)
        assert ledger.stock_of("A") == 4

    def test_cancel_skips_deleted_items(self, lifecycle, ledger):
        order = lifecycle.commit(_cart_with(ledger, ("A", 1), ("B", 2)), "alice")
        ledger.remove_item("B")

        lifecycle.cancel(order.order_id)

        assert order.status == OrderStatus.CANCELLED.value
        assert ledger.stock_of("A") == 5
        assert "B" not in ledger

    def test_cancel_unknown_order(self, lifecycle):
        with pytest.raises(NotFoundError):
            lifecycle.cancel("ORD4242")


class TestConfirmAndShip:
    def test_confirm_then_ship(self, lifecycle, ledger):
        order = lifecycle.commit(_cart_with(ledger, ("A", 1)), "alice")
        lifecycle.confirm(order.order_id)
        assert order.status == OrderStatus.CONFIRMED.value
        lifecycle.ship(order.order_id)
        assert order.status == OrderStatus.SHIPPED.value

    def test_confirm_does_not_touch_counters(self, lifecycle, ledger):
        order = lifecycle.commit(_cart_with(ledger, ("A", 2)), "alice")
        lifecycle.confirm(order.order_id)
        assert ledger.stock_of("A") == 3
        assert ledger.by_id("A").popularity == 2

    def test_ship_requires_confirmation(self, lifecycle, ledger):
        order = lifecycle.commit(_cart_with(ledger, ("A", 1)), "alice")
        with pytest.raises(InvalidStateError):
            lifecycle.ship(order.order_id)

    def test_confirm_unknown_order(self, lifecycle):
        with pytest.raises(NotFoundError):
            lifecycle.confirm("ORD4242")
