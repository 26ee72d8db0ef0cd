"""Shared BDD fixtures and step definitions for the Ordering domain."""

import pytest
from bookstore.catalogue.item import CatalogItem
from bookstore.ordering.cart import ShoppingCart
from bookstore.ordering.lifecycle import OrderLifecycle
from pytest_bdd import given, parsers, then


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def error():
    """Container for captured validation and transition errors."""
    return {"exc": None}


@pytest.fixture()
def lifecycle(ledger):
    return OrderLifecycle(ledger)


@pytest.fixture()
def cart():
    return ShoppingCart.create(customer_ref="alice")


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('the catalogue holds "{item_id}" with {stock:d} in stock'))
def catalogue_holds(ledger, item_id, stock):
    ledger.add_item(
        CatalogItem.create(
            item_id=item_id,
            title=f"Book {item_id}",
            author="Author",
            base_price=10.0,
            category="Fiction",
            stock=stock,
        )
    )


@given(parsers.cfparse('a cart with {quantity:d} of "{item_id}"'))
def cart_with(ledger, cart, quantity, item_id):
    cart.add(ledger.by_id(item_id), quantity)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the stock of "{item_id}" is {stock:d}'))
def stock_is(ledger, item_id, stock):
    assert ledger.stock_of(item_id) == stock


@then(parsers.cfparse('the popularity of "{item_id}" is {popularity:d}'))
def popularity_is(ledger, item_id, popularity):
    assert ledger.by_id(item_id).popularity == popularity
