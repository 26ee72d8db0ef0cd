"""Shared BDD fixtures and step definitions for the Catalogue domain."""

import pytest
from bookstore.catalogue.item import CatalogItem
from pytest_bdd import given, parsers, then


@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


@given(
    parsers.cfparse('an item "{item_id}" titled "{title}" priced at {price:f} with {stock:d} in stock'),
    target_fixture="item",
)
def catalogue_item(item_id, title, price, stock):
    return CatalogItem.create(
        item_id=item_id,
        title=title,
        author="Frank Herbert",
        base_price=price,
        category="Fiction",
        stock=stock,
    )


@then(parsers.cfparse("the effective price is {price:f}"))
def effective_price_is(item, price):
    assert item.effective_price() == pytest.approx(price)
