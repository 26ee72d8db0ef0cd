"""Full-collection snapshots of the bookstore's state.

Every save rewrites all six collections (items, orders, users, reviews,
categories, config). Collections are written one after another with no
cross-collection atomicity: a failure part-way leaves earlier collections
written and raises ``PersistenceError``; in-memory state is not rolled back.
"""

import json

from protean.exceptions import ValidationError

from bookstore.exceptions import PersistenceError
from bookstore.ordering.order import FIRST_ORDER_NUMBER
from bookstore.persistence.records import (
    flatten_item,
    flatten_order,
    flatten_review,
    flatten_user,
    reconstruct_item,
    reconstruct_order,
    reconstruct_review,
    reconstruct_user,
)
from bookstore.utils.logging import get_logger

logger = get_logger(__name__)

ITEMS = "items"
ORDERS = "orders"
USERS = "users"
REVIEWS = "reviews"
CATEGORIES = "categories"
CONFIG = "config"

COLLECTIONS = (ITEMS, ORDERS, USERS, REVIEWS, CATEGORIES, CONFIG)

# Errors that mean a stored collection is corrupt rather than absent
_DECODE_ERRORS = (ValueError, KeyError, TypeError, AttributeError, ValidationError)


class LedgerSnapshotter:
    def __init__(self, store):
        self.store = store

    # -------------------------------------------------------------------
    # Save
    # -------------------------------------------------------------------
    def _write(self, collection, data):
        self.store.write(collection, json.dumps(data, indent=2))

    def save(self, state):
        """Rewrite every collection from the given bookstore state."""
        self._write(ITEMS, [flatten_item(item) for item in state.ledger.all_items()])
        self._write(ORDERS, [flatten_order(order) for order in state.ledger.orders()])
        self._write(USERS, [flatten_user(user) for user in state.users.users()])
        self._write(REVIEWS, [flatten_review(review) for review in state.reviews.reviews()])
        self._write(CATEGORIES, state.ledger.categories())
        self._write(CONFIG, {"orderIdCounter": state.ledger.order_counter})
        logger.debug(
            "snapshot.saved",
            items=len(state.ledger),
            orders=len(state.ledger.orders()),
            users=len(state.users),
            reviews=len(state.reviews),
        )

    # -------------------------------------------------------------------
    # Load
    # -------------------------------------------------------------------
    def _read(self, collection, empty):
        payload = self.store.read(collection)
        if payload is None:
            logger.info("snapshot.collection_missing", collection=collection)
            return empty
        try:
            data = json.loads(payload)
        except ValueError as exc:
            raise PersistenceError(collection, f"undecodable payload: {exc}") from exc
        if not isinstance(data, type(empty)):
            raise PersistenceError(collection, f"expected a JSON {type(empty).__name__}")
        return data

    def _rebuild(self, collection, records, rebuild):
        try:
            return [rebuild(record) for record in records]
        except _DECODE_ERRORS as exc:
            raise PersistenceError(collection, f"malformed record: {exc}") from exc

    def has_data(self):
        return any(self.store.read(collection) is not None for collection in COLLECTIONS)

    def load(self, state):
        """Fill an empty bookstore state from the store.

        Absent collections load as empty; corrupt ones raise
        ``PersistenceError``.
        """
        config = self._read(CONFIG, {})
        try:
            counter = int(config.get("orderIdCounter", FIRST_ORDER_NUMBER))
        except _DECODE_ERRORS as exc:
            raise PersistenceError(CONFIG, f"bad orderIdCounter: {exc}") from exc

        items = self._rebuild(ITEMS, self._read(ITEMS, []), reconstruct_item)
        orders = self._rebuild(ORDERS, self._read(ORDERS, []), reconstruct_order)
        users = self._rebuild(USERS, self._read(USERS, []), reconstruct_user)
        reviews = self._rebuild(REVIEWS, self._read(REVIEWS, []), reconstruct_review)
        categories = self._read(CATEGORIES, [])

        state.ledger.restore_order_counter(counter)
        for collection, entries, add in (
            (ITEMS, items, state.ledger.add_item),
            (ORDERS, orders, state.ledger.record_order),
            (USERS, users, state.users.register),
        ):
            try:
                for entry in entries:
                    add(entry)
            except ValidationError as exc:
                raise PersistenceError(collection, f"duplicate record: {exc}") from exc

        highest = state.ledger.highest_order_number()
        if highest is not None and counter <= highest:
            logger.warning("snapshot.order_counter_behind", order_counter=counter, highest_order=highest)
            counter = highest + 1
            state.ledger.restore_order_counter(counter)

        for review in reviews:
            state.reviews.append(review)
        try:
            for category in categories:
                state.ledger.add_category(category)
        except _DECODE_ERRORS as exc:
            raise PersistenceError(CATEGORIES, f"malformed category: {exc}") from exc

        logger.info(
            "snapshot.loaded",
            items=len(items),
            orders=len(orders),
            users=len(users),
            reviews=len(reviews),
            order_counter=counter,
        )
