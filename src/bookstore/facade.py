"""Bookstore facade — the surface offered to UIs and command-line tools.

Every mutating call saves all collections before returning. A failed save
raises ``PersistenceError``; the in-memory change it followed stays applied.
Carts are kept per username for the life of the facade and never saved.
"""

import functools

from bookstore.catalogue.item import CatalogItem
from bookstore.context import open_state
from bookstore.exceptions import NotFoundError, PersistenceError
from bookstore.identity.user import Customer
from bookstore.ordering import statistics
from bookstore.ordering.cart import ShoppingCart
from bookstore.ordering.lifecycle import OrderLifecycle
from bookstore.reviews.review import Review
from bookstore.utils.logging import get_logger

logger = get_logger(__name__)


def persisted(method):
    """Save every collection after the wrapped mutation succeeds."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        result = method(self, *args, **kwargs)
        self.save()
        return result

    return wrapper


class BookstoreFacade:
    def __init__(self, state, snapshotter):
        self.state = state
        self.snapshotter = snapshotter
        self.lifecycle = OrderLifecycle(state.ledger)
        self._carts = {}

    @classmethod
    def open(cls, store=None, settings=None):
        state, snapshotter = open_state(store=store, settings=settings)
        return cls(state, snapshotter)

    @property
    def ledger(self):
        return self.state.ledger

    def save(self):
        try:
            self.snapshotter.save(self.state)
        except PersistenceError as exc:
            logger.error("snapshot.save_failed", collection=exc.collection, error=str(exc))
            raise

    # -------------------------------------------------------------------
    # Customers
    # -------------------------------------------------------------------
    @persisted
    def register_customer(self, username, password, address=None, phone=None):
        customer = Customer.register(username, password, address=address, phone=phone)
        self.state.users.register(customer)
        return customer

    @persisted
    def update_customer_info(self, username, address, phone):
        customer = self.state.users.customer(username)
        customer.update_contact(address, phone)
        return customer

    def authenticate(self, username, password):
        return self.state.users.authenticate(username, password)

    def customers(self):
        return self.state.users.customers()

    # -------------------------------------------------------------------
    # Browsing
    # -------------------------------------------------------------------
    def browse_items(self):
        return self.ledger.all_items()

    def search_items(self, text):
        return self.ledger.search(text)

    def filter_by_category(self, category):
        return self.ledger.by_category(category)

    def sort_by_price(self, ascending=True):
        return self.ledger.sort_by_price(ascending)

    def sort_by_popularity(self):
        return self.ledger.sort_by_popularity()

    def item_details(self, item_id):
        return self.ledger.by_id(item_id)

    # -------------------------------------------------------------------
    # Cart
    # -------------------------------------------------------------------
    def cart_for(self, username):
        self.state.users.customer(username)
        if username not in self._carts:
            self._carts[username] = ShoppingCart.create(customer_ref=username)
        return self._carts[username]

    def add_to_cart(self, username, item_id, quantity):
        cart = self.cart_for(username)
        cart.add(self.ledger.by_id(item_id), quantity)
        return cart

    def remove_from_cart(self, username, item_id):
        self.cart_for(username).remove(item_id)

    def update_cart_quantity(self, username, item_id, quantity):
        self.cart_for(username).set_quantity(item_id, quantity)

    def clear_cart(self, username):
        self.cart_for(username).clear()

    def cart_total(self, username):
        return self.cart_for(username).total(self.ledger)

    def cart_lines(self, username):
        return self.cart_for(username).lines()

    # -------------------------------------------------------------------
    # Orders (customer)
    # -------------------------------------------------------------------
    @persisted
    def place_order(self, username):
        customer = self.state.users.customer(username)
        order = self.lifecycle.commit(self.cart_for(username), customer_ref=username)
        customer.record_order(order.order_id)
        return order

    @persisted
    def cancel_order(self, username, order_id):
        order = self.ledger.order(order_id)
        if order.customer_ref != username:
            raise NotFoundError({"_entity": f"Order {order_id} not found for {username}"})
        return self.lifecycle.cancel(order_id)

    def order_history(self, username):
        self.state.users.customer(username)
        return self.ledger.orders_for(username)

    def order_details(self, order_id):
        return self.ledger.order(order_id)

    # -------------------------------------------------------------------
    # Reviews
    # -------------------------------------------------------------------
    @persisted
    def add_review(self, username, item_id, rating, comment):
        customer = self.state.users.customer(username)
        self.ledger.by_id(item_id)
        review = Review.write(item_id, username, rating, comment)
        self.state.reviews.append(review)
        customer.record_review(str(review.id))
        return review

    def item_reviews(self, item_id):
        return self.state.reviews.reviews_for(item_id)

    # -------------------------------------------------------------------
    # Catalogue administration
    # -------------------------------------------------------------------
    @persisted
    def add_item(
        self,
        item_id,
        title,
        author,
        price,
        category,
        stock,
        edition=None,
        cover_ref=None,
        featured=False,
        discount_fraction=0.0,
    ):
        item = CatalogItem.create(
            item_id=item_id,
            title=title,
            author=author,
            base_price=price,
            category=category,
            stock=stock,
            edition=edition,
            cover_ref=cover_ref,
            featured=featured,
            discount_fraction=discount_fraction,
        )
        self.ledger.add_item(item)
        return self.ledger.by_id(item_id)

    @persisted
    def update_item(self, item):
        self.ledger.update_item(item)
        return self.ledger.by_id(item.item_id)

    @persisted
    def delete_item(self, item_id):
        self.ledger.remove_item(item_id)

    @persisted
    def update_stock(self, item_id, stock):
        self.ledger.set_stock(item_id, stock)

    @persisted
    def promote_item(self, item_id, featured=None, discount_fraction=None):
        self.ledger.promote(item_id, featured=featured, discount_fraction=discount_fraction)
        return self.ledger.by_id(item_id)

    def categories(self):
        return self.ledger.categories()

    @persisted
    def add_category(self, name):
        self.ledger.add_category(name)

    # -------------------------------------------------------------------
    # Order administration
    # -------------------------------------------------------------------
    def all_orders(self):
        return self.ledger.orders()

    def pending_orders(self):
        return self.ledger.pending_orders()

    @persisted
    def confirm_order(self, order_id):
        return self.lifecycle.confirm(order_id)

    @persisted
    def ship_order(self, order_id):
        return self.lifecycle.ship(order_id)

    @persisted
    def cancel_order_as_admin(self, order_id):
        return self.lifecycle.cancel(order_id)

    # -------------------------------------------------------------------
    # Statistics
    # -------------------------------------------------------------------
    def total_revenue(self):
        return statistics.total_revenue(self.ledger)

    def category_sales(self):
        return statistics.category_sales(self.ledger)

    def top_selling_items(self, limit=5):
        return statistics.top_sellers(self.ledger, limit)

    def total_orders_count(self):
        return statistics.order_count(self.ledger)
