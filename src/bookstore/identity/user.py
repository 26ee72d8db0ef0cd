"""Admin and Customer aggregates.

Both are keyed by username. Only customers carry contact details, an order
history and the reviews they wrote; those are stored as JSON arrays of
references, never as owned objects.
"""

import json
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import String, Text

from bookstore.domain import bookstore


class UserType(Enum):
    ADMIN = "ADMIN"
    CUSTOMER = "CUSTOMER"


@bookstore.aggregate
class Admin:
    username = String(identifier=True, required=True, max_length=100)
    password = String(required=True, max_length=255)

    @property
    def user_type(self):
        return UserType.ADMIN

    def check_password(self, password):
        return self.password == password


@bookstore.aggregate
class Customer:
    """A shopper who places orders and writes reviews."""

    username = String(identifier=True, required=True, max_length=100)
    password = String(required=True, max_length=255)
    address = String(max_length=500)
    phone = String(max_length=50)
    order_history = Text()  # JSON array of order ids
    review_refs = Text()  # JSON array of review ids

    @property
    def user_type(self):
        return UserType.CUSTOMER

    @classmethod
    def register(cls, username, password, address=None, phone=None, order_refs=None, review_refs=None):
        if not username or not username.strip():
            raise ValidationError({"username": ["Username is required"]})
        return cls(
            username=username,
            password=password,
            address=address,
            phone=phone,
            order_history=json.dumps(list(order_refs or [])),
            review_refs=json.dumps(list(review_refs or [])),
        )

    @property
    def order_refs(self):
        return json.loads(self.order_history) if self.order_history else []

    @property
    def reviews_written(self):
        return json.loads(self.review_refs) if self.review_refs else []

    def check_password(self, password):
        return self.password == password

    def update_contact(self, address, phone):
        self.address = address
        self.phone = phone

    def record_order(self, order_id):
        refs = self.order_refs
        refs.append(order_id)
        self.order_history = json.dumps(refs)

    def record_review(self, review_ref):
        refs = self.reviews_written
        refs.append(review_ref)
        self.review_refs = json.dumps(refs)
