"""Flatten domain objects into flat, self-describing records and rebuild them.

Item records carry the promotion as two plain fields, ``featuredFlag`` and
``discountFraction``, read from the item's own queries. Rebuilding applies
the discount first and the featured flag second.

User records carry a ``userType`` discriminator. Records written before the
discriminator existed are classified by ``infer_user_type``; that heuristic
is the only place that knows about the legacy layout.
"""

from datetime import datetime

from protean.exceptions import ValidationError

from bookstore.catalogue.item import CatalogItem
from bookstore.identity.user import Admin, Customer, UserType
from bookstore.ordering.order import Order, OrderItemSnapshot, OrderStatus
from bookstore.reviews.review import Review, clamp_rating
from bookstore.utils.logging import get_logger

logger = get_logger(__name__)

LEGACY_ADMIN_USERNAME = "admin"


def _timestamp(value):
    return value.isoformat() if value is not None else None


def _parse_timestamp(value):
    return datetime.fromisoformat(value) if value else None


# ---------------------------------------------------------------------------
# Items
# ---------------------------------------------------------------------------
def flatten_item(item):
    return {
        "id": item.item_id,
        "title": item.title,
        "author": item.author or "",
        "basePrice": item.original_price(),
        "category": item.category or "",
        "stock": item.stock,
        "edition": item.edition or "",
        "coverRef": item.cover_ref or "",
        "popularity": item.popularity,
        "featuredFlag": item.is_featured(),
        "discountFraction": item.discount_fraction if item.is_discounted() else 0.0,
    }


def reconstruct_item(record):
    item = CatalogItem.create(
        item_id=record["id"],
        title=record["title"],
        author=record.get("author", ""),
        base_price=float(record["basePrice"]),
        category=record.get("category", ""),
        stock=int(record.get("stock", 0)),
        edition=record.get("edition", ""),
        cover_ref=record.get("coverRef", ""),
        popularity=int(record.get("popularity", 0)),
    )

    featured = record.get("featuredFlag", False)
    if not isinstance(featured, bool):
        raise ValidationError({"featuredFlag": [f"Expected true or false, got {featured!r}"]})
    discount_fraction = float(record.get("discountFraction", 0.0))
    if not 0.0 <= discount_fraction < 1.0:
        raise ValidationError({"discountFraction": [f"Discount must be in [0, 1), got {discount_fraction}"]})

    if discount_fraction > 0:
        item.apply_discount(discount_fraction)
    if featured:
        item.feature()
    return item


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
def flatten_order(order):
    return {
        "orderId": order.order_id,
        "customerRef": order.customer_ref,
        "items": [
            {
                "itemId": snapshot.item_id,
                "titleAtPurchase": snapshot.title_at_purchase,
                "authorAtPurchase": snapshot.author_at_purchase or "",
                "categoryAtPurchase": snapshot.category_at_purchase or "",
                "quantity": snapshot.quantity,
                "unitPriceAtPurchase": snapshot.unit_price_at_purchase,
            }
            for snapshot in order.items
        ],
        "totalAmount": order.total_amount,
        "status": order.status,
        "createdAt": _timestamp(order.created_at),
    }


def reconstruct_order(record):
    snapshots = [
        OrderItemSnapshot(
            item_id=line["itemId"],
            title_at_purchase=line["titleAtPurchase"],
            author_at_purchase=line.get("authorAtPurchase", ""),
            category_at_purchase=line.get("categoryAtPurchase", ""),
            quantity=int(line["quantity"]),
            unit_price_at_purchase=float(line["unitPriceAtPurchase"]),
        )
        for line in record["items"]
    ]

    order = Order(
        order_id=record["orderId"],
        customer_ref=record["customerRef"],
        status=OrderStatus(record["status"]).value,
        created_at=_parse_timestamp(record.get("createdAt")),
    )
    order.items = snapshots
    return order


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------
def flatten_user(user):
    record = {
        "username": user.username,
        "password": user.password,
        "userType": user.user_type.value,
    }
    if isinstance(user, Customer):
        record.update(
            {
                "address": user.address,
                "phone": user.phone,
                "orderHistoryRefs": user.order_refs,
                "reviewRefs": user.reviews_written,
            }
        )
    return record


def _has_customer_data(record):
    return any(record.get(key) for key in ("address", "phone", "orderHistoryRefs", "reviewRefs"))


def infer_user_type(record):
    """Classify a legacy user record that has no ``userType``.

    ``admin`` is an admin; so is any record without customer-only data;
    everything else is a customer. The guess is logged for the operator.
    """
    username = record.get("username")
    if username == LEGACY_ADMIN_USERNAME:
        user_type, reason = UserType.ADMIN, "default admin username"
    elif not _has_customer_data(record):
        user_type, reason = UserType.ADMIN, "no customer fields"
    else:
        user_type, reason = UserType.CUSTOMER, "customer fields present"

    logger.warning("user.type_inferred", username=username, user_type=user_type.value, reason=reason)
    return user_type


def reconstruct_user(record):
    raw_type = record.get("userType")
    user_type = UserType(raw_type.upper()) if raw_type else infer_user_type(record)

    if user_type == UserType.ADMIN:
        return Admin(username=record["username"], password=record["password"])

    return Customer.register(
        username=record["username"],
        password=record["password"],
        address=record.get("address"),
        phone=record.get("phone"),
        order_refs=record.get("orderHistoryRefs") or [],
        review_refs=record.get("reviewRefs") or [],
    )


# ---------------------------------------------------------------------------
# Reviews
# ---------------------------------------------------------------------------
def flatten_review(review):
    return {
        "reviewId": str(review.id),
        "itemId": review.item_id,
        "customerUsername": review.customer_username,
        "rating": review.rating,
        "comment": review.comment or "",
        "createdAt": _timestamp(review.created_at),
    }


def reconstruct_review(record):
    fields = {
        "item_id": record["itemId"],
        "customer_username": record["customerUsername"],
        "rating": clamp_rating(record["rating"]),
        "comment": record.get("comment", ""),
        "created_at": _parse_timestamp(record.get("createdAt")),
    }
    if record.get("reviewId"):
        fields["id"] = record["reviewId"]
    return Review(**fields)
