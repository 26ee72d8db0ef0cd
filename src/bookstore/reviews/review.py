"""Review aggregate — append-only customer ratings of catalogue items."""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, Integer, String, Text

from bookstore.domain import bookstore

MIN_RATING = 1
MAX_RATING = 5


def clamp_rating(rating):
    try:
        value = int(rating)
    except (TypeError, ValueError):
        raise ValidationError({"rating": [f"Rating must be a number, got {rating!r}"]}) from None
    return max(MIN_RATING, min(MAX_RATING, value))


@bookstore.aggregate
class Review:
    item_id = String(required=True, max_length=50)
    customer_username = String(required=True, max_length=100)
    rating = Integer(required=True, min_value=MIN_RATING, max_value=MAX_RATING)
    comment = Text()
    created_at = DateTime()

    @classmethod
    def write(cls, item_id, customer_username, rating, comment, created_at=None):
        """Record a review; out-of-range ratings are clamped to 1..5."""
        return cls(
            item_id=item_id,
            customer_username=customer_username,
            rating=clamp_rating(rating),
            comment=comment,
            created_at=created_at or datetime.now(UTC),
        )
