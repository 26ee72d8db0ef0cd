"""Catalogue item aggregate and its Promotion value object.

A promotion is a tagged pair rather than a stack of wrappers: an item is
either featured or not, and carries at most one discount fraction. Price
queries read through the promotion; every other field belongs to the base
item and is never touched by promoting or demoting it.

    effective_price = base_price * (1 - discount_fraction)   (discounted)
    effective_price = base_price                             (otherwise)
"""

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, Float, Integer, String, ValueObject

from bookstore.domain import bookstore

# Sentinel for distinguishing "not provided" from None in partial updates
_UNSET = object()


@bookstore.value_object(part_of="CatalogItem")
class Promotion:
    """Display and pricing promotion for a catalogue item.

    ``discount_fraction`` is a fraction of the base price in ``[0, 1)``;
    zero means the item is not discounted.
    """

    featured = Boolean(default=False)
    discount_fraction = Float(default=0.0)

    @invariant.post
    def discount_must_be_a_fraction_below_one(self):
        fraction = self.discount_fraction or 0.0
        if fraction < 0.0 or fraction >= 1.0:
            raise ValidationError({"discount_fraction": [f"Discount must be in [0, 1), got {fraction}"]})


@bookstore.aggregate
class CatalogItem:
    """A book in the catalogue, with stock and popularity counters."""

    item_id = String(identifier=True, required=True, max_length=50)
    title = String(required=True, max_length=255)
    author = String(max_length=255)
    base_price = Float(required=True, min_value=0.0)
    category = String(max_length=100)
    stock = Integer(default=0, min_value=0)
    edition = String(max_length=100)
    cover_ref = String(max_length=500)
    popularity = Integer(default=0, min_value=0)
    promotion = ValueObject(Promotion)

    @classmethod
    def create(
        cls,
        item_id,
        title,
        author,
        base_price,
        category,
        stock=0,
        edition=None,
        cover_ref=None,
        popularity=0,
        featured=False,
        discount_fraction=0.0,
    ):
        return cls(
            item_id=item_id,
            title=title,
            author=author,
            base_price=base_price,
            category=category,
            stock=stock,
            edition=edition,
            cover_ref=cover_ref,
            popularity=popularity,
            promotion=Promotion(featured=featured, discount_fraction=discount_fraction),
        )

    # -------------------------------------------------------------------
    # Price and display queries
    # -------------------------------------------------------------------
    @property
    def discount_fraction(self):
        if self.promotion is None:
            return 0.0
        return self.promotion.discount_fraction or 0.0

    def is_featured(self):
        return bool(self.promotion and self.promotion.featured)

    def is_discounted(self):
        return self.discount_fraction > 0.0

    def original_price(self):
        return self.base_price

    def effective_price(self):
        if not self.is_discounted():
            return self.base_price
        return self.base_price * (1.0 - self.discount_fraction)

    def discount_percent(self):
        """Discount as a percentage. Round only when rendering."""
        return self.discount_fraction * 100.0

    # -------------------------------------------------------------------
    # Promotion changes
    # -------------------------------------------------------------------
    def feature(self):
        self.promotion = Promotion(featured=True, discount_fraction=self.discount_fraction)

    def unfeature(self):
        self.promotion = Promotion(featured=False, discount_fraction=self.discount_fraction)

    def apply_discount(self, fraction):
        """Set the item's single discount, replacing any previous one."""
        self.promotion = Promotion(featured=self.is_featured(), discount_fraction=fraction)

    def remove_discount(self):
        self.promotion = Promotion(featured=self.is_featured(), discount_fraction=0.0)

    def set_promotion(self, featured, discount_fraction):
        """Replace the whole promotion in one step; an invalid one leaves the item as it was."""
        self.promotion = Promotion(featured=featured, discount_fraction=discount_fraction)

    # -------------------------------------------------------------------
    # Base item mutations
    # -------------------------------------------------------------------
    def set_stock(self, quantity):
        if quantity < 0:
            raise ValidationError({"stock": [f"Stock cannot be negative, got {quantity}"]})
        self.stock = quantity

    def increment_popularity(self, amount=1):
        self.popularity = (self.popularity or 0) + amount

    def decrement_popularity(self, amount=1):
        """Lower popularity, never below zero."""
        self.popularity = max(0, (self.popularity or 0) - amount)

    def update_details(
        self,
        title=_UNSET,
        author=_UNSET,
        base_price=_UNSET,
        category=_UNSET,
        edition=_UNSET,
        cover_ref=_UNSET,
    ):
        if title is not _UNSET:
            self.title = title
        if author is not _UNSET:
            self.author = author
        if base_price is not _UNSET:
            self.base_price = base_price
        if category is not _UNSET:
            self.category = category
        if edition is not _UNSET:
            self.edition = edition
        if cover_ref is not _UNSET:
            self.cover_ref = cover_ref

    def clone(self):
        """Detached copy; changes to it never reach the catalogue."""
        return CatalogItem.create(
            item_id=self.item_id,
            title=self.title,
            author=self.author,
            base_price=self.base_price,
            category=self.category,
            stock=self.stock,
            edition=self.edition,
            cover_ref=self.cover_ref,
            popularity=self.popularity,
            featured=self.is_featured(),
            discount_fraction=self.discount_fraction,
        )
