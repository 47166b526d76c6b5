"""Wishlist aggregate: products a customer saved for later.

Like the cart, the wishlist's identity is the customer's id. A product
appears at most once; the newest entry comes first. Saving a product does
not reserve stock or fix its price.
"""

from datetime import UTC, datetime

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer

from storefront.domain import storefront
from storefront.wishlist.events import WishlistItemAdded, WishlistItemRemoved


@storefront.entity(part_of="Wishlist")
class WishlistItem:
    product_id = Identifier(required=True)
    position = Integer(default=0)
    added_at = DateTime()


@storefront.aggregate
class Wishlist:
    customer_id = Identifier(required=True)
    items = HasMany(WishlistItem)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, customer_id):
        now = datetime.now(UTC)
        return cls(id=str(customer_id), customer_id=str(customer_id), created_at=now, updated_at=now)

    def entries(self) -> list[WishlistItem]:
        """Newest first."""
        return sorted(self.items, key=lambda item: item.position or 0, reverse=True)

    def find_entry(self, product_id):
        return next((item for item in self.items if str(item.product_id) == str(product_id)), None)

    def contains(self, product_id) -> bool:
        return self.find_entry(product_id) is not None

    def add_product(self, product) -> WishlistItem:
        if self.contains(product.id):
            raise ValidationError({"product_id": ["Product already in wishlist"]})

        now = datetime.now(UTC)
        item = WishlistItem(
            product_id=str(product.id),
            position=max((i.position or 0 for i in self.items), default=0) + 1,
            added_at=now,
        )
        self.add_items(item)
        self.updated_at = now

        self.raise_(WishlistItemAdded(wishlist_id=str(self.id), product_id=str(product.id)))
        return item

    def remove_product(self, product_id) -> None:
        item = self.find_entry(product_id)
        if item is None:
            raise ObjectNotFoundError({"product_id": ["Product not in wishlist"]})

        self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(WishlistItemRemoved(wishlist_id=str(self.id), product_id=str(product_id)))
