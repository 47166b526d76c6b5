"""Domain events for the Wishlist aggregate."""

from protean.fields import Identifier

from storefront.domain import storefront


@storefront.event(part_of="Wishlist")
class WishlistItemAdded:
    __version__ = 1

    wishlist_id = Identifier(required=True)
    product_id = Identifier(required=True)


@storefront.event(part_of="Wishlist")
class WishlistItemRemoved:
    __version__ = 1

    wishlist_id = Identifier(required=True)
    product_id = Identifier(required=True)
