"""Repository for the Wishlist aggregate."""

from protean.exceptions import ObjectNotFoundError

from storefront.domain import storefront
from storefront.wishlist.wishlist import Wishlist


@storefront.repository(part_of=Wishlist)
class WishlistRepository:
    def find_for_customer(self, customer_id) -> Wishlist | None:
        try:
            return self.get(str(customer_id))
        except ObjectNotFoundError:
            return None

    def for_customer(self, customer_id) -> Wishlist:
        """The customer's wishlist, or a new empty one (not yet persisted)."""
        wishlist = self.find_for_customer(customer_id)
        if wishlist is None:
            wishlist = Wishlist.create(customer_id=customer_id)
        return wishlist
