"""Repository for the Cart aggregate."""

from protean.exceptions import ObjectNotFoundError

from storefront.cart.cart import Cart
from storefront.domain import storefront


@storefront.repository(part_of=Cart)
class CartRepository:
    def find_for_customer(self, customer_id) -> Cart | None:
        try:
            return self.get(str(customer_id))
        except ObjectNotFoundError:
            return None

    def for_customer(self, customer_id) -> Cart:
        """The customer's cart, or a new empty one (not yet persisted)."""
        cart = self.find_for_customer(customer_id)
        if cart is None:
            cart = Cart.create(customer_id=customer_id)
        return cart
