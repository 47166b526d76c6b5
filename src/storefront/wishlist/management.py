"""Wishlist management: commands and handler."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.wishlist.wishlist import Wishlist


@storefront.command(part_of="Wishlist")
class AddToWishlist:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)


@storefront.command(part_of="Wishlist")
class RemoveFromWishlist:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)


@storefront.command_handler(part_of=Wishlist)
class ManageWishlistHandler:
    @handle(AddToWishlist)
    def add_to_wishlist(self, command):
        product = current_domain.repository_for(Product).get(command.product_id)

        repo = current_domain.repository_for(Wishlist)
        wishlist = repo.for_customer(command.customer_id)
        wishlist.add_product(product)
        repo.add(wishlist)

    @handle(RemoveFromWishlist)
    def remove_from_wishlist(self, command):
        repo = current_domain.repository_for(Wishlist)
        wishlist = repo.find_for_customer(command.customer_id)
        if wishlist is None:
            raise ObjectNotFoundError({"wishlist": ["Wishlist not found"]})
        wishlist.remove_product(command.product_id)
        repo.add(wishlist)
