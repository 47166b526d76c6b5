"""Catalog management: commands and handler.

Covers the admin side (adding products, correcting stock) and customer
reviews. Stock decrements for orders go through ``Product.deduct_stock``
from the checkout handler, not through these commands.
"""

import json

from protean import handle
from protean.fields import Boolean, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.domain import storefront


@storefront.command(part_of="Product")
class AddProduct:
    name: String(required=True, max_length=255)
    description: Text()
    category: String(max_length=100)
    price: Float(required=True, min_value=0.01)
    discount_price: Float(min_value=0.0)
    stock: Integer(min_value=0, default=0)
    featured: Boolean(default=False)
    images: Text()  # JSON: list of {url, alt_text}
    customization_options: Text()  # JSON: list of {name, options, required}


@storefront.command(part_of="Product")
class AdjustStock:
    """Move a product's stock by ``delta`` (negative to take units out)."""

    product_id: Identifier(required=True)
    delta: Integer(required=True)
    reason: String(max_length=50, default="adjustment")


@storefront.command(part_of="Product")
class AddReview:
    product_id: Identifier(required=True)
    user_id: Identifier(required=True)
    name: String(max_length=100)
    rating: Integer(required=True, min_value=1, max_value=5)
    comment: Text()


def _json_list(value):
    if not value:
        return []
    return json.loads(value) if isinstance(value, str) else value


@storefront.command_handler(part_of=Product)
class ManageProductHandler:
    @handle(AddProduct)
    def add_product(self, command):
        product = Product.create(
            name=command.name,
            description=command.description,
            category=command.category,
            price=command.price,
            discount_price=command.discount_price,
            stock=command.stock,
            featured=command.featured,
            images=_json_list(command.images),
            customization_options=_json_list(command.customization_options),
        )
        current_domain.repository_for(Product).add(product)
        return str(product.id)

    @handle(AdjustStock)
    def adjust_stock(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.adjust_stock(command.delta, reason=command.reason)
        repo.add(product)
        return product.stock

    @handle(AddReview)
    def add_review(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.add_review(
            user_id=command.user_id,
            rating=command.rating,
            name=command.name,
            comment=command.comment,
        )
        repo.add(product)
