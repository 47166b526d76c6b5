"""Product aggregate root with image, review and customization entities.

Stock is the only part of a product the checkout flow mutates. It is changed
through ``deduct_stock`` and ``restock``, which refuse to take it below zero,
and through ``adjust_stock`` for admin corrections.
"""

import json
from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String, Text

from storefront.cart import customization as customizations
from storefront.catalogue.events import ProductAdded, ReviewAdded, StockAdjusted
from storefront.domain import storefront
from storefront.errors import InsufficientStock


@storefront.entity(part_of="Product")
class ProductImage:
    url: String(required=True, max_length=500)
    alt_text: String(max_length=255)
    display_order: Integer(default=0)


@storefront.entity(part_of="Product")
class Review:
    """A customer's rating of a product; at most one per customer."""

    user_id: Identifier(required=True)
    name: String(max_length=100)
    rating: Integer(required=True, min_value=1, max_value=5)
    comment: Text()
    created_at: DateTime()


@storefront.entity(part_of="Product")
class CustomizationOption:
    """A named choice a shopper makes when adding the product, e.g. size."""

    name: String(required=True, max_length=100)
    options: Text()  # JSON array of allowed values
    required: Boolean(default=False)

    def allowed_values(self) -> list[str]:
        if not self.options:
            return []
        return [str(value) for value in json.loads(self.options)]


@storefront.aggregate
class Product:
    name: String(required=True, max_length=255)
    description: Text()
    category: String(max_length=100)
    price: Float(required=True, min_value=0.01)
    discount_price: Float(min_value=0.0)
    stock: Integer(min_value=0, default=0)
    featured: Boolean(default=False)
    images: HasMany(ProductImage)
    reviews: HasMany(Review)
    customization_options: HasMany(CustomizationOption)
    ratings: Float(default=0.0)
    num_reviews: Integer(default=0)
    created_at: DateTime(default=lambda: datetime.now(UTC))
    updated_at: DateTime(default=lambda: datetime.now(UTC))

    @invariant.post
    def discount_cannot_exceed_price(self):
        if self.discount_price is not None and self.price is not None and self.discount_price > self.price:
            raise ValidationError({"discount_price": ["Discount price cannot be greater than the regular price"]})

    @classmethod
    def create(
        cls,
        name,
        price,
        stock=0,
        description=None,
        category=None,
        discount_price=None,
        featured=False,
        images=None,
        customization_options=None,
    ):
        product = cls(
            name=name,
            price=price,
            stock=stock,
            description=description,
            category=category,
            discount_price=discount_price,
            featured=featured,
        )
        for position, image in enumerate(images or []):
            product.add_images(
                ProductImage(
                    url=image["url"],
                    alt_text=image.get("alt_text") or image.get("alt"),
                    display_order=image.get("display_order", position),
                )
            )
        for option in customization_options or []:
            product.add_customization_options(
                CustomizationOption(
                    name=option["name"],
                    options=json.dumps([str(value) for value in option.get("options", [])]),
                    required=bool(option.get("required", False)),
                )
            )

        product.raise_(
            ProductAdded(
                product_id=str(product.id),
                name=product.name,
                price=product.price,
                stock=product.stock,
            )
        )
        return product

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    def unit_price(self) -> float:
        """The price a shopper pays right now: the discount if one is set."""
        return self.discount_price if self.discount_price is not None else self.price

    def primary_image_url(self) -> str:
        if not self.images:
            return ""
        return sorted(self.images, key=lambda image: image.display_order or 0)[0].url

    def customization_spec(self) -> list[dict]:
        return [
            {"name": option.name, "options": option.allowed_values(), "required": option.required}
            for option in self.customization_options
        ]

    def validate_customization(self, selection: dict) -> None:
        """Check a shopper's choices against this product's options."""
        customizations.check_selection(self.customization_spec(), selection, self.name)

    # -------------------------------------------------------------------
    # Stock
    # -------------------------------------------------------------------
    def ensure_available(self, quantity: int) -> None:
        if self.stock < quantity:
            raise InsufficientStock(self.id, self.name, requested=quantity, available=self.stock)

    def deduct_stock(self, quantity: int, reason: str = "order") -> None:
        """Take ``quantity`` units out of stock, only if that many are left."""
        self.ensure_available(quantity)
        self._change_stock(-quantity, reason)

    def restock(self, quantity: int, reason: str = "restock") -> None:
        if quantity < 1:
            raise ValidationError({"quantity": ["Restock quantity must be positive"]})
        self._change_stock(quantity, reason)

    def adjust_stock(self, delta: int, reason: str = "adjustment") -> None:
        if self.stock + delta < 0:
            raise ValidationError({"stock": [f"Stock of {self.name} cannot go below zero"]})
        self._change_stock(delta, reason)

    def _change_stock(self, delta: int, reason: str) -> None:
        previous = self.stock
        self.stock = previous + delta
        self.updated_at = datetime.now(UTC)
        self.raise_(
            StockAdjusted(
                product_id=str(self.id),
                previous_stock=previous,
                new_stock=self.stock,
                delta=delta,
                reason=reason,
            )
        )

    # -------------------------------------------------------------------
    # Reviews
    # -------------------------------------------------------------------
    def add_review(self, user_id, rating, name=None, comment=None) -> None:
        if any(str(r.user_id) == str(user_id) for r in self.reviews):
            raise ValidationError({"review": ["Product already reviewed"]})

        self.add_reviews(
            Review(
                user_id=user_id,
                name=name,
                rating=rating,
                comment=comment,
                created_at=datetime.now(UTC),
            )
        )
        self._recompute_ratings()

        self.raise_(
            ReviewAdded(
                product_id=str(self.id),
                user_id=str(user_id),
                rating=rating,
                ratings=self.ratings,
                num_reviews=self.num_reviews,
            )
        )

    def _recompute_ratings(self) -> None:
        self.num_reviews = len(self.reviews)
        if self.num_reviews == 0:
            self.ratings = 0.0
        else:
            self.ratings = round(sum(r.rating for r in self.reviews) / self.num_reviews, 2)
