"""Domain events for the Product aggregate."""

from protean.fields import Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Product")
class ProductAdded:
    __version__ = 1

    product_id: Identifier(required=True)
    name: String(required=True, max_length=255)
    price: Float(required=True)
    stock: Integer(required=True)


@storefront.event(part_of="Product")
class StockAdjusted:
    """Stock moved by ``delta``; ``reason`` is "order", "rollback", "adjustment"..."""

    __version__ = 1

    product_id: Identifier(required=True)
    previous_stock: Integer(required=True)
    new_stock: Integer(required=True)
    delta: Integer(required=True)
    reason: String(max_length=50)


@storefront.event(part_of="Product")
class ReviewAdded:
    __version__ = 1

    product_id: Identifier(required=True)
    user_id: Identifier(required=True)
    rating: Integer(required=True)
    ratings: Float(required=True)
    num_reviews: Integer(required=True)
