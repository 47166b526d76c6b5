"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """A cart was turned into an order and stock was taken for it."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    customer_email = String(max_length=255)
    items = Text(required=True)  # JSON: list of {product_id, name, quantity, unit_price}
    item_count = Integer(required=True)
    items_price = Float(required=True)
    tax_price = Float(required=True)
    shipping_price = Float(required=True)
    total_price = Float(required=True)
    placed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderPaid:
    __version__ = 1

    order_id = Identifier(required=True)
    payment_id = String(max_length=255)
    payment_status = String(max_length=50)
    amount = Float(required=True)
    paid_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderStatusChanged:
    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    customer_email = String(max_length=255)
    previous_status = String(required=True, max_length=20)
    new_status = String(required=True, max_length=20)
    note = Text()
    changed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderDelivered:
    __version__ = 1

    order_id = Identifier(required=True)
    delivered_at = DateTime(required=True)
