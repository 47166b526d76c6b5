"""Aggregate -> JSON payloads for the storefront API.

The cart payload embeds the pricing breakdown so a client never has to
derive subtotal, tax or shipping on its own.
"""

from protean.utils.globals import current_domain

from storefront.cart import customization as customizations
from storefront.cart.cart import Cart
from storefront.catalogue.product import Product
from storefront.order.order import Order
from storefront.wishlist.wishlist import Wishlist


def _iso(value):
    return value.isoformat() if value is not None else None


def product_summary(product: Product) -> dict:
    return {
        "id": str(product.id),
        "name": product.name,
        "price": product.price,
        "discount_price": product.discount_price,
        "stock": product.stock,
        "image": product.primary_image_url(),
        "customization_options": product.customization_spec(),
    }


def serialize_product(product: Product, detail: bool = False) -> dict:
    payload = {
        **product_summary(product),
        "description": product.description,
        "category": product.category,
        "featured": product.featured,
        "ratings": product.ratings,
        "num_reviews": product.num_reviews,
        "images": [
            {"url": image.url, "alt_text": image.alt_text}
            for image in sorted(product.images, key=lambda image: image.display_order or 0)
        ],
        "created_at": _iso(product.created_at),
    }
    if detail:
        payload["reviews"] = [
            {
                "user_id": str(review.user_id),
                "name": review.name,
                "rating": review.rating,
                "comment": review.comment,
                "created_at": _iso(review.created_at),
            }
            for review in sorted(product.reviews, key=lambda review: _iso(review.created_at) or "")
        ]
    return payload


def serialize_cart(cart: Cart) -> dict:
    products = current_domain.repository_for(Product).find_many(item.product_id for item in cart.items)
    items = []
    for item in cart.lines():
        product = products.get(str(item.product_id))
        items.append(
            {
                "id": str(item.id),
                "product_id": str(item.product_id),
                "product": product_summary(product) if product is not None else None,
                "quantity": item.quantity,
                "customization": item.options,
                "price": item.price,
            }
        )
    return {
        "id": str(cart.id),
        "customer_id": str(cart.customer_id),
        "items": items,
        "total_price": cart.total_price,
        "pricing": cart.pricing().as_dict(),
        "updated_at": _iso(cart.updated_at),
    }


def serialize_wishlist(wishlist: Wishlist | None) -> dict:
    if wishlist is None:
        return {"products": []}
    entries = wishlist.entries()
    products = current_domain.repository_for(Product).find_many(item.product_id for item in entries)
    listed = []
    for item in entries:
        product = products.get(str(item.product_id))
        listed.append(
            {
                "product_id": str(item.product_id),
                "product": (
                    {
                        "id": str(product.id),
                        "name": product.name,
                        "price": product.price,
                        "image": product.primary_image_url(),
                        "description": product.description,
                    }
                    if product is not None
                    else None
                ),
                "added_at": _iso(item.added_at),
            }
        )
    return {"id": str(wishlist.id), "customer_id": str(wishlist.customer_id), "products": listed}


def serialize_order(order: Order) -> dict:
    address = order.shipping_address
    payment = order.payment_result
    return {
        "id": str(order.id),
        "customer_id": str(order.customer_id),
        "items": [
            {
                "product_id": str(item.product_id),
                "name": item.name,
                "image": item.image,
                "quantity": item.quantity,
                "unit_price": item.unit_price,
                "customization": customizations.decode(item.customization),
            }
            for item in order.lines()
        ],
        "shipping_address": {
            "full_name": address.full_name,
            "address": address.address,
            "city": address.city,
            "state": address.state,
            "postal_code": address.postal_code,
            "country": address.country,
            "phone": address.phone,
        },
        "payment_method": order.payment_method,
        "payment_result": (
            {
                "payment_id": payment.payment_id,
                "status": payment.status,
                "update_time": payment.update_time,
                "email_address": payment.email_address,
            }
            if payment is not None
            else None
        ),
        "items_price": order.items_price,
        "tax_price": order.tax_price,
        "shipping_price": order.shipping_price,
        "total_price": order.total_price,
        "is_paid": order.is_paid,
        "paid_at": _iso(order.paid_at),
        "is_delivered": order.is_delivered,
        "delivered_at": _iso(order.delivered_at),
        "status": order.status,
        "status_history": [
            {"status": change.status, "note": change.note, "changed_at": _iso(change.changed_at)}
            for change in order.history()
        ],
        "placed_at": _iso(order.placed_at),
    }
