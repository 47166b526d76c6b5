"""Order placement: turns a customer's cart into an order.

Flow:
    1. Load the cart; an empty or missing cart is an EmptyCart error.
    2. Re-read every product and compare live stock with the quantity the
       cart needs of it (lines sharing a product are summed).
    3. Price the cart through the shared pricing calculator, using the unit
       prices snapshotted on the cart lines.
    4. Persist the order with frozen copies of the lines.
    5. Take stock for every product.
    6. Clear the cart.

Steps 4-6 run inside the command's unit of work. If any of them fails, the
stock already taken is put back, the order is cancelled with a rollback note
and the failure surfaces as OrderCommitFailed. A stock race caught at step 5
surfaces as InsufficientStock instead, after the same rollback.
"""

import json
from collections import OrderedDict

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.errors import EmptyCart, InsufficientStock, OrderCommitFailed
from storefront.order.order import Order, ShippingAddress

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class PlaceOrder:
    customer_id = Identifier(required=True)
    customer_email = String(max_length=255)
    shipping_address = Text(required=True)  # JSON: address dict
    payment_method = String(required=True, max_length=50)


def _required_quantities(cart: Cart) -> "OrderedDict[str, int]":
    required = OrderedDict()
    for item in cart.lines():
        product_id = str(item.product_id)
        required[product_id] = required.get(product_id, 0) + item.quantity
    return required


def _check_stock(required) -> dict:
    """Load every product the cart needs and check it can be supplied."""
    repo = current_domain.repository_for(Product)
    products = repo.find_many(required.keys())
    for product_id, quantity in required.items():
        product = products.get(product_id)
        if product is None:
            raise InsufficientStock(product_id, requested=quantity, available=0)
        product.ensure_available(quantity)
    return products


def _order_lines(cart: Cart, products: dict) -> list[dict]:
    lines = []
    for item in cart.lines():
        product = products[str(item.product_id)]
        lines.append(
            {
                "product_id": str(item.product_id),
                "name": product.name,
                "image": product.primary_image_url(),
                "quantity": item.quantity,
                "unit_price": item.price,
                "customization": item.customization,
            }
        )
    return lines


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        cart = current_domain.repository_for(Cart).find_for_customer(command.customer_id)
        if cart is None or cart.is_empty():
            raise EmptyCart()

        address_data = (
            json.loads(command.shipping_address)
            if isinstance(command.shipping_address, str)
            else command.shipping_address
        )
        shipping_address = ShippingAddress(**address_data)

        required = _required_quantities(cart)
        products = _check_stock(required)

        order = Order.place(
            customer_id=command.customer_id,
            customer_email=command.customer_email,
            lines=_order_lines(cart, products),
            shipping_address=shipping_address,
            payment_method=command.payment_method,
            pricing=cart.pricing(),
        )

        self._commit(order, cart, products, required)

        logger.info(
            "Order placed",
            order_id=str(order.id),
            customer_id=str(command.customer_id),
            total_price=order.total_price,
            items=len(order.items),
        )
        return str(order.id)

    def _commit(self, order, cart, products, required):
        order_repo = current_domain.repository_for(Order)
        product_repo = current_domain.repository_for(Product)
        cart_repo = current_domain.repository_for(Cart)

        step = "persist_order"
        deducted = []
        try:
            order_repo.add(order)

            step = "deduct_stock"
            for product_id, quantity in required.items():
                product = products[product_id]
                product.deduct_stock(quantity, reason="order")
                product_repo.add(product)
                deducted.append(product_id)

            step = "clear_cart"
            cart.clear(reason="order_placed")
            cart_repo.add(cart)
        except InsufficientStock:
            self._compensate(order, products, required, deducted, step)
            raise
        except Exception as exc:
            compensated = self._compensate(order, products, required, deducted, step)
            logger.error(
                "Order commit failed",
                order_id=str(order.id),
                step=step,
                product_ids=list(required),
                compensated=compensated,
                error=str(exc),
            )
            raise OrderCommitFailed(order.id, step, product_ids=list(required), compensated=compensated) from exc

    def _compensate(self, order, products, required, deducted, step) -> list[str]:
        """Put back stock already taken and cancel the order, if it was saved."""
        product_repo = current_domain.repository_for(Product)
        restored = []
        for product_id in deducted:
            product = products[product_id]
            try:
                product.restock(required[product_id], reason="rollback")
                product_repo.add(product)
                restored.append(product_id)
            except Exception as exc:
                logger.error(
                    "Stock rollback failed",
                    order_id=str(order.id),
                    product_id=product_id,
                    quantity=required[product_id],
                    error=str(exc),
                )

        if step != "persist_order":
            try:
                order.cancel(note=f"Rolled back: placement failed at {step}")
                current_domain.repository_for(Order).add(order)
            except Exception as exc:
                logger.error("Order cancellation after rollback failed", order_id=str(order.id), error=str(exc))

        return restored
