"""Storefront-specific exceptions.

Not-found and plain validation failures use Protean's own
``ObjectNotFoundError`` and ``ValidationError``; the classes here add the
machine-readable ``code`` the REST layer and the client carts rely on.
"""

from protean.exceptions import ValidationError


class InsufficientStock(ValidationError):
    """Requested quantity exceeds the live stock of a product."""

    code = "insufficient_stock"

    def __init__(self, product_id, product_name=None, requested=None, available=None):
        self.product_id = str(product_id) if product_id is not None else None
        self.product_name = product_name or "Product"
        self.requested = requested
        self.available = available
        super().__init__({"stock": [f"{self.product_name} is out of stock or has insufficient quantity"]})


class EmptyCart(ValidationError):
    """An order was requested from a cart with no lines."""

    code = "empty_cart"

    def __init__(self):
        super().__init__({"cart": ["No items in cart"]})


class Unauthorized(Exception):
    """The caller is not authenticated, or not allowed to do this."""

    def __init__(self, message="Not authorized"):
        self.message = message
        super().__init__(message)


class OrderCommitFailed(Exception):
    """Order placement failed after it started mutating state.

    Raised once compensation has run. ``step`` names the stage that failed
    (``persist_order``, ``deduct_stock`` or ``clear_cart``) and
    ``compensated`` lists the product ids whose stock was put back.
    """

    def __init__(self, order_id, step, product_ids=None, compensated=None):
        self.order_id = str(order_id)
        self.step = step
        self.product_ids = list(product_ids or [])
        self.compensated = list(compensated or [])
        super().__init__(f"Order {self.order_id} could not be committed (failed at {step})")


class Forbidden(Unauthorized):
    """The caller is authenticated but lacks the required role."""

    def __init__(self, message="Admin access required"):
        super().__init__(message)
