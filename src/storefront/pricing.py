"""Pricing calculator shared by the cart display, the client carts and orders.

There is exactly one place where subtotal, tax and shipping are derived, so
what a shopper sees at checkout is what the persisted order charges.

    subtotal = sum(unit_price * quantity)         rounded to 2 dp
    tax      = subtotal * 0.18                    rounded to 2 dp, half up
    shipping = 0 if subtotal > 1000 else 100
    total    = subtotal + tax + shipping
"""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

TAX_RATE = Decimal("0.18")
FREE_SHIPPING_THRESHOLD = Decimal("1000")
FLAT_SHIPPING = Decimal("100")

_CENTS = Decimal("0.01")


def to_money(value) -> Decimal:
    """Convert a float, int, str or Decimal to a 2 dp Decimal.

    Floats go through ``str`` first so 0.1 stays 0.1 instead of its binary
    expansion.
    """
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(_CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class PriceBreakdown:
    subtotal: Decimal
    tax: Decimal
    shipping: Decimal
    total: Decimal

    def as_dict(self) -> dict:
        return {
            "subtotal": float(self.subtotal),
            "tax": float(self.tax),
            "shipping": float(self.shipping),
            "total": float(self.total),
        }


def calculate_subtotal(lines: Iterable[tuple]) -> Decimal:
    subtotal = sum(
        (Decimal(str(unit_price)) * int(quantity) for unit_price, quantity in lines),
        Decimal("0"),
    )
    return to_money(subtotal)


def calculate_pricing(lines: Iterable[tuple]) -> PriceBreakdown:
    """Price a sequence of ``(unit_price, quantity)`` pairs."""
    subtotal = calculate_subtotal(lines)
    tax = to_money(subtotal * TAX_RATE)
    shipping = Decimal("0.00") if subtotal > FREE_SHIPPING_THRESHOLD else to_money(FLAT_SHIPPING)
    return PriceBreakdown(
        subtotal=subtotal,
        tax=tax,
        shipping=shipping,
        total=subtotal + tax + shipping,
    )
