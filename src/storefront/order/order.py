"""Order aggregate (CQRS): an immutable snapshot of a completed purchase.

Items, prices and the shipping address are frozen when the order is placed
and never reference live product state again. Orders are never deleted;
only their status moves, along the table below, and every move is appended
to ``status_history``.

State Machine:
    PLACED -> PROCESSING -> SHIPPED -> DELIVERED
    PLACED, PROCESSING -> CANCELLED
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String, Text, ValueObject

from storefront.domain import storefront
from storefront.order.events import OrderDelivered, OrderPaid, OrderPlaced, OrderStatusChanged
from storefront.pricing import PriceBreakdown, to_money


class OrderStatus(Enum):
    PLACED = "placed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


_VALID_TRANSITIONS = {
    OrderStatus.PLACED: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

_PAYABLE_STATES = {OrderStatus.PLACED, OrderStatus.PROCESSING}


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class ShippingAddress:
    """Where the order goes. Copied onto the order at checkout."""

    full_name = String(required=True, max_length=150)
    address = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    state = String(required=True, max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)
    phone = String(required=True, max_length=30)

    @invariant.post
    def fields_cannot_be_blank(self):
        blank = [
            name
            for name in ("full_name", "address", "city", "state", "postal_code", "country", "phone")
            if not (getattr(self, name) or "").strip()
        ]
        if blank:
            raise ValidationError({name: [f"{name} is required"] for name in blank})


@storefront.value_object(part_of="Order")
class PaymentResult:
    """What the payment provider reported. Recorded only, never charged here."""

    payment_id = String(max_length=255)
    status = String(max_length=50)
    update_time = String(max_length=50)
    email_address = String(max_length=255)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderItem:
    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    image = String(max_length=500, default="")
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    customization = Text()  # canonical JSON, as on the cart line
    position = Integer(default=0)

    @property
    def line_total(self) -> float:
        return float(to_money(self.unit_price) * self.quantity)


@storefront.entity(part_of="Order")
class StatusChange:
    status = String(required=True, max_length=20)
    note = Text()
    sequence = Integer(required=True, min_value=1)
    changed_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Aggregate
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    customer_id = Identifier(required=True)
    customer_email = String(max_length=255)
    items = HasMany(OrderItem)
    shipping_address = ValueObject(ShippingAddress, required=True)
    payment_method = String(required=True, max_length=50)
    payment_result = ValueObject(PaymentResult)
    items_price = Float(default=0.0)
    tax_price = Float(default=0.0)
    shipping_price = Float(default=0.0)
    total_price = Float(default=0.0)
    is_paid = Boolean(default=False)
    paid_at = DateTime()
    is_delivered = Boolean(default=False)
    delivered_at = DateTime()
    status = String(choices=OrderStatus, default=OrderStatus.PLACED.value)
    status_history = HasMany(StatusChange)
    placed_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def total_is_sum_of_parts(self):
        expected = to_money(self.items_price or 0) + to_money(self.tax_price or 0) + to_money(self.shipping_price or 0)
        if to_money(self.total_price or 0) != expected:
            raise ValidationError({"total_price": ["Total must equal items + tax + shipping"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        customer_id,
        lines,
        shipping_address: ShippingAddress,
        payment_method,
        pricing: PriceBreakdown,
        customer_email=None,
    ):
        """Build a placed order from already-validated lines.

        ``lines`` are dicts with product_id, name, image, quantity,
        unit_price and customization.
        """
        if not lines:
            raise ValidationError({"items": ["An order needs at least one item"]})

        now = datetime.now(UTC)
        order = cls(
            customer_id=str(customer_id),
            customer_email=customer_email,
            shipping_address=shipping_address,
            payment_method=payment_method,
            items_price=float(pricing.subtotal),
            tax_price=float(pricing.tax),
            shipping_price=float(pricing.shipping),
            total_price=float(pricing.total),
            status=OrderStatus.PLACED.value,
            placed_at=now,
            updated_at=now,
        )

        with atomic_change(order):
            for position, line in enumerate(lines):
                order.add_items(
                    OrderItem(
                        product_id=str(line["product_id"]),
                        name=line["name"],
                        image=line.get("image") or "",
                        quantity=line["quantity"],
                        unit_price=line["unit_price"],
                        customization=line.get("customization"),
                        position=position,
                    )
                )
            order._record_status(OrderStatus.PLACED, "Order placed", now)

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                customer_id=str(customer_id),
                customer_email=customer_email,
                items=json.dumps(
                    [
                        {
                            "product_id": str(line["product_id"]),
                            "name": line["name"],
                            "quantity": line["quantity"],
                            "unit_price": line["unit_price"],
                        }
                        for line in lines
                    ]
                ),
                item_count=sum(line["quantity"] for line in lines),
                items_price=order.items_price,
                tax_price=order.tax_price,
                shipping_price=order.shipping_price,
                total_price=order.total_price,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    def lines(self) -> list[OrderItem]:
        return sorted(self.items, key=lambda item: item.position or 0)

    def history(self) -> list[StatusChange]:
        return sorted(self.status_history, key=lambda change: change.sequence)

    def belongs_to(self, customer_id) -> bool:
        return str(self.customer_id) == str(customer_id)

    # -------------------------------------------------------------------
    # State machine
    # -------------------------------------------------------------------
    def can_transition_to(self, target_status: OrderStatus) -> bool:
        return target_status in _VALID_TRANSITIONS.get(OrderStatus(self.status), set())

    def _assert_can_transition(self, target_status: OrderStatus):
        """Validate that the current state allows transition to target."""
        current = OrderStatus(self.status)
        if not self.can_transition_to(target_status):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def _record_status(self, status: OrderStatus, note, at):
        self.add_status_history(
            StatusChange(
                status=status.value,
                note=note,
                sequence=len(self.status_history) + 1,
                changed_at=at,
            )
        )

    def _transition(self, target_status: OrderStatus, note=None):
        self._assert_can_transition(target_status)

        previous = self.status
        now = datetime.now(UTC)
        with atomic_change(self):
            self.status = target_status.value
            self._record_status(target_status, note, now)
            if target_status == OrderStatus.DELIVERED:
                self.is_delivered = True
                self.delivered_at = now
            self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                customer_id=str(self.customer_id),
                customer_email=self.customer_email,
                previous_status=previous,
                new_status=target_status.value,
                note=note,
                changed_at=now,
            )
        )
        if target_status == OrderStatus.DELIVERED:
            self.raise_(OrderDelivered(order_id=str(self.id), delivered_at=now))

    def mark_paid(self, payment_id=None, payment_status=None, update_time=None, email_address=None):
        """Record a payment. A placed order moves on to processing."""
        if self.is_paid:
            raise ValidationError({"is_paid": ["Order is already paid"]})
        if OrderStatus(self.status) not in _PAYABLE_STATES:
            raise ValidationError({"status": [f"Cannot record payment for an order that is {self.status}"]})

        now = datetime.now(UTC)
        self.is_paid = True
        self.paid_at = now
        self.payment_result = PaymentResult(
            payment_id=payment_id,
            status=payment_status,
            update_time=update_time,
            email_address=email_address,
        )

        self.raise_(
            OrderPaid(
                order_id=str(self.id),
                payment_id=payment_id,
                payment_status=payment_status,
                amount=self.total_price,
                paid_at=now,
            )
        )

        if OrderStatus(self.status) == OrderStatus.PLACED:
            self._transition(OrderStatus.PROCESSING, "Payment received")
        else:
            self.updated_at = now

    def mark_delivered(self, note="Delivered"):
        self._transition(OrderStatus.DELIVERED, note)

    def set_status(self, new_status, note=None):
        try:
            target = OrderStatus(new_status)
        except ValueError:
            raise ValidationError({"status": [f"Unknown order status '{new_status}'"]}) from None
        self._transition(target, note)

    def cancel(self, note=None):
        self._transition(OrderStatus.CANCELLED, note)
