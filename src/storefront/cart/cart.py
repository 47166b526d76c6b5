"""Cart aggregate (CQRS): one server-side cart per customer.

The cart's identity is the owning customer's id, so a customer has at most
one cart and it can be loaded without a lookup. Lines are keyed by product
and customization: adding the same pair again increments the existing line.
Each line keeps the unit price seen when it was first added; ``total_price``
is recomputed from the lines on every mutation.
"""

from datetime import UTC, datetime

from protean import atomic_change, invariant
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, Text

from storefront.cart import customization as customizations
from storefront.cart.events import CartCleared, CartItemAdded, CartItemQuantityUpdated, CartItemRemoved
from storefront.domain import storefront
from storefront.pricing import PriceBreakdown, calculate_pricing, calculate_subtotal


@storefront.entity(part_of="Cart")
class CartItem:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    customization = Text()  # canonical JSON, see cart.customization
    price = Float(required=True, min_value=0.0)
    position = Integer(default=0)
    added_at = DateTime()

    @property
    def options(self) -> dict:
        return customizations.decode(self.customization)

    def matches(self, product_id, options) -> bool:
        return str(self.product_id) == str(product_id) and customizations.same_customization(self.options, options)


@storefront.aggregate
class Cart:
    customer_id = Identifier(required=True)
    items = HasMany(CartItem)
    total_price = Float(default=0.0)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def total_price_matches_lines(self):
        expected = float(calculate_subtotal((i.price, i.quantity) for i in self.items))
        if round(self.total_price or 0.0, 2) != expected:
            raise ValidationError({"total_price": ["Cart total does not match its lines"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, customer_id):
        now = datetime.now(UTC)
        return cls(
            id=str(customer_id),
            customer_id=str(customer_id),
            total_price=0.0,
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    def lines(self) -> list[CartItem]:
        """Lines in the order they were first added."""
        return sorted(self.items, key=lambda item: item.position or 0)

    def find_item(self, item_id):
        return next((i for i in self.items if str(i.id) == str(item_id)), None)

    def pricing(self) -> PriceBreakdown:
        return calculate_pricing((i.price, i.quantity) for i in self.items)

    def is_empty(self) -> bool:
        return not self.items

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    def add_item(self, product, quantity, customization=None):
        """Add ``quantity`` of ``product`` with the given option choices.

        Raises ValidationError for a non-positive quantity or an invalid
        customization, and InsufficientStock when the product's live stock is
        below ``quantity``. Returns the affected line.
        """
        if quantity is None or int(quantity) < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        quantity = int(quantity)

        options = customizations.normalize(customization)
        product.validate_customization(options)
        product.ensure_available(quantity)

        now = datetime.now(UTC)
        existing = next((i for i in self.items if i.matches(product.id, options)), None)

        with atomic_change(self):
            if existing is not None:
                existing.quantity += quantity
                item = existing
            else:
                item = CartItem(
                    product_id=str(product.id),
                    quantity=quantity,
                    customization=customizations.encode(options),
                    price=product.unit_price(),
                    position=self._next_position(),
                    added_at=now,
                )
                self.add_items(item)
            self._recompute_total()

        self.updated_at = now

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                item_id=str(item.id),
                product_id=str(product.id),
                quantity=quantity,
                line_quantity=item.quantity,
                customization=item.customization,
                merged=str(existing is not None),
            )
        )
        return item

    def update_item_quantity(self, item_id, quantity) -> bool:
        """Set a line's quantity. Quantities below 1 are ignored.

        Returns True when the cart changed.
        """
        if quantity is None or int(quantity) < 1:
            return False

        item = self.find_item(item_id)
        if item is None:
            raise ObjectNotFoundError({"item_id": [f"Item {item_id} not found in cart"]})

        previous_quantity = item.quantity
        with atomic_change(self):
            item.quantity = int(quantity)
            self._recompute_total()
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartItemQuantityUpdated(
                cart_id=str(self.id),
                item_id=str(item.id),
                previous_quantity=previous_quantity,
                new_quantity=item.quantity,
            )
        )
        return True

    def remove_item(self, item_id) -> bool:
        """Drop a line. Unknown ids leave the cart as it is."""
        item = self.find_item(item_id)
        if item is None:
            return False

        with atomic_change(self):
            self.remove_items(item)
            self._recompute_total()
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                item_id=str(item.id),
                product_id=str(item.product_id),
            )
        )
        return True

    def clear(self, reason="cleared"):
        removed = len(self.items)
        with atomic_change(self):
            for item in list(self.items):
                self.remove_items(item)
            self._recompute_total()
        self.updated_at = datetime.now(UTC)

        self.raise_(CartCleared(cart_id=str(self.id), removed_items=removed, reason=reason))

    def _next_position(self) -> int:
        return max((i.position or 0 for i in self.items), default=-1) + 1

    def _recompute_total(self):
        self.total_price = float(calculate_subtotal((i.price, i.quantity) for i in self.items))
