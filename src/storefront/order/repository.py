"""Repository for the Order aggregate."""

from protean.exceptions import ValidationError

from storefront.domain import storefront
from storefront.order.order import Order, OrderStatus

MAX_PAGE_SIZE = 100


@storefront.repository(part_of=Order)
class OrderRepository:
    def for_customer(self, customer_id, limit=MAX_PAGE_SIZE) -> list[Order]:
        """A customer's orders, newest first."""
        return (
            self._dao.query.filter(customer_id=str(customer_id))
            .order_by("-placed_at")
            .limit(limit)
            .all()
            .items
        )

    def list_orders(self, page=1, limit=10, status=None):
        """Return ``(total, orders)`` for one page of all orders, newest first."""
        page = max(int(page), 1)
        limit = min(max(int(limit), 1), MAX_PAGE_SIZE)

        query = self._dao.query
        if status:
            try:
                query = query.filter(status=OrderStatus(status).value)
            except ValueError:
                raise ValidationError({"status": [f"Unknown order status '{status}'"]}) from None
        result = query.order_by("-placed_at").offset((page - 1) * limit).limit(limit).all()
        return result.total, result.items
