"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance keeps its own state; nothing is shared between
users apart from the seeded product catalog.
"""

from dataclasses import dataclass, field


@dataclass
class ShopperState:
    """Tracks a single simulated shopper from browsing to checkout."""

    customer_id: str | None = None
    token: str | None = None
    cart_item_ids: list[str] = field(default_factory=list)
    order_ids: list[str] = field(default_factory=list)

    @property
    def headers(self) -> dict:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}


@dataclass
class CatalogState:
    """Products seeded by the admin user, shared by every shopper."""

    products: list[dict] = field(default_factory=list)
