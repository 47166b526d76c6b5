"""Client-side carts: one interface, two backing stores.

``LocalCart`` is the anonymous shopper's cart. It never talks to the server
for cart state and persists itself to a KeyValueStore after every change.
``RemoteCart`` is the signed-in shopper's cart and forwards every operation
to the REST API.

Both apply the same rules as the server cart: lines merge on product plus
customization, quantities below 1 are rejected on add and ignored on
update, removing an unknown line is a no-op, and pricing comes from the
shared pricing calculator.
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from uuid import uuid4

import httpx
import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError

from storefront.cart import customization as customizations
from storefront.client.catalog import ProductSnapshot
from storefront.client.responses import raise_for_response
from storefront.client.storage import KeyValueStore
from storefront.errors import InsufficientStock
from storefront.pricing import PriceBreakdown, calculate_pricing

logger = structlog.get_logger(__name__)

LOCAL_CART_KEY = "storefront.cart"


@dataclass
class CartLine:
    id: str
    product_id: str
    quantity: int
    customization: dict
    price: float
    product: ProductSnapshot | None = None


class ClientCart(ABC):
    @abstractmethod
    def lines(self) -> list[CartLine]: ...

    @abstractmethod
    def add_item(self, product: ProductSnapshot, quantity: int = 1, customization=None) -> CartLine: ...

    @abstractmethod
    def update_item_quantity(self, item_id, quantity) -> None: ...

    @abstractmethod
    def remove_item(self, item_id) -> None: ...

    @abstractmethod
    def clear(self) -> None: ...

    def pricing(self) -> PriceBreakdown:
        return calculate_pricing((line.price, line.quantity) for line in self.lines())

    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines())

    def is_empty(self) -> bool:
        return not self.lines()


class LocalCart(ClientCart):
    def __init__(self, store: KeyValueStore, key: str = LOCAL_CART_KEY):
        self.store = store
        self.key = key
        self._lines: list[CartLine] = self._load()

    def _load(self) -> list[CartLine]:
        raw = self.store.get(self.key)
        if not raw:
            return []
        try:
            stored = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Discarding unreadable local cart", key=self.key)
            return []
        return [
            CartLine(
                id=line["id"],
                product_id=line["product_id"],
                quantity=line["quantity"],
                customization=customizations.normalize(line.get("customization")),
                price=line["price"],
                product=ProductSnapshot.from_payload(line["product"]) if line.get("product") else None,
            )
            for line in stored
        ]

    def _save(self) -> None:
        self.store.set(
            self.key,
            json.dumps(
                [
                    {
                        "id": line.id,
                        "product_id": line.product_id,
                        "quantity": line.quantity,
                        "customization": line.customization,
                        "price": line.price,
                        "product": line.product.as_payload() if line.product else None,
                    }
                    for line in self._lines
                ]
            ),
        )

    def lines(self):
        return list(self._lines)

    def add_item(self, product, quantity=1, customization=None):
        if quantity is None or int(quantity) < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        quantity = int(quantity)

        options = customizations.normalize(customization)
        customizations.check_selection(product.customization_options, options, product.name)
        if product.stock < quantity:
            raise InsufficientStock(product.id, product.name, requested=quantity, available=product.stock)

        line = next(
            (
                existing
                for existing in self._lines
                if existing.product_id == str(product.id)
                and customizations.same_customization(existing.customization, options)
            ),
            None,
        )
        if line is not None:
            line.quantity += quantity
        else:
            line = CartLine(
                id=uuid4().hex,
                product_id=str(product.id),
                quantity=quantity,
                customization=options,
                price=product.unit_price(),
                product=product,
            )
            self._lines.append(line)

        self._save()
        return line

    def update_item_quantity(self, item_id, quantity):
        if quantity is None or int(quantity) < 1:
            return
        line = next((line for line in self._lines if line.id == str(item_id)), None)
        if line is None:
            raise ObjectNotFoundError({"item_id": [f"Item {item_id} not found in cart"]})
        line.quantity = int(quantity)
        self._save()

    def remove_item(self, item_id):
        remaining = [line for line in self._lines if line.id != str(item_id)]
        if len(remaining) != len(self._lines):
            self._lines = remaining
            self._save()

    def clear(self):
        self._lines = []
        self._save()

    def discard(self) -> None:
        """Forget the cart entirely, including its stored copy."""
        self._lines = []
        self.store.delete(self.key)


class RemoteCart(ClientCart):
    def __init__(self, http: httpx.Client, token: str):
        self.http = http
        self.token = token
        self._payload: dict | None = None

    @property
    def _headers(self) -> dict:
        return {"Authorization": f"Bearer {self.token}"}

    def _call(self, method: str, path: str, **kwargs) -> dict:
        response = self.http.request(method, path, headers=self._headers, **kwargs)
        raise_for_response(response)
        self._payload = response.json()["cart"]
        return self._payload

    def refresh(self) -> dict:
        return self._call("GET", "/cart")

    def lines(self):
        payload = self._payload if self._payload is not None else self.refresh()
        return [
            CartLine(
                id=item["id"],
                product_id=item["product_id"],
                quantity=item["quantity"],
                customization=customizations.normalize(item.get("customization")),
                price=item["price"],
                product=ProductSnapshot.from_payload(item["product"]) if item.get("product") else None,
            )
            for item in payload["items"]
        ]

    def add_item(self, product, quantity=1, customization=None):
        options = customizations.normalize(customization)
        self._call(
            "POST",
            "/cart",
            json={"product_id": str(product.id), "quantity": quantity, "customization": options},
        )
        return next(
            line
            for line in self.lines()
            if line.product_id == str(product.id) and customizations.same_customization(line.customization, options)
        )

    def update_item_quantity(self, item_id, quantity):
        self._call("PUT", f"/cart/{item_id}", json={"quantity": quantity})

    def remove_item(self, item_id):
        self._call("DELETE", f"/cart/{item_id}")

    def clear(self):
        self._call("DELETE", "/cart")

    def server_pricing(self) -> dict:
        payload = self._payload if self._payload is not None else self.refresh()
        return payload["pricing"]
