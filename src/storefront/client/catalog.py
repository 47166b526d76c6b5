"""Read-only product access over the storefront API."""

from dataclasses import dataclass, field

import httpx

from storefront.client.responses import raise_for_response


@dataclass(frozen=True)
class ProductSnapshot:
    """What a client knows about a product when it puts it in a cart."""

    id: str
    name: str
    price: float
    discount_price: float | None = None
    stock: int = 0
    image: str = ""
    customization_options: list = field(default_factory=list)

    def unit_price(self) -> float:
        return self.discount_price if self.discount_price is not None else self.price

    @classmethod
    def from_payload(cls, payload: dict) -> "ProductSnapshot":
        return cls(
            id=str(payload["id"]),
            name=payload.get("name") or "",
            price=payload.get("price") or 0.0,
            discount_price=payload.get("discount_price"),
            stock=payload.get("stock") or 0,
            image=payload.get("image") or "",
            customization_options=list(payload.get("customization_options") or []),
        )

    def as_payload(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "discount_price": self.discount_price,
            "stock": self.stock,
            "image": self.image,
            "customization_options": list(self.customization_options),
        }


class RemoteCatalog:
    def __init__(self, http: httpx.Client):
        self.http = http

    def find_by_id(self, product_id) -> ProductSnapshot:
        response = self.http.get(f"/products/{product_id}")
        raise_for_response(response)
        return ProductSnapshot.from_payload(response.json()["product"])

    def search(self, keyword=None, category=None, page=1, limit=12) -> list[ProductSnapshot]:
        params = {"page": page, "limit": limit}
        if keyword:
            params["keyword"] = keyword
        if category:
            params["category"] = category
        response = self.http.get("/products", params=params)
        raise_for_response(response)
        return [ProductSnapshot.from_payload(product) for product in response.json()["products"]]
