"""Checkout journeys: cart building, checkout and admin fulfilment.

``CheckoutJourney`` walks one shopper through add -> update -> remove ->
checkout -> order history. ``FulfilmentUser`` moves placed orders along the
status machine. Tokens are minted with the same signed-token verifier the
API uses, so STOREFRONT_TOKEN_SECRET must match the server's.
"""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import checkout_data, customization_for, product_data, shopper_id
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import CatalogState, ShopperState
from storefront.identity import CurrentUser
from storefront.identity.signed_token import SignedTokenVerifier

CATALOG = CatalogState()
_verifier = SignedTokenVerifier.from_env()


def _token(user_id: str, is_admin: bool = False) -> str:
    return _verifier.issue(CurrentUser(user_id=user_id, email=f"{user_id}@example.com", is_admin=is_admin))


def _admin_headers() -> dict:
    return {"Authorization": f"Bearer {_token('lt-admin', is_admin=True)}"}


def seed_catalog(client, count: int = 20) -> None:
    """Create products once per worker; later users reuse them."""
    if CATALOG.products:
        return
    headers = _admin_headers()
    for _ in range(count):
        with client.post(
            "/products",
            json=product_data(),
            headers=headers,
            catch_response=True,
            name="POST /products (seed)",
        ) as resp:
            if resp.status_code == 201:
                CATALOG.products.append(resp.json()["product"])
            else:
                resp.failure(f"Seed product failed: {resp.status_code} {extract_error_detail(resp)}")


class CheckoutJourney(SequentialTaskSet):
    """Add two products, change one, drop one, re-add, check out, list orders."""

    def on_start(self):
        seed_catalog(self.client)
        customer_id = shopper_id()
        self.state = ShopperState(customer_id=customer_id, token=_token(customer_id))

    def _add(self, label: str):
        if not CATALOG.products:
            self.interrupt()
        product = random.choice(CATALOG.products)
        with self.client.post(
            "/cart",
            json={
                "product_id": product["id"],
                "quantity": random.randint(1, 3),
                "customization": customization_for(product),
            },
            headers=self.state.headers,
            catch_response=True,
            name="POST /cart",
        ) as resp:
            if resp.status_code == 201:
                self.state.cart_item_ids = [item["id"] for item in resp.json()["cart"]["items"]]
            else:
                resp.failure(f"{label} failed: {resp.status_code} {extract_error_detail(resp)}")

    @task
    def add_first(self):
        self._add("Add first item")

    @task
    def add_second(self):
        self._add("Add second item")

    @task
    def update_quantity(self):
        if not self.state.cart_item_ids:
            return
        with self.client.put(
            f"/cart/{self.state.cart_item_ids[0]}",
            json={"quantity": random.randint(1, 4)},
            headers=self.state.headers,
            catch_response=True,
            name="PUT /cart/{item_id}",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Update quantity failed: {resp.status_code} {extract_error_detail(resp)}")

    @task
    def remove_last(self):
        if len(self.state.cart_item_ids) < 2:
            return
        with self.client.delete(
            f"/cart/{self.state.cart_item_ids[-1]}",
            headers=self.state.headers,
            catch_response=True,
            name="DELETE /cart/{item_id}",
        ) as resp:
            if resp.status_code == 200:
                self.state.cart_item_ids = [item["id"] for item in resp.json()["cart"]["items"]]
            else:
                resp.failure(f"Remove item failed: {resp.status_code} {extract_error_detail(resp)}")

    @task
    def view_cart(self):
        with self.client.get("/cart", headers=self.state.headers, catch_response=True, name="GET /cart") as resp:
            if resp.status_code != 200:
                resp.failure(f"View cart failed: {resp.status_code} {extract_error_detail(resp)}")

    @task
    def checkout(self):
        with self.client.post(
            "/orders",
            json=checkout_data(),
            headers=self.state.headers,
            catch_response=True,
            name="POST /orders",
        ) as resp:
            if resp.status_code == 201:
                self.state.order_ids.append(resp.json()["order"]["id"])
                self.state.cart_item_ids = []
            elif resp.status_code == 400 and resp.json().get("code") == "insufficient_stock":
                # Expected under contention; not a server failure
                resp.success()
            else:
                resp.failure(f"Checkout failed: {resp.status_code} {extract_error_detail(resp)}")

    @task
    def my_orders(self):
        with self.client.get(
            "/orders/myorders",
            headers=self.state.headers,
            catch_response=True,
            name="GET /orders/myorders",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Order history failed: {resp.status_code} {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class ShopperUser(HttpUser):
    wait_time = between(1, 3)
    weight = 2
    tasks = [CheckoutJourney]


class FulfilmentUser(HttpUser):
    """An admin paying, shipping and delivering placed orders."""

    wait_time = between(2, 5)
    weight = 1

    def on_start(self):
        self.headers = _admin_headers()

    @task
    def advance_orders(self):
        with self.client.get(
            "/orders",
            params={"status": "placed", "limit": 5},
            headers=self.headers,
            catch_response=True,
            name="GET /orders?status",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"List orders failed: {resp.status_code} {extract_error_detail(resp)}")
                return
            orders = resp.json()["orders"]

        for order in orders:
            self.client.put(
                f"/orders/{order['id']}/pay",
                json={"payment_id": f"PAY-{order['id'][:8]}", "status": "COMPLETED"},
                headers=self.headers,
                name="PUT /orders/{id}/pay",
            )
            self.client.put(
                f"/orders/{order['id']}/status",
                json={"status": "shipped"},
                headers=self.headers,
                name="PUT /orders/{id}/status",
            )
            self.client.put(
                f"/orders/{order['id']}/deliver",
                headers=self.headers,
                name="PUT /orders/{id}/deliver",
            )
