"""Catalog browsing: listing, keyword search and product detail.

Read-only traffic; needs no token.
"""

import random

from locust import HttpUser, between, task

from loadtests.data_generators import CATEGORIES, search_keyword
from loadtests.helpers.response import extract_error_detail


class BrowsingUser(HttpUser):
    wait_time = between(0.5, 2)
    weight = 3

    def on_start(self):
        self.product_ids: list[str] = []

    @task(3)
    def list_products(self):
        with self.client.get(
            "/products",
            params={"page": random.randint(1, 3), "limit": 12},
            catch_response=True,
            name="GET /products",
        ) as resp:
            if resp.status_code == 200:
                self.product_ids = [p["id"] for p in resp.json()["products"]]
            else:
                resp.failure(f"List products failed: {resp.status_code} {extract_error_detail(resp)}")

    @task(2)
    def search(self):
        params = {"keyword": search_keyword()}
        if random.random() < 0.5:
            params["category"] = random.choice(CATEGORIES)
        with self.client.get("/products", params=params, catch_response=True, name="GET /products?keyword") as resp:
            if resp.status_code != 200:
                resp.failure(f"Search failed: {resp.status_code} {extract_error_detail(resp)}")

    @task(2)
    def product_detail(self):
        if not self.product_ids:
            return
        with self.client.get(
            f"/products/{random.choice(self.product_ids)}",
            catch_response=True,
            name="GET /products/{id}",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Product detail failed: {resp.status_code} {extract_error_detail(resp)}")
