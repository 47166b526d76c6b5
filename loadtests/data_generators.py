"""Faker-based data generators for Locust load test scenarios.

Payloads match the field names of the API's Pydantic request schemas and
pass the domain's validation (non-blank address fields, positive prices).
"""

import random
import uuid

from faker import Faker

fake = Faker()

CATEGORIES = ["lighting", "furniture", "textiles", "kitchen", "decor"]


def product_data(stock: int = 10_000) -> dict:
    """A product with enough stock to survive a long run."""
    price = round(random.uniform(50, 1500), 2)
    data = {
        "name": f"{fake.color_name()} {fake.word().title()} {uuid.uuid4().hex[:4]}",
        "description": fake.sentence(),
        "category": random.choice(CATEGORIES),
        "price": price,
        "stock": stock,
        "featured": random.random() < 0.2,
        "images": [{"url": f"/images/{uuid.uuid4().hex[:8]}.jpg", "alt_text": fake.word()}],
    }
    if random.random() < 0.3:
        data["discount_price"] = round(price * 0.8, 2)
    if random.random() < 0.4:
        data["customization_options"] = [{"name": "size", "options": ["S", "M", "L"], "required": True}]
    return data


def customization_for(product: dict) -> dict:
    """Pick a value for every option the product offers."""
    return {option["name"]: random.choice(option["options"]) for option in product.get("customization_options", [])}


def shipping_address() -> dict:
    return {
        "full_name": fake.name(),
        "address": fake.street_address(),
        "city": fake.city(),
        "state": fake.state_abbr(),
        "postal_code": fake.postcode(),
        "country": "US",
        "phone": fake.numerify("+1-###-###-####"),
    }


def checkout_data() -> dict:
    return {
        "shipping_address": shipping_address(),
        "payment_method": random.choice(["PayPal", "Card"]),
    }


def search_keyword() -> str:
    return random.choice(["lamp", "rug", "chair", "mug", "shelf", fake.word()])


def shopper_id() -> str:
    return f"lt-{uuid.uuid4().hex[:10]}"
