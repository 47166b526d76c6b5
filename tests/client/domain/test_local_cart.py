"""Tests for the anonymous shopper's local cart."""

import json

import pytest
from protean.exceptions import ObjectNotFoundError, ValidationError

from storefront.cart.cart import Cart
from storefront.catalogue.product import Product
from storefront.client.carts import LOCAL_CART_KEY, LocalCart
from storefront.client.catalog import ProductSnapshot
from storefront.client.storage import JsonFileStore, MemoryStore
from storefront.errors import InsufficientStock


@pytest.fixture()
def lamp():
    return ProductSnapshot(id="prod-lamp", name="Desk Lamp", price=500.0, stock=10)


@pytest.fixture()
def shirt():
    return ProductSnapshot(
        id="prod-shirt",
        name="T-Shirt",
        price=400.0,
        discount_price=350.0,
        stock=3,
        customization_options=[
            {"name": "size", "options": ["S", "M"], "required": True},
            {"name": "color", "options": ["red", "blue"]},
        ],
    )


@pytest.fixture()
def store():
    return MemoryStore()


@pytest.fixture()
def cart(store):
    return LocalCart(store)


class TestLocalCartRules:
    def test_add_and_merge(self, cart, lamp):
        first = cart.add_item(lamp, 1)
        second = cart.add_item(lamp, 2)
        assert first.id == second.id
        assert cart.item_count() == 3
        assert len(cart.lines()) == 1

    def test_customization_key_order(self, cart, shirt):
        cart.add_item(shirt, 1, {"size": "M", "color": "red"})
        cart.add_item(shirt, 1, {"color": "red", "size": "M"})
        assert len(cart.lines()) == 1

    def test_price_snapshot_uses_discount(self, cart, shirt):
        assert cart.add_item(shirt, 1, {"size": "S"}).price == 350.0

    @pytest.mark.parametrize("quantity", [0, -2])
    def test_quantity_below_one_on_add(self, cart, lamp, quantity):
        with pytest.raises(ValidationError):
            cart.add_item(lamp, quantity)
        assert cart.is_empty()

    def test_update_below_one_is_ignored(self, cart, lamp):
        line = cart.add_item(lamp, 2)
        cart.update_item_quantity(line.id, 0)
        assert cart.lines()[0].quantity == 2

    def test_update_unknown_line(self, cart):
        with pytest.raises(ObjectNotFoundError):
            cart.update_item_quantity("nope", 1)

    def test_remove_unknown_line_is_a_no_op(self, cart, lamp):
        cart.add_item(lamp, 1)
        cart.remove_item("nope")
        assert len(cart.lines()) == 1

    def test_stock_check(self, cart, shirt):
        with pytest.raises(InsufficientStock):
            cart.add_item(shirt, 4, {"size": "S"})

    def test_required_customization(self, cart, shirt):
        with pytest.raises(ValidationError):
            cart.add_item(shirt, 1, {"color": "red"})

    def test_clear(self, cart, lamp, shirt):
        cart.add_item(lamp, 1)
        cart.add_item(shirt, 1, {"size": "M"})
        cart.clear()
        assert cart.is_empty()


class TestLocalCartPersistence:
    def test_every_change_is_written(self, store, cart, lamp):
        cart.add_item(lamp, 2)
        stored = json.loads(store.get(LOCAL_CART_KEY))
        assert stored[0]["quantity"] == 2
        assert stored[0]["product"]["name"] == "Desk Lamp"

    def test_survives_reload(self, store, lamp, shirt):
        LocalCart(store).add_item(shirt, 1, {"size": "M"})
        LocalCart(store).add_item(lamp, 1)

        reloaded = LocalCart(store)
        assert [line.product_id for line in reloaded.lines()] == ["prod-shirt", "prod-lamp"]
        assert reloaded.lines()[0].customization == {"size": "M"}
        assert reloaded.lines()[0].product.customization_options == shirt.customization_options

    def test_unreadable_state_is_discarded(self, lamp):
        cart = LocalCart(MemoryStore({LOCAL_CART_KEY: "{not json"}))
        assert cart.is_empty()
        cart.add_item(lamp, 1)
        assert cart.item_count() == 1

    def test_discard_removes_stored_copy(self, store, cart, lamp):
        cart.add_item(lamp, 1)
        cart.discard()
        assert store.get(LOCAL_CART_KEY) is None
        assert LocalCart(store).is_empty()

    def test_json_file_store(self, tmp_path, lamp):
        path = tmp_path / "state" / "storefront.json"
        LocalCart(JsonFileStore(path)).add_item(lamp, 3)

        reloaded = LocalCart(JsonFileStore(path))
        assert reloaded.item_count() == 3
        assert list(path.parent.glob("*.tmp")) == []

    def test_json_file_store_delete(self, tmp_path):
        store = JsonFileStore(tmp_path / "kv.json")
        store.set("a", "1")
        store.set("b", "2")
        store.delete("a")
        assert store.get("a") is None
        assert store.get("b") == "2"


class TestPricingParity:
    def test_local_cart_prices_like_the_server_cart(self, cart, lamp):
        cart.add_item(lamp, 2)

        server_cart = Cart.create(customer_id="cust-001")
        server_cart.add_item(Product.create(name="Desk Lamp", price=500.0, stock=10), 2)

        assert cart.pricing() == server_cart.pricing()
        assert cart.pricing().as_dict() == {"subtotal": 1000.0, "tax": 180.0, "shipping": 100.0, "total": 1280.0}

    def test_empty_local_cart(self, cart):
        assert cart.pricing().subtotal == 0
