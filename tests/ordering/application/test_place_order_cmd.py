"""Application tests for order placement."""

import json

import pytest
from protean import current_domain

from storefront.cart import customization as customizations
from storefront.cart.cart import Cart
from storefront.cart.management import AddToCart
from storefront.catalogue.product import Product
from storefront.checkout.placement import PlaceOrder
from storefront.errors import EmptyCart, InsufficientStock, OrderCommitFailed
from storefront.order.order import Order

CUSTOMER = "cust-001"


def _add(product_id, quantity=1, customization=None):
    return current_domain.process(
        AddToCart(
            customer_id=CUSTOMER,
            product_id=product_id,
            quantity=quantity,
            customization=customizations.encode(customization),
        ),
        asynchronous=False,
    )


def _place(address):
    return current_domain.process(
        PlaceOrder(
            customer_id=CUSTOMER,
            customer_email="cust-001@example.com",
            shipping_address=json.dumps(address),
            payment_method="PayPal",
        ),
        asynchronous=False,
    )


def _stock(product_id):
    return current_domain.repository_for(Product).get(product_id).stock


def _placed_orders():
    return [o for o in current_domain.repository_for(Order).for_customer(CUSTOMER) if o.status != "cancelled"]


class TestPlaceOrder:
    def test_worked_example(self, make_product, address):
        lamp = make_product(price=500.0, stock=10)
        _add(lamp.id, 2)

        order_id = _place(address)

        order = current_domain.repository_for(Order).get(order_id)
        assert order.items_price == 1000.0
        assert order.tax_price == 180.0
        assert order.shipping_price == 100.0
        assert order.total_price == 1280.0
        assert order.status == "placed"
        assert order.shipping_address.city == "Bengaluru"
        assert _stock(lamp.id) == 8
        assert current_domain.repository_for(Cart).get(CUSTOMER).is_empty()

    def test_free_shipping_above_threshold(self, make_product, address):
        lamp = make_product(price=600.0)
        _add(lamp.id, 2)
        order = current_domain.repository_for(Order).get(_place(address))
        assert order.shipping_price == 0.0
        assert order.total_price == 1416.0

    def test_order_keeps_cart_prices_and_customization(self, make_product, address):
        shirt = make_product(
            name="T-Shirt",
            price=400.0,
            customization_options=[{"name": "size", "options": ["S", "M"], "required": True}],
        )
        _add(shirt.id, 1, {"size": "M"})

        product = current_domain.repository_for(Product).get(shirt.id)
        product.price = 450.0
        current_domain.repository_for(Product).add(product)

        order = current_domain.repository_for(Order).get(_place(address))
        item = order.lines()[0]
        assert item.unit_price == 400.0
        assert item.name == "T-Shirt"
        assert customizations.decode(item.customization) == {"size": "M"}

    def test_lines_of_one_product_take_stock_once_each(self, make_product, address):
        shirt = make_product(
            name="T-Shirt",
            stock=5,
            customization_options=[{"name": "size", "options": ["S", "M"]}],
        )
        _add(shirt.id, 2, {"size": "S"})
        _add(shirt.id, 3, {"size": "M"})

        _place(address)

        assert _stock(shirt.id) == 0


class TestPlaceOrderRejections:
    def test_empty_cart(self, address):
        with pytest.raises(EmptyCart):
            _place(address)
        assert _placed_orders() == []

    def test_cart_emptied_by_removal(self, make_product, address):
        from storefront.cart.management import RemoveFromCart

        item_id = _add(make_product().id)
        current_domain.process(RemoveFromCart(customer_id=CUSTOMER, item_id=item_id), asynchronous=False)
        with pytest.raises(EmptyCart):
            _place(address)

    def test_stock_dropped_after_add(self, make_product, address):
        lamp = make_product(stock=5)
        _add(lamp.id, 5)

        product = current_domain.repository_for(Product).get(lamp.id)
        product.adjust_stock(-2)
        current_domain.repository_for(Product).add(product)

        with pytest.raises(InsufficientStock) as exc:
            _place(address)

        assert exc.value.product_id == str(lamp.id)
        assert _stock(lamp.id) == 3
        assert _placed_orders() == []
        assert current_domain.repository_for(Cart).get(CUSTOMER).items[0].quantity == 5

    def test_lines_sharing_a_product_are_checked_together(self, make_product, address):
        shirt = make_product(name="T-Shirt", stock=4, customization_options=[{"name": "size", "options": ["S", "M"]}])
        _add(shirt.id, 2, {"size": "S"})
        _add(shirt.id, 2, {"size": "M"})

        product = current_domain.repository_for(Product).get(shirt.id)
        product.adjust_stock(-1)
        current_domain.repository_for(Product).add(product)

        with pytest.raises(InsufficientStock):
            _place(address)
        assert _stock(shirt.id) == 3

    def test_incomplete_address(self, make_product, address):
        from protean.exceptions import ValidationError

        lamp = make_product()
        _add(lamp.id)
        address["postal_code"] = ""
        with pytest.raises(ValidationError):
            _place(address)
        assert _stock(lamp.id) == 10
        assert _placed_orders() == []


class TestPlaceOrderRollback:
    def test_failure_while_taking_stock_is_rolled_back(self, make_product, address, monkeypatch):
        lamp = make_product(name="Desk Lamp", stock=10)
        rug = make_product(name="Rug", stock=10)
        _add(lamp.id, 1)
        _add(rug.id, 2)

        original = Product.deduct_stock

        def failing_deduct(self, quantity, reason="order"):
            if self.name == "Rug":
                raise RuntimeError("storage unavailable")
            return original(self, quantity, reason)

        monkeypatch.setattr(Product, "deduct_stock", failing_deduct)

        with pytest.raises(OrderCommitFailed) as exc:
            _place(address)

        assert exc.value.step == "deduct_stock"
        assert _stock(lamp.id) == 10
        assert _stock(rug.id) == 10
        assert _placed_orders() == []
        assert len(current_domain.repository_for(Cart).get(CUSTOMER).items) == 2
