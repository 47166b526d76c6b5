"""BDD tests for checkout."""

import json

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, scenarios, then, when

from storefront.cart.cart import Cart
from storefront.cart.management import AddToCart
from storefront.catalogue.product import Product
from storefront.checkout.placement import PlaceOrder
from storefront.order.order import Order

scenarios("features/checkout.feature")

CUSTOMER = "cust-001"


@pytest.fixture()
def products():
    return {}


@pytest.fixture()
def outcome():
    return {"order_id": None, "exc": None}


def _stock(products, name):
    return current_domain.repository_for(Product).get(products[name]).stock


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a product "{name}" priced {price:f} with {stock:d} in stock'))
def _(make_product, products, name, price, stock):
    products[name] = str(make_product(name=name, price=price, stock=stock).id)


@given(parsers.cfparse('the customer has {quantity:d} "{name}" in their cart'))
def _(products, name, quantity):
    current_domain.process(
        AddToCart(customer_id=CUSTOMER, product_id=products[name], quantity=quantity, customization="{}"),
        asynchronous=False,
    )


@given(parsers.cfparse('"{name}" stock drops to {stock:d}'))
def _(products, name, stock):
    repo = current_domain.repository_for(Product)
    product = repo.get(products[name])
    product.adjust_stock(stock - product.stock)
    repo.add(product)


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when("the customer checks out")
def _(address, outcome):
    try:
        outcome["order_id"] = current_domain.process(
            PlaceOrder(
                customer_id=CUSTOMER,
                customer_email="cust-001@example.com",
                shipping_address=json.dumps(address),
                payment_method="PayPal",
            ),
            asynchronous=False,
        )
    except ValidationError as exc:
        outcome["exc"] = exc


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then("an order is placed", target_fixture="order")
def _(outcome):
    assert outcome["exc"] is None
    order = current_domain.repository_for(Order).get(outcome["order_id"])
    assert order.status == "placed"
    return order


@then(parsers.cfparse("the order {part} price is {amount:f}"))
def _(outcome, part, amount):
    order = current_domain.repository_for(Order).get(outcome["order_id"])
    field = {"items": "items_price", "tax": "tax_price", "shipping": "shipping_price", "total": "total_price"}[part]
    assert getattr(order, field) == pytest.approx(amount)


@then(parsers.cfparse('"{name}" has {stock:d} in stock'))
def _(products, name, stock):
    assert _stock(products, name) == stock


@then("the customer's cart is empty")
def _():
    assert current_domain.repository_for(Cart).get(CUSTOMER).is_empty()


@then(parsers.cfparse('the customer\'s cart still holds {quantity:d} "{name}"'))
def _(products, name, quantity):
    cart = current_domain.repository_for(Cart).get(CUSTOMER)
    assert [(str(item.product_id), item.quantity) for item in cart.items] == [(products[name], quantity)]


@then(parsers.cfparse('the checkout fails with "{code}"'))
def _(outcome, code):
    assert outcome["exc"] is not None
    assert getattr(outcome["exc"], "code", None) == code


@then("the customer has no orders")
def _():
    assert current_domain.repository_for(Order).for_customer(CUSTOMER) == []
