"""Tests for the Wishlist aggregate."""

import pytest
from protean.exceptions import ObjectNotFoundError, ValidationError

from storefront.catalogue.product import Product
from storefront.wishlist.events import WishlistItemAdded, WishlistItemRemoved
from storefront.wishlist.wishlist import Wishlist


@pytest.fixture()
def wishlist():
    return Wishlist.create(customer_id="cust-001")


@pytest.fixture()
def lamp():
    return Product.create(name="Desk Lamp", price=500.0, stock=10)


@pytest.fixture()
def rug():
    return Product.create(name="Wool Rug", price=1200.0, stock=0)


class TestCreation:
    def test_identity_is_the_customer(self, wishlist):
        assert wishlist.id == "cust-001"
        assert wishlist.entries() == []


class TestAddProduct:
    def test_adds_entry_and_raises_event(self, wishlist, lamp):
        wishlist.add_product(lamp)

        assert wishlist.contains(lamp.id)
        event = wishlist._events[-1]
        assert isinstance(event, WishlistItemAdded)
        assert event.product_id == str(lamp.id)

    def test_newest_entry_first(self, wishlist, lamp, rug):
        wishlist.add_product(lamp)
        wishlist.add_product(rug)
        assert [str(item.product_id) for item in wishlist.entries()] == [str(rug.id), str(lamp.id)]

    def test_out_of_stock_products_can_be_saved(self, wishlist, rug):
        wishlist.add_product(rug)
        assert wishlist.contains(rug.id)

    def test_duplicate_is_refused(self, wishlist, lamp):
        wishlist.add_product(lamp)
        with pytest.raises(ValidationError) as exc:
            wishlist.add_product(lamp)
        assert exc.value.messages == {"product_id": ["Product already in wishlist"]}
        assert len(wishlist.items) == 1


class TestRemoveProduct:
    def test_removes_entry_and_raises_event(self, wishlist, lamp, rug):
        wishlist.add_product(lamp)
        wishlist.add_product(rug)

        wishlist.remove_product(lamp.id)

        assert [str(item.product_id) for item in wishlist.entries()] == [str(rug.id)]
        assert isinstance(wishlist._events[-1], WishlistItemRemoved)

    def test_unknown_product(self, wishlist, lamp):
        with pytest.raises(ObjectNotFoundError):
            wishlist.remove_product(lamp.id)
