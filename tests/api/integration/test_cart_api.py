"""Integration tests for the cart endpoints via TestClient."""

from protean import current_domain

from storefront.cart.cart import Cart


def _add(api_client, headers, product_id, quantity=1, customization=None):
    return api_client.post(
        "/cart",
        json={"product_id": str(product_id), "quantity": quantity, "customization": customization or {}},
        headers=headers,
    )


class TestCartAuthentication:
    def test_requires_token(self, api_client):
        response = api_client.get("/cart")
        assert response.status_code == 401
        assert response.json()["code"] == "unauthorized"

    def test_rejects_bad_token(self, api_client):
        response = api_client.get("/cart", headers={"Authorization": "Bearer not.a.token"})
        assert response.status_code == 401


class TestGetCart:
    def test_new_customer_sees_empty_cart(self, api_client, auth_header):
        response = api_client.get("/cart", headers=auth_header())
        assert response.status_code == 200
        cart = response.json()["cart"]
        assert cart["items"] == []
        assert cart["pricing"] == {"subtotal": 0.0, "tax": 0.0, "shipping": 100.0, "total": 100.0}

    def test_reading_does_not_create_a_cart(self, api_client, auth_header):
        api_client.get("/cart", headers=auth_header())
        assert current_domain.repository_for(Cart).find_for_customer("cust-001") is None


class TestAddToCart:
    def test_add_returns_priced_cart(self, api_client, auth_header, make_product):
        lamp = make_product(price=500.0)
        response = _add(api_client, auth_header(), lamp.id, 2)

        assert response.status_code == 201
        cart = response.json()["cart"]
        assert len(cart["items"]) == 1
        assert cart["items"][0]["product"]["name"] == "Desk Lamp"
        assert cart["pricing"] == {"subtotal": 1000.0, "tax": 180.0, "shipping": 100.0, "total": 1280.0}

    def test_same_customization_merges(self, api_client, auth_header, make_product):
        shirt = make_product(
            name="T-Shirt",
            customization_options=[
                {"name": "size", "options": ["S", "M"]},
                {"name": "color", "options": ["red", "blue"]},
            ],
        )
        headers = auth_header()
        _add(api_client, headers, shirt.id, 1, {"size": "M", "color": "red"})
        response = _add(api_client, headers, shirt.id, 1, {"color": "red", "size": "M"})

        items = response.json()["cart"]["items"]
        assert len(items) == 1
        assert items[0]["quantity"] == 2
        assert items[0]["customization"] == {"color": "red", "size": "M"}

    def test_zero_quantity(self, api_client, auth_header, make_product):
        response = _add(api_client, auth_header(), make_product().id, 0)
        assert response.status_code == 400
        assert response.json()["code"] == "validation"

    def test_insufficient_stock(self, api_client, auth_header, make_product):
        lamp = make_product(stock=1)
        response = _add(api_client, auth_header(), lamp.id, 3)
        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "insufficient_stock"
        assert body["product_id"] == str(lamp.id)
        assert body["product_name"] == "Desk Lamp"

    def test_unknown_product(self, api_client, auth_header):
        response = _add(api_client, auth_header(), "no-such-product")
        assert response.status_code == 404
        assert response.json()["code"] == "not_found"

    def test_missing_product_id(self, api_client, auth_header):
        response = api_client.post("/cart", json={"quantity": 1}, headers=auth_header())
        assert response.status_code == 400
        assert "product_id" in response.json()["error"]


class TestChangeCart:
    def test_update_quantity(self, api_client, auth_header, make_product):
        headers = auth_header()
        item_id = _add(api_client, headers, make_product().id).json()["cart"]["items"][0]["id"]

        response = api_client.put(f"/cart/{item_id}", json={"quantity": 3}, headers=headers)
        assert response.status_code == 200
        assert response.json()["cart"]["items"][0]["quantity"] == 3

    def test_update_to_zero_changes_nothing(self, api_client, auth_header, make_product):
        headers = auth_header()
        item_id = _add(api_client, headers, make_product().id, 2).json()["cart"]["items"][0]["id"]

        response = api_client.put(f"/cart/{item_id}", json={"quantity": 0}, headers=headers)
        assert response.status_code == 200
        assert response.json()["cart"]["items"][0]["quantity"] == 2

    def test_update_unknown_item(self, api_client, auth_header, make_product):
        headers = auth_header()
        _add(api_client, headers, make_product().id)
        response = api_client.put("/cart/nope", json={"quantity": 3}, headers=headers)
        assert response.status_code == 404
        assert response.json() == {"error": {"item_id": ["Item nope not found in cart"]}, "code": "not_found"}

    def test_remove_is_idempotent(self, api_client, auth_header, make_product):
        headers = auth_header()
        item_id = _add(api_client, headers, make_product().id).json()["cart"]["items"][0]["id"]

        for _ in range(2):
            response = api_client.delete(f"/cart/{item_id}", headers=headers)
            assert response.status_code == 200
            assert response.json()["cart"]["items"] == []

    def test_clear(self, api_client, auth_header, make_product):
        headers = auth_header()
        _add(api_client, headers, make_product(name="A").id)
        _add(api_client, headers, make_product(name="B").id)

        response = api_client.delete("/cart", headers=headers)
        assert response.status_code == 200
        assert response.json()["cart"]["items"] == []

    def test_carts_are_per_customer(self, api_client, auth_header, make_product):
        _add(api_client, auth_header("cust-001"), make_product().id)
        response = api_client.get("/cart", headers=auth_header("cust-002"))
        assert response.json()["cart"]["items"] == []
