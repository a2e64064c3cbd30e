"""
HTTP surface: routing, status codes and error bodies.
"""

from backoffice.services import asset_store

ORDER = {
    "customer": {"first_name": "Olena", "last_name": "Shevchenko", "email": "olena@example.com", "phone": "+380"},
    "payment_method": "card",
    "delivery_method": "post",
    "delivery_cost": "10",
}


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


class TestCategoriesApi:
    def test_create_and_tree(self, client):
        root = client.post("/categories/", json={"name": "Phones"})
        assert root.status_code == 201
        assert root.json()["slug"] == "phones"

        child = client.post("/categories/", json={"name": "Android", "parent_id": root.json()["id"]})
        assert child.status_code == 201

        tree = client.get("/categories/tree").json()
        assert [node["name"] for node in tree] == ["Phones"]
        assert [node["name"] for node in tree[0]["children"]] == ["Android"]

    def test_duplicate_slug_conflict(self, client):
        client.post("/categories/", json={"name": "Phones"})

        response = client.post("/categories/", json={"name": "Other", "slug": "phones"})

        assert response.status_code == 409
        assert response.json() == {
            "status": "error",
            "message": 'Category with slug "phones" already exists',
            "details": {"slug": "phones"},
        }

    def test_unknown_category(self, client):
        response = client.get("/categories/999")

        assert response.status_code == 404
        assert response.json()["details"] == {"id": 999}

    def test_delete_with_children(self, client):
        root = client.post("/categories/", json={"name": "Phones"}).json()
        client.post("/categories/", json={"name": "Android", "parent_id": root["id"]})

        assert client.delete(f"/categories/{root['id']}").status_code == 400

    def test_empty_slug_on_update(self, client):
        root = client.post("/categories/", json={"name": "Phones"}).json()

        response = client.patch(f"/categories/{root['id']}", json={"slug": ""})

        assert response.status_code == 400
        assert client.get(f"/categories/{root['id']}").json()["slug"] == "phones"

    def test_image_upload(self, client, monkeypatch, tmp_path):
        monkeypatch.setattr(asset_store, "UPLOADS_DIR", str(tmp_path))
        root = client.post("/categories/", json={"name": "Phones"}).json()

        response = client.post(f"/categories/{root['id']}/image", files={"file": ("cover.png", b"png", "image/png")})

        assert response.status_code == 200
        name = response.json()["image"].rsplit("/", 1)[1]
        assert (tmp_path / "categories" / str(root["id"]) / name).read_bytes() == b"png"

    def test_menu_statistics(self, client):
        client.post("/menu/", json={"name": "Home", "url": "/"})

        stats = client.get("/menu/statistics").json()

        assert stats["total"] == 1
        assert stats["sub_menu"] == 0


class TestOrdersApi:
    def test_place_order(self, client, make_product, notifications):
        phone = make_product(price="100")

        response = client.post("/orders/", json={**ORDER, "items": [{"product_id": phone.id, "quantity": 2}]})

        assert response.status_code == 201
        body = response.json()
        assert body["total"] == "210.00"
        assert body["status"] == "pending"
        assert "payment_details" not in body
        assert notifications == [body["id"]]

    def test_string_product_id(self, client, make_product):
        phone = make_product()

        response = client.post("/orders/", json={**ORDER, "items": [{"product_id": str(phone.id), "quantity": 1}]})

        assert response.status_code == 201

    def test_missing_product(self, client):
        response = client.post("/orders/", json={**ORDER, "items": [{"product_id": 404, "quantity": 1}]})

        assert response.status_code == 400
        assert response.json()["details"] == {"missing": [404]}

    def test_validation_error(self, client):
        assert client.post("/orders/", json={**ORDER, "items": []}).status_code == 422

    def test_dispatch_endpoint(self, client, make_product, make_integration, telegram_client):
        make_integration()
        order = client.post("/orders/", json={**ORDER, "items": [{"product_id": make_product().id, "quantity": 1}]}).json()

        first = client.post(f"/orders/{order['id']}/dispatch").json()
        second = client.post(f"/orders/{order['id']}/dispatch").json()

        assert first == {"order_id": order["id"], "outcome": "sent"}
        assert second["outcome"] == "already_sent"
        assert len(telegram_client.sent) == 1

    def test_update_status(self, client, make_product):
        order = client.post("/orders/", json={**ORDER, "items": [{"product_id": make_product().id, "quantity": 1}]}).json()

        response = client.patch(f"/orders/{order['id']}", json={"status": "confirmed", "tracking_number": "TT1"})

        assert response.json()["status"] == "confirmed"
        assert response.json()["tracking_number"] == "TT1"


class TestCartsApi:
    def test_cart_flow(self, client, make_product):
        phone = make_product(price="25")

        client.post("/carts/items?session_id=s1", json={"product_id": phone.id, "quantity": 2})
        cart = client.post("/carts/items?session_id=s1", json={"product_id": phone.id}).json()

        assert len(cart["items"]) == 1
        assert cart["items"][0]["quantity"] == 3
        assert cart["subtotal"] == "75.00"

        line_id = cart["items"][0]["id"]
        cart = client.patch(f"/carts/items/{line_id}?session_id=s1", json={"quantity": 0}).json()
        assert cart["items"] == []

    def test_owner_required(self, client):
        assert client.get("/carts/").status_code == 400


class TestIntegrationsApi:
    def test_secrets_are_not_returned(self, client):
        response = client.post("/integrations/", json={"type": "telegram", "name": "Bot", "bot_token": "123:SECRET"})

        assert response.status_code == 201
        body = response.json()
        assert body["has_bot_token"] is True
        assert "bot_token" not in body
        assert "123:SECRET" not in response.text

    def test_unknown_type(self, client):
        assert client.get("/integrations/type/fax").status_code == 422

    def test_generate_link(self, client, make_integration):
        tracker = make_integration(type="keitaro", tracking_url="https://track.example.com")

        response = client.post(
            "/integrations/keitaro/generate-link",
            json={"integration_id": tracker.id, "base_url": "https://shop.example.com", "params": {"utm_source": "tg"}},
        )

        assert response.json() == {"url": "https://shop.example.com?utm_source=tg"}
