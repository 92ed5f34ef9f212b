"""
Integration tests for the HTTP API.

Tests cover:
- POST /api/admin/login and GET /api/admin/me
- The access guard on every admin-only route
- Products, testimonials, spotlight, metadata and contact endpoints
- Error translation (400 / 401 / 404 / 500)
- The configurable admin route segment
"""

import dataclasses
import sqlite3
from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from c4knives.api.server import create_app
from c4knives.auth.security import create_access_token
from c4knives.util.ids import new_id
from c4knives.util.time import utcnow


PRODUCT = {
    "name": "Bowie",
    "description": "Hand-forged 1095 carbon steel",
    "price": 350,
    "imageUrl": "/img/bowie.jpg",
    "tags": ["fixed", "carbon"],
}

TESTIMONIAL = {"name": "Sam", "role": "Chef", "content": "Holds an edge.", "rating": 5}


class TestAuthEndpoints:
    def test_login_returns_token_and_admin(self, client):
        response = client.post("/api/admin/login", json={"username": "admin", "password": "admin123"})

        assert response.status_code == 200
        data = response.json()
        assert data["token"]
        assert data["admin"]["username"] == "admin"
        assert set(data["admin"]) == {"id", "username"}

    def test_me_returns_admin_without_password(self, client, auth_headers):
        response = client.get("/api/admin/me", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["username"] == "admin"
        assert "id" in data
        assert not any("password" in k.lower() for k in data)

    def test_bearer_header_is_accepted(self, client, token):
        response = client.get("/api/admin/me", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200

    @pytest.mark.parametrize(
        "body",
        [
            {"username": "admin", "password": "wrong"},
            {"username": "nobody", "password": "admin123"},
        ],
    )
    def test_bad_credentials_look_the_same(self, client, body):
        response = client.post("/api/admin/login", json=body)

        assert response.status_code == 400
        assert response.json() == {"msg": "Invalid credentials"}

    @pytest.mark.parametrize("body", [{}, {"username": "admin"}, {"password": "admin123"}, {"username": "", "password": ""}])
    def test_missing_fields(self, client, body):
        response = client.post("/api/admin/login", json=body)

        assert response.status_code == 400
        assert response.json() == {"msg": "Please enter all fields"}


class TestAccessGuard:
    def _bad_headers(self, cfg):
        expired = create_access_token(
            secret=cfg.AUTH_JWT_SECRET,
            admin_id=new_id(),
            now=utcnow() - timedelta(hours=25),
        )
        forged = create_access_token(secret="not-the-server-secret-but-32-bytes-long", admin_id=new_id())
        unknown_subject = create_access_token(secret=cfg.AUTH_JWT_SECRET, admin_id=new_id())
        return [
            {},
            {"x-auth-token": ""},
            {"x-auth-token": "garbage"},
            {"x-auth-token": expired},
            {"x-auth-token": forged},
            {"x-auth-token": unknown_subject},
        ]

    def test_every_bad_token_fails_identically(self, client, cfg):
        bodies = set()
        for headers in self._bad_headers(cfg):
            response = client.post("/api/products", json=PRODUCT, headers=headers)
            assert response.status_code == 401
            bodies.add(response.text)

        assert bodies == {'{"msg":"Token is not valid"}'}
        assert client.get("/api/products").json() == []

    def test_post_products_without_token_does_not_create(self, client):
        before = len(client.get("/api/products").json())

        response = client.post("/api/products", json=PRODUCT)

        assert response.status_code == 401
        assert len(client.get("/api/products").json()) == before

    def test_guard_runs_before_body_validation(self, client):
        response = client.post("/api/testimonials", json={"rating": 99})

        assert response.status_code == 401

    @pytest.mark.parametrize(
        "method,path",
        [
            ("get", "/api/admin/me"),
            ("post", "/api/products"),
            ("put", "/api/products/{id}"),
            ("delete", "/api/products/{id}"),
            ("put", "/api/spotlight"),
            ("post", "/api/testimonials"),
            ("put", "/api/testimonials/{id}"),
            ("delete", "/api/testimonials/{id}"),
            ("get", "/api/contact/messages"),
            ("put", "/api/metadata"),
        ],
    )
    def test_admin_routes_require_token(self, client, method, path):
        kwargs = {"json": {}} if method in ("post", "put") else {}
        response = getattr(client, method)(path.format(id=new_id()), **kwargs)

        assert response.status_code == 401

    @pytest.mark.parametrize("path", ["/api/products", "/api/spotlight", "/api/testimonials", "/api/metadata", "/api/health"])
    def test_public_reads_need_no_token(self, client, path):
        assert client.get(path).status_code == 200


class TestProductEndpoints:
    def test_crud(self, client, auth_headers):
        created = client.post("/api/products", json=PRODUCT, headers=auth_headers)
        assert created.status_code == 200
        product = created.json()
        assert product["name"] == "Bowie"
        assert product["isCurrentlyAvailable"] is False

        fetched = client.get(f"/api/products/{product['id']}")
        assert fetched.status_code == 200
        assert fetched.json() == product

        updated = client.put(
            f"/api/products/{product['id']}",
            json={"price": 400, "isCurrentlyAvailable": True, "notAField": 1},
            headers=auth_headers,
        )
        assert updated.status_code == 200
        assert updated.json()["price"] == 400
        assert updated.json()["isCurrentlyAvailable"] is True
        assert updated.json()["description"] == PRODUCT["description"]

        deleted = client.delete(f"/api/products/{product['id']}", headers=auth_headers)
        assert deleted.status_code == 200
        assert deleted.json() == {"msg": "Product removed"}
        assert client.get("/api/products").json() == []

    @pytest.mark.parametrize("product_id", ["not-an-id", "0" * 24])
    def test_get_malformed_id_is_404(self, client, product_id):
        response = client.get(f"/api/products/{product_id}")

        assert response.status_code == 404
        assert response.json() == {"msg": "Product not found"}

    def test_update_and_delete_unknown_id(self, client, auth_headers):
        client.post("/api/products", json=PRODUCT, headers=auth_headers)
        before = client.get("/api/products").json()

        put = client.put(f"/api/products/{new_id()}", json={"name": "ghost"}, headers=auth_headers)
        delete = client.delete(f"/api/products/{new_id()}", headers=auth_headers)

        assert put.status_code == 404
        assert delete.status_code == 404
        assert client.get("/api/products").json() == before

    def test_negative_price_rejected(self, client, auth_headers):
        response = client.post("/api/products", json={**PRODUCT, "price": -1}, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["msg"] == "Invalid request body"

    def test_missing_required_field_rejected(self, client, auth_headers):
        body = {k: v for k, v in PRODUCT.items() if k != "name"}

        response = client.post("/api/products", json=body, headers=auth_headers)

        assert response.status_code == 400

    def test_empty_name_rejected(self, client, auth_headers):
        response = client.post("/api/products", json={**PRODUCT, "name": ""}, headers=auth_headers)

        assert response.status_code == 400
        assert "name" in response.json()["msg"]
        assert client.get("/api/products").json() == []


class TestTestimonialEndpoints:
    def test_crud(self, client, auth_headers):
        created = client.post("/api/testimonials", json=TESTIMONIAL, headers=auth_headers).json()

        listed = client.get("/api/testimonials").json()
        assert listed == [created]

        updated = client.put(f"/api/testimonials/{created['id']}", json={"rating": 3}, headers=auth_headers)
        assert updated.status_code == 200
        assert updated.json()["rating"] == 3
        assert updated.json()["name"] == "Sam"

        deleted = client.delete(f"/api/testimonials/{created['id']}", headers=auth_headers)
        assert deleted.json() == {"msg": "Testimonial removed"}

    def test_null_image_clears_it(self, client, auth_headers):
        body = {**TESTIMONIAL, "imageUrl": "/img/sam.jpg"}
        created = client.post("/api/testimonials", json=body, headers=auth_headers).json()

        response = client.put(f"/api/testimonials/{created['id']}", json={"imageUrl": None}, headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["imageUrl"] is None
        assert client.get("/api/testimonials").json()[0]["imageUrl"] is None

    @pytest.mark.parametrize("rating", [0, 6])
    def test_rating_bounds(self, client, auth_headers, rating):
        response = client.post("/api/testimonials", json={**TESTIMONIAL, "rating": rating}, headers=auth_headers)

        assert response.status_code == 400

    def test_unknown_id(self, client, auth_headers):
        put = client.put(f"/api/testimonials/{new_id()}", json={"rating": 3}, headers=auth_headers)
        delete = client.delete(f"/api/testimonials/{new_id()}", headers=auth_headers)

        assert put.status_code == 404
        assert put.json() == {"msg": "Testimonial not found"}
        assert delete.status_code == 404


class TestSpotlightEndpoints:
    def test_null_until_written(self, client):
        response = client.get("/api/spotlight")

        assert response.status_code == 200
        assert response.json() is None

    def test_put_then_get(self, client, auth_headers):
        body = {"title": "The Ranger", "description": "New drop", "videoUrl": "https://youtu.be/x"}

        put = client.put("/api/spotlight", json=body, headers=auth_headers)
        got = client.get("/api/spotlight")

        assert put.status_code == 200
        assert got.json() == put.json()
        assert got.json()["title"] == "The Ranger"

    def test_null_product_id_unlinks_product(self, client, auth_headers):
        product = client.post("/api/products", json=PRODUCT, headers=auth_headers).json()
        client.put("/api/spotlight", json={"title": "The Ranger", "productId": product["id"]}, headers=auth_headers)

        response = client.put("/api/spotlight", json={"productId": None}, headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["productId"] is None
        assert response.json()["title"] == "The Ranger"


class TestMetadataEndpoints:
    def test_get_auto_creates_defaults(self, client):
        first = client.get("/api/metadata").json()
        second = client.get("/api/metadata").json()

        assert first == second
        assert first["knifeCounter"] == 0
        assert first["email"] == ""

    def test_partial_put_keeps_other_fields(self, client, auth_headers):
        client.put("/api/metadata", json={"email": "shop@c4knives.com", "phone": "555-0100"}, headers=auth_headers)
        before = client.get("/api/metadata").json()

        put = client.put("/api/metadata", json={"knifeCounter": 42}, headers=auth_headers)
        after = client.get("/api/metadata").json()

        assert put.status_code == 200
        assert after["knifeCounter"] == 42
        for field in ("email", "phone", "address", "instagram", "facebook", "youtube"):
            assert after[field] == before[field]

    def test_negative_counter_rejected(self, client, auth_headers):
        response = client.put("/api/metadata", json={"knifeCounter": -1}, headers=auth_headers)

        assert response.status_code == 400


class TestContactEndpoints:
    def test_short_message_accepted(self, client, auth_headers):
        response = client.post("/api/contact", json={"name": "Ann", "email": "ann@example.com", "message": "Hi"})

        assert response.status_code == 200
        saved = response.json()
        assert saved["message"] == "Hi"

        messages = client.get("/api/contact/messages", headers=auth_headers)
        assert messages.status_code == 200
        assert messages.json() == [saved]

    def test_missing_fields(self, client):
        response = client.post("/api/contact", json={"name": "Ann", "email": "ann@example.com"})

        assert response.status_code == 400
        assert response.json() == {"msg": "Please enter all fields"}


class TestServerErrors:
    def test_unexpected_failure_is_generic_500(self, cfg):
        with TestClient(create_app(cfg)) as client:
            # Break the store underneath the running app.
            raw = sqlite3.connect(cfg.DB_DSN)
            try:
                raw.execute("DROP TABLE products")
                raw.commit()
            finally:
                raw.close()

            response = client.get("/api/products")

        assert response.status_code == 500
        assert response.text == "Server Error"

    def test_500_keeps_cors_headers(self, cfg):
        with TestClient(create_app(cfg)) as client:
            raw = sqlite3.connect(cfg.DB_DSN)
            try:
                raw.execute("DROP TABLE products")
                raw.commit()
            finally:
                raw.close()

            response = client.get("/api/products", headers={"Origin": "http://localhost:3000"})

        assert response.status_code == 500
        assert response.headers["access-control-allow-origin"] == "http://localhost:3000"


class TestAdminRouteSegment:
    @pytest.fixture
    def segmented(self, cfg):
        with TestClient(create_app(dataclasses.replace(cfg, ADMIN_API_ROUTE="manage"))) as c:
            token = c.post("/api/admin/login", json={"username": "admin", "password": "admin123"}).json()["token"]
            yield c, {"x-auth-token": token}

    def test_admin_writes_use_the_segment(self, segmented):
        client, headers = segmented

        created = client.post("/api/products/manage", json=PRODUCT, headers=headers)
        assert created.status_code == 200
        product_id = created.json()["id"]

        assert client.put(f"/api/products/manage/{product_id}", json={"price": 1}, headers=headers).status_code == 200
        assert client.put("/api/metadata/manage", json={"knifeCounter": 7}, headers=headers).status_code == 200
        assert client.get("/api/contact/manage/messages", headers=headers).status_code == 200
        assert client.get("/api/metadata").json()["knifeCounter"] == 7

    def test_plain_paths_do_not_accept_writes(self, segmented):
        client, headers = segmented

        assert client.post("/api/products", json=PRODUCT, headers=headers).status_code in (404, 405)
        assert client.put("/api/metadata", json={"knifeCounter": 1}, headers=headers).status_code in (404, 405)
        assert client.get("/api/products").json() == []


class TestStartup:
    def test_bootstrap_failure_does_not_stop_the_server(self, cfg, monkeypatch):
        def _boom(_cfg):
            raise RuntimeError("store unavailable")

        monkeypatch.setattr("c4knives.api.server.bootstrap_admin_if_needed", _boom)

        with TestClient(create_app(cfg)) as client:
            assert client.get("/api/health").json() == {"status": "ok"}
            login = client.post("/api/admin/login", json={"username": "admin", "password": "admin123"})

        assert login.status_code == 400

    def test_restart_keeps_the_same_admin(self, cfg):
        with TestClient(create_app(cfg)) as client:
            first = client.post("/api/admin/login", json={"username": "admin", "password": "admin123"}).json()
        with TestClient(create_app(cfg)) as client:
            second = client.post("/api/admin/login", json={"username": "admin", "password": "admin123"}).json()

        assert first["admin"]["id"] == second["admin"]["id"]
