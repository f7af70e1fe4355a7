from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from sqlmodel import select

from app.main import app
from app.models.product import Product
from app.repositories.product_repo import ProductRepository

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def _create(client, **fields):
    data = {"title": "Ring", "category": "Gold", "imageUrl": "http://x/a.jpg"}
    data.update(fields)
    resp = client.post("/api/products", data=data)
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_create_with_image_url(client, store):
    resp = client.post(
        "/api/products",
        data={"title": "Ring", "category": "Gold", "imageUrl": "http://x/a.jpg"},
    )

    assert resp.status_code == 201
    body = resp.json()
    assert isinstance(body["id"], int)
    assert body["image"] == "http://x/a.jpg"
    assert body["title"] == "Ring"
    assert body["category"] == "Gold"
    assert body["description"] is None
    assert store.uploads == []


def test_create_with_file_uploads_before_insert(client, store):
    resp = client.post(
        "/api/products",
        data={"title": "Chain", "category": "Silver", "weight": "12 g"},
        files={"image": ("chain.png", PNG_BYTES, "image/png")},
    )

    assert resp.status_code == 201
    assert resp.json()["image"] == "https://cdn.test/products/1.png"
    assert store.uploads == [(PNG_BYTES, "png", "image/png")]


def test_file_wins_over_image_url(client, store):
    resp = client.post(
        "/api/products",
        data={"title": "Chain", "category": "Silver", "imageUrl": "http://x/ignored.jpg"},
        files={"image": ("chain.png", PNG_BYTES, "image/png")},
    )

    assert resp.status_code == 201
    assert resp.json()["image"].startswith("https://cdn.test/")


def test_create_without_any_image_is_rejected(client, session, store):
    resp = client.post("/api/products", data={"title": "Ring", "category": "Gold"})

    assert resp.status_code == 400
    assert "error" in resp.json()
    assert session.exec(select(Product)).all() == []
    assert store.uploads == []


def test_create_missing_required_fields(client, session):
    resp = client.post("/api/products", data={"title": "Ring", "imageUrl": "http://x/a.jpg"})

    assert resp.status_code == 400
    assert "category" in resp.json()["error"]
    assert session.exec(select(Product)).all() == []


def test_blank_title_counts_as_missing(client):
    resp = client.post(
        "/api/products",
        data={"title": "   ", "category": "Gold", "imageUrl": "http://x/a.jpg"},
    )
    assert resp.status_code == 400


def test_required_fields_are_configurable(client, settings):
    settings.PRODUCT_REQUIRED_FIELDS = ["title", "description", "weight", "category"]

    resp = client.post(
        "/api/products",
        data={"title": "Ring", "category": "Gold", "imageUrl": "http://x/a.jpg"},
    )

    assert resp.status_code == 400
    assert "description" in resp.json()["error"]
    assert "weight" in resp.json()["error"]


def test_unsupported_image_type(client, store):
    resp = client.post(
        "/api/products",
        data={"title": "Ring", "category": "Gold"},
        files={"image": ("notes.txt", b"hello", "text/plain")},
    )

    assert resp.status_code == 400
    assert store.uploads == []


def test_upload_failure_is_500_and_nothing_stored(client, session, store):
    store.fail = True

    resp = client.post(
        "/api/products",
        data={"title": "Ring", "category": "Gold"},
        files={"image": ("ring.png", PNG_BYTES, "image/png")},
    )

    assert resp.status_code == 500
    assert resp.json() == {"error": "Image upload failed"}
    assert session.exec(select(Product)).all() == []


def test_list_is_newest_first(client):
    for title in ("A", "B", "C"):
        _create(client, title=title)

    resp = client.get("/api/products")

    assert resp.status_code == 200
    rows = resp.json()
    assert [r["title"] for r in rows] == ["C", "B", "A"]
    ids = [r["id"] for r in rows]
    assert ids == sorted(ids, reverse=True)


def test_list_empty(client):
    resp = client.get("/api/products")
    assert resp.status_code == 200
    assert resp.json() == []


def test_partial_update_keeps_other_fields(client):
    created = _create(client, description="22 carat", weight="5 g")

    resp = client.put(f"/api/products/{created['id']}", data={"title": "Big Ring"})

    assert resp.status_code == 200
    updated = resp.json()
    assert updated["title"] == "Big Ring"
    assert updated["image"] == "http://x/a.jpg"
    assert updated["description"] == "22 carat"
    assert updated["weight"] == "5 g"
    assert updated["category"] == "Gold"


def test_update_replaces_image_with_new_file(client, store):
    created = _create(client)

    resp = client.put(
        f"/api/products/{created['id']}",
        files={"image": ("new.png", PNG_BYTES, "image/png")},
    )

    assert resp.status_code == 200
    assert resp.json()["image"] == "https://cdn.test/products/1.png"
    assert resp.json()["title"] == "Ring"


def test_update_replaces_image_with_new_url(client):
    created = _create(client)

    resp = client.put(
        f"/api/products/{created['id']}",
        data={"imageUrl": "http://x/b.jpg"},
    )

    assert resp.status_code == 200
    assert resp.json()["image"] == "http://x/b.jpg"


def test_update_unknown_product(client):
    resp = client.put("/api/products/999", data={"title": "Ghost"})
    assert resp.status_code == 404
    assert resp.json() == {"error": "Product not found"}


def test_delete_product(client):
    created = _create(client)

    resp = client.delete(f"/api/products/{created['id']}")

    assert resp.status_code == 200
    assert resp.json() == {"message": "Product deleted"}
    assert client.get("/api/products").json() == []


def test_delete_is_idempotent(client):
    resp = client.delete("/api/products/12345")

    assert resp.status_code == 200
    assert resp.json() == {"message": "Product deleted"}


def test_update_unknown_product_does_not_upload(client, store):
    resp = client.put(
        "/api/products/999",
        files={"image": ("a.png", PNG_BYTES, "image/png")},
    )

    assert resp.status_code == 404
    assert store.uploads == []


def test_oversized_image_is_413_and_not_uploaded(client, session, store):
    too_big = b"\x00" * (5 * 1024 * 1024 + 1)

    resp = client.post(
        "/api/products",
        data={"title": "Ring", "category": "Gold"},
        files={"image": ("big.png", too_big, "image/png")},
    )

    assert resp.status_code == 413
    assert "error" in resp.json()
    assert store.uploads == []
    assert session.exec(select(Product)).all() == []


def _db_down(*args, **kwargs):
    raise OperationalError("SELECT 1", {}, Exception("connection refused"))


def test_list_store_failure_is_500(client, monkeypatch):
    monkeypatch.setattr(ProductRepository, "list", _db_down)

    resp = client.get("/api/products")

    assert resp.status_code == 500
    assert resp.json() == {"error": "Database operation failed"}


def test_update_store_failure_is_500(client, monkeypatch):
    monkeypatch.setattr(ProductRepository, "get_by_id", _db_down)

    resp = client.put("/api/products/1", data={"title": "New"})

    assert resp.status_code == 500
    assert resp.json() == {"error": "Database operation failed"}


def test_delete_store_failure_is_500(client, monkeypatch):
    monkeypatch.setattr(ProductRepository, "delete_by_id", _db_down)

    resp = client.delete("/api/products/1")

    assert resp.status_code == 500
    assert resp.json() == {"error": "Database operation failed"}
    assert "connection refused" not in resp.text


def test_unexpected_error_is_generic_500(client, monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("secret internals")

    monkeypatch.setattr(ProductRepository, "list", boom)
    quiet_client = TestClient(app, raise_server_exceptions=False)

    resp = quiet_client.get("/api/products")

    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal server error"}
    assert "secret" not in resp.text
