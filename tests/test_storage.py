import pytest

from app.core import storage_utils
from app.core.exceptions import StorageError
from app.core.storage_utils import SupabaseObjectStore


class FakeBucket:
    def __init__(self, fail=False):
        self.fail = fail
        self.uploaded = []

    def upload(self, path, data, options):
        if self.fail:
            raise RuntimeError("bucket not found")
        self.uploaded.append((path, data, options))

    def get_public_url(self, path):
        return f"https://proj.supabase.co/storage/v1/object/public/products/{path}"


class FakeStorage:
    def __init__(self, bucket):
        self.bucket = bucket
        self.names = []

    def from_(self, name):
        self.names.append(name)
        return self.bucket


class FakeClient:
    def __init__(self, bucket):
        self.storage = FakeStorage(bucket)


def test_upload_returns_public_url(monkeypatch):
    bucket = FakeBucket()
    client = FakeClient(bucket)
    monkeypatch.setattr(storage_utils, "supabase_admin", lambda: client)

    url = SupabaseObjectStore(bucket="products").upload(b"img", "png", "image/png")

    path, data, options = bucket.uploaded[0]
    assert path.startswith("products/") and path.endswith(".png")
    assert data == b"img"
    assert options == {"content-type": "image/png"}
    assert url.endswith(path)
    assert client.storage.names == ["products"]


def test_upload_failure_becomes_storage_error(monkeypatch):
    monkeypatch.setattr(storage_utils, "supabase_admin", lambda: FakeClient(FakeBucket(fail=True)))

    with pytest.raises(StorageError):
        SupabaseObjectStore(bucket="products").upload(b"img", "png", "image/png")


def test_missing_credentials_become_storage_error(monkeypatch):
    def not_configured():
        raise RuntimeError("Missing SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY in .env")

    monkeypatch.setattr(storage_utils, "supabase_admin", not_configured)

    with pytest.raises(StorageError):
        SupabaseObjectStore(bucket="products").upload(b"img", "png", "image/png")
