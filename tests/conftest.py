import os

# Must be set before app modules build the engine / settings
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from app.core.config import Settings, get_settings
from app.core.exceptions import NotificationError, StorageError
from app.core.notifier import get_notifier
from app.core.storage_utils import get_object_store
from app.database import get_session
from app.main import app
from app.models import order as _order_models  # noqa: F401
from app.models import product as _product_models  # noqa: F401


class FakeObjectStore:
    def __init__(self):
        self.uploads: list[tuple[bytes, str, str]] = []
        self.fail = False

    def upload(self, file_bytes: bytes, ext: str, content_type: str) -> str:
        if self.fail:
            raise StorageError()
        self.uploads.append((file_bytes, ext, content_type))
        return f"https://cdn.test/products/{len(self.uploads)}.{ext}"


class FakeNotifier:
    def __init__(self):
        self.messages: list[str] = []
        self.error: Exception | None = None

    def notify(self, message: str) -> None:
        if self.error is not None:
            raise self.error
        self.messages.append(message)

    def fail_with(self, error: Exception | None = None) -> None:
        self.error = error or NotificationError()


@pytest.fixture(name="engine")
def engine_fixture():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture(name="store")
def store_fixture():
    return FakeObjectStore()


@pytest.fixture(name="notifier")
def notifier_fixture():
    return FakeNotifier()


@pytest.fixture(name="settings")
def settings_fixture():
    return Settings(_env_file=None, DATABASE_URL="sqlite://")


@pytest.fixture(name="client")
def client_fixture(engine, store, notifier, settings):
    def get_session_override():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_object_store] = lambda: store
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_settings] = lambda: settings

    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()
