"""
Test Suite Configuration
"""
import pytest
from datetime import datetime, timedelta, timezone
from fastapi.testclient import TestClient

from bakery.config import Settings
from bakery.main import create_app
from bakery.storage.container import build_storage
from bakery.storage.session_cache import SessionCache
from bakery.storage.snapshot import SnapshotStore
from bakery.utils.auth import hash_password
from bakery.utils.rate_limit import limiter

ADMIN_USERNAME = "test_admin"
ADMIN_PASSWORD = "Sugar&Flour-2025"


class FakeClock:
    """Mutable clock for time-dependent tests"""

    def __init__(self, start: datetime = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(scope="session")
def admin_password_hash() -> str:
    """Low-cost bcrypt hash so the suite stays fast"""
    return hash_password(ADMIN_PASSWORD, rounds=4)


@pytest.fixture
def test_settings(tmp_path, admin_password_hash) -> Settings:
    """Settings pointing every file at a temp directory"""
    return Settings(
        DATA_DIR=tmp_path / "data",
        UPLOAD_DIR=tmp_path / "uploads",
        ADMIN_USERNAME=ADMIN_USERNAME,
        ADMIN_PASSWORD_HASH=admin_password_hash,
        JWT_SECRET_KEY="test-secret-key",
        SMTP_HOST="",
    )


@pytest.fixture
def store(tmp_path, clock) -> SnapshotStore:
    return SnapshotStore(tmp_path / "store.json", clock=clock)


@pytest.fixture
def cache(tmp_path, clock) -> SessionCache:
    return SessionCache(tmp_path / "cache.json", clock=clock)


@pytest.fixture
def storage(test_settings):
    return build_storage(test_settings)


@pytest.fixture
def app(test_settings, storage):
    limiter.reset()
    return create_app(test_settings, storage)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_headers(client) -> dict:
    """Log in once and return the Authorization header"""
    response = client.post(
        "/api/admin/login",
        json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD},
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}
