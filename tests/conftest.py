"""Shared fixtures: an in-memory Record Store, a test app and role tokens."""

import pytest
from fastapi.testclient import TestClient

from recordkeeper.api.app import create_app
from recordkeeper.auth.jwt_service import JWTService
from recordkeeper.auth.password import PasswordService
from recordkeeper.auth.types import CallerContext
from recordkeeper.config import Settings
from recordkeeper.metadata.loader import MetadataLoader
from recordkeeper.persistence.config import DatabaseConfig
from recordkeeper.persistence.sqlite import SQLiteAdapter

TEST_SECRET = "test-secret-key-for-recordkeeper-tests"


@pytest.fixture
def loader():
    loader = MetadataLoader()
    loader.load_all()
    return loader


@pytest.fixture
def store(loader):
    """Connected in-memory SQLite store with every table created."""
    adapter = SQLiteAdapter(":memory:")
    adapter.connect()
    for name in loader.list_record_types():
        adapter.initialize_record_type(loader.get_record_type(name))
    yield adapter
    adapter.close()


@pytest.fixture
def user_caller():
    return CallerContext(user_id="2", email="reader@example.com", roles=frozenset({"USER"}))


@pytest.fixture
def admin_caller():
    return CallerContext(
        user_id="1", email="admin@example.com", roles=frozenset({"USER", "ADMIN"})
    )


@pytest.fixture
def password_service():
    # Minimum bcrypt cost keeps the suite fast
    return PasswordService(rounds=4)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database=DatabaseConfig(url=f"sqlite:///{tmp_path / 'data' / 'test.db'}"),
        secret_key=TEST_SECRET,
        admin_emails=frozenset({"boss@example.com"}),
    )


@pytest.fixture
def app(settings, password_service):
    return create_app(settings, password_service=password_service)


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client


@pytest.fixture
def jwt_service():
    return JWTService(TEST_SECRET)


def _bearer(jwt_service: JWTService, user_id: str, roles: list[str]) -> dict[str, str]:
    token = jwt_service.generate_access_token(user_id, roles, email=f"{user_id}@example.com")
    return {"Authorization": f"Bearer {token.access_token}"}


@pytest.fixture
def user_headers(jwt_service):
    return _bearer(jwt_service, "2", ["USER"])


@pytest.fixture
def admin_headers(jwt_service):
    return _bearer(jwt_service, "1", ["USER", "ADMIN"])
