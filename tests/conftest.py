"""
Shared fixtures: in-memory storage, a token issuer with test secrets,
and a TestClient around a freshly built app.
"""

import pytest
from fastapi.testclient import TestClient

from taskify.api.app import create_app
from taskify.auth import AuthService, Identity, TokenIssuer
from taskify.config import Settings
from taskify.services import FileService, ProjectService
from taskify.storage import FileStore, ProjectStore, UserStore, create_local_storage

ACCESS_SECRET = "test-access-secret-0123456789abcdef"
REFRESH_SECRET = "test-refresh-secret-0123456789abcdef"


# =============================================================================
# Core fixtures
# =============================================================================


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        environment="test",
        jwt_secret=ACCESS_SECRET,
        jwt_refresh_secret=REFRESH_SECRET,
        content_dir=str(tmp_path / "content"),
        redis_url="",
        sentry_dsn="",
    )


@pytest.fixture
def issuer(settings):
    return TokenIssuer.from_settings(settings)


@pytest.fixture
def storage(settings):
    return create_local_storage(settings.content_dir)


@pytest.fixture
def users(storage):
    return UserStore(storage.metadata)


@pytest.fixture
def auth_service(users, issuer):
    return AuthService(users, issuer)


@pytest.fixture
def project_service(storage):
    return ProjectService(
        ProjectStore(storage.metadata),
        FileStore(storage.metadata),
        storage.content,
    )


@pytest.fixture
def file_service(storage):
    return FileService(
        ProjectStore(storage.metadata),
        FileStore(storage.metadata),
        storage.content,
        max_files=5,
        max_file_size=1024,
    )


@pytest.fixture
def alice():
    return Identity(id="usr_alice", email="alice@example.com")


@pytest.fixture
def bob():
    return Identity(id="usr_bob", email="bob@example.com")


# =============================================================================
# HTTP fixtures
# =============================================================================


@pytest.fixture
def app(settings, storage):
    return create_app(settings, storage)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def signup(client: TestClient, email: str, password: str = "pw123456") -> dict:
    """Register and log in, returning the token body."""
    resp = client.post("/auth/register", json={"email": email, "password": password})
    assert resp.status_code == 201, resp.text
    resp = client.post("/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return resp.json()
