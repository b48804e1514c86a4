"""
End-to-end tests through the HTTP layer.
"""

import io
from datetime import timedelta

import jwt
import pytest
from fastapi import UploadFile
from fastapi.testclient import TestClient
from starlette.datastructures import Headers

from taskify.api.app import create_app
from taskify.api.files import read_upload
from taskify.core.utils import utc_now

from conftest import ACCESS_SECRET, bearer, signup


# =============================================================================
# Auth
# =============================================================================


class TestRegisterEndpoint:
    def test_register(self, client):
        resp = client.post("/auth/register", json={
            "email": "alice@example.com",
            "password": "pw123456",
            "name": "Alice",
        })

        assert resp.status_code == 201
        body = resp.json()
        assert body["email"] == "alice@example.com"
        assert body["name"] == "Alice"
        assert body["id"].startswith("usr_")
        assert "createdAt" in body
        assert "password" not in body
        assert "passwordHash" not in body
        assert "accessToken" not in body

    def test_duplicate_is_409(self, client):
        payload = {"email": "alice@example.com", "password": "pw123456"}
        assert client.post("/auth/register", json=payload).status_code == 201

        resp = client.post("/auth/register", json=payload)
        assert resp.status_code == 409
        assert resp.json()["error"] == "User already exists"

    @pytest.mark.parametrize("payload", [
        {"email": "not-an-email", "password": "pw123456"},
        {"email": "alice@example.com", "password": "short"},
        {"email": "alice@example.com"},
        {},
    ])
    def test_invalid_input_is_400(self, client, payload):
        resp = client.post("/auth/register", json=payload)
        assert resp.status_code == 400
        body = resp.json()
        assert body["error"] == "Validation failed"
        assert body["details"]


class TestLoginEndpoint:
    def test_login(self, client):
        tokens = signup(client, "alice@example.com")

        assert tokens["accessToken"]
        assert tokens["refreshToken"]
        assert tokens["accessToken"] != tokens["refreshToken"]
        assert tokens["tokenType"] == "bearer"
        assert tokens["expiresIn"] == 900

    def test_failures_look_the_same(self, client):
        signup(client, "alice@example.com")

        wrong_password = client.post("/auth/login", json={"email": "alice@example.com", "password": "nope-nope"})
        unknown_email = client.post("/auth/login", json={"email": "ghost@example.com", "password": "pw123456"})

        assert wrong_password.status_code == unknown_email.status_code == 401
        assert wrong_password.json() == unknown_email.json()


class TestProtectedAccess:
    def test_missing_header_is_401(self, client):
        resp = client.get("/auth/me")
        assert resp.status_code == 401
        assert resp.json() == {"error": "Authorization header missing"}

    @pytest.mark.parametrize("header", ["Basic abc", "Bearer", "Bearer not-a-jwt"])
    def test_bad_header_is_403(self, client, header):
        resp = client.get("/auth/me", headers={"Authorization": header})
        assert resp.status_code == 403
        assert resp.json() == {"error": "Invalid or expired token"}

    def test_expired_token_is_403(self, client):
        now = utc_now()
        token = jwt.encode(
            {"id": "usr_x", "email": "x@example.com", "iat": now - timedelta(hours=1), "exp": now - timedelta(seconds=5)},
            ACCESS_SECRET,
            algorithm="HS256",
        )
        assert client.get("/auth/me", headers=bearer(token)).status_code == 403

    def test_refresh_token_rejected_as_access(self, client):
        tokens = signup(client, "alice@example.com")
        assert client.get("/auth/me", headers=bearer(tokens["refreshToken"])).status_code == 403


class TestSessionLifecycle:
    def test_full_session(self, client):
        resp = client.post("/auth/register", json={"email": "alice@example.com", "password": "pw123456"})
        assert resp.status_code == 201
        user_id = resp.json()["id"]

        first = client.post("/auth/login", json={"email": "alice@example.com", "password": "pw123456"}).json()

        me = client.get("/auth/me", headers=bearer(first["accessToken"]))
        assert me.status_code == 200
        assert me.json()["id"] == user_id

        resp = client.post("/auth/refresh", json={"token": first["refreshToken"]})
        assert resp.status_code == 200
        second = resp.json()
        assert second["refreshToken"] != first["refreshToken"]
        assert second["accessToken"] != first["accessToken"]

        stale = client.post("/auth/refresh", json={"token": first["refreshToken"]})
        assert stale.status_code == 401
        assert stale.json() == {"error": "Invalid refresh token"}

        assert client.post("/auth/refresh", json={"token": second["refreshToken"]}).status_code == 200

    def test_logout_revokes_refresh(self, client):
        tokens = signup(client, "alice@example.com")

        resp = client.post("/auth/logout", headers=bearer(tokens["accessToken"]))
        assert resp.status_code == 200

        assert client.post("/auth/refresh", json={"token": tokens["refreshToken"]}).status_code == 401

    def test_refresh_requires_token(self, client):
        assert client.post("/auth/refresh", json={}).status_code == 400
        assert client.post("/auth/refresh", json={"token": "garbage"}).status_code == 401


# =============================================================================
# Projects
# =============================================================================


@pytest.fixture
def alice_headers(client):
    return bearer(signup(client, "alice@example.com")["accessToken"])


@pytest.fixture
def bob_headers(client):
    return bearer(signup(client, "bob@example.com")["accessToken"])


class TestProjectsEndpoints:
    def test_crud(self, client, alice_headers):
        resp = client.post("/projects", json={"title": "Roadmap", "description": "Q3"}, headers=alice_headers)
        assert resp.status_code == 201
        project = resp.json()
        assert project["title"] == "Roadmap"
        assert "ownerId" in project

        resp = client.put(f"/projects/{project['id']}", json={"title": "Roadmap v2"}, headers=alice_headers)
        assert resp.status_code == 200
        assert resp.json()["title"] == "Roadmap v2"

        assert client.delete(f"/projects/{project['id']}", headers=alice_headers).status_code == 204
        assert client.get(f"/projects/{project['id']}", headers=alice_headers).status_code == 404

    def test_empty_title_rejected(self, client, alice_headers):
        assert client.post("/projects", json={"title": ""}, headers=alice_headers).status_code == 400

    def test_ownership(self, client, alice_headers, bob_headers):
        project = client.post("/projects", json={"title": "Private"}, headers=alice_headers).json()
        url = f"/projects/{project['id']}"

        assert client.get(url, headers=bob_headers).status_code == 403
        assert client.put(url, json={"title": "Mine now"}, headers=bob_headers).status_code == 403
        assert client.delete(url, headers=bob_headers).status_code == 403
        assert client.get("/projects/proj_missing", headers=bob_headers).status_code == 404

        assert client.get(url, headers=alice_headers).json()["title"] == "Private"
        assert client.get("/projects", headers=bob_headers).json() == []

    def test_list_is_cached_until_mutation(self, client, alice_headers, bob_headers):
        client.post("/projects", json={"title": "One"}, headers=alice_headers)

        first = client.get("/projects", headers=alice_headers)
        assert first.headers["X-Cache"] == "MISS"
        second = client.get("/projects", headers=alice_headers)
        assert second.headers["X-Cache"] == "HIT"
        assert second.json() == first.json()

        # Another user's request never sees alice's cached list
        other = client.get("/projects", headers=bob_headers)
        assert other.headers["X-Cache"] == "MISS"
        assert other.json() == []

        client.post("/projects", json={"title": "Two"}, headers=alice_headers)

        third = client.get("/projects", headers=alice_headers)
        assert third.headers["X-Cache"] == "MISS"
        assert [p["title"] for p in third.json()] == ["One", "Two"]

    def test_query_string_is_part_of_cache_key(self, client, alice_headers):
        client.get("/projects", headers=alice_headers)
        assert client.get("/projects?page=2", headers=alice_headers).headers["X-Cache"] == "MISS"


# =============================================================================
# Files
# =============================================================================


def _files(*items):
    return [("files", item) for item in items]


class TestFilesEndpoints:
    @pytest.fixture
    def project_id(self, client, alice_headers):
        return client.post("/projects", json={"title": "Docs"}, headers=alice_headers).json()["id"]

    def test_upload_list_get_delete(self, client, alice_headers, project_id):
        resp = client.post(
            f"/projects/{project_id}/files",
            files=_files(("notes.txt", b"hello", "text/plain"), ("pic.png", b"\x89PNG", "image/png")),
            headers=alice_headers,
        )
        assert resp.status_code == 201
        body = resp.json()
        assert body["success"] is True
        assert [f["originalName"] for f in body["data"]] == ["notes.txt", "pic.png"]
        file_id = body["data"][0]["id"]

        listing = client.get(f"/projects/{project_id}/files", headers=alice_headers)
        assert listing.status_code == 200
        assert listing.headers["X-Cache"] == "MISS"
        assert listing.json()["stats"] == {"totalFiles": 2, "totalSize": 9}

        resp = client.get(f"/files/{file_id}", headers=alice_headers)
        assert resp.status_code == 200
        assert resp.json()["mimeType"] == "text/plain"

        stats = client.get("/files/stats", headers=alice_headers).json()
        assert stats == {"totalFiles": 2, "totalSize": 9}

        resp = client.delete(f"/files/{file_id}", headers=alice_headers)
        assert resp.status_code == 200
        assert resp.json()["success"] is True
        assert client.get(f"/files/{file_id}", headers=alice_headers).status_code == 404

        listing = client.get(f"/projects/{project_id}/files", headers=alice_headers)
        assert listing.headers["X-Cache"] == "MISS"
        assert len(listing.json()["files"]) == 1

    def test_disallowed_type_is_400(self, client, alice_headers, project_id):
        resp = client.post(
            f"/projects/{project_id}/files",
            files=_files(("virus.exe", b"MZ", "application/x-msdownload")),
            headers=alice_headers,
        )
        assert resp.status_code == 400
        assert "not allowed" in resp.json()["error"]

    def test_missing_files_is_400(self, client, alice_headers, project_id):
        assert client.post(f"/projects/{project_id}/files", headers=alice_headers).status_code == 400

    def test_foreign_user_is_403(self, client, alice_headers, bob_headers, project_id):
        resp = client.post(
            f"/projects/{project_id}/files",
            files=_files(("notes.txt", b"hello", "text/plain")),
            headers=alice_headers,
        )
        file_id = resp.json()["data"][0]["id"]

        assert client.get(f"/projects/{project_id}/files", headers=bob_headers).status_code == 403
        assert client.get(f"/files/{file_id}", headers=bob_headers).status_code == 403
        assert client.delete(f"/files/{file_id}", headers=bob_headers).status_code == 403
        assert client.post(
            f"/projects/{project_id}/files",
            files=_files(("x.txt", b"x", "text/plain")),
            headers=bob_headers,
        ).status_code == 403

    def test_storage_failure_is_502(self, app, client, alice_headers, project_id):
        async def broken_put(*args, **kwargs):
            raise OSError("disk full")

        app.state.file_service.content.put = broken_put
        resp = client.post(
            f"/projects/{project_id}/files",
            files=_files(("notes.txt", b"hello", "text/plain")),
            headers=alice_headers,
        )
        assert resp.status_code == 502
        assert "notes.txt" in resp.json()["error"]


# =============================================================================
# Misc
# =============================================================================


class TestMisc:
    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "cache": "up"}

    def test_unexpected_error_is_500_with_stack_outside_production(self, app):
        @app.get("/boom")
        async def boom():
            raise RuntimeError("kaboom")

        with TestClient(app, raise_server_exceptions=False) as client:
            resp = client.get("/boom")

        assert resp.status_code == 500
        body = resp.json()
        assert body["error"] == "Internal server error"
        assert any("kaboom" in line for line in body["stack"])

    def test_no_stack_in_production(self, settings, storage):
        app = create_app(settings.model_copy(update={"environment": "production"}), storage)

        @app.get("/boom")
        async def boom():
            raise RuntimeError("kaboom")

        with TestClient(app, raise_server_exceptions=False) as client:
            resp = client.get("/boom")

        assert resp.status_code == 500
        assert resp.json() == {"error": "Internal server error"}


# =============================================================================
# Input limits
# =============================================================================


class TestPasswordLimit:
    @pytest.mark.parametrize("password", ["a" * 80, "é" * 37])
    def test_register_with_password_over_72_bytes_is_400(self, client, password):
        resp = client.post("/auth/register", json={"email": "long@example.com", "password": password})
        assert resp.status_code == 400
        assert resp.json()["error"] == "Validation failed"

    def test_login_with_password_over_72_bytes_is_400(self, client):
        resp = client.post("/auth/login", json={"email": "long@example.com", "password": "a" * 80})
        assert resp.status_code == 400

    def test_72_byte_password_works(self, client):
        tokens = signup(client, "long@example.com", password="a" * 72)
        assert tokens["accessToken"]


class TestUploadLimits:
    @pytest.fixture
    def project_id(self, client, alice_headers):
        return client.post("/projects", json={"title": "Docs"}, headers=alice_headers).json()["id"]

    def test_too_many_files_is_400(self, client, alice_headers, project_id):
        resp = client.post(
            f"/projects/{project_id}/files",
            files=_files(*[(f"n{i}.txt", b"x", "text/plain") for i in range(6)]),
            headers=alice_headers,
        )
        assert resp.status_code == 400
        assert "Too many files" in resp.json()["error"]

    def test_oversize_file_is_400(self, app, client, alice_headers, project_id):
        app.state.file_service.max_file_size = 16
        resp = client.post(
            f"/projects/{project_id}/files",
            files=_files(("big.txt", b"x" * 1000, "text/plain")),
            headers=alice_headers,
        )
        assert resp.status_code == 400
        assert resp.json()["details"] == {"file": "big.txt", "limit": 16}

    @pytest.mark.asyncio
    async def test_read_upload_stops_past_the_limit(self):
        part = UploadFile(
            io.BytesIO(b"x" * 5000),
            filename="big.txt",
            headers=Headers({"content-type": "text/plain"}),
        )
        upload = await read_upload(part, limit=100)

        assert len(upload.data) == 101
        assert upload.content_type == "text/plain"
        assert upload.filename == "big.txt"
