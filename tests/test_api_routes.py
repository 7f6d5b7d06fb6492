"""
tests/test_api_routes.py -- Integration tests for the auth and user routes.

These tests exercise the full stack: FastAPI routing -> guard dependencies ->
CredentialService/AccountService -> UserStore -> response model serialization
and the shared error envelope. Unit testing individual route functions would
miss middleware, dependency injection, and response model validation --
integration tests are the right tool here.

Coverage:
  - Register: 201 with token + public user, 409 duplicate, 422 per-field errors
  - Login: 200 valid, 401 wrong password / unknown email (same message)
  - Emails are stored exactly as submitted, so mixed-case domains log in
  - Guard messages: "Invalid token" vs "Please provide a valid token",
    admin-only routes answer 403 for users and for missing tokens; the
    bearer scheme is matched case-insensitively
  - Account routes: self update, cross-account update forbidden, admin read
    and delete, self delete

Fixtures used (from conftest.py):
  - api_client: ApiContext with an admin (admin@example.com / adminpass123)
    and a regular user (user@example.com / userpass123), tokens for both.
"""

from __future__ import annotations

from conftest import ADMIN_PASSWORD, USER_PASSWORD, ApiContext


def _register(ctx: ApiContext, email: str, password: str = "secret1", first: str = "New", last: str = "Person"):
    return ctx.client.post(
        "/api/v1/auth/register",
        json={"email": email, "password": password, "firstName": first, "lastName": last},
    )


class TestRegister:
    def test_register_returns_token_and_public_user(self, api_client: ApiContext) -> None:
        resp = _register(api_client, "fresh@example.com", first="Fresh", last="Face")
        assert resp.status_code == 201, resp.text
        data = resp.json()
        assert data["token_type"] == "bearer"
        assert data["access_token"]
        assert data["user"]["email"] == "fresh@example.com"
        assert data["user"]["name"] == "Fresh Face"
        assert data["user"]["role"] == "user"
        assert set(data["user"]) == {"id", "email", "name", "role"}
        assert resp.headers["Cache-Control"] == "no-store"

    def test_register_duplicate_is_409(self, api_client: ApiContext) -> None:
        assert _register(api_client, "twice@example.com").status_code == 201
        resp = _register(api_client, "twice@example.com", first="Other", last="Name")
        assert resp.status_code == 409
        assert resp.json()["error"]["message"] == "Email already exists"

    def test_register_validation_errors_per_field(self, api_client: ApiContext) -> None:
        resp = api_client.client.post(
            "/api/v1/auth/register",
            json={"email": "not-an-email", "password": "123", "firstName": ""},
        )
        assert resp.status_code == 422
        error = resp.json()["error"]
        assert error["code"] == "validation_error"
        assert {"email", "password", "firstName", "lastName"} <= set(error["field_errors"])

    def test_register_rejects_unknown_fields(self, api_client: ApiContext) -> None:
        resp = api_client.client.post(
            "/api/v1/auth/register",
            json={
                "email": "role@example.com",
                "password": "secret1",
                "firstName": "Role",
                "lastName": "Grab",
                "role": "admin",
            },
        )
        assert resp.status_code == 422
        assert "role" in resp.json()["error"]["field_errors"]

    def test_registered_email_is_kept_verbatim(self, api_client: ApiContext) -> None:
        """The address stored is the one the client sent, so it logs in unchanged."""
        body = {"email": "Mixed.Case@Example.COM", "password": "secret1"}
        resp = _register(api_client, body["email"], password=body["password"])
        assert resp.status_code == 201, resp.text
        assert resp.json()["user"]["email"] == "Mixed.Case@Example.COM"

        login = api_client.client.post("/api/v1/auth/login", json=body)
        assert login.status_code == 200, login.text
        assert login.json()["user"]["email"] == "Mixed.Case@Example.COM"


class TestLogin:
    def test_login_valid(self, api_client: ApiContext) -> None:
        resp = api_client.client.post(
            "/api/v1/auth/login",
            json={"email": "admin@example.com", "password": ADMIN_PASSWORD},
        )
        assert resp.status_code == 200, resp.text
        data = resp.json()
        assert data["user"] == {
            "id": api_client.admin.id,
            "email": "admin@example.com",
            "name": "Ada Admin",
            "role": "admin",
        }
        assert resp.headers["Cache-Control"] == "no-store"

    def test_login_wrong_password_and_unknown_email_match(self, api_client: ApiContext) -> None:
        wrong = api_client.client.post("/api/v1/auth/login", json={"email": "user@example.com", "password": "nope"})
        ghost = api_client.client.post("/api/v1/auth/login", json={"email": "ghost@example.com", "password": "nope"})
        assert wrong.status_code == ghost.status_code == 401
        assert wrong.json() == ghost.json()
        assert wrong.json()["error"]["message"] == "Invalid credentials"
        assert wrong.headers["WWW-Authenticate"] == "Bearer"

    def test_login_empty_fields_422(self, api_client: ApiContext) -> None:
        resp = api_client.client.post("/api/v1/auth/login", json={"email": "", "password": ""})
        assert resp.status_code == 422

    def test_login_token_opens_profile(self, api_client: ApiContext) -> None:
        token = api_client.client.post(
            "/api/v1/auth/login",
            json={"email": "user@example.com", "password": USER_PASSWORD},
        ).json()["access_token"]
        resp = api_client.client.get("/api/v1/auth/profile", headers=api_client.auth(token))
        assert resp.status_code == 200
        assert resp.json()["role"] == "user"
        assert resp.json()["id"] == api_client.user.id


class TestGuardMessages:
    def test_missing_token(self, api_client: ApiContext) -> None:
        resp = api_client.client.get("/api/v1/auth/profile")
        assert resp.status_code == 401
        assert resp.json()["error"]["message"] == "Please provide a valid token"
        assert resp.headers["WWW-Authenticate"] == "Bearer"

    def test_invalid_token(self, api_client: ApiContext) -> None:
        resp = api_client.client.get("/api/v1/auth/profile", headers=api_client.auth("garbage.token.value"))
        assert resp.status_code == 401
        assert resp.json()["error"]["message"] == "Invalid token"

    def test_non_bearer_scheme_is_missing(self, api_client: ApiContext) -> None:
        resp = api_client.client.get("/api/v1/auth/profile", headers={"Authorization": "Basic dXNlcjpwYXNz"})
        assert resp.json()["error"]["message"] == "Please provide a valid token"

    def test_lowercase_bearer_scheme(self, api_client: ApiContext) -> None:
        resp = api_client.client.get("/api/v1/auth/profile", headers={"Authorization": f"bearer {api_client.user_token}"})
        assert resp.status_code == 200
        assert resp.json()["id"] == api_client.user.id

    def test_admin_route_as_user(self, api_client: ApiContext) -> None:
        resp = api_client.client.get(f"/api/v1/users/{api_client.admin.id}", headers=api_client.auth(api_client.user_token))
        assert resp.status_code == 403
        assert resp.json()["error"]["message"] == "Only administrators can access this resource"

    def test_admin_route_without_token(self, api_client: ApiContext) -> None:
        resp = api_client.client.get(f"/api/v1/users/{api_client.user.id}")
        assert resp.status_code == 403
        assert resp.json()["error"]["message"] == "Access denied"


class TestAccountRoutes:
    def test_admin_reads_user(self, api_client: ApiContext) -> None:
        resp = api_client.client.get(f"/api/v1/users/{api_client.user.id}", headers=api_client.auth(api_client.admin_token))
        assert resp.status_code == 200
        data = resp.json()
        assert data["email"] == "user@example.com"
        assert data["firstName"] == "Uma"
        assert "passwordHash" not in data and "password_hash" not in data

    def test_admin_reads_missing_user(self, api_client: ApiContext) -> None:
        resp = api_client.client.get("/api/v1/users/99999", headers=api_client.auth(api_client.admin_token))
        assert resp.status_code == 404
        assert resp.json()["error"]["message"] == "User with ID 99999 not found"

    def test_update_own_profile(self, api_client: ApiContext) -> None:
        token = _register(api_client, "editme@example.com", first="Edit", last="Me").json()["access_token"]
        resp = api_client.client.put("/api/v1/users/profile", json={"lastName": "Done"}, headers=api_client.auth(token))
        assert resp.status_code == 200, resp.text
        assert resp.json()["name"] == "Edit Done"

    def test_update_own_account_by_id(self, api_client: ApiContext) -> None:
        body = _register(api_client, "byid@example.com").json()
        uid, token = body["user"]["id"], body["access_token"]
        resp = api_client.client.put(f"/api/v1/users/{uid}", json={"firstName": "Renamed"}, headers=api_client.auth(token))
        assert resp.status_code == 200
        assert resp.json()["firstName"] == "Renamed"

    def test_update_new_password_then_login(self, api_client: ApiContext) -> None:
        token = _register(api_client, "rotate@example.com").json()["access_token"]
        resp = api_client.client.put("/api/v1/users/profile", json={"password": "rotated1"}, headers=api_client.auth(token))
        assert resp.status_code == 200
        login = api_client.client.post("/api/v1/auth/login", json={"email": "rotate@example.com", "password": "rotated1"})
        assert login.status_code == 200

    def test_updated_email_is_kept_verbatim(self, api_client: ApiContext) -> None:
        token = _register(api_client, "relocate@example.com").json()["access_token"]
        resp = api_client.client.put(
            "/api/v1/users/profile", json={"email": "Moved@Example.ORG"}, headers=api_client.auth(token)
        )
        assert resp.status_code == 200, resp.text
        assert resp.json()["email"] == "Moved@Example.ORG"
        login = api_client.client.post("/api/v1/auth/login", json={"email": "Moved@Example.ORG", "password": "secret1"})
        assert login.status_code == 200

    def test_update_invalid_email_422(self, api_client: ApiContext) -> None:
        resp = api_client.client.put(
            "/api/v1/users/profile", json={"email": "nowhere"}, headers=api_client.auth(api_client.user_token)
        )
        assert resp.status_code == 422
        assert "email" in resp.json()["error"]["field_errors"]

    def test_update_short_password_422(self, api_client: ApiContext) -> None:
        resp = api_client.client.put(
            "/api/v1/users/profile", json={"password": "123"}, headers=api_client.auth(api_client.user_token)
        )
        assert resp.status_code == 422
        assert "password" in resp.json()["error"]["field_errors"]

    def test_update_other_account_forbidden(self, api_client: ApiContext) -> None:
        resp = api_client.client.put(
            f"/api/v1/users/{api_client.admin.id}", json={}, headers=api_client.auth(api_client.user_token)
        )
        assert resp.status_code == 403
        assert resp.json()["error"]["message"] == "You can only update your own profile"

    def test_admin_cannot_update_other_account(self, api_client: ApiContext) -> None:
        resp = api_client.client.put(
            f"/api/v1/users/{api_client.user.id}", json={"firstName": "X"}, headers=api_client.auth(api_client.admin_token)
        )
        assert resp.status_code == 403

    def test_update_requires_token(self, api_client: ApiContext) -> None:
        resp = api_client.client.put("/api/v1/users/profile", json={"firstName": "X"})
        assert resp.status_code == 401

    def test_update_email_taken_409(self, api_client: ApiContext) -> None:
        token = _register(api_client, "mover@example.com").json()["access_token"]
        resp = api_client.client.put(
            "/api/v1/users/profile", json={"email": "admin@example.com"}, headers=api_client.auth(token)
        )
        assert resp.status_code == 409

    def test_user_cannot_delete_by_id(self, api_client: ApiContext) -> None:
        resp = api_client.client.delete(f"/api/v1/users/{api_client.admin.id}", headers=api_client.auth(api_client.user_token))
        assert resp.status_code == 403

    def test_admin_deletes_user(self, api_client: ApiContext) -> None:
        uid = _register(api_client, "doomed@example.com").json()["user"]["id"]
        resp = api_client.client.delete(f"/api/v1/users/{uid}", headers=api_client.auth(api_client.admin_token))
        assert resp.status_code == 200
        assert resp.json() == {"message": "User deleted successfully"}
        assert api_client.store.find_user_by_id(uid) is None

    def test_self_delete(self, api_client: ApiContext) -> None:
        body = _register(api_client, "leaving@example.com").json()
        resp = api_client.client.delete("/api/v1/users/profile", headers=api_client.auth(body["access_token"]))
        assert resp.status_code == 200
        login = api_client.client.post("/api/v1/auth/login", json={"email": "leaving@example.com", "password": "secret1"})
        assert login.status_code == 401


class TestPublicRoutes:
    def test_root(self, api_client: ApiContext) -> None:
        resp = api_client.client.get("/")
        assert resp.status_code == 200
        assert resp.json() == {"message": "Hello World!"}

    def test_unknown_route_uses_error_envelope(self, api_client: ApiContext) -> None:
        resp = api_client.client.get("/api/v1/nope")
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "http_404"
