"""
tests/conftest.py -- Shared test fixtures for Warden unit and integration tests.

This module provides:
  - make_store():       isolated named shared-memory UserStore
  - _patch_lifespan():  wires a test store and codec into app.state
  - store / codec / credentials / accounts: per-test service fixtures
  - api_client:         TestClient plus one admin and one regular account

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker thread.
The named URI format (file:name?mode=memory&cache=shared&uri=true) shares one
in-memory instance across all connections in the same process.

DEBUG and RATE_LIMIT_ENABLED must be set before any api/auth/core import:
get_settings() is cached on first call and api.limiter reads it at import.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager
from dataclasses import dataclass

# CRITICAL: Set before any auth/core import so get_settings() can auto-generate
# SECRET_KEY in dev mode instead of raising ValueError. Rate limiting is off by
# default; test_rate_limit.py switches it on for its own tests.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.accounts import AccountService
from auth.credentials import CredentialService
from auth.models import ADMIN_ROLE, USER_ROLE, TokenClaims, User, build_display_name
from auth.passwords import hash_password
from auth.store import UserStore
from auth.tokens import TokenCodec, TokenConfig

TEST_SECRET = "test-secret-key-that-is-at-least-32-characters-long"

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "adminpass123"
USER_EMAIL = "user@example.com"
USER_PASSWORD = "userpass123"


# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def make_store(db_suffix: str | None = None) -> UserStore:
    """Create an isolated named shared-memory SQLite store.

    Args:
        db_suffix: Unique string appended to the DB name so tests and modules
                   never share state. Random when omitted.
    """
    suffix = db_suffix or uuid.uuid4().hex
    return UserStore(db_url=f"sqlite:///file:test_warden_{suffix}?mode=memory&cache=shared&uri=true")


def make_codec(expire_seconds: int = 0) -> TokenCodec:
    return TokenCodec(TokenConfig(secret_key=TEST_SECRET, expire_seconds=expire_seconds))


def seed_user(
    store: UserStore,
    email: str,
    password: str,
    role: str = USER_ROLE,
    first_name: str = "Test",
    last_name: str = "User",
) -> User:
    """Insert a user directly through the store and return it with its role loaded."""
    role_row = store.find_or_create_role(role)
    uid = store.create_user(
        User(
            email=email,
            password_hash=hash_password(password),
            first_name=first_name,
            last_name=last_name,
            display_name=build_display_name(first_name, last_name),
            role_id=role_row.id,
        )
    )
    return store.find_user_by_id(uid)


def _patch_lifespan(user_store: UserStore, codec: TokenCodec):
    """Return an async context manager that replaces the real lifespan.

    Wires pre-created test objects into app.state so TestClient routes see
    the isolated test DB rather than the configured database.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        app.state.token_codec = codec
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Unit fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def store() -> Generator[UserStore, None, None]:
    s = make_store()
    yield s
    s.close()


@pytest.fixture()
def codec() -> TokenCodec:
    return make_codec()


@pytest.fixture()
def credentials(store: UserStore, codec: TokenCodec) -> CredentialService:
    return CredentialService(store, codec)


@pytest.fixture()
def accounts(store: UserStore) -> AccountService:
    return AccountService(store)


# ---------------------------------------------------------------------------
# Integration fixture -- one TestClient per test module for speed
# ---------------------------------------------------------------------------


@dataclass
class ApiContext:
    client: TestClient
    store: UserStore
    codec: TokenCodec
    admin: User
    admin_token: str
    user: User
    user_token: str

    def auth(self, token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope="module")
def api_client(request) -> Generator[ApiContext, None, None]:
    """Yield an ApiContext for API integration tests.

    The TestClient uses the real FastAPI app with a patched lifespan so tests
    hit real route handlers and middleware against an isolated in-memory
    store. One admin and one regular account exist before the client starts;
    tokens for both are signed with the same codec the app uses.

    Tests that delete accounts should register their own rather than remove
    the shared ones.
    """
    user_store = make_store(request.module.__name__.replace(".", "_"))
    codec = make_codec()

    admin = seed_user(user_store, ADMIN_EMAIL, ADMIN_PASSWORD, role=ADMIN_ROLE, first_name="Ada", last_name="Admin")
    user = seed_user(user_store, USER_EMAIL, USER_PASSWORD, first_name="Uma", last_name="User")

    app.router.lifespan_context = _patch_lifespan(user_store, codec)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield ApiContext(
            client=client,
            store=user_store,
            codec=codec,
            admin=admin,
            admin_token=codec.issue(TokenClaims.for_user(admin)),
            user=user,
            user_token=codec.issue(TokenClaims.for_user(user)),
        )

    user_store.close()
