"""
auth/dependencies.py -- FastAPI Depends() adapters for the guard chain.

Only the Authorization: Bearer <token> header is read. There is no cookie or
API-key fallback.

get_decode_outcome() runs the decoding step once per request; FastAPI caches
a dependency within a request, so a route that stacks several guards still
verifies the signature once.

get_current_principal() -- authenticated guard, 401 on failure.
require_admin()         -- admin guard, 403 on failure.

The services are exposed as dependencies too so routes never reach into
app.state themselves.

Layer rule: auth/dependencies.py may import from fastapi because this module
is part of the FastAPI dependency injection system. Nothing else in auth/
does.
"""

from __future__ import annotations

from fastapi import Depends, Request

from auth import guards
from auth.accounts import AccountService
from auth.credentials import CredentialService
from auth.guards import DecodeOutcome
from auth.models import Principal
from auth.store import UserStore
from auth.tokens import TokenCodec


def get_user_store(request: Request) -> UserStore:
    return request.app.state.user_store


def get_token_codec(request: Request) -> TokenCodec:
    return request.app.state.token_codec


def get_credential_service(
    store: UserStore = Depends(get_user_store),
    codec: TokenCodec = Depends(get_token_codec),
) -> CredentialService:
    return CredentialService(store, codec)


def get_account_service(store: UserStore = Depends(get_user_store)) -> AccountService:
    return AccountService(store)


def get_decode_outcome(request: Request, codec: TokenCodec = Depends(get_token_codec)) -> DecodeOutcome:
    outcome = guards.decode_bearer(codec, request.headers.get("Authorization"))
    if outcome.principal is not None:
        request.state.principal = outcome.principal
    return outcome


def get_current_principal(outcome: DecodeOutcome = Depends(get_decode_outcome)) -> Principal:
    """Require a valid bearer token. Raises Unauthorized (401) otherwise.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(principal: Principal = Depends(get_current_principal)): ...
    """
    return guards.authenticated(outcome)


def require_admin(outcome: DecodeOutcome = Depends(get_decode_outcome)) -> Principal:
    """Require the admin role. Raises Forbidden (403) otherwise."""
    return guards.require_admin(outcome)
