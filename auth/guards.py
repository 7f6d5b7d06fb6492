"""
auth/guards.py -- Request-time authorization pipeline.

The chain is plain functions over a DecodeOutcome rather than a class
hierarchy:

    decode_bearer(codec, header)  ->  DecodeOutcome
        authenticated(outcome)    ->  Principal   (401 on failure)
        require_admin(outcome)    ->  Principal   (403 on failure)

decode_bearer() never raises for a bad credential. It records what happened
and each guard decides how to reject. The two 401 messages let a client tell
a tampered or garbled token ("Invalid token") from an absent one ("Please
provide a valid token").

role_guard() builds the role-predicate step. Note that it rejects a request
with no principal as 403 "Access denied", not 401: only the authenticated
guard distinguishes missing from invalid tokens.

ensure_owner_or_admin() is the ownership rule used by AccountService.

Layer rule: no FastAPI imports here. auth/dependencies.py adapts these
functions to Depends().
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from auth.errors import AccessError, Forbidden, Unauthorized
from auth.models import ADMIN_ROLE, Principal
from auth.tokens import DecodeFailure, TokenCodec, TokenDecodeError

logger = logging.getLogger("warden.auth")

_BEARER_SCHEME = "bearer"


@dataclass(frozen=True)
class DecodeOutcome:
    """Result of the token-decoding step.

    Exactly one of principal / failure is set. error carries an AccessError
    raised while turning verified claims into a principal; guards that
    propagate errors re-raise it unchanged.
    """

    principal: Principal | None = None
    failure: DecodeFailure | None = None
    error: AccessError | None = None


def extract_bearer(authorization: str | None) -> str | None:
    """Return the token from an "Authorization: Bearer <token>" header value.

    The scheme is matched case-insensitively ("bearer", "BEARER").
    """
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != _BEARER_SCHEME:
        return None
    return token.strip() or None


def decode_bearer(codec: TokenCodec, authorization: str | None) -> DecodeOutcome:
    token = extract_bearer(authorization)
    if token is None:
        return DecodeOutcome(failure=DecodeFailure.MISSING_TOKEN)
    try:
        claims = codec.verify(token)
    except TokenDecodeError as exc:
        logger.debug("Token rejected (%s): %s", exc.kind.value, exc.reason)
        if exc.kind is DecodeFailure.INVALID_TOKEN:
            return DecodeOutcome(failure=DecodeFailure.INVALID_TOKEN)
        return DecodeOutcome(failure=exc.kind, error=Unauthorized("Invalid token payload"))
    return DecodeOutcome(principal=claims.to_principal())


def authenticated(outcome: DecodeOutcome) -> Principal:
    if outcome.error is not None or outcome.principal is None:
        if outcome.failure is DecodeFailure.INVALID_TOKEN:
            raise Unauthorized("Invalid token")
        raise Unauthorized("Please provide a valid token")
    return outcome.principal


def role_guard(role: str, message: str) -> Callable[[DecodeOutcome], Principal]:
    """Build a guard that accepts only principals whose role is exactly `role`."""

    def guard(outcome: DecodeOutcome) -> Principal:
        if outcome.error is not None:
            raise outcome.error
        if outcome.principal is None:
            raise Forbidden("Access denied")
        if outcome.principal.role != role:
            raise Forbidden(message)
        return outcome.principal

    return guard


require_admin = role_guard(ADMIN_ROLE, "Only administrators can access this resource")


def ensure_owner_or_admin(caller_id: int | None, target_id: int, is_admin: bool, message: str) -> None:
    """Raise Forbidden unless the caller owns target_id or holds the admin role."""
    if caller_id != target_id and not is_admin:
        raise Forbidden(message)
