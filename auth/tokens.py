"""
auth/tokens.py -- JWT bearer token codec.

Security design decisions:
  JWT: python-jose with a shared-secret HMAC algorithm (HS256 by default).
       Tokens carry sub (user id), email, name (display name), role and iat.

  Expiry: exp is added only when TokenConfig.expire_seconds > 0. The default
       of 0 issues non-expiring tokens; deployments that want expiry opt in
       via TOKEN_EXPIRE_SECONDS.

  Secret: injected through TokenConfig at construction. TokenCodec never
       reads settings itself -- api/main.py builds one from get_settings()
       at startup and tests build their own.

  Decode failures are classified, because the guard chain words its 401
  differently for each class:
    INVALID_TOKEN -- anything python-jose rejects: malformed structure, bad
                     signature, wrong algorithm, failed claim checks (exp).
    OTHER         -- a correctly signed token whose payload cannot be mapped
                     to TokenClaims (e.g. a non-numeric subject).

Layer rule: no imports from api/. core/ is only used by from_settings().
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any

from jose import JWTError, jwt

from auth.models import TokenClaims

if TYPE_CHECKING:
    from core.config import Settings


class DecodeFailure(str, enum.Enum):
    MISSING_TOKEN = "missing_token"
    INVALID_TOKEN = "invalid_token"
    OTHER = "other"


class TokenDecodeError(Exception):
    """Raised by TokenCodec.verify(). kind tells the guard how to word the 401."""

    def __init__(self, kind: DecodeFailure, reason: str) -> None:
        super().__init__(reason)
        self.kind = kind
        self.reason = reason


@dataclass(frozen=True)
class TokenConfig:
    secret_key: str
    algorithm: str = "HS256"
    expire_seconds: int = 0

    @classmethod
    def from_settings(cls, settings: Settings) -> TokenConfig:
        return cls(
            secret_key=settings.secret_key,
            algorithm=settings.jwt_algorithm,
            expire_seconds=settings.token_expire_seconds,
        )


class TokenCodec:
    """Signs TokenClaims into a JWT and verifies JWTs back into TokenClaims.

    Stateless apart from the immutable config; safe to share across threads.

    Usage:
        codec = TokenCodec(TokenConfig(secret_key=settings.secret_key))
        token = codec.issue(TokenClaims.for_user(user))
        claims = codec.verify(token)
    """

    def __init__(self, config: TokenConfig) -> None:
        self._config = config

    @property
    def config(self) -> TokenConfig:
        return self._config

    def issue(self, claims: TokenClaims) -> str:
        now = datetime.now(timezone.utc)
        payload: dict[str, Any] = {
            "email": claims.email,
            "name": claims.name,
            "role": claims.role,
            "iat": now,
        }
        if claims.subject is not None:
            # RFC 7519 subjects are strings; verify() maps it back to int.
            payload["sub"] = str(claims.subject)
        if self._config.expire_seconds > 0:
            payload["exp"] = now + timedelta(seconds=self._config.expire_seconds)
        return jwt.encode(payload, self._config.secret_key, algorithm=self._config.algorithm)

    def verify(self, token: str) -> TokenClaims:
        """Decode and verify a JWT. Raises TokenDecodeError on any failure."""
        try:
            payload = jwt.decode(
                token,
                self._config.secret_key,
                algorithms=[self._config.algorithm],
                # sub may be numeric; _subject_to_id() validates it instead.
                options={"verify_sub": False},
            )
        except JWTError as exc:
            raise TokenDecodeError(DecodeFailure.INVALID_TOKEN, str(exc)) from exc

        if not isinstance(payload, dict):
            raise TokenDecodeError(DecodeFailure.OTHER, "Token payload is not an object")
        return TokenClaims(
            subject=_subject_to_id(payload.get("sub")),
            email=payload.get("email"),
            name=payload.get("name"),
            role=payload.get("role"),
        )


def _subject_to_id(sub: Any) -> int | None:
    # Accepts "7" (issued here) and 7 (numeric subjects from older tokens).
    if sub is None:
        return None
    if isinstance(sub, int) and not isinstance(sub, bool):
        return sub
    if isinstance(sub, str):
        try:
            return int(sub)
        except ValueError:
            pass
    raise TokenDecodeError(DecodeFailure.OTHER, f"Token subject is not a user id: {sub!r}")
