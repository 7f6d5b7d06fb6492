"""
auth/credentials.py -- Registration and password login.

Both operations end the same way: build TokenClaims from the stored user,
sign them, and return the token with the public user view. The password
hash never leaves this module -- to_public_user() copies named fields only.

Security:
  [C1] login() always runs exactly one bcrypt verification. An unknown email
       is verified against DUMMY_HASH so response time does not reveal
       whether the account exists. Both failure paths raise the identical
       Unauthorized("Invalid credentials").

  Registration checks for the email before any side effect, then treats an
  IntegrityError from the insert as the same Conflict -- a concurrent
  registration can win the race between the check and the insert.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from auth.errors import Conflict, Unauthorized, ValidationError
from auth.models import USER_ROLE, AuthResult, TokenClaims, User, build_display_name, to_public_user
from auth.passwords import DUMMY_HASH, hash_password, verify_password
from auth.store import UserStore
from auth.tokens import TokenCodec

logger = logging.getLogger("warden.auth")

PASSWORD_MIN_LENGTH = 6

_INVALID_CREDENTIALS = "Invalid credentials"
_EMAIL_TAKEN = "Email already exists"


def check_password_length(password: str) -> None:
    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValidationError(
            {"password": [f"password must be longer than or equal to {PASSWORD_MIN_LENGTH} characters"]}
        )


class CredentialService:
    def __init__(self, store: UserStore, codec: TokenCodec) -> None:
        self._store = store
        self._codec = codec

    def register(self, email: str, password: str, first_name: str, last_name: str) -> AuthResult:
        """Create a user with the default role and return a signed token for it."""
        if self._store.find_user_by_email(email) is not None:
            raise Conflict(_EMAIL_TAKEN)
        check_password_length(password)

        display_name = build_display_name(first_name, last_name)
        password_hash = hash_password(password)
        role = self._store.find_or_create_role(USER_ROLE)

        try:
            user_id = self._store.create_user(
                User(
                    email=email,
                    password_hash=password_hash,
                    first_name=first_name,
                    last_name=last_name,
                    display_name=display_name,
                    role_id=role.id,
                )
            )
        except IntegrityError as exc:
            raise Conflict(_EMAIL_TAKEN) from exc

        user = User(
            id=user_id,
            email=email,
            password_hash=password_hash,
            first_name=first_name,
            last_name=last_name,
            display_name=display_name,
            role_id=role.id,
            role=role,
        )
        logger.info("Registered user id=%s", user_id)
        return self._issue(user)

    def login(self, email: str, password: str) -> AuthResult:
        user = self._store.find_user_by_email(email)
        if user is None:
            # Equalize timing -- do NOT return before running bcrypt [C1]
            verify_password(password, DUMMY_HASH)
            logger.info("Rejected login: bad credentials")
            raise Unauthorized(_INVALID_CREDENTIALS)
        if not verify_password(password, user.password_hash):
            logger.info("Rejected login: bad credentials")
            raise Unauthorized(_INVALID_CREDENTIALS)

        logger.info("Login succeeded for user id=%s", user.id)
        return self._issue(user)

    def _issue(self, user: User) -> AuthResult:
        token = self._codec.issue(TokenClaims.for_user(user))
        return AuthResult(token=token, user=to_public_user(user))
