"""
auth/accounts.py -- Self-service and admin account management.

The route layer picks the guard (authenticated or admin) and passes the
caller's id down; this service re-checks ownership against the stored
target before touching it:

  update  -- self only. There is no admin override at this layer, even for
             an empty patch.
  remove  -- self, or any account when is_admin is True.

Results go through to_account_view(); password_hash is never returned.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError

from auth.credentials import check_password_length
from auth.errors import Conflict, Forbidden, NotFound
from auth.guards import ensure_owner_or_admin
from auth.models import AccountView, User, build_display_name, to_account_view
from auth.passwords import hash_password
from auth.store import UserStore

logger = logging.getLogger("warden.auth")


@dataclass(frozen=True)
class AccountPatch:
    """Partial update. None means "leave unchanged"."""

    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    password: str | None = None


class AccountService:
    def __init__(self, store: UserStore) -> None:
        self._store = store

    def get(self, user_id: int) -> AccountView:
        return to_account_view(self._load(user_id))

    def update(self, target_id: int, patch: AccountPatch, caller_id: int | None) -> AccountView:
        user = self._load(target_id)
        if target_id != caller_id:
            raise Forbidden("You can only update your own profile")

        fields: dict = {}
        if patch.email is not None:
            fields["email"] = patch.email
        if patch.password is not None:
            check_password_length(patch.password)
            fields["password_hash"] = hash_password(patch.password)
        if patch.first_name is not None:
            fields["first_name"] = patch.first_name
        if patch.last_name is not None:
            fields["last_name"] = patch.last_name
        if patch.first_name is not None or patch.last_name is not None:
            fields["display_name"] = build_display_name(
                patch.first_name if patch.first_name is not None else user.first_name,
                patch.last_name if patch.last_name is not None else user.last_name,
            )

        try:
            self._store.update_user(target_id, **fields)
        except IntegrityError as exc:
            raise Conflict("Email already exists") from exc

        updated = self._load(target_id)
        logger.info("Updated user id=%s (fields: %s)", target_id, ", ".join(sorted(fields)) or "none")
        return to_account_view(updated)

    def remove(self, target_id: int, caller_id: int | None, is_admin: bool) -> dict[str, str]:
        self._load(target_id)
        ensure_owner_or_admin(
            caller_id,
            target_id,
            is_admin,
            "You can only delete your own account unless you are an admin",
        )
        self._store.delete_user(target_id)
        logger.info("Deleted user id=%s (by user id=%s, admin=%s)", target_id, caller_id, is_admin)
        return {"message": "User deleted successfully"}

    def _load(self, user_id: int) -> User:
        user = self._store.find_user_by_id(user_id)
        if user is None:
            raise NotFound(f"User with ID {user_id} not found")
        return user
