"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, minimal logic). Dataclasses own
domain shape; stores, services and routes do the work.

User is the only type that carries password_hash. Everything that leaves the
auth package goes through to_public_user() or to_account_view(), which copy
named fields into a fresh object -- the hash is never part of the output
shape, so it cannot be serialized by accident.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

from dataclasses import dataclass

USER_ROLE = "user"
ADMIN_ROLE = "admin"


@dataclass
class Role:
    """Named permission tier. name is unique ("user", "admin")."""

    name: str
    id: int | None = None


@dataclass
class User:
    """Persisted identity record.

    display_name is derived as "{first_name} {last_name}" and recomputed by
    the services whenever either part changes. role is loaded by a join in
    the store; it is None only for rows whose role_id points nowhere.
    """

    email: str
    password_hash: str
    first_name: str
    last_name: str
    display_name: str
    role_id: int
    id: int | None = None
    role: Role | None = None
    created_at: str | None = None

    @property
    def role_name(self) -> str | None:
        return self.role.name if self.role is not None else None


@dataclass(frozen=True)
class Principal:
    """The decoded identity attached to a request after token validation.

    Built from token claims only. Fields are optional because the guard does
    not validate claim shape beyond the signature.
    """

    id: int | None
    email: str | None
    display_name: str | None
    role: str | None

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE


@dataclass(frozen=True)
class TokenClaims:
    """Signed payload of a bearer token.

    subject is the user id. On the wire it is the "sub" claim and name is the
    display name; to_principal() maps subject -> id and name -> display_name.
    """

    subject: int | None
    email: str | None
    name: str | None
    role: str | None

    @classmethod
    def for_user(cls, user: User) -> TokenClaims:
        return cls(subject=user.id, email=user.email, name=user.display_name, role=user.role_name)

    def to_principal(self) -> Principal:
        return Principal(id=self.subject, email=self.email, display_name=self.name, role=self.role)


@dataclass(frozen=True)
class PublicUser:
    """Outward view returned by login and registration."""

    id: int
    email: str
    name: str
    role: str | None


@dataclass(frozen=True)
class AccountView:
    """Outward view returned by account reads and updates."""

    id: int
    email: str
    first_name: str
    last_name: str
    name: str
    role: str | None
    created_at: str | None = None


@dataclass(frozen=True)
class AuthResult:
    token: str
    user: PublicUser


def to_public_user(user: User) -> PublicUser:
    return PublicUser(id=user.id, email=user.email, name=user.display_name, role=user.role_name)


def to_account_view(user: User) -> AccountView:
    return AccountView(
        id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        name=user.display_name,
        role=user.role_name,
        created_at=user.created_at,
    )


def build_display_name(first_name: str, last_name: str) -> str:
    return f"{first_name} {last_name}"
