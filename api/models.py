"""
API request and response models for Warden REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py, which
own the internal domain representation. Route handlers map between the two.

Wire names are camelCase (firstName, lastName); Python attributes stay
snake_case. Request models reject unknown fields.

Emails are checked for format with email-validator but kept exactly as the
client sent them. Lookups are exact, so the stored address must be the one
the user will type at login.
"""

from typing import Annotated, Optional

from email_validator import EmailNotValidError, validate_email
from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from auth.credentials import PASSWORD_MIN_LENGTH
from auth.models import AccountView, AuthResult, Principal, PublicUser


def _check_email(value: str) -> str:
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError as exc:
        raise ValueError(f"value is not a valid email address: {exc}") from exc
    return value


Email = Annotated[str, AfterValidator(_check_email)]


class _RequestModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


class _ResponseModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class RegisterRequest(_RequestModel):
    """Request body for POST /api/v1/auth/register."""

    email: Email
    password: str = Field(min_length=PASSWORD_MIN_LENGTH)
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)


class LoginRequest(_RequestModel):
    """Request body for POST /api/v1/auth/login.

    No minimum password length here; only registration enforces one.
    """

    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class UpdateUserRequest(_RequestModel):
    """Request body for PUT /api/v1/users/{id} and /users/profile. All fields optional."""

    first_name: Optional[str] = Field(default=None, min_length=1)
    last_name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[Email] = None
    password: Optional[str] = Field(default=None, min_length=PASSWORD_MIN_LENGTH)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class UserResponse(_ResponseModel):
    """Public user shape: {id, email, name, role}. Never carries a password."""

    id: Optional[int]
    email: Optional[str]
    name: Optional[str]
    role: Optional[str]

    @classmethod
    def from_public(cls, user: PublicUser) -> "UserResponse":
        return cls(id=user.id, email=user.email, name=user.name, role=user.role)

    @classmethod
    def from_principal(cls, principal: Principal) -> "UserResponse":
        return cls(id=principal.id, email=principal.email, name=principal.display_name, role=principal.role)


class AuthResponse(BaseModel):
    """Response for login and registration. Field names match the OAuth2 token response."""

    model_config = ConfigDict(frozen=True)

    access_token: str
    token_type: str = "bearer"
    user: UserResponse

    @classmethod
    def from_result(cls, result: AuthResult) -> "AuthResponse":
        return cls(access_token=result.token, user=UserResponse.from_public(result.user))


class AccountResponse(_ResponseModel):
    """Account detail returned by user reads and updates."""

    id: int
    email: str
    first_name: str
    last_name: str
    name: str
    role: Optional[str]
    created_at: Optional[str] = None

    @classmethod
    def from_view(cls, view: AccountView) -> "AccountResponse":
        return cls(
            id=view.id,
            email=view.email,
            first_name=view.first_name,
            last_name=view.last_name,
            name=view.name,
            role=view.role,
            created_at=view.created_at,
        )


class MessageResponse(_ResponseModel):
    message: str


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None
    field_errors: Optional[dict[str, list[str]]] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str
    version: str
    components: dict[str, str]
