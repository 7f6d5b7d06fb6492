"""
api/routes/v1/auth.py -- Login, registration and current-identity endpoints.

Routes:
  POST /api/v1/auth/login     -- password login; returns a bearer token
  POST /api/v1/auth/register  -- create an account with the "user" role
  GET  /api/v1/auth/profile   -- the principal decoded from the token

Security:
  [H2] login is rate-limited (default 5 per 5 minutes per client address)
       and register likewise (default 3 per 10 minutes). Limits apply
       whether or not the credentials were correct.
  [C1] CredentialService.login() provides timing equalization and a single
       "Invalid credentials" message -- never inline store lookups here.
  [M5] Cache-Control: no-store on responses that carry a token.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response

from api.limiter import LOGIN_LIMIT, REGISTER_LIMIT, limiter
from api.models import AuthResponse, LoginRequest, RegisterRequest, UserResponse
from auth.credentials import CredentialService
from auth.dependencies import get_credential_service, get_current_principal
from auth.models import Principal

# Auth policy:
# - POST /api/v1/auth/login:     public (rate-limited)
# - POST /api/v1/auth/register:  public (rate-limited)
# - GET  /api/v1/auth/profile:   requires auth (get_current_principal)
router = APIRouter()


@limiter.limit(LOGIN_LIMIT)  # [H2] must be ABOVE @router to preserve FastAPI introspection
@router.post("/auth/login", response_model=AuthResponse)
def login(
    request: Request,
    response: Response,
    body: LoginRequest,
    service: CredentialService = Depends(get_credential_service),
) -> AuthResponse:
    """Authenticate with email and password.

    Wrong email and wrong password produce the same 401 "Invalid credentials"
    so the response does not reveal which accounts exist.
    """
    result = service.login(body.email, body.password)
    response.headers["Cache-Control"] = "no-store"  # [M5]
    return AuthResponse.from_result(result)


@limiter.limit(REGISTER_LIMIT)  # [H2]
@router.post("/auth/register", response_model=AuthResponse, status_code=201)
def register(
    request: Request,
    response: Response,
    body: RegisterRequest,
    service: CredentialService = Depends(get_credential_service),
) -> AuthResponse:
    """Create an account and return a token for it. 409 if the email is taken."""
    result = service.register(body.email, body.password, body.first_name, body.last_name)
    response.headers["Cache-Control"] = "no-store"  # [M5]
    return AuthResponse.from_result(result)


@router.get("/auth/profile", response_model=UserResponse)
async def profile(principal: Principal = Depends(get_current_principal)) -> UserResponse:
    """Return the identity carried by the bearer token. No store lookup."""
    return UserResponse.from_principal(principal)
