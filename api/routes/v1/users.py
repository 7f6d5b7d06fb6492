"""
api/routes/v1/users.py -- Account management endpoints.

Routes:
  PUT    /api/v1/users/profile    -- update own account (requires auth)
  DELETE /api/v1/users/profile    -- delete own account (requires auth)
  GET    /api/v1/users/{id}       -- read any account (admin only)
  PUT    /api/v1/users/{id}       -- update account; service allows self only
  DELETE /api/v1/users/{id}       -- delete any account (admin only)

The guard on each route decides who may call it at all. AccountService
re-validates ownership against the stored target. The /profile routes are
registered before /{user_id} so "profile" is never parsed as an id.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from api.models import AccountResponse, MessageResponse, UpdateUserRequest
from auth.accounts import AccountPatch, AccountService
from auth.dependencies import get_account_service, get_current_principal, require_admin
from auth.models import Principal

router = APIRouter()


def _to_patch(body: UpdateUserRequest) -> AccountPatch:
    return AccountPatch(
        first_name=body.first_name,
        last_name=body.last_name,
        email=body.email,
        password=body.password,
    )


# ---------------------------------------------------------------------------
# Self-service (authenticated)
# ---------------------------------------------------------------------------


@router.put("/users/profile", response_model=AccountResponse)
def update_profile(
    body: UpdateUserRequest,
    principal: Principal = Depends(get_current_principal),
    service: AccountService = Depends(get_account_service),
) -> AccountResponse:
    view = service.update(principal.id, _to_patch(body), principal.id)
    return AccountResponse.from_view(view)


@router.delete("/users/profile", response_model=MessageResponse)
def delete_own_account(
    principal: Principal = Depends(get_current_principal),
    service: AccountService = Depends(get_account_service),
) -> MessageResponse:
    return MessageResponse(**service.remove(principal.id, principal.id, False))


# ---------------------------------------------------------------------------
# By id
# ---------------------------------------------------------------------------


@router.get("/users/{user_id}", response_model=AccountResponse)
def get_user(
    user_id: int,
    admin: Principal = Depends(require_admin),
    service: AccountService = Depends(get_account_service),
) -> AccountResponse:
    """Read an account. Admin only."""
    return AccountResponse.from_view(service.get(user_id))


@router.put("/users/{user_id}", response_model=AccountResponse)
def update_user(
    user_id: int,
    body: UpdateUserRequest,
    principal: Principal = Depends(get_current_principal),
    service: AccountService = Depends(get_account_service),
) -> AccountResponse:
    """Update an account. Any authenticated caller may call it; only the owner succeeds."""
    view = service.update(user_id, _to_patch(body), principal.id)
    return AccountResponse.from_view(view)


@router.delete("/users/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: int,
    admin: Principal = Depends(require_admin),
    service: AccountService = Depends(get_account_service),
) -> MessageResponse:
    """Delete any account. Admin only."""
    return MessageResponse(**service.remove(user_id, admin.id, True))
