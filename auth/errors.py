"""
auth/errors.py -- Business error taxonomy for the access-control core.

Services raise these; api/main.py renders every AccessError into the shared
{"error": {...}} envelope using status_code and code. Anything that is not an
AccessError (SQLAlchemy failures, bcrypt failures on a corrupt hash) is a
fatal infrastructure error and propagates to the catch-all 500 handler.

Layer rule: no imports from api/ or core/. FastAPI is not imported here so
services stay usable outside an HTTP request.
"""

from __future__ import annotations


class AccessError(Exception):
    """Base class for errors surfaced to the caller with a specific message."""

    status_code: int = 400
    code: str = "bad_request"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(AccessError):
    """Malformed input. fields maps each offending field to its messages."""

    status_code = 422
    code = "validation_error"

    def __init__(self, fields: dict[str, list[str]], message: str = "Request validation failed.") -> None:
        super().__init__(message)
        self.fields = fields


class Unauthorized(AccessError):
    status_code = 401
    code = "unauthorized"


class Forbidden(AccessError):
    status_code = 403
    code = "forbidden"


class NotFound(AccessError):
    status_code = 404
    code = "not_found"


class Conflict(AccessError):
    status_code = 409
    code = "conflict"


class RateLimited(AccessError):
    status_code = 429
    code = "rate_limited"

    def __init__(self, message: str = "Too many attempts. Try again later.", retry_after: int = 60) -> None:
        super().__init__(message)
        self.retry_after = retry_after
