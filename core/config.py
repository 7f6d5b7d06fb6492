"""
core/config.py -- Warden settings, read once from the environment.

Every environment variable the service understands is a field on Settings.
Other modules call get_settings() and never touch os.environ themselves.

  get_settings() is wrapped in lru_cache, so the first call builds Settings
  and every later call gets the same object. api.limiter and api.main read it
  at import time.

  Values come from the process environment first, then an optional .env
  file. Field names are the lower-cased variable names (TOKEN_EXPIRE_SECONDS
  -> token_expire_seconds); pydantic handles coercion, so "false" and "0"
  work for booleans and list fields take JSON.

  The signing key is checked after every field is loaded. Debug runs get a
  random key and a warning; anything else refuses to start without one.

Security notes:
  [M6] SECRET_KEY shorter than 32 chars is rejected outright. JWT signing
       relies on key entropy -- a short key makes HS256 tokens forgeable.

  [M7] Outside debug mode a missing SECRET_KEY stops startup. A key generated
       per process would silently log every user out on each restart.

Layer rule: core/ is the kernel. This module may not import from api/ or auth/.
"""

import logging
import secrets
from functools import lru_cache
from pathlib import Path

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("warden.config")

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'warden.db'}"


class Settings(BaseSettings):
    """Runtime configuration for the API, the store and the CLI.

    Only secret_key lacks a usable default, and debug mode fills that in,
    so tests can build Settings(debug=True) with nothing else configured.
    Keyword arguments override the environment.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False
    # Empty string is the sentinel for "not configured". The model_validator
    # below either generates a dev key or raises, so callers never see "".
    secret_key: str = ""
    database_url: str = _DEFAULT_DB_URL

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    jwt_algorithm: str = "HS256"
    # 0 = tokens carry no exp claim. Positive values add one.
    token_expire_seconds: int = 0

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    allowed_hosts: list[str] = ["*"]
    allowed_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:3001",
        "http://localhost:8080",
        "http://localhost:4200",
    ]

    # ------------------------------------------------------------------
    # Rate limiting
    # ------------------------------------------------------------------

    rate_limit_enabled: bool = True
    login_rate_limit: str = "5 per 5 minutes"
    register_rate_limit: str = "3 per 10 minutes"

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @field_validator("jwt_algorithm")
    @classmethod
    def validate_jwt_algorithm(cls, v: str) -> str:
        # Shared-secret signing only; asymmetric algorithms need a key pair.
        if v not in ("HS256", "HS384", "HS512"):
            raise ValueError("JWT_ALGORITHM must be one of HS256, HS384, HS512.")
        return v

    @field_validator("token_expire_seconds")
    @classmethod
    def validate_token_expire_seconds(cls, v: int) -> int:
        if v < 0:
            raise ValueError("TOKEN_EXPIRE_SECONDS must be 0 (no expiry) or positive.")
        return v

    @model_validator(mode="after")
    def validate_secret_key(self) -> "Settings":
        """Enforce the SECRET_KEY policy [M7].

        DEBUG=true: generate a random key and log a warning. Tokens
            issued before a restart stop verifying.

        Otherwise: a missing key is a startup error.

        Either way, keys shorter than 32 characters are rejected [M6].
        """
        if not self.secret_key:
            if self.debug:
                self.secret_key = secrets.token_hex(32)
                logger.warning("Using auto-generated SECRET_KEY. Issued tokens will not survive a restart.")
            else:
                raise ValueError(
                    "SECRET_KEY is required unless DEBUG=true. "
                    "Provide it through the environment or a .env file."
                )
        if len(self.secret_key) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
