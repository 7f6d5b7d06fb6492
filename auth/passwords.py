"""
auth/passwords.py -- One-way password hashing (bcrypt, direct usage).

Using bcrypt directly rather than passlib[bcrypt] because passlib's internal
wrap-bug detection creates a password longer than 72 bytes, which bcrypt 4.x
rejects with an explicit error.

Work factor is the fixed module constant BCRYPT_ROUNDS. It is never taken
from a request.

bcrypt only looks at the first 72 bytes of input and bcrypt 5.x raises on
anything longer, so both hash and verify truncate to 72 bytes.

Errors: verify_password() returns False on a mismatch and nothing else. A
corrupt stored hash (ValueError from bcrypt) is an environment problem, not a
credential problem, and propagates.
"""

from __future__ import annotations

import bcrypt

BCRYPT_ROUNDS = 10

_BCRYPT_MAX_BYTES = 72


def _encode(plain: str) -> bytes:
    return plain.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(plain: str) -> str:
    """Return a bcrypt hash of the given plaintext password."""
    return bcrypt.hashpw(_encode(plain), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash."""
    return bcrypt.checkpw(_encode(plain), hashed.encode("utf-8"))


# Timing equalization dummy hash [C1].
# Computed once at module load. login() verifies against it when the email
# is unknown so both rejection paths pay for exactly one bcrypt check.
DUMMY_HASH: str = hash_password("warden_timing_dummy")
