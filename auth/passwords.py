"""
auth/passwords.py -- bcrypt password hashing.

Using bcrypt directly rather than passlib[bcrypt] because passlib's internal
wrap-bug detection creates a password longer than 72 bytes, which bcrypt 4.x
rejects with an explicit error.

StoredHash format: the standard modular-crypt string bcrypt produces,
"$2b$<cost>$<22-char salt><31-char digest>". Algorithm, cost, salt and digest
all live in that one string, so verify_password() needs nothing else.

bcrypt only consumes the first 72 bytes of a password and recent releases
raise instead of truncating. _encode() truncates explicitly so hashing never
fails for long input and verification stays consistent with hashing.
"""

from __future__ import annotations

import bcrypt

BCRYPT_ROUNDS = 12
_MAX_PASSWORD_BYTES = 72


def _encode(plain: str) -> bytes:
    return plain.encode("utf-8")[:_MAX_PASSWORD_BYTES]


def hash_password(plain: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """Return a bcrypt StoredHash for plain. A fresh salt is drawn on every call."""
    return bcrypt.hashpw(_encode(plain), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if plain matches the StoredHash.

    Returns False, never raises, for an empty password or a stored value that
    is not a well-formed bcrypt hash. bcrypt.checkpw compares in constant time.
    """
    if not plain or not hashed:
        return False
    try:
        return bcrypt.checkpw(_encode(plain), hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


# Timing equalization dummy hash.
# Computed once at module load so the first login attempt is not measurably
# slower than subsequent ones. authenticate_user() verifies against this when
# the email is unknown so response time does not reveal account existence.
DUMMY_HASH: str = hash_password("taskteam_timing_dummy")
