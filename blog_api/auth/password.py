"""Password hashing utilities.

bcrypt salts every hash and its work factor makes brute force expensive.
Verification goes through ``bcrypt.checkpw``, whose comparison is
constant-time.  Passwords are truncated to bcrypt's 72-byte limit.
"""

from functools import lru_cache

import bcrypt

DEFAULT_ROUNDS = 12


def hash_password(password: str, rounds: int = DEFAULT_ROUNDS) -> str:
    pw_bytes = password.encode("utf-8")[:72]
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(pw_bytes, salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Return True when *password* matches *password_hash*; malformed hashes never match."""
    try:
        pw_bytes = password.encode("utf-8")[:72]
        return bcrypt.checkpw(pw_bytes, password_hash.encode("utf-8"))
    except (ValueError, TypeError):
        return False


@lru_cache(maxsize=None)
def dummy_hash(rounds: int = DEFAULT_ROUNDS) -> bytes:
    """A real hash of a throwaway value, built once per work factor."""
    return bcrypt.hashpw(b"not-a-real-password", bcrypt.gensalt(rounds=rounds))


def burn_verification(password: str, rounds: int = DEFAULT_ROUNDS) -> None:
    """
    Spend one bcrypt check on a dummy hash; the result is discarded.

    Used when the username does not exist, so that an unknown user costs
    as much as a wrong password.  *rounds* must match the work factor
    real hashes are created with.
    """
    bcrypt.checkpw(password.encode("utf-8")[:72], dummy_hash(rounds))
