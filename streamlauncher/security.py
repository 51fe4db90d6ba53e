"""Password hashing for stored credentials (bcrypt)."""

from __future__ import annotations

import bcrypt

# bcrypt only looks at the first 72 bytes; newer releases reject longer input.
_MAX_BYTES = 72
DEFAULT_ROUNDS = 12


def _encode(plain: str) -> bytes:
    return plain.encode("utf-8")[:_MAX_BYTES]


def hash_password(plain: str, rounds: int = DEFAULT_ROUNDS) -> str:
    """Return a salted bcrypt digest of *plain* as text."""
    return bcrypt.hashpw(_encode(plain), bcrypt.gensalt(rounds)).decode("ascii")


def verify_password(digest: str, plain: str) -> bool:
    """True if *plain* matches *digest*; malformed digests never match."""
    if not digest:
        return False
    try:
        return bcrypt.checkpw(_encode(plain), digest.encode("ascii"))
    except (ValueError, UnicodeEncodeError):
        return False


class PasswordHasher:
    """Injectable pair of hash / verify callables.

    Tests swap in a cheaper work factor through *rounds*.
    """

    def __init__(self, rounds: int = DEFAULT_ROUNDS) -> None:
        self._rounds = rounds

    def hash(self, plain: str) -> str:
        return hash_password(plain, self._rounds)

    def verify(self, digest: str, plain: str) -> bool:
        return verify_password(digest, plain)
