"""
Password hashing and verification.

Uses bcrypt with automatic salting and a configurable work factor.
"""

from __future__ import annotations

import bcrypt

# bcrypt only looks at the first 72 bytes of input and newer releases refuse
# longer input outright.
_BCRYPT_MAX_BYTES = 72


def _encode(plaintext: str) -> bytes:
    return plaintext.encode("utf-8")[:_BCRYPT_MAX_BYTES]


# PUBLIC_INTERFACE
class PasswordHasher:
    """One-way salted password hashing with an adaptive cost factor."""

    def __init__(self, rounds: int = 10) -> None:
        self._rounds = rounds

    def hash(self, plaintext: str) -> str:
        """Hash a password with bcrypt (fresh salt per call)."""
        return bcrypt.hashpw(_encode(plaintext), bcrypt.gensalt(rounds=self._rounds)).decode()

    def verify(self, plaintext: str, password_hash: str) -> bool:
        """Constant-time comparison against a bcrypt hash. False for malformed hashes."""
        if not password_hash:
            return False
        try:
            return bcrypt.checkpw(_encode(plaintext), password_hash.encode())
        except (ValueError, TypeError):
            return False
