"""
Signed identity tokens.

Tokens are RS256 JWTs carrying the user id as ``sub`` plus ``iat``/``exp``.
Only RS256 is accepted on verification, so tokens signed with a shared
secret (HS256) or left unsigned are rejected.
"""

from __future__ import annotations

from datetime import timedelta

import jwt

from .errors import InvalidTokenError
from .keys import KeyPair
from .utils import utc_now

ALGORITHM = "RS256"


# PUBLIC_INTERFACE
class TokenService:
    """Sign and verify identity tokens with an injected key pair."""

    def __init__(self, keys: KeyPair, ttl_seconds: int = 3600) -> None:
        self._keys = keys
        self._ttl = timedelta(seconds=ttl_seconds)

    def sign(self, user_id: str) -> str:
        """Create a token for user_id that expires after the configured TTL."""
        if not user_id:
            raise ValueError("Invalid user id for token generation")
        now = utc_now()
        payload = {"sub": str(user_id), "iat": now, "exp": now + self._ttl}
        return jwt.encode(payload, self._keys.private_key, algorithm=ALGORITHM)

    def verify(self, token: str) -> str:
        """
        Verify token and return its subject (the user id).

        Raises ``InvalidTokenError`` for a bad signature, a foreign algorithm,
        an elapsed expiry or a malformed token alike.
        """
        try:
            payload = jwt.decode(
                token,
                self._keys.public_key,
                algorithms=[ALGORITHM],
                options={"require": ["sub", "iat", "exp"]},
            )
        except jwt.PyJWTError as e:
            raise InvalidTokenError() from e
        subject = payload.get("sub")
        if not subject:
            raise InvalidTokenError()
        return subject
