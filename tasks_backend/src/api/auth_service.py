"""
Registration, login and token-to-identity resolution.
"""

from __future__ import annotations

import logging

from .errors import InvalidCredentialsError, InvalidTokenError, UserAlreadyExistsError
from .models import AuthenticatedUser, SignedUser, UserEntity
from .passwords import PasswordHasher
from .repositories import UserRepository
from .tokens import TokenService

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class AuthService:
    """Orchestrates the credential store, password hasher and token service."""

    def __init__(self, users: UserRepository, hasher: PasswordHasher, tokens: TokenService) -> None:
        self._users = users
        self._hasher = hasher
        self._tokens = tokens

    def _signed(self, user: UserEntity) -> SignedUser:
        return SignedUser(id=user["id"], username=user["username"], token=self._tokens.sign(user["id"]))

    def register(self, username: str, password: str) -> SignedUser:
        """
        Create an account and return it with a fresh token.

        Raises:
            UserAlreadyExistsError if the username is taken; nothing is hashed or written.
        """
        if self._users.get_by_username(username) is not None:
            logger.warning("Registration rejected: username already exists")
            raise UserAlreadyExistsError()

        user = self._users.create(username, self._hasher.hash(password))
        logger.info("Registered user %s (%s)", user["username"], user["id"])
        return self._signed(user)

    def authenticate(self, username: str, password: str) -> SignedUser:
        """
        Check credentials and return the user with a fresh token.

        Raises:
            InvalidCredentialsError for an unknown username or a wrong password alike.
        """
        user = self._users.get_by_username(username)
        if user is None:
            logger.warning("Login failed: unknown user")
            raise InvalidCredentialsError()
        if not self._hasher.verify(password, user["password_hash"]):
            logger.warning("Login failed: bad password for %s", user["id"])
            raise InvalidCredentialsError()

        logger.info("Login: %s (%s)", user["username"], user["id"])
        return self._signed(user)

    def resolve_identity(self, token: str) -> AuthenticatedUser:
        """
        Verify token and load the user it names.

        Raises:
            InvalidTokenError if verification fails or the user no longer exists.
        """
        user_id = self._tokens.verify(token)
        user = self._users.get(user_id)
        if user is None:
            logger.warning("Token subject %s no longer exists", user_id)
            raise InvalidTokenError()
        return AuthenticatedUser(id=user["id"], username=user["username"])
