from __future__ import annotations

from typing import Optional

from fastapi import status


class AppError(Exception):
    """
    Base class for errors that map onto an HTTP response.

    The exception handler in main renders these as {"error": message} with
    the class' status code.
    """

    status_code: int = status.HTTP_400_BAD_REQUEST
    message: str = "Invalid request"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.message)
        if message is not None:
            self.message = message


class AuthenticationRequiredError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Authentication required"


class InvalidTokenError(AppError):
    """Raised for any token that fails verification, or whose subject is gone."""

    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Invalid or expired token"


class InvalidCredentialsError(AppError):
    # Same response for unknown user and wrong password.
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Failed to authenticate user"


class UserAlreadyExistsError(AppError):
    status_code = status.HTTP_409_CONFLICT
    message = "User already exists"


class TaskNotFoundError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Task not found"


class KeyMaterialError(RuntimeError):
    """Signing keys could not be loaded. Fatal at startup."""
