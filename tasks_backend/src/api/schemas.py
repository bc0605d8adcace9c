from __future__ import annotations

import re
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

USERNAME_PATTERN = r"^[A-Za-z0-9_]+$"
TITLE_MAX_LENGTH = 100

_HAS_DIGIT = re.compile(r"\d")
_HAS_UPPER = re.compile(r"[A-Z]")
_HAS_LOWER = re.compile(r"[a-z]")
_HAS_SPECIAL = re.compile(r"[^A-Za-z0-9]")


def _normalize_title(v: str) -> str:
    s = v.strip()
    if not (1 <= len(s) <= TITLE_MAX_LENGTH):
        raise ValueError(f"title length must be between 1 and {TITLE_MAX_LENGTH} characters")
    return s


# PUBLIC_INTERFACE
class LoginRequest(BaseModel):
    """
    Credentials presented at login. Only length bounds are checked on the
    password since it is compared against an existing hash.
    """

    model_config = ConfigDict(
        json_schema_extra={"example": {"username": "jane_doe", "password": "Secr3t!pass"}}
    )

    username: str = Field(..., min_length=3, max_length=30, pattern=USERNAME_PATTERN)
    password: str = Field(..., min_length=8, max_length=100)


# PUBLIC_INTERFACE
class RegisterRequest(LoginRequest):
    """
    Credentials for a new account. The password must contain a digit, an
    uppercase letter, a lowercase letter and a special character.
    """

    @field_validator("password")
    @classmethod
    def validate_password_strength(cls, v: str) -> str:
        missing = []
        if not _HAS_DIGIT.search(v):
            missing.append("a digit")
        if not _HAS_UPPER.search(v):
            missing.append("an uppercase letter")
        if not _HAS_LOWER.search(v):
            missing.append("a lowercase letter")
        if not _HAS_SPECIAL.search(v):
            missing.append("a special character")
        if missing:
            raise ValueError("password must contain " + ", ".join(missing))
        return v


# PUBLIC_INTERFACE
class SignedUserOut(BaseModel):
    """Returned by register and login. Never carries the password hash."""

    id: str = Field(..., description="Unique identifier of the user")
    username: str = Field(..., description="Login name")
    token: str = Field(..., description="RS256-signed bearer token, valid for one hour")


# PUBLIC_INTERFACE
class TaskCreate(BaseModel):
    """
    Schema for creating a task. The owner is never read from the body.
    """

    model_config = ConfigDict(
        json_schema_extra={"example": {"title": "Buy milk", "description": "Two litres, semi-skimmed"}}
    )

    title: str = Field(..., description="Short title for the task", min_length=1, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = Field(default=None, description="Optional detailed description")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """
        Strip whitespace and enforce 1..100 length.
        """
        return _normalize_title(v)


# PUBLIC_INTERFACE
class TaskUpdate(BaseModel):
    """
    Schema for updating an existing task.
    All fields are optional; only provided fields will be updated.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={"example": {"title": "Buy oat milk", "isComplete": True}},
    )

    title: Optional[str] = Field(default=None, description="Short title for the task", min_length=1, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = Field(default=None, description="Optional detailed description")
    is_complete: Optional[bool] = Field(default=None, description="Completion status flag")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: Optional[str]) -> Optional[str]:
        """
        If title is provided, strip whitespace and enforce 1..100 length.
        """
        if v is None:
            return v
        return _normalize_title(v)


# PUBLIC_INTERFACE
class TaskOut(BaseModel):
    """
    Schema returned by the API for a task.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": "3f0f6a2e-8d4c-4c53-9d55-0d8f1f9a2b7c",
                "title": "Buy milk",
                "description": None,
                "isComplete": False,
                "userId": "a1c3e5f7-0b2d-4e6f-8a9b-1c2d3e4f5a6b",
                "createdAt": "2025-01-25T10:15:30.123456+00:00",
                "updatedAt": "2025-01-26T09:00:00.000001+00:00",
            }
        },
    )

    id: str = Field(..., description="Unique identifier of the task")
    title: str = Field(..., description="Short title for the task")
    description: Optional[str] = Field(default=None, description="Optional detailed description")
    is_complete: bool = Field(..., description="Completion status flag")
    user_id: str = Field(..., description="Identifier of the owning user")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")


class ValidationIssue(BaseModel):
    path: List[str]
    message: str
    code: str


# PUBLIC_INTERFACE
class ErrorOut(BaseModel):
    """Body of every error response."""

    error: str = Field(..., description="Short error code or message")
    message: Optional[str] = None
    detail: Optional[List[ValidationIssue]] = None


class HealthOut(BaseModel):
    message: str
    backend: str
