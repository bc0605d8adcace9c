from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, TypedDict


# PUBLIC_INTERFACE
class UserEntity(TypedDict):
    """
    A registered user as held by the credential store.

    Fields:
    - id: UUID4 string generated at creation
    - username: unique, case-sensitive login name
    - password_hash: bcrypt digest; never leaves the service layer
    - created_at / updated_at: UTC timestamps
    """

    id: str
    username: str
    password_hash: str
    created_at: datetime
    updated_at: datetime


# PUBLIC_INTERFACE
class TaskEntity(TypedDict):
    """
    A task row.

    Fields:
    - id: UUID4 string
    - title: short title (1..100 chars, trimmed on input via schemas)
    - description: optional detailed description
    - is_complete: completion flag
    - user_id: owning user's id, fixed at creation
    - created_at / updated_at: UTC timestamps
    """

    id: str
    title: str
    description: Optional[str]
    is_complete: bool
    user_id: str
    created_at: datetime
    updated_at: datetime


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class AuthenticatedUser:
    """Identity established by the bearer token gate for a single request."""

    id: str
    username: str


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class SignedUser:
    """Public projection returned by register/login."""

    id: str
    username: str
    token: str
