from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header

from .auth_service import AuthService
from .container import get_auth_service
from .errors import AuthenticationRequiredError
from .models import AuthenticatedUser


# PUBLIC_INTERFACE
def require_user(
    authorization: Optional[str] = Header(
        default=None,
        description="Signed token as returned by /auth/login; the whole header value is the token",
    ),
    auth: AuthService = Depends(get_auth_service),
) -> AuthenticatedUser:
    """
    Establish the caller's identity from the Authorization header.

    Behavior:
    - Header missing or empty: 401 "Authentication required".
    - Token invalid, expired, or naming a user that no longer exists:
      401 "Invalid or expired token".
    - Otherwise returns the AuthenticatedUser for the handler.

    Usage:
        router = APIRouter(dependencies=[Depends(require_user)])
        def handler(user: AuthenticatedUser = Depends(require_user)): ...
    """
    if not authorization:
        raise AuthenticationRequiredError()
    return auth.resolve_identity(authorization)
