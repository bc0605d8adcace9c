from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ..auth_service import AuthService
from ..container import get_auth_service
from ..schemas import ErrorOut, LoginRequest, RegisterRequest, SignedUserOut

router = APIRouter(
    prefix="/auth",
    tags=["auth"],
)


# PUBLIC_INTERFACE
@router.post(
    "/register",
    response_model=SignedUserOut,
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    description="Create an account and return it with a signed token.",
    responses={
        201: {"description": "User registered"},
        400: {"model": ErrorOut, "description": "Validation error"},
        409: {"model": ErrorOut, "description": "Username already taken"},
    },
)
def register(payload: RegisterRequest, auth: AuthService = Depends(get_auth_service)) -> SignedUserOut:
    """
    Register a new user.
    """
    user = auth.register(payload.username, payload.password)
    return SignedUserOut(id=user.id, username=user.username, token=user.token)


# PUBLIC_INTERFACE
@router.post(
    "/login",
    response_model=SignedUserOut,
    summary="Login",
    description="Exchange username and password for a signed token.",
    responses={
        200: {"description": "Authenticated"},
        400: {"model": ErrorOut, "description": "Validation error or bad credentials"},
    },
)
def login(payload: LoginRequest, auth: AuthService = Depends(get_auth_service)) -> SignedUserOut:
    """
    Authenticate with username and password.
    """
    user = auth.authenticate(payload.username, payload.password)
    return SignedUserOut(id=user.id, username=user.username, token=user.token)
