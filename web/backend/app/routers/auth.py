"""Auth router -- registration, login, logout, profile and token verification."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from devhub.auth.models import User
from devhub.services import Services
from web.backend.app.middleware.auth import get_bearer_token, get_current_user, get_services
from web.backend.app.models.api import (
    AuthResponse,
    LoginRequest,
    MessageResponse,
    ProfileEnvelope,
    RegisterRequest,
    VerifiedUser,
    VerifyResponse,
)
from web.backend.app.presenters import user_response

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new account",
)
async def register(body: RegisterRequest, services: Services = Depends(get_services)):
    """Create an account and sign it in. Duplicate username or email -> 409."""
    user = services.users.create(body.username, body.email, body.password)
    _, token = services.users.create_session(user.id)
    return AuthResponse(
        message="User registered successfully",
        token=token,
        user=user_response(user),
    )


@router.post("/login", response_model=AuthResponse, summary="Login with username or email")
async def login(body: LoginRequest, services: Services = Depends(get_services)):
    """Exchange an identifier (username or email) and password for a session token."""
    user = services.users.authenticate(body.identifier, body.password)
    _, token = services.users.create_session(user.id)
    return AuthResponse(message="Login successful", token=token, user=user_response(user))


@router.get("/profile", response_model=ProfileEnvelope, summary="Current user's profile")
async def profile(user: User = Depends(get_current_user)):
    return ProfileEnvelope(user=user_response(user))


@router.get("/verify", response_model=VerifyResponse, summary="Verify a session token")
async def verify(user: User = Depends(get_current_user)):
    return VerifyResponse(
        valid=True,
        user=VerifiedUser(id=user.id, username=user.username, email=user.email),
    )


@router.post("/logout", response_model=MessageResponse, summary="Logout / revoke session")
async def logout(
    user: User = Depends(get_current_user),
    token: str = Depends(get_bearer_token),
    services: Services = Depends(get_services),
):
    """Revoke the token used for this request."""
    services.users.delete_session(token)
    return MessageResponse(message="Logout successful")
