import logging
from typing import Optional

from fastapi import APIRouter, Cookie, Response, status

from ..schemas.auth_schemas import (
    RegisterRequest, LoginRequest, LoginResponse, RefreshTokenRequest, RefreshTokenResponse,
    ChangePasswordRequest, ForgotPasswordRequest, ResetPasswordRequest,
)
from ..schemas.user_schemas import UserOut
from ....core.exceptions import AuthenticationError
from ....deps import UowDep
from ....security import ActorDep, ACCESS_TOKEN_EXP_SECONDS, REFRESH_TOKEN_EXP_SECONDS
from ....services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter()

GENERIC_RESET_MESSAGE = "If the email exists, a password reset link has been sent"


def _set_auth_cookies(response: Response, access_token: str, refresh_token: Optional[str] = None) -> None:
    response.set_cookie(
        key="access_token",
        value=access_token,
        httponly=True,
        secure=True,
        samesite="lax",
        max_age=ACCESS_TOKEN_EXP_SECONDS,
    )
    if refresh_token:
        response.set_cookie(
            key="refresh_token",
            value=refresh_token,
            httponly=True,
            secure=True,
            samesite="lax",
            max_age=REFRESH_TOKEN_EXP_SECONDS,
        )


@router.post("/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterRequest, uow: UowDep):
    """Create an account"""
    service = AuthService(uow)
    user = await service.register(
        email=payload.email,
        password=payload.password,
        first_name=payload.first_name,
        last_name=payload.last_name,
        role=payload.role,
        phone=payload.phone,
    )
    return UserOut.model_validate(user)


@router.post("/login", response_model=LoginResponse)
async def login(payload: LoginRequest, response: Response, uow: UowDep):
    """Login with email and password"""
    service = AuthService(uow)
    user, access_token, refresh_token = await service.authenticate_user(
        email=payload.email,
        password=payload.password,
    )
    _set_auth_cookies(response, access_token, refresh_token)
    return LoginResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        user=UserOut.model_validate(user).model_dump(mode="json"),
    )


@router.post("/refresh", response_model=RefreshTokenResponse)
async def refresh_token(
    response: Response,
    uow: UowDep,
    payload: Optional[RefreshTokenRequest] = None,
    refresh_token: Optional[str] = Cookie(None),
):
    """Get new access token using a refresh token from the body or cookie"""
    token = payload.refresh_token if payload and payload.refresh_token else refresh_token
    if not token:
        raise AuthenticationError("Missing refresh token")

    access_token = await AuthService(uow).refresh_access_token(token)
    _set_auth_cookies(response, access_token)
    return RefreshTokenResponse(access_token=access_token)


@router.post("/logout")
async def logout(response: Response):
    """Logout (clear auth cookies)"""
    response.delete_cookie(key="access_token", secure=True, httponly=True, samesite="lax")
    response.delete_cookie(key="refresh_token", secure=True, httponly=True, samesite="lax")
    return {"success": True}


@router.get("/me", response_model=UserOut)
async def me(actor: ActorDep, uow: UowDep):
    """Get current user info"""
    user = await uow.users.get(actor.id)
    return UserOut.model_validate(user)


@router.post("/change-password")
async def change_password(payload: ChangePasswordRequest, actor: ActorDep, uow: UowDep):
    """Change current user's password"""
    await AuthService(uow).change_password(
        actor,
        actor.id,
        current_password=payload.current_password,
        new_password=payload.new_password,
    )
    return {"success": True}


@router.post("/forgot-password")
async def forgot_password(payload: ForgotPasswordRequest, uow: UowDep):
    """Start a password reset; the answer never reveals whether the email exists"""
    token = await AuthService(uow).forgot_password(payload.email)
    if token:
        # Delivery is an external concern; the token leaves through the mail channel only
        logger.debug("Password reset token ready for %s", payload.email)
    return {"success": True, "message": GENERIC_RESET_MESSAGE}


@router.post("/reset-password")
async def reset_password(payload: ResetPasswordRequest, uow: UowDep):
    await AuthService(uow).reset_password(payload.token, payload.new_password)
    return {"success": True}
