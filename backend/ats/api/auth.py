from fastapi import APIRouter, Depends

from ats.auth import get_auth_service, get_current_user
from ats.models import User
from ats.schemas import (
    MessageResponse,
    PasswordResetConfirm,
    PasswordResetRequest,
    SignInRequest,
    SignInResponse,
)
from ats.services.auth import AuthService

router = APIRouter()


@router.post("/signin", response_model=SignInResponse)
async def sign_in(
    request: SignInRequest,
    auth: AuthService = Depends(get_auth_service),
):
    token = await auth.sign_in(request.username, request.password)
    return SignInResponse(token=token)


@router.post("/signout", response_model=MessageResponse)
async def sign_out(
    user: User = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
):
    await auth.sign_out(user)
    return MessageResponse(message="Successfully signed out")


@router.post("/reset-password-request", response_model=MessageResponse)
async def reset_password_request(
    request: PasswordResetRequest,
    auth: AuthService = Depends(get_auth_service),
):
    await auth.request_password_reset(request.email)
    return MessageResponse(message="Password reset email sent")


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    request: PasswordResetConfirm,
    auth: AuthService = Depends(get_auth_service),
):
    await auth.confirm_password_reset(request.token, request.new_password)
    return MessageResponse(message="Password successfully reset")
