from fastapi import APIRouter, Depends, status

from canteen.core.security import Identity, get_current_identity
from canteen.schemas.auth import ForgotPasswordRequest, LoginRequest, RegisterRequest, ResetPasswordRequest
from canteen.schemas.response import SuccessResponse
from canteen.services.auth_service import (
    get_profile,
    login,
    register_employee,
    request_password_reset,
    reset_password,
)
from canteen.services.notifications import ResetMailer, get_reset_mailer

router = APIRouter()


@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def register_endpoint(payload: RegisterRequest):
    profile = await register_employee(payload)
    return SuccessResponse(message="Registration successful.", data=profile.to_api())


@router.post("/login", response_model=SuccessResponse)
async def login_endpoint(payload: LoginRequest):
    result = await login(payload)
    return SuccessResponse(message="Login successful.", data=result.to_api())


@router.get("/profile", response_model=SuccessResponse)
async def profile_endpoint(identity: Identity = Depends(get_current_identity)):
    profile = await get_profile(identity.employee_id)
    return SuccessResponse(data=profile.to_api())


@router.post("/forgot-password", response_model=SuccessResponse)
async def forgot_password_endpoint(payload: ForgotPasswordRequest, mailer: ResetMailer = Depends(get_reset_mailer)):
    """Same answer for known and unknown ids."""
    await request_password_reset(payload.employee_id, mailer)
    return SuccessResponse(
        message="If the Employee ID exists, you will receive password reset instructions shortly."
    )


@router.post("/reset-password", response_model=SuccessResponse)
async def reset_password_endpoint(payload: ResetPasswordRequest):
    await reset_password(payload.token, payload.password)
    return SuccessResponse(message="Password has been reset successfully.")
