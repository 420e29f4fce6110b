from fastapi import APIRouter, Depends, Request
from starlette import status
from core.config import settings
from middleware.auth import authenticate, current_user_dependency
from middleware.rate_limiter import limiter
from schemas.auth_schemas import (ApiResponse, AuthUser, ForgotPasswordRequest, LoginRequest,
    RefreshTokenRequest, RegisterRequest, ResetPasswordRequest, TokenResponse, UpdatePasswordRequest)
from utils.deps import auth_service_dependency


router = APIRouter(
    prefix="/api/auth",
    tags=["auth"]
)

authenticated = [Depends(authenticate)]


@router.post("/register", response_model=ApiResponse[TokenResponse], status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.AUTH_RATE_LIMIT)
def register(request: Request, body: RegisterRequest, auth: auth_service_dependency):
    result = auth.register(body)
    return ApiResponse(message="Registration successful", data=result)


@router.post("/login", response_model=ApiResponse[TokenResponse])
@limiter.limit(settings.AUTH_RATE_LIMIT)
def login(request: Request, body: LoginRequest, auth: auth_service_dependency):
    result = auth.login(body.email, body.password)
    return ApiResponse(message="Login successful", data=result)


@router.post("/refresh-token", response_model=ApiResponse[TokenResponse])
def refresh_token(request: Request, body: RefreshTokenRequest, auth: auth_service_dependency):
    """
    Exchange a refresh token for a new access/refresh pair.
    """
    result = auth.refresh(body.refresh_token)
    return ApiResponse(message="Token refreshed successfully", data=result)


@router.post("/forgot-password", response_model=ApiResponse[None])
@limiter.limit(settings.AUTH_RATE_LIMIT)
def forgot_password(request: Request, body: ForgotPasswordRequest, auth: auth_service_dependency):
    """
    Email a password reset link. The answer never reveals whether the account exists.
    """
    message = auth.forgot_password(body.email)
    return ApiResponse(message=message)


@router.post("/reset-password", response_model=ApiResponse[None])
def reset_password(request: Request, body: ResetPasswordRequest, auth: auth_service_dependency):
    auth.reset_password_with_token(body.token, body.new_password)
    return ApiResponse(message="Password reset successfully")


@router.get("/me", response_model=ApiResponse[AuthUser], dependencies=authenticated)
def get_current_user(user: current_user_dependency, auth: auth_service_dependency):
    return ApiResponse(data=auth.get_current_user(user.id))


@router.post("/logout", response_model=ApiResponse[None], dependencies=authenticated)
def logout(user: current_user_dependency, auth: auth_service_dependency):
    """
    Revoke every refresh token of the caller, on all devices.
    """
    auth.logout(user.id)
    return ApiResponse(message="Logout successful")


@router.post("/update-password", response_model=ApiResponse[None], dependencies=authenticated)
def update_password(body: UpdatePasswordRequest, user: current_user_dependency, auth: auth_service_dependency):
    auth.update_password(user.id, body.old_password, body.new_password)
    return ApiResponse(message="Password updated successfully")
