from __future__ import annotations

from fastapi import APIRouter, Depends, status

from donation_api.dependencies import (
    get_account_service,
    get_current_user,
    get_identity_gateway,
)
from donation_api.schemas import (
    ForgotPasswordRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
    ResetPasswordRequest,
    UserOut,
)
from donation_kernel.models import User
from donation_services import AccountService, IdentityGateway

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    accounts: AccountService = Depends(get_account_service),
) -> RegisterResponse:
    registration = accounts.register(
        email=body.email,
        password=body.password,
        first_name=body.first_name,
        last_name=body.last_name,
    )
    return RegisterResponse(
        message="User created successfully",
        user=UserOut.model_validate(registration.user),
    )


@router.post("/login", response_model=LoginResponse)
def login(
    body: LoginRequest,
    gateway: IdentityGateway = Depends(get_identity_gateway),
) -> LoginResponse:
    grant = gateway.authenticate(body.email, body.password)
    return LoginResponse(token=grant.token, user=UserOut.model_validate(grant.user))


@router.get("/verify-email", response_model=MessageResponse)
def verify_email(
    token: str,
    accounts: AccountService = Depends(get_account_service),
) -> MessageResponse:
    accounts.verify_email(token)
    return MessageResponse(message="Email verified successfully")


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(
    body: ForgotPasswordRequest,
    accounts: AccountService = Depends(get_account_service),
) -> MessageResponse:
    accounts.request_password_reset(body.email)
    return MessageResponse(message="Password reset email sent")


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(
    body: ResetPasswordRequest,
    accounts: AccountService = Depends(get_account_service),
) -> MessageResponse:
    accounts.reset_password(body.token, body.password)
    return MessageResponse(message="Password reset successfully")


@router.get("/me")
def me(user: User = Depends(get_current_user)) -> dict[str, UserOut]:
    return {"user": UserOut.model_validate(user)}
