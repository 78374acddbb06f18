"""Authentication endpoints for the web clients."""
import logging

from fastapi import APIRouter, Depends, HTTPException, status

from quickdesk.core.config import Settings, get_settings
from quickdesk.core.security import create_access_token, get_current_account
from quickdesk.interfaces.http.deps import get_account_service
from quickdesk.modules.accounts.exceptions import (
    AccountAlreadyExistsError,
    AccountDisabledError,
    AccountNotFoundError,
    InvalidPasswordError,
    InvalidResetTokenError,
)
from quickdesk.modules.accounts.models import ROLE_USER, Account, AccountCreateInput, AccountUpdateInput
from quickdesk.modules.accounts.service import AccountService
from quickdesk.schemas import (
    ApiResponse,
    AuthPayload,
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginRequest,
    ProfileUpdate,
    RegisterRequest,
    ResetPasswordRequest,
    ResetTokenPayload,
    UserOut,
    UserPayload,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _auth_payload(account: Account) -> AuthPayload:
    return AuthPayload(
        user=UserOut.model_validate(account),
        token=create_access_token(account.id, account.role),
    )


@router.post(
    "/register",
    response_model=ApiResponse[AuthPayload],
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
async def register(
    payload: RegisterRequest,
    account_service: AccountService = Depends(get_account_service),
):
    try:
        account = await account_service.create_account(
            AccountCreateInput(
                name=payload.name,
                email=payload.email,
                password=payload.password,
                role=ROLE_USER,
                department=payload.department,
                phone=payload.phone,
            )
        )
    except AccountAlreadyExistsError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User already exists with this email",
        ) from exc

    return ApiResponse(message="User registered successfully", data=_auth_payload(account))


@router.post("/login", response_model=ApiResponse[AuthPayload], summary="Log in with email and password")
async def login(
    payload: LoginRequest,
    account_service: AccountService = Depends(get_account_service),
):
    try:
        account = await account_service.authenticate(payload.email, payload.password)
    except AccountDisabledError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account is deactivated. Please contact administrator.",
        ) from exc
    if account is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    return ApiResponse(message="Login successful", data=_auth_payload(account))


@router.get("/me", response_model=ApiResponse[UserPayload], summary="Current user profile")
async def me(current: Account = Depends(get_current_account)):
    return ApiResponse(data=UserPayload(user=UserOut.model_validate(current)))


@router.put("/profile", response_model=ApiResponse[UserPayload], summary="Update own profile")
async def update_profile(
    payload: ProfileUpdate,
    current: Account = Depends(get_current_account),
    account_service: AccountService = Depends(get_account_service),
):
    try:
        account = await account_service.update_account(
            current.id,
            AccountUpdateInput(name=payload.name, department=payload.department, phone=payload.phone),
        )
    except AccountNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found") from exc

    return ApiResponse(message="Profile updated successfully", data=UserPayload(user=UserOut.model_validate(account)))


@router.put("/change-password", response_model=ApiResponse, summary="Change own password")
async def change_password(
    payload: ChangePasswordRequest,
    current: Account = Depends(get_current_account),
    account_service: AccountService = Depends(get_account_service),
):
    try:
        await account_service.change_password(current.id, payload.current_password, payload.new_password)
    except InvalidPasswordError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Current password is incorrect",
        ) from exc

    return ApiResponse(message="Password changed successfully")


@router.post("/forgot-password", response_model=ApiResponse[ResetTokenPayload], summary="Request a password reset token")
async def forgot_password(
    payload: ForgotPasswordRequest,
    account_service: AccountService = Depends(get_account_service),
    settings: Settings = Depends(get_settings),
):
    try:
        token = await account_service.request_password_reset(payload.email)
    except AccountNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No user found with this email address",
        ) from exc

    # No mail transport: the token goes to the debug log, and back to the
    # caller outside production.
    logger.debug("Password reset token for %s: %s", payload.email, token)
    if settings.environment == "production":
        return ApiResponse(message="Password reset token issued")
    return ApiResponse(message="Password reset token issued", data=ResetTokenPayload(reset_token=token))


@router.put("/reset-password/{reset_token}", response_model=ApiResponse[AuthPayload], summary="Reset a password with a token")
async def reset_password(
    reset_token: str,
    payload: ResetPasswordRequest,
    account_service: AccountService = Depends(get_account_service),
):
    try:
        account = await account_service.reset_password(reset_token, payload.new_password)
    except InvalidResetTokenError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid or expired reset token",
        ) from exc

    return ApiResponse(message="Password reset successful", data=_auth_payload(account))


@router.post("/logout", response_model=ApiResponse, summary="Log out")
async def logout(current: Account = Depends(get_current_account)):
    # Tokens are stateless; the client discards its copy.
    return ApiResponse(message="Logged out successfully")
