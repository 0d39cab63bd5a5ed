"""
User routes - Registration, confirmation, sessions and own account.

- POST /user/register - Begin registration (pending until confirmed)
- GET  /user/verifyMail/{token} - Confirm from the emailed link, redirect to the front end
- POST /user/confirm-email - Confirm from the front end, open a session
- POST /user/login, /user/logout
- POST /user/forgot-password, /user/reset-password/{token}
- GET/PATCH/DELETE /user/me, PUT /user/change-password
"""

import logging

from fastapi import APIRouter, Body, Depends, Query, Response, status
from fastapi.responses import RedirectResponse

from localiz.api.cookies import clear_session_cookie, set_session_cookie
from localiz.api.dependencies import (
    get_account_service,
    get_app_settings,
    get_current_user,
    get_registration_service,
)
from localiz.api.models import (
    ChangePasswordRequest,
    ConfirmEmailRequest,
    ErrorResponse,
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    ProfileUpdateRequest,
    PublicUser,
    RegisterRequest,
    RegisterResponse,
    ResetPasswordRequest,
    SessionResponse,
    UserResponse,
)
from localiz.config.settings import Settings
from localiz.domain.accounts import AccountService, ProfileChanges
from localiz.domain.exceptions import LocalizError, TokenExpired
from localiz.domain.models import User
from localiz.domain.registration import RegistrationRequest, RegistrationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/user", tags=["users"])


def _public(user: User) -> PublicUser:
    return PublicUser.model_validate(user.public())


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse, "description": "Validation or uniqueness failure"}},
    summary="Register a new user",
    description="Store the registration as pending and email a confirmation link. "
    "The account becomes active once the link is followed.",
)
def register(
    request_data: RegisterRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> RegisterResponse:
    """
    Register a new user and send the confirmation link.

    Returns the link's expiry (epoch milliseconds) so the client can
    show a countdown.
    """
    receipt = service.register(RegistrationRequest(**request_data.model_dump()))
    return RegisterResponse(
        message="Registration received. Check your inbox to confirm your email address.",
        expires_at=int(receipt.expires_at.timestamp() * 1000),
    )


@router.get(
    "/verifyMail/{token}",
    response_class=RedirectResponse,
    status_code=status.HTTP_307_TEMPORARY_REDIRECT,
    summary="Confirm registration from the emailed link",
)
def verify_mail(
    token: str,
    service: RegistrationService = Depends(get_registration_service),
    settings: Settings = Depends(get_app_settings),
) -> RedirectResponse:
    """Confirm and redirect; the outcome travels only as ``message=success|expired|error``."""
    outcome = "success"
    try:
        service.confirm(token)
    except TokenExpired:
        outcome = "expired"
    except LocalizError as e:
        logger.info("Email verification via link failed: %s", e.message)
        outcome = "error"
    except Exception:
        logger.exception("Email verification via link crashed")
        outcome = "error"
    return RedirectResponse(f"{settings.front_url}/?message={outcome}&clearRegister=1")


@router.post(
    "/confirm-email",
    response_model=SessionResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing or invalid token"},
        410: {"model": ErrorResponse, "description": "Token expired"},
    },
    summary="Confirm registration and log in",
)
def confirm_email(
    response: Response,
    body: ConfirmEmailRequest | None = Body(default=None),
    token: str | None = Query(default=None),
    service: RegistrationService = Depends(get_registration_service),
    settings: Settings = Depends(get_app_settings),
) -> SessionResponse:
    """
    Confirm a pending registration.

    The token is read from the JSON body, or from ``?token=`` when the
    body has none. On success the session cookie is set.
    """
    raw = (body.token if body else None) or token
    confirmation = service.confirm(raw or "")
    set_session_cookie(response, confirmation.session, settings)
    return SessionResponse(message="User confirmed", user=_public(confirmation.user))


@router.post("/login", response_model=SessionResponse, responses={400: {"model": ErrorResponse}})
def login(
    request_data: LoginRequest,
    response: Response,
    accounts: AccountService = Depends(get_account_service),
    settings: Settings = Depends(get_app_settings),
) -> SessionResponse:
    """Log in with an email or username (``data``) and a password."""
    session = accounts.login(request_data.data, request_data.password)
    set_session_cookie(response, session.token, settings)
    return SessionResponse(message="Login successful", user=_public(session.user))


@router.post("/logout", response_model=MessageResponse)
def logout(response: Response, settings: Settings = Depends(get_app_settings)) -> MessageResponse:
    clear_session_cookie(response, settings)
    return MessageResponse(message="Logged out")


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(
    request_data: ForgotPasswordRequest,
    accounts: AccountService = Depends(get_account_service),
) -> MessageResponse:
    """Same answer whether or not the account exists."""
    accounts.request_password_reset(request_data.email)
    return MessageResponse(message="If an account exists for this email, a reset link has been sent.")


@router.post(
    "/reset-password/{token}",
    response_model=MessageResponse,
    responses={400: {"model": ErrorResponse}},
)
def reset_password(
    token: str,
    request_data: ResetPasswordRequest,
    accounts: AccountService = Depends(get_account_service),
) -> MessageResponse:
    accounts.reset_password(token, request_data.password)
    return MessageResponse(message="Password reset successfully")


@router.get("/me", response_model=UserResponse, responses={401: {"model": ErrorResponse}})
def get_me(user: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse(user=_public(user))


@router.patch(
    "/me",
    response_model=UserResponse,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)
def update_me(
    request_data: ProfileUpdateRequest,
    user: User = Depends(get_current_user),
    accounts: AccountService = Depends(get_account_service),
) -> UserResponse:
    updated = accounts.update_profile(user.id, ProfileChanges(**request_data.model_dump()))
    return UserResponse(user=_public(updated))


@router.put(
    "/change-password",
    response_model=MessageResponse,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)
def change_password(
    request_data: ChangePasswordRequest,
    user: User = Depends(get_current_user),
    accounts: AccountService = Depends(get_account_service),
) -> MessageResponse:
    accounts.change_password(user.id, request_data.current_password, request_data.new_password)
    return MessageResponse(message="Password updated successfully")


@router.delete("/me", response_model=MessageResponse, responses={401: {"model": ErrorResponse}})
def delete_me(
    response: Response,
    user: User = Depends(get_current_user),
    accounts: AccountService = Depends(get_account_service),
    settings: Settings = Depends(get_app_settings),
) -> MessageResponse:
    accounts.delete_account(user.id)
    clear_session_cookie(response, settings)
    return MessageResponse(message="Account deleted")
