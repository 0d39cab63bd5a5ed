"""
Account domain services - Sessions, profile and password management.

AccountService covers everything an active user does with their own
account; AdminService covers the admin-only user management screens.
"""

import logging
import re
import secrets
from dataclasses import dataclass, field, fields
from datetime import date, datetime, timedelta

from .exceptions import (
    DuplicateKey,
    ForbiddenContent,
    IncorrectPassword,
    InvalidCredentials,
    InvalidRole,
    InvalidToken,
    MissingFields,
    NotAuthenticated,
    TokenExpired,
    UserNotFound,
)
from .models import Page, Profile, Role, User
from .notifications import send_best_effort
from .passwords import hash_password, verify_password
from .policy import RegistrationPolicy, capitalize_name, normalize_email, parse_birthday
from .ports import Clock, EmailSender, IssuedToken, TokenIssuer, UserRepository
from .registration import utcnow

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[\w\-.+]+@([\w-]+\.)+[\w-]{2,}$")


@dataclass(frozen=True)
class Session:
    """An authenticated user with the session token just issued."""

    user: User
    token: IssuedToken


@dataclass
class ProfileChanges:
    """Profile fields a user may edit; None means unchanged."""

    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    postal_code: str | None = None
    city: str | None = None
    gender: str | None = None


@dataclass
class AccountService:
    """Domain service for an active user's own account."""

    users: UserRepository
    tokens: TokenIssuer
    email_sender: EmailSender
    policy: RegistrationPolicy = field(default_factory=RegistrationPolicy)
    bcrypt_cost: int = 10
    reset_ttl_seconds: int = 3600
    clock: Clock = utcnow

    def login(self, identifier: str | None, password: str | None) -> Session:
        """
        Authenticate by email or username and open a session.

        The identifier is treated as an email when it looks like one.
        Unknown user and wrong password raise the same error.
        """
        if not identifier or not password:
            raise MissingFields(
                [name for name, value in (("data", identifier), ("password", password)) if not value],
                "Missing credentials",
            )

        identifier = identifier.strip()
        if _EMAIL_RE.match(identifier):
            user = self.users.find_by_email(normalize_email(identifier))
        else:
            user = self.users.find_by_username(identifier)

        if user is None or not verify_password(password, user.password_hash):
            raise InvalidCredentials()

        logger.info("User logged in: id=%s", user.id)
        return Session(user=user, token=self.tokens.issue_session_token(user.id))

    def authenticate(self, token: str | None) -> User:
        """
        Resolve a session token to its user.

        Raises:
            NotAuthenticated: no token, bad/expired token or unknown user
        """
        if not token:
            raise NotAuthenticated("Not authenticated: no token provided")
        try:
            user_id = self.tokens.decode_session_token(token)
        except TokenExpired:
            raise NotAuthenticated("Your session has expired. Please log in again.") from None
        except InvalidToken:
            raise NotAuthenticated("Not authenticated: invalid token") from None

        user = self.users.get(user_id)
        if user is None:
            raise NotAuthenticated("Not authenticated: user not found")
        return user

    def get_profile(self, user_id: str) -> User:
        user = self.users.get(user_id)
        if user is None:
            raise UserNotFound()
        return user

    def update_profile(self, user_id: str, changes: ProfileChanges) -> User:
        """
        Apply profile edits.

        Names go through the same forbidden-word and capitalization rules
        as registration. A phone already used by another account raises
        DuplicateKey.
        """
        user = self.get_profile(user_id)
        profile = user.profile

        for f in fields(ProfileChanges):
            value = getattr(changes, f.name)
            if value is None:
                continue
            value = value.strip() or None
            if value and f.name in ("first_name", "last_name"):
                value = capitalize_name(value)
                if self.policy.name_is_forbidden(value):
                    raise ForbiddenContent("Your first or last name contains a forbidden word.")
            setattr(profile, f.name, value)

        user.profile = profile
        return self.users.update(user)

    def change_password(
        self, user_id: str, current_password: str | None, new_password: str | None
    ) -> None:
        if not current_password or not new_password:
            missing = [
                name
                for name, value in (("currentPassword", current_password), ("newPassword", new_password))
                if not value
            ]
            raise MissingFields(missing, "Please fill in all fields.")

        user = self.get_profile(user_id)
        if not verify_password(current_password, user.password_hash):
            raise IncorrectPassword()

        user.password_hash = hash_password(new_password, self.bcrypt_cost)
        self.users.update(user)
        logger.info("Password changed for user id=%s", user.id)

    def request_password_reset(self, email: str | None) -> None:
        """
        Store a reset token and email the link when the account exists.

        Silent when it does not, so callers cannot probe for accounts.
        """
        if not email:
            return
        user = self.users.find_by_email(normalize_email(email))
        if user is None:
            logger.info("Password reset requested for unknown email")
            return

        user.reset_password_token = secrets.token_urlsafe(32)
        user.reset_password_expires = self.clock() + timedelta(seconds=self.reset_ttl_seconds)
        self.users.update(user)

        send_best_effort(
            "password_reset", self.email_sender.send_password_reset, user.email, user.reset_password_token
        )

    def reset_password(self, token: str | None, new_password: str | None) -> None:
        """
        Set a new password from a reset token.

        Raises:
            MissingFields: no new password
            InvalidToken: unknown token, or expiry reached (now >= expiry)
        """
        if not new_password:
            raise MissingFields(["password"])
        if not token:
            raise InvalidToken("Invalid or expired token.")

        user = self.users.find_by_reset_token(token)
        if (
            user is None
            or user.reset_password_expires is None
            or self.clock() >= user.reset_password_expires
        ):
            raise InvalidToken("Invalid or expired token.")

        user.password_hash = hash_password(new_password, self.bcrypt_cost)
        user.reset_password_token = None
        user.reset_password_expires = None
        self.users.update(user)

        send_best_effort(
            "password_changed", self.email_sender.send_password_changed, user.email, user.username
        )

    def delete_account(self, user_id: str) -> None:
        if not self.users.delete(user_id):
            raise UserNotFound()
        logger.info("Account deleted: id=%s", user_id)

    def seed_admin(
        self,
        username: str,
        email: str,
        password: str,
        birthday: date | datetime | str,
        profile: Profile | None = None,
    ) -> User | None:
        """
        Create an admin account unless the email is already taken.

        Returns:
            The new admin, or None when an account already uses the email
        """
        email = normalize_email(email)
        if self.users.find_by_email(email) is not None:
            return None
        try:
            return self.users.add(
                User(
                    username=username.strip(),
                    email=email,
                    password_hash=hash_password(password, self.bcrypt_cost),
                    birthday=parse_birthday(birthday),
                    profile=profile or Profile(),
                    role=Role.ADMIN,
                )
            )
        except DuplicateKey:
            return None


@dataclass
class AdminService:
    """Admin-only management of active accounts."""

    users: UserRepository

    def list_users(self, page: int = 1, limit: int = 20) -> Page:
        page = max(page, 1)
        limit = min(max(limit, 1), 100)
        return self.users.list(page, limit)

    def get_user(self, user_id: str) -> User:
        user = self.users.get(user_id)
        if user is None:
            raise UserNotFound()
        return user

    def set_role(self, user_id: str, role: str | None) -> User:
        try:
            new_role = Role(role)
        except ValueError:
            raise InvalidRole() from None
        user = self.get_user(user_id)
        user.role = new_role
        logger.info("Role of user id=%s set to %s", user_id, new_role.value)
        return self.users.update(user)

    def delete_user(self, user_id: str) -> None:
        if not self.users.delete(user_id):
            raise UserNotFound()
        logger.info("User deleted by admin: id=%s", user_id)
