"""
Registration domain service - Pending registration lifecycle.

This module contains the core business logic for user sign-up:
a registrant is first stored as a pending registration, then promoted
to an active account when they follow the emailed confirmation link.

Lifecycle
=========

    Submitted -> Pending -> Confirmed | Expired | Abandoned

- Pending -> Confirmed: confirm() with a valid token
- Pending -> Expired: TTL elapses; the store hides and purges the row
- Pending -> Abandoned: link never followed; looks like Expired once
  the TTL fires

Uniqueness of email/username is checked across both stores before the
insert, but the check and the insert are not atomic. The store's unique
indexes are the source of truth: the loser of a concurrent insert gets
DuplicateKey.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone

from .exceptions import (
    AlreadyRegistered,
    ConfirmationPending,
    ConsentRequired,
    ForbiddenContent,
    InvalidToken,
    MissingFields,
    UnderageRegistrant,
)
from .models import PendingRegistration, Profile, User
from .notifications import send_best_effort
from .passwords import hash_password
from .policy import RegistrationPolicy, capitalize_name, normalize_email, parse_birthday
from .ports import (
    Clock,
    EmailSender,
    IssuedToken,
    PendingRegistrationRepository,
    TokenIssuer,
    UserRepository,
)

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class RegistrationRequest:
    """Raw registration input; anything may be missing."""

    username: str | None = None
    email: str | None = None
    password: str | None = None
    birthday: date | str | None = None
    agree_to_terms: bool = False
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    postal_code: str | None = None
    city: str | None = None
    gender: str | None = None


@dataclass(frozen=True)
class RegistrationReceipt:
    """Outcome of a successful registration submission."""

    email: str
    expires_at: datetime


@dataclass(frozen=True)
class Confirmation:
    """Outcome of a successful confirmation."""

    user: User
    session: IssuedToken


def _blank(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass
class RegistrationService:
    """
    Domain service for user registration.

    Orchestrates the registration flow (validation, cross-store
    uniqueness, password hashing, token issuance, pending persistence,
    confirmation email) and the confirmation flow (token check,
    promotion to an active account, session issuance).
    """

    pending: PendingRegistrationRepository
    users: UserRepository
    tokens: TokenIssuer
    email_sender: EmailSender
    policy: RegistrationPolicy = field(default_factory=RegistrationPolicy)
    bcrypt_cost: int = 10
    clock: Clock = utcnow

    def register(self, request: RegistrationRequest) -> RegistrationReceipt:
        """
        Register a new user as a pending registration.

        Args:
            request: Registration input

        Returns:
            Normalized email and the confirmation token's expiry

        Raises:
            MissingFields: username, email, password or birthday absent
            ConsentRequired: terms not accepted
            ForbiddenContent: username or names contain a forbidden word
            InvalidBirthday: birthday is not a date
            UnderageRegistrant: registrant younger than the minimum age
            AlreadyRegistered: an active account holds the email/username/phone
            ConfirmationPending: a pending registration holds them
            DuplicateKey: lost a concurrent insert race
        """
        required = {
            "username": request.username,
            "email": request.email,
            "password": request.password,
            "birthday": request.birthday,
        }
        missing = [name for name, value in required.items() if _blank(value)]
        if missing:
            raise MissingFields(missing)

        if not request.agree_to_terms:
            raise ConsentRequired()

        username = request.username.strip()
        email = normalize_email(request.email)
        first_name = capitalize_name(request.first_name.strip()) if _clean(request.first_name) else None
        last_name = capitalize_name(request.last_name.strip()) if _clean(request.last_name) else None

        if self.policy.username_is_forbidden(username):
            raise ForbiddenContent()
        if self.policy.name_is_forbidden(first_name) or self.policy.name_is_forbidden(last_name):
            raise ForbiddenContent("Your first or last name contains a forbidden word.")

        birthday = parse_birthday(request.birthday)
        if self.policy.is_underage(birthday, self.clock().date()):
            raise UnderageRegistrant(
                f"You must be at least {self.policy.min_age} years old to register."
            )

        phone = _clean(request.phone)
        if self.users.exists(email, username, phone):
            raise AlreadyRegistered()
        if self.pending.exists(email, username, phone):
            raise ConfirmationPending()

        password_hash = hash_password(request.password, self.bcrypt_cost)
        issued = self.tokens.issue_verification_token(email)

        self.pending.add(
            PendingRegistration(
                username=username,
                email=email,
                password_hash=password_hash,
                birthday=birthday,
                verification_token=issued.token,
                profile=Profile(
                    first_name=first_name,
                    last_name=last_name,
                    phone=phone,
                    postal_code=_clean(request.postal_code),
                    city=_clean(request.city),
                    gender=_clean(request.gender),
                ),
                agree_to_terms=True,
            )
        )
        logger.info("Pending registration created for username=%s", username)

        send_best_effort("confirmation", self.email_sender.send_confirmation, email, issued.token)
        return RegistrationReceipt(email=email, expires_at=issued.expires_at)

    def confirm(self, token: str) -> Confirmation:
        """
        Promote a pending registration to an active account.

        Args:
            token: Verification token from the confirmation email

        Returns:
            The new active user and a session token

        Raises:
            TokenExpired: token expiry reached
            InvalidToken: bad token, or no pending row for (email, token)
            DuplicateKey: an active account took the email/username meanwhile
        """
        if _blank(token):
            raise InvalidToken("Missing token")
        token = token.strip()

        email = self.tokens.decode_verification_token(token)
        pending = self.pending.find_by_email_and_token(email, token)
        if pending is None:
            raise InvalidToken()

        user = self.users.add(
            User(
                username=pending.username,
                email=pending.email,
                password_hash=pending.password_hash,
                birthday=pending.birthday,
                profile=pending.profile,
                agree_to_terms=pending.agree_to_terms,
            )
        )

        try:
            self.pending.delete(pending.id)
        except Exception:
            # account exists already; a stale pending row only holds its slot until the TTL
            logger.exception("Failed to delete pending registration id=%s", pending.id)

        send_best_effort("welcome", self.email_sender.send_welcome, user.email, user.username)

        session = self.tokens.issue_session_token(user.id)
        logger.info("Registration confirmed for username=%s", user.username)
        return Confirmation(user=user, session=session)
