"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from .models import (
    BlogPost,
    ContactMessage,
    Deal,
    Listing,
    Page,
    PendingRegistration,
    PostalCode,
    Rating,
    RatingStats,
    User,
)

Clock = Callable[[], datetime]


@dataclass(frozen=True)
class IssuedToken:
    """A signed token together with its absolute expiry (UTC)."""

    token: str
    expires_at: datetime


class PendingRegistrationRepository(Protocol):
    """Port interface for not-yet-confirmed registrations."""

    def exists(self, email: str, username: str, phone: str | None = None) -> bool:
        """
        Whether a live (non-expired) pending row holds any of the keys.

        Args:
            email: Normalized email address
            username: Stripped username
            phone: Optional phone number

        Returns:
            True if email, username or phone is held by a pending row
        """
        ...

    def add(self, pending: PendingRegistration) -> PendingRegistration:
        """
        Persist a pending registration.

        Expired rows holding the same keys are released first. Raises
        DuplicateKey when a unique index rejects the insert.
        """
        ...

    def find_by_email_and_token(self, email: str, token: str) -> PendingRegistration | None:
        """Live pending row matching both email and verification token."""
        ...

    def delete(self, pending_id: str) -> None:
        """Remove a pending row."""
        ...

    def purge_expired(self) -> int:
        """Delete every expired pending row; returns the number removed."""
        ...


class UserRepository(Protocol):
    """Port interface for active accounts."""

    def exists(self, email: str, username: str, phone: str | None = None) -> bool:
        """Whether an active account holds email, username or phone."""
        ...

    def add(self, user: User) -> User:
        """Persist a new account. Raises DuplicateKey on unique conflict."""
        ...

    def get(self, user_id: str) -> User | None: ...

    def find_by_email(self, email: str) -> User | None: ...

    def find_by_username(self, username: str) -> User | None: ...

    def find_by_reset_token(self, token: str) -> User | None: ...

    def update(self, user: User) -> User:
        """Write back mutable fields. Raises DuplicateKey on unique conflict."""
        ...

    def delete(self, user_id: str) -> bool:
        """Delete an account; False when it did not exist."""
        ...

    def list(self, page: int, limit: int) -> Page:
        """Accounts newest first."""
        ...


class TokenIssuer(Protocol):
    """Port interface for signed, expiring tokens."""

    def issue_verification_token(self, email: str) -> IssuedToken:
        """Sign a short-lived token embedding the registrant's email."""
        ...

    def decode_verification_token(self, token: str) -> str:
        """
        Verify a verification token and return the embedded email.

        Raises:
            TokenExpired: Signature valid, expiry reached (now >= exp)
            InvalidToken: Malformed, badly signed or wrong token kind
        """
        ...

    def issue_session_token(self, user_id: str) -> IssuedToken:
        """Sign a session token for an active user."""
        ...

    def decode_session_token(self, token: str) -> str:
        """Verify a session token and return the user id."""
        ...


class EmailSender(Protocol):
    """Port interface for transactional email delivery."""

    def send_confirmation(self, email: str, token: str) -> None:
        """Send the registration confirmation link."""
        ...

    def send_welcome(self, email: str, username: str) -> None:
        """Notify that the account is activated."""
        ...

    def send_password_reset(self, email: str, token: str) -> None:
        """Send the password reset link."""
        ...

    def send_password_changed(self, email: str, username: str) -> None:
        """Confirm that the password was changed."""
        ...

    def send_contact_notification(self, message: ContactMessage) -> None:
        """Forward a contact form submission to support."""
        ...

    def send_contact_acknowledgment(self, message: ContactMessage) -> None:
        """Tell the sender their contact message was received."""
        ...


class DealRepository(Protocol):
    def list(self) -> list[Deal]: ...

    def get(self, deal_id: str) -> Deal | None: ...

    def add(self, deal: Deal) -> Deal: ...

    def update(self, deal: Deal) -> Deal: ...

    def delete(self, deal_id: str) -> bool: ...


class ListingRepository(Protocol):
    def list(self) -> list[Listing]: ...

    def get(self, listing_id: str) -> Listing | None: ...

    def add(self, listing: Listing) -> Listing: ...

    def update(self, listing: Listing) -> Listing: ...

    def delete(self, listing_id: str) -> bool: ...


class BlogRepository(Protocol):
    def list(self) -> list[BlogPost]:
        """Posts newest first."""
        ...

    def add(self, post: BlogPost) -> BlogPost: ...


class RatingRepository(Protocol):
    def find(self, author_id: str, target_user_id: str) -> Rating | None: ...

    def add(self, rating: Rating) -> Rating: ...

    def update(self, rating: Rating) -> Rating: ...

    def delete(self, rating_id: str) -> None: ...

    def stats(self, target_user_id: str) -> RatingStats: ...


class ContactRepository(Protocol):
    def add(self, message: ContactMessage) -> ContactMessage: ...

    def list(self, page: int, limit: int, archived: bool | None = None) -> Page:
        """Messages newest first, optionally filtered on the archived flag."""
        ...

    def set_archived(self, message_id: str, archived: bool) -> bool:
        """Flip the archived flag; False when the message does not exist."""
        ...


class PostalCodeRepository(Protocol):
    def find(self, country: str, postal_code: str) -> PostalCode | None:
        """Unexpired cache entry for the code, if any."""
        ...

    def record_hit(self, entry_id: str) -> None: ...

    def upsert(self, entry: PostalCode) -> PostalCode:
        """Insert or refresh the entry for (country, postal_code), counting one hit."""
        ...


class TownDirectory(Protocol):
    def lookup(self, country: str, postal_code: str) -> str | None:
        """
        Resolve a postal code remotely.

        Returns:
            The first matching town name, or None when the code is unknown

        Raises:
            TownLookupFailed: transport error or timeout
        """
        ...
