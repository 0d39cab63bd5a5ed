"""
Domain layer - Pure business logic with zero framework imports.

This package contains the core business logic for Localiz: the pending
registration lifecycle, account and session management, the
marketplace content rules and the postal code lookup. It defines its
own port interfaces for infrastructure abstraction, ensuring true
hexagonal architecture decoupling.
"""

from .accounts import AccountService, AdminService, ProfileChanges, Session
from .contact import ContactService
from .exceptions import (
    AlreadyRegistered,
    ConfirmationPending,
    ConsentRequired,
    DuplicateKey,
    EmailDeliveryFailure,
    ForbiddenContent,
    InvalidToken,
    LocalizError,
    MissingFields,
    RegistrationError,
    TokenExpired,
    TownLookupFailed,
    UnderageRegistrant,
)
from .marketplace import BlogService, DealService, ListingService
from .policy import RegistrationPolicy
from .ports import (
    EmailSender,
    IssuedToken,
    PendingRegistrationRepository,
    TokenIssuer,
    UserRepository,
)
from .ratings import RatingService
from .registration import (
    Confirmation,
    RegistrationReceipt,
    RegistrationRequest,
    RegistrationService,
)
from .towns import TownResolution, TownService

__all__ = [
    "AccountService",
    "AdminService",
    "AlreadyRegistered",
    "BlogService",
    "Confirmation",
    "ConfirmationPending",
    "ConsentRequired",
    "ContactService",
    "DealService",
    "DuplicateKey",
    "EmailDeliveryFailure",
    "EmailSender",
    "ForbiddenContent",
    "InvalidToken",
    "IssuedToken",
    "ListingService",
    "LocalizError",
    "MissingFields",
    "PendingRegistrationRepository",
    "ProfileChanges",
    "RatingService",
    "RegistrationError",
    "RegistrationPolicy",
    "RegistrationReceipt",
    "RegistrationRequest",
    "RegistrationService",
    "Session",
    "TokenExpired",
    "TokenIssuer",
    "TownLookupFailed",
    "TownResolution",
    "TownService",
    "UnderageRegistrant",
    "UserRepository",
]
