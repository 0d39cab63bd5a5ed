"""
Domain exceptions - Semantic error types for Localiz.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
Each error carries the HTTP status the API layer should answer with,
so the web layer maps them without knowing every concrete type.
"""


class LocalizError(Exception):
    """Base class for domain errors."""

    status_code = 400
    default_message = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class RegistrationError(LocalizError):
    """Base class for registration domain errors."""

    pass


class MissingFields(RegistrationError):
    """One or more required fields are absent or empty."""

    default_message = "Missing required fields"

    def __init__(self, missing: list[str], message: str | None = None) -> None:
        self.missing = list(missing)
        super().__init__(message)


class ConsentRequired(RegistrationError):
    """The registrant did not accept the terms of use."""

    default_message = "You must accept the terms of use to register."


class ForbiddenContent(RegistrationError):
    """A username or name contains a forbidden word."""

    default_message = "The username contains a forbidden word."


class InvalidBirthday(RegistrationError):
    """Birthday could not be parsed as a date."""

    default_message = "Invalid date of birth."


class UnderageRegistrant(RegistrationError):
    """Registrant is younger than the minimum registration age."""

    default_message = "You must be at least 16 years old to register."


class AlreadyRegistered(RegistrationError):
    """Email, username or phone already belongs to an active account."""

    default_message = "Email or username already in use"


class ConfirmationPending(RegistrationError):
    """A registration for this email or username awaits confirmation."""

    default_message = "Please check your inbox to confirm your registration."


class DuplicateKey(LocalizError):
    """A unique index rejected the write (lost a concurrent insert race)."""

    default_message = "An account with these details already exists"


class InvalidToken(LocalizError):
    """Token is malformed, badly signed, unknown or already used."""

    default_message = "Invalid token or user not found"


class TokenExpired(LocalizError):
    """Token signature is valid but its expiry has passed."""

    status_code = 410
    default_message = "Token expired"


class EmailDeliveryFailure(LocalizError):
    """Outbound email could not be delivered. Logged, never sent to clients."""

    status_code = 502
    default_message = "Email delivery failed"


class InvalidCredentials(LocalizError):
    """Login identifier or password did not match."""

    default_message = "Invalid credentials"


class IncorrectPassword(LocalizError):
    """Current password supplied for a password change is wrong."""

    default_message = "Current password is incorrect."


class InvalidRole(LocalizError):
    """Requested role is not one of the known roles."""

    default_message = "Invalid role"


class InvalidRating(LocalizError):
    """Rating value or target is not acceptable."""

    default_message = "Invalid rating"


class InvalidContent(LocalizError):
    """Marketplace content violates a business rule."""

    default_message = "Invalid content"


class NotAuthenticated(LocalizError):
    """No valid session accompanies the request."""

    status_code = 401
    default_message = "Not authenticated"


class Forbidden(LocalizError):
    """Authenticated user may not perform this action."""

    status_code = 403
    default_message = "Forbidden"


class UserNotFound(LocalizError):
    """No active user matches the given id."""

    status_code = 404
    default_message = "User not found"


class ResourceNotFound(LocalizError):
    """Requested deal, listing, rating or message does not exist."""

    status_code = 404
    default_message = "Resource not found"


class TownLookupFailed(LocalizError):
    """The remote postal code directory could not be reached."""

    status_code = 502
    default_message = "Postal code lookup failed"
