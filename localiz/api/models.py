"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
JSON bodies use camelCase keys; Python attributes stay snake_case.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from localiz.domain.models import (
    AccessConditions,
    AccessType,
    BlogPost,
    ContactMessage,
    Deal,
    DealStatus,
    Listing,
    ListingCondition,
    ListingStatus,
    ListingType,
    Location,
    Rating,
)


class CamelModel(BaseModel):
    """Base model accepting and emitting camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MessageResponse(BaseModel):
    """Plain acknowledgment."""

    message: str


class ErrorResponse(BaseModel):
    """Standard error response model."""

    message: str
    missing: list[str] | None = None


# --- Accounts ---------------------------------------------------------------


class RegisterRequest(CamelModel):
    """
    Request model for user registration.

    Required fields are optional here so that absent ones are reported
    together in a single 400 response listing every missing name.
    """

    username: str | None = None
    email: str | None = None
    password: str | None = None
    birthday: str | None = Field(default=None, description="ISO date, e.g. 2000-01-31")
    agree_to_terms: bool = False
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    postal_code: str | None = None
    city: str | None = None
    gender: str | None = None


class RegisterResponse(CamelModel):
    """Response model for successful registration."""

    message: str
    expires_at: int = Field(description="Confirmation link expiry, epoch milliseconds")


class ConfirmEmailRequest(BaseModel):
    token: str | None = None


class LoginRequest(BaseModel):
    """Request model for login; ``data`` is an email or a username."""

    data: str | None = None
    password: str | None = None


class ForgotPasswordRequest(BaseModel):
    email: str | None = None


class ResetPasswordRequest(BaseModel):
    password: str | None = None


class ChangePasswordRequest(CamelModel):
    current_password: str | None = None
    new_password: str | None = None


class ProfileUpdateRequest(CamelModel):
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    postal_code: str | None = None
    city: str | None = None
    gender: str | None = None


class PublicUser(CamelModel):
    """Client-safe projection of an account."""

    id: str
    username: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    postal_code: str | None = None
    city: str | None = None
    birthday: str | None = None
    gender: str | None = None
    role: str
    created_at: str | None = None


class UserResponse(BaseModel):
    user: PublicUser


class SessionResponse(BaseModel):
    """Response of confirm-email and login; the token itself travels in a cookie."""

    message: str
    user: PublicUser


class RoleUpdateRequest(BaseModel):
    role: str | None = None


class UserPage(BaseModel):
    items: list[PublicUser]
    total: int
    page: int
    pages: int


# --- Deals ------------------------------------------------------------------


class LocationModel(CamelModel):
    name: str | None = None
    address: str | None = None
    zone: str | None = None
    postal_code: str | None = None

    def to_domain(self) -> Location:
        return Location(**self.model_dump())

    @classmethod
    def from_domain(cls, location: Location) -> "LocationModel":
        return cls.model_validate(location, from_attributes=True)


class AccessConditionsModel(CamelModel):
    type: AccessType = AccessType.FREE
    price: float | None = None

    def to_domain(self) -> AccessConditions:
        return AccessConditions(type=self.type, price=self.price)


class DealCreateRequest(CamelModel):
    image: str
    title: str
    start_date: datetime
    description: str
    end_date: datetime | None = None
    location: LocationModel = Field(default_factory=LocationModel)
    access_conditions: AccessConditionsModel = Field(default_factory=AccessConditionsModel)
    website: str | None = None
    tags: list[str] = Field(default_factory=list)

    def to_domain(self) -> Deal:
        return Deal(
            image=self.image,
            title=self.title,
            start_date=self.start_date,
            end_date=self.end_date,
            description=self.description,
            author_id="",
            location=self.location.to_domain(),
            access_conditions=self.access_conditions.to_domain(),
            website=self.website,
            tags=self.tags,
        )


class DealUpdateRequest(CamelModel):
    image: str | None = None
    title: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    description: str | None = None
    location: LocationModel | None = None
    access_conditions: AccessConditionsModel | None = None
    website: str | None = None
    tags: list[str] | None = None
    status: DealStatus | None = None

    def changes(self) -> dict[str, Any]:
        """Fields explicitly sent, converted to domain values."""
        changes: dict[str, Any] = {}
        for name in self.model_fields_set:
            value = getattr(self, name)
            if value is None and name not in ("end_date", "website"):
                continue
            if isinstance(value, (LocationModel, AccessConditionsModel)):
                value = value.to_domain()
            changes[name] = value
        return changes


class DealResponse(CamelModel):
    id: str
    image: str
    title: str
    start_date: datetime
    end_date: datetime | None = None
    description: str
    author_id: str
    location: LocationModel
    access_conditions: AccessConditionsModel
    website: str | None = None
    tags: list[str]
    status: DealStatus
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_domain(cls, deal: Deal) -> "DealResponse":
        return cls.model_validate(deal, from_attributes=True)


# --- Listings ---------------------------------------------------------------


class ListingCreateRequest(CamelModel):
    title: str
    description: str
    type: ListingType
    images: list[str] = Field(default_factory=list)
    condition: ListingCondition = ListingCondition.USED
    tags: list[str] = Field(default_factory=list)
    is_published: bool = True
    location: LocationModel = Field(default_factory=LocationModel)

    def to_domain(self) -> Listing:
        return Listing(
            title=self.title,
            description=self.description,
            type=self.type,
            owner_id="",
            images=self.images,
            condition=self.condition,
            tags=self.tags,
            is_published=self.is_published,
            location=self.location.to_domain(),
        )


class ListingUpdateRequest(CamelModel):
    title: str | None = None
    description: str | None = None
    type: ListingType | None = None
    images: list[str] | None = None
    condition: ListingCondition | None = None
    tags: list[str] | None = None
    is_published: bool | None = None
    status: ListingStatus | None = None
    location: LocationModel | None = None

    def changes(self) -> dict[str, Any]:
        changes: dict[str, Any] = {}
        for name in self.model_fields_set:
            value = getattr(self, name)
            if value is None:
                continue
            if isinstance(value, LocationModel):
                value = value.to_domain()
            changes[name] = value
        return changes


class ListingResponse(CamelModel):
    id: str
    title: str
    description: str
    type: ListingType
    owner_id: str
    images: list[str]
    condition: ListingCondition
    tags: list[str]
    is_published: bool
    status: ListingStatus
    location: LocationModel
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_domain(cls, listing: Listing) -> "ListingResponse":
        return cls.model_validate(listing, from_attributes=True)


# --- Blog -------------------------------------------------------------------


class BlogPostRequest(BaseModel):
    title: str
    content: str
    image: str | None = None


class BlogPostResponse(CamelModel):
    id: str
    title: str
    content: str
    image: str | None = None
    author_id: str
    created_at: datetime | None = None

    @classmethod
    def from_domain(cls, post: BlogPost) -> "BlogPostResponse":
        return cls.model_validate(post, from_attributes=True)


# --- Ratings ----------------------------------------------------------------


class RatingRequest(BaseModel):
    value: int | float | None = None


class RatingResponse(CamelModel):
    id: str
    author_id: str
    target_user_id: str
    value: int
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_domain(cls, rating: Rating) -> "RatingResponse":
        return cls.model_validate(rating, from_attributes=True)


class RatingStatsResponse(BaseModel):
    count: int
    average: float | None = None


# --- Contact ----------------------------------------------------------------


class ContactRequest(BaseModel):
    name: str
    email: EmailStr
    subject: str = Field(..., max_length=150)
    message: str


class ContactCreatedResponse(BaseModel):
    ok: bool
    id: str


class ContactMessageResponse(CamelModel):
    id: str
    name: str
    email: str
    subject: str
    message: str
    archived: bool
    created_at: datetime | None = None

    @classmethod
    def from_domain(cls, message: ContactMessage) -> "ContactMessageResponse":
        return cls.model_validate(message, from_attributes=True)


class ContactPage(BaseModel):
    items: list[ContactMessageResponse]
    total: int
    page: int
    pages: int


# --- Utilities --------------------------------------------------------------


class TownResponse(BaseModel):
    """Town for a postal code; ``source`` is db, remote or none."""

    town: str | None = None
    source: str
