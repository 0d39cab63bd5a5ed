"""
Domain entities - Plain dataclasses shared by services and adapters.

Registration lifecycle (two stores, mutually exclusive per email/username):

    Submitted -> Pending -> Confirmed   (token confirmed, row promoted to users)
                         -> Expired     (TTL elapsed, row removed by the store)
                         -> Abandoned   (never confirmed, indistinguishable from
                                         Expired until the TTL fires)
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any


class Role(str, Enum):
    """Account roles."""

    USER = "user"
    ADMIN = "admin"


class AccessType(str, Enum):
    FREE = "free"
    PAID = "paid"
    RESERVATION = "reservation"
    REDUCTION = "reduction"


class DealStatus(str, Enum):
    OPEN = "open"
    HIDDEN = "hidden"
    CANCELLED = "cancelled"


class ListingType(str, Enum):
    SWAP = "swap"
    DONATE = "donate"


class ListingCondition(str, Enum):
    NEW = "new"
    LIKE_NEW = "like_new"
    USED = "used"


class ListingStatus(str, Enum):
    AVAILABLE = "available"
    RESERVED = "reserved"
    COMPLETED = "completed"


@dataclass
class Profile:
    """Optional personal details collected at registration or later."""

    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    postal_code: str | None = None
    city: str | None = None
    gender: str | None = None


@dataclass
class PendingRegistration:
    """A submitted registration awaiting email confirmation."""

    username: str
    email: str
    password_hash: str
    birthday: date
    verification_token: str
    profile: Profile = field(default_factory=Profile)
    agree_to_terms: bool = True
    id: str | None = None
    created_at: datetime | None = None


@dataclass
class User:
    """A confirmed, active account."""

    username: str
    email: str
    password_hash: str
    birthday: date
    profile: Profile = field(default_factory=Profile)
    role: Role = Role.USER
    agree_to_terms: bool = True
    reset_password_token: str | None = None
    reset_password_expires: datetime | None = None
    id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def public(self) -> dict[str, Any]:
        """Projection safe to send to clients (no hash, no reset token)."""
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "firstName": self.profile.first_name,
            "lastName": self.profile.last_name,
            "phone": self.profile.phone,
            "postalCode": self.profile.postal_code,
            "city": self.profile.city,
            "birthday": self.birthday.isoformat() if self.birthday else None,
            "gender": self.profile.gender,
            "role": self.role.value,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass
class Location:
    name: str | None = None
    address: str | None = None
    zone: str | None = None
    postal_code: str | None = None


@dataclass
class AccessConditions:
    type: AccessType = AccessType.FREE
    price: float | None = None


@dataclass
class Deal:
    image: str
    title: str
    start_date: datetime
    description: str
    author_id: str
    location: Location = field(default_factory=Location)
    access_conditions: AccessConditions = field(default_factory=AccessConditions)
    end_date: datetime | None = None
    website: str | None = None
    tags: list[str] = field(default_factory=list)
    status: DealStatus = DealStatus.OPEN
    id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class Listing:
    title: str
    description: str
    type: ListingType
    owner_id: str
    images: list[str] = field(default_factory=list)
    condition: ListingCondition = ListingCondition.USED
    tags: list[str] = field(default_factory=list)
    is_published: bool = True
    status: ListingStatus = ListingStatus.AVAILABLE
    location: Location = field(default_factory=Location)
    id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class BlogPost:
    title: str
    content: str
    author_id: str
    image: str | None = None
    id: str | None = None
    created_at: datetime | None = None


@dataclass
class Rating:
    author_id: str
    target_user_id: str
    value: int
    id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class RatingStats:
    count: int = 0
    average: float | None = None


@dataclass
class ContactMessage:
    name: str
    email: str
    subject: str
    message: str
    archived: bool = False
    id: str | None = None
    created_at: datetime | None = None


@dataclass
class Page:
    """One page of a paginated listing."""

    items: list[Any]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit if self.limit else 0


@dataclass
class PostalCode:
    """Cached postal code to town resolution."""

    postal_code: str
    town: str
    country: str = "FR"
    source: str = "zippopotam"
    hits: int = 0
    expires_at: datetime | None = None
    id: str | None = None
