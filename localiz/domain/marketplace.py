"""
Marketplace domain services - Deals, swap/donate listings and blog posts.

Writes go through an explicit normalization step before reaching the
repository, and only the author/owner or an admin may change or delete
an entry.
"""

import logging
from dataclasses import dataclass, replace
from typing import Any

from .exceptions import Forbidden, InvalidContent, ResourceNotFound
from .models import AccessType, BlogPost, Deal, Listing, User
from .ports import BlogRepository, DealRepository, ListingRepository

logger = logging.getLogger(__name__)

MIN_DESCRIPTION_LENGTH = 20


def normalize_description(description: str | None) -> str | None:
    """Trim surrounding whitespace from free-text descriptions."""
    if description is None:
        return None
    return description.strip()


def _require_description(description: str | None) -> None:
    if not description or len(description) < MIN_DESCRIPTION_LENGTH:
        raise InvalidContent(
            f"Description must be at least {MIN_DESCRIPTION_LENGTH} characters"
        )


def _ensure_can_modify(actor: User, owner_id: str, what: str) -> None:
    if actor.id != owner_id and not actor.is_admin:
        raise Forbidden(f"Forbidden: you are not the {what}")


def normalize_deal(deal: Deal) -> Deal:
    return replace(deal, title=deal.title.strip(), description=normalize_description(deal.description))


def validate_deal(deal: Deal) -> None:
    if len(deal.title) < 3:
        raise InvalidContent("Title too short")
    _require_description(deal.description)
    access = deal.access_conditions
    if access.type == AccessType.PAID and (access.price is None or access.price <= 0):
        raise InvalidContent("Price required for paid access")


def normalize_listing(listing: Listing) -> Listing:
    return replace(
        listing,
        title=listing.title.strip(),
        description=normalize_description(listing.description),
        images=[image for image in listing.images if image],
    )


def validate_listing(listing: Listing) -> None:
    if not listing.title:
        raise InvalidContent("Title is required")
    _require_description(listing.description)
    if not listing.images:
        raise InvalidContent("At least one image is required")


@dataclass
class DealService:
    deals: DealRepository

    def list(self) -> list[Deal]:
        return self.deals.list()

    def get(self, deal_id: str) -> Deal:
        deal = self.deals.get(deal_id)
        if deal is None:
            raise ResourceNotFound("Deal not found")
        return deal

    def create(self, author: User, deal: Deal) -> Deal:
        deal = normalize_deal(replace(deal, author_id=author.id))
        validate_deal(deal)
        created = self.deals.add(deal)
        logger.info("Deal created: id=%s author=%s", created.id, author.id)
        return created

    def update(self, actor: User, deal_id: str, changes: dict[str, Any]) -> Deal:
        """
        Apply field changes to a deal.

        Args:
            actor: Authenticated user
            deal_id: Deal to change
            changes: Deal attribute names mapped to new values
        """
        existing = self.get(deal_id)
        _ensure_can_modify(actor, existing.author_id, "author")
        changes = {k: v for k, v in changes.items() if k not in ("id", "author_id", "created_at")}
        deal = normalize_deal(replace(existing, **changes))
        validate_deal(deal)
        return self.deals.update(deal)

    def delete(self, actor: User, deal_id: str) -> None:
        existing = self.get(deal_id)
        _ensure_can_modify(actor, existing.author_id, "author")
        self.deals.delete(deal_id)
        logger.info("Deal deleted: id=%s by=%s", deal_id, actor.id)


@dataclass
class ListingService:
    listings: ListingRepository

    def list(self) -> list[Listing]:
        return self.listings.list()

    def get(self, listing_id: str) -> Listing:
        listing = self.listings.get(listing_id)
        if listing is None:
            raise ResourceNotFound("Listing not found")
        return listing

    def create(self, owner: User, listing: Listing) -> Listing:
        listing = normalize_listing(replace(listing, owner_id=owner.id))
        validate_listing(listing)
        created = self.listings.add(listing)
        logger.info("Listing created: id=%s owner=%s", created.id, owner.id)
        return created

    def update(self, actor: User, listing_id: str, changes: dict[str, Any]) -> Listing:
        existing = self.get(listing_id)
        _ensure_can_modify(actor, existing.owner_id, "owner")
        changes = {k: v for k, v in changes.items() if k not in ("id", "owner_id", "created_at")}
        listing = normalize_listing(replace(existing, **changes))
        validate_listing(listing)
        return self.listings.update(listing)

    def delete(self, actor: User, listing_id: str) -> None:
        existing = self.get(listing_id)
        _ensure_can_modify(actor, existing.owner_id, "owner")
        self.listings.delete(listing_id)
        logger.info("Listing deleted: id=%s by=%s", listing_id, actor.id)


@dataclass
class BlogService:
    posts: BlogRepository

    def list(self) -> list[BlogPost]:
        return self.posts.list()

    def create(self, author: User, title: str, content: str, image: str | None = None) -> BlogPost:
        title = title.strip()
        content = content.strip()
        if len(title) < 3:
            raise InvalidContent("Title too short")
        if len(content) < 10:
            raise InvalidContent("Content too short")
        return self.posts.add(BlogPost(title=title, content=content, image=image, author_id=author.id))
