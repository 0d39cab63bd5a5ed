"""
PostgreSQL repository adapter - Marketplace, contact and lookup stores.

Deals, listings, blog posts, ratings, contact messages and the postal
code cache. Nested value objects (location, access conditions) are
stored as JSONB, tags and images as TEXT[].
"""

import logging
from dataclasses import asdict

from psycopg.rows import dict_row
from psycopg.types.json import Jsonb
from psycopg_pool import ConnectionPool

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
    Page,
    PostalCode,
    Rating,
    RatingStats,
)

from .postgres import as_uuid

logger = logging.getLogger(__name__)


def _location_from_json(data: dict | None) -> Location:
    data = data or {}
    return Location(
        name=data.get("name"),
        address=data.get("address"),
        zone=data.get("zone"),
        postal_code=data.get("postal_code"),
    )


def _access_to_json(access: AccessConditions) -> Jsonb:
    return Jsonb({"type": access.type.value, "price": access.price})


def _access_from_json(data: dict | None) -> AccessConditions:
    data = data or {}
    return AccessConditions(type=AccessType(data.get("type", "free")), price=data.get("price"))


def _deal_from_row(row: dict) -> Deal:
    return Deal(
        id=str(row["id"]),
        image=row["image"],
        title=row["title"],
        start_date=row["start_date"],
        end_date=row["end_date"],
        description=row["description"],
        author_id=str(row["author_id"]),
        location=_location_from_json(row["location"]),
        access_conditions=_access_from_json(row["access_conditions"]),
        website=row["website"],
        tags=list(row["tags"] or []),
        status=DealStatus(row["status"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _listing_from_row(row: dict) -> Listing:
    return Listing(
        id=str(row["id"]),
        title=row["title"],
        description=row["description"],
        images=list(row["images"] or []),
        condition=ListingCondition(row["condition"]),
        type=ListingType(row["type"]),
        owner_id=str(row["owner_id"]),
        tags=list(row["tags"] or []),
        is_published=row["is_published"],
        status=ListingStatus(row["status"]),
        location=_location_from_json(row["location"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _post_from_row(row: dict) -> BlogPost:
    return BlogPost(
        id=str(row["id"]),
        title=row["title"],
        content=row["content"],
        image=row["image"],
        author_id=str(row["author_id"]),
        created_at=row["created_at"],
    )


def _rating_from_row(row: dict) -> Rating:
    return Rating(
        id=str(row["id"]),
        author_id=str(row["author_id"]),
        target_user_id=str(row["target_user_id"]),
        value=row["value"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _message_from_row(row: dict) -> ContactMessage:
    return ContactMessage(
        id=str(row["id"]),
        name=row["name"],
        email=row["email"],
        subject=row["subject"],
        message=row["message"],
        archived=row["archived"],
        created_at=row["created_at"],
    )


class _PostgresRepository:
    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def _fetch_one(self, sql: str, params: tuple) -> dict | None:
        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
            cursor.execute(sql, params)
            row = cursor.fetchone()
            conn.commit()
        return row

    def _fetch_all(self, sql: str, params: tuple = ()) -> list[dict]:
        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
            cursor.execute(sql, params)
            return cursor.fetchall()

    def _delete(self, table: str, entity_id: str) -> bool:
        eid = as_uuid(entity_id)
        if eid is None:
            return False
        with self._pool.connection() as conn, conn.cursor() as cursor:
            # table names come from class constants, never from input
            cursor.execute(f"DELETE FROM {table} WHERE id = %s", (eid,))
            conn.commit()
            return cursor.rowcount == 1


class PostgresDealRepository(_PostgresRepository):
    """Implements DealRepository protocol via psycopg3."""

    def list(self) -> list[Deal]:
        rows = self._fetch_all("SELECT * FROM deals ORDER BY start_date ASC")
        return [_deal_from_row(r) for r in rows]

    def get(self, deal_id: str) -> Deal | None:
        did = as_uuid(deal_id)
        if did is None:
            return None
        row = self._fetch_one("SELECT * FROM deals WHERE id = %s", (did,))
        return _deal_from_row(row) if row else None

    def add(self, deal: Deal) -> Deal:
        sql = """
            INSERT INTO deals (
                image, title, location, start_date, end_date, access_conditions,
                website, description, author_id, tags, status
            )
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING *
        """
        row = self._fetch_one(
            sql,
            (
                deal.image,
                deal.title,
                Jsonb(asdict(deal.location)),
                deal.start_date,
                deal.end_date,
                _access_to_json(deal.access_conditions),
                deal.website,
                deal.description,
                as_uuid(deal.author_id),
                deal.tags,
                deal.status.value,
            ),
        )
        return _deal_from_row(row)

    def update(self, deal: Deal) -> Deal:
        sql = """
            UPDATE deals
            SET image = %s, title = %s, location = %s, start_date = %s, end_date = %s,
                access_conditions = %s, website = %s, description = %s, tags = %s,
                status = %s, updated_at = NOW()
            WHERE id = %s
            RETURNING *
        """
        row = self._fetch_one(
            sql,
            (
                deal.image,
                deal.title,
                Jsonb(asdict(deal.location)),
                deal.start_date,
                deal.end_date,
                _access_to_json(deal.access_conditions),
                deal.website,
                deal.description,
                deal.tags,
                deal.status.value,
                as_uuid(deal.id),
            ),
        )
        return _deal_from_row(row) if row else deal

    def delete(self, deal_id: str) -> bool:
        return self._delete("deals", deal_id)


class PostgresListingRepository(_PostgresRepository):
    """Implements ListingRepository protocol via psycopg3."""

    def list(self) -> list[Listing]:
        rows = self._fetch_all(
            "SELECT * FROM listings WHERE is_published ORDER BY created_at DESC"
        )
        return [_listing_from_row(r) for r in rows]

    def get(self, listing_id: str) -> Listing | None:
        lid = as_uuid(listing_id)
        if lid is None:
            return None
        row = self._fetch_one("SELECT * FROM listings WHERE id = %s", (lid,))
        return _listing_from_row(row) if row else None

    def add(self, listing: Listing) -> Listing:
        sql = """
            INSERT INTO listings (
                title, description, images, condition, type, owner_id,
                tags, is_published, status, location
            )
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING *
        """
        row = self._fetch_one(
            sql,
            (
                listing.title,
                listing.description,
                listing.images,
                listing.condition.value,
                listing.type.value,
                as_uuid(listing.owner_id),
                listing.tags,
                listing.is_published,
                listing.status.value,
                Jsonb(asdict(listing.location)),
            ),
        )
        return _listing_from_row(row)

    def update(self, listing: Listing) -> Listing:
        sql = """
            UPDATE listings
            SET title = %s, description = %s, images = %s, condition = %s, type = %s,
                tags = %s, is_published = %s, status = %s, location = %s, updated_at = NOW()
            WHERE id = %s
            RETURNING *
        """
        row = self._fetch_one(
            sql,
            (
                listing.title,
                listing.description,
                listing.images,
                listing.condition.value,
                listing.type.value,
                listing.tags,
                listing.is_published,
                listing.status.value,
                Jsonb(asdict(listing.location)),
                as_uuid(listing.id),
            ),
        )
        return _listing_from_row(row) if row else listing

    def delete(self, listing_id: str) -> bool:
        return self._delete("listings", listing_id)


class PostgresBlogRepository(_PostgresRepository):
    """Implements BlogRepository protocol via psycopg3."""

    def list(self) -> list[BlogPost]:
        rows = self._fetch_all("SELECT * FROM blog_posts ORDER BY created_at DESC")
        return [_post_from_row(r) for r in rows]

    def add(self, post: BlogPost) -> BlogPost:
        row = self._fetch_one(
            """
            INSERT INTO blog_posts (title, content, image, author_id)
            VALUES (%s, %s, %s, %s)
            RETURNING *
            """,
            (post.title, post.content, post.image, as_uuid(post.author_id)),
        )
        return _post_from_row(row)


class PostgresRatingRepository(_PostgresRepository):
    """Implements RatingRepository protocol via psycopg3."""

    def find(self, author_id: str, target_user_id: str) -> Rating | None:
        aid, tid = as_uuid(author_id), as_uuid(target_user_id)
        if aid is None or tid is None:
            return None
        row = self._fetch_one(
            "SELECT * FROM ratings WHERE author_id = %s AND target_user_id = %s", (aid, tid)
        )
        return _rating_from_row(row) if row else None

    def add(self, rating: Rating) -> Rating:
        # ON CONFLICT keeps two simultaneous first ratings from failing
        row = self._fetch_one(
            """
            INSERT INTO ratings (author_id, target_user_id, value)
            VALUES (%s, %s, %s)
            ON CONFLICT (author_id, target_user_id)
            DO UPDATE SET value = EXCLUDED.value, updated_at = NOW()
            RETURNING *
            """,
            (as_uuid(rating.author_id), as_uuid(rating.target_user_id), rating.value),
        )
        return _rating_from_row(row)

    def update(self, rating: Rating) -> Rating:
        row = self._fetch_one(
            "UPDATE ratings SET value = %s, updated_at = NOW() WHERE id = %s RETURNING *",
            (rating.value, as_uuid(rating.id)),
        )
        return _rating_from_row(row) if row else rating

    def delete(self, rating_id: str) -> None:
        self._delete("ratings", rating_id)

    def stats(self, target_user_id: str) -> RatingStats:
        tid = as_uuid(target_user_id)
        if tid is None:
            return RatingStats()
        row = self._fetch_one(
            "SELECT COUNT(*) AS count, AVG(value) AS average FROM ratings WHERE target_user_id = %s",
            (tid,),
        )
        average = row["average"]
        return RatingStats(
            count=row["count"],
            average=round(float(average), 2) if average is not None else None,
        )


class PostgresContactRepository(_PostgresRepository):
    """Implements ContactRepository protocol via psycopg3."""

    def add(self, message: ContactMessage) -> ContactMessage:
        row = self._fetch_one(
            """
            INSERT INTO contact_messages (name, email, subject, message)
            VALUES (%s, %s, %s, %s)
            RETURNING *
            """,
            (message.name, message.email, message.subject, message.message),
        )
        return _message_from_row(row)

    def list(self, page: int, limit: int, archived: bool | None = None) -> Page:
        offset = (page - 1) * limit
        where = "WHERE archived = %s" if archived is not None else ""
        filters: tuple = (archived,) if archived is not None else ()
        rows = self._fetch_all(
            f"SELECT * FROM contact_messages {where} ORDER BY created_at DESC LIMIT %s OFFSET %s",
            filters + (limit, offset),
        )
        total = self._fetch_one(f"SELECT COUNT(*) AS total FROM contact_messages {where}", filters)
        return Page(
            items=[_message_from_row(r) for r in rows],
            total=total["total"],
            page=page,
            limit=limit,
        )

    def set_archived(self, message_id: str, archived: bool) -> bool:
        mid = as_uuid(message_id)
        if mid is None:
            return False
        row = self._fetch_one(
            "UPDATE contact_messages SET archived = %s WHERE id = %s RETURNING id", (archived, mid)
        )
        return row is not None


def _postal_code_from_row(row: dict) -> PostalCode:
    return PostalCode(
        id=str(row["id"]),
        country=row["country"],
        postal_code=row["postal_code"],
        town=row["town"],
        source=row["source"],
        hits=row["hits"],
        expires_at=row["expires_at"],
    )


class PostgresPostalCodeRepository(_PostgresRepository):
    """Implements PostalCodeRepository protocol via psycopg3."""

    def find(self, country: str, postal_code: str) -> PostalCode | None:
        row = self._fetch_one(
            """
            SELECT * FROM postal_codes
            WHERE country = %s AND postal_code = %s
              AND (expires_at IS NULL OR expires_at > NOW())
            """,
            (country, postal_code),
        )
        return _postal_code_from_row(row) if row else None

    def record_hit(self, entry_id: str) -> None:
        eid = as_uuid(entry_id)
        if eid is None:
            return
        with self._pool.connection() as conn:
            conn.execute("UPDATE postal_codes SET hits = hits + 1 WHERE id = %s", (eid,))
            conn.commit()

    def upsert(self, entry: PostalCode) -> PostalCode:
        row = self._fetch_one(
            """
            INSERT INTO postal_codes (country, postal_code, town, source, hits, expires_at)
            VALUES (%s, %s, %s, %s, 1, %s)
            ON CONFLICT (country, postal_code)
            DO UPDATE SET town = EXCLUDED.town, source = EXCLUDED.source,
                          expires_at = EXCLUDED.expires_at,
                          hits = postal_codes.hits + 1, updated_at = NOW()
            RETURNING *
            """,
            (entry.country, entry.postal_code, entry.town, entry.source, entry.expires_at),
        )
        return _postal_code_from_row(row)
