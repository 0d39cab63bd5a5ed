"""
PostgreSQL repository adapter - Account stores.

This module provides the PostgreSQL implementations of the domain's
PendingRegistrationRepository and UserRepository ports using psycopg3
with raw SQL.

Pending registrations expire ``ttl_seconds`` after ``created_at``:
every lookup ignores older rows, an insert first releases expired rows
holding the same keys, and purge_expired() removes the rest. The
UNIQUE constraints on username/email/phone are the final arbiter of
concurrent inserts; a violation surfaces as DuplicateKey.
"""

import logging
from pathlib import Path
from uuid import UUID

from psycopg.errors import UniqueViolation
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from localiz.domain.exceptions import DuplicateKey
from localiz.domain.models import Page, PendingRegistration, Profile, Role, User

logger = logging.getLogger(__name__)


def as_uuid(value: str | None) -> UUID | None:
    """Parse an entity id; None for anything that is not a UUID."""
    if value is None:
        return None
    try:
        return UUID(str(value))
    except ValueError:
        return None


def _profile_from_row(row: dict) -> Profile:
    return Profile(
        first_name=row["first_name"],
        last_name=row["last_name"],
        phone=row["phone"],
        postal_code=row["postal_code"],
        city=row["city"],
        gender=row["gender"],
    )


def _pending_from_row(row: dict) -> PendingRegistration:
    return PendingRegistration(
        id=str(row["id"]),
        username=row["username"],
        email=row["email"],
        password_hash=row["password_hash"],
        birthday=row["birthday"],
        verification_token=row["verification_token"],
        profile=_profile_from_row(row),
        agree_to_terms=row["agree_to_terms"],
        created_at=row["created_at"],
    )


def _user_from_row(row: dict) -> User:
    return User(
        id=str(row["id"]),
        username=row["username"],
        email=row["email"],
        password_hash=row["password_hash"],
        birthday=row["birthday"],
        profile=_profile_from_row(row),
        role=Role(row["role"]),
        agree_to_terms=row["agree_to_terms"],
        reset_password_token=row["reset_password_token"],
        reset_password_expires=row["reset_password_expires"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class PostgresPendingRegistrationRepository:
    """
    Implements PendingRegistrationRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool, ttl_seconds: int = 3600) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
            ttl_seconds: Lifetime of a pending row, counted from created_at
        """
        self._pool = pool
        self._ttl = ttl_seconds

    def exists(self, email: str, username: str, phone: str | None = None) -> bool:
        sql = """
            SELECT 1 FROM pending_registrations
            WHERE (email = %s OR username = %s OR (%s::text IS NOT NULL AND phone = %s))
              AND created_at > NOW() - make_interval(secs => %s)
            LIMIT 1
        """
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (email, username, phone, phone, self._ttl))
            return cursor.fetchone() is not None

    def add(self, pending: PendingRegistration) -> PendingRegistration:
        """
        Insert a pending registration.

        Expired rows holding the same email/username/phone are deleted
        in the same transaction so an expired attempt never blocks a
        fresh one.

        Raises:
            DuplicateKey: a live row (or a concurrent insert) holds a key
        """
        release_sql = """
            DELETE FROM pending_registrations
            WHERE (email = %s OR username = %s OR (%s::text IS NOT NULL AND phone = %s))
              AND created_at <= NOW() - make_interval(secs => %s)
        """
        insert_sql = """
            INSERT INTO pending_registrations (
                username, email, phone, password_hash, first_name, last_name,
                postal_code, city, birthday, gender, agree_to_terms, verification_token
            )
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING *
        """
        p = pending.profile
        try:
            with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
                cursor.execute(
                    release_sql, (pending.email, pending.username, p.phone, p.phone, self._ttl)
                )
                cursor.execute(
                    insert_sql,
                    (
                        pending.username,
                        pending.email,
                        p.phone,
                        pending.password_hash,
                        p.first_name,
                        p.last_name,
                        p.postal_code,
                        p.city,
                        pending.birthday,
                        p.gender,
                        pending.agree_to_terms,
                        pending.verification_token,
                    ),
                )
                row = cursor.fetchone()
                conn.commit()
        except UniqueViolation as e:
            logger.info("Pending registration insert lost a uniqueness race: %s", e.diag.constraint_name)
            raise DuplicateKey() from e
        return _pending_from_row(row)

    def find_by_email_and_token(self, email: str, token: str) -> PendingRegistration | None:
        sql = """
            SELECT * FROM pending_registrations
            WHERE email = %s AND verification_token = %s
              AND created_at > NOW() - make_interval(secs => %s)
        """
        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
            cursor.execute(sql, (email, token, self._ttl))
            row = cursor.fetchone()
        return _pending_from_row(row) if row else None

    def delete(self, pending_id: str) -> None:
        pid = as_uuid(pending_id)
        if pid is None:
            return
        with self._pool.connection() as conn:
            conn.execute("DELETE FROM pending_registrations WHERE id = %s", (pid,))
            conn.commit()

    def purge_expired(self) -> int:
        sql = """
            DELETE FROM pending_registrations
            WHERE created_at <= NOW() - make_interval(secs => %s)
        """
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (self._ttl,))
            conn.commit()
            return cursor.rowcount


class PostgresUserRepository:
    """
    Implements UserRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def _fetch_one(self, sql: str, params: tuple) -> User | None:
        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
            cursor.execute(sql, params)
            row = cursor.fetchone()
        return _user_from_row(row) if row else None

    def exists(self, email: str, username: str, phone: str | None = None) -> bool:
        sql = """
            SELECT 1 FROM users
            WHERE email = %s OR username = %s OR (%s::text IS NOT NULL AND phone = %s)
            LIMIT 1
        """
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (email, username, phone, phone))
            return cursor.fetchone() is not None

    def add(self, user: User) -> User:
        sql = """
            INSERT INTO users (
                username, email, phone, password_hash, role, first_name, last_name,
                postal_code, city, birthday, gender, agree_to_terms
            )
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING *
        """
        p = user.profile
        try:
            with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
                cursor.execute(
                    sql,
                    (
                        user.username,
                        user.email,
                        p.phone,
                        user.password_hash,
                        user.role.value,
                        p.first_name,
                        p.last_name,
                        p.postal_code,
                        p.city,
                        user.birthday,
                        p.gender,
                        user.agree_to_terms,
                    ),
                )
                row = cursor.fetchone()
                conn.commit()
        except UniqueViolation as e:
            raise DuplicateKey() from e
        return _user_from_row(row)

    def get(self, user_id: str) -> User | None:
        uid = as_uuid(user_id)
        if uid is None:
            return None
        return self._fetch_one("SELECT * FROM users WHERE id = %s", (uid,))

    def find_by_email(self, email: str) -> User | None:
        return self._fetch_one("SELECT * FROM users WHERE email = %s", (email,))

    def find_by_username(self, username: str) -> User | None:
        return self._fetch_one("SELECT * FROM users WHERE username = %s", (username,))

    def find_by_reset_token(self, token: str) -> User | None:
        return self._fetch_one("SELECT * FROM users WHERE reset_password_token = %s", (token,))

    def update(self, user: User) -> User:
        sql = """
            UPDATE users
            SET phone = %s, password_hash = %s, role = %s, first_name = %s, last_name = %s,
                postal_code = %s, city = %s, gender = %s,
                reset_password_token = %s, reset_password_expires = %s, updated_at = NOW()
            WHERE id = %s
            RETURNING *
        """
        p = user.profile
        try:
            with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
                cursor.execute(
                    sql,
                    (
                        p.phone,
                        user.password_hash,
                        user.role.value,
                        p.first_name,
                        p.last_name,
                        p.postal_code,
                        p.city,
                        p.gender,
                        user.reset_password_token,
                        user.reset_password_expires,
                        as_uuid(user.id),
                    ),
                )
                row = cursor.fetchone()
                conn.commit()
        except UniqueViolation as e:
            raise DuplicateKey("Phone number already in use") from e
        return _user_from_row(row) if row else user

    def delete(self, user_id: str) -> bool:
        uid = as_uuid(user_id)
        if uid is None:
            return False
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute("DELETE FROM users WHERE id = %s", (uid,))
            conn.commit()
            return cursor.rowcount == 1

    def list(self, page: int, limit: int) -> Page:
        offset = (page - 1) * limit
        with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
            cursor.execute(
                "SELECT * FROM users ORDER BY created_at DESC LIMIT %s OFFSET %s", (limit, offset)
            )
            rows = cursor.fetchall()
            cursor.execute("SELECT COUNT(*) AS total FROM users")
            total = cursor.fetchone()["total"]
        return Page(items=[_user_from_row(r) for r in rows], total=total, page=page, limit=limit)


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    # Structure: localiz/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning("Migrations directory not found: %s", migrations_dir)
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info("Running %d migration(s)", len(sql_files))

    for sql_file in sql_files:
        logger.info("Executing migration: %s", sql_file.name)
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)
                conn.commit()

            logger.info("Migration complete: %s", sql_file.name)
        except Exception as e:
            logger.error("Migration failed: %s - %s", sql_file.name, e)
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
