"""Repository adapters - Database implementations."""

from .content import (
    PostgresBlogRepository,
    PostgresContactRepository,
    PostgresDealRepository,
    PostgresListingRepository,
    PostgresPostalCodeRepository,
    PostgresRatingRepository,
)
from .postgres import PostgresPendingRegistrationRepository, PostgresUserRepository, run_migrations

__all__ = [
    "PostgresBlogRepository",
    "PostgresContactRepository",
    "PostgresDealRepository",
    "PostgresListingRepository",
    "PostgresPendingRegistrationRepository",
    "PostgresPostalCodeRepository",
    "PostgresRatingRepository",
    "PostgresUserRepository",
    "run_migrations",
]
