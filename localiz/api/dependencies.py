"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
Long-lived collaborators (pool, token issuer, mailer, settings) are
built once at startup and read from app.state; services are cheap
dataclasses assembled per request.
"""

from datetime import timedelta

from fastapi import Depends, Request
from fastapi.security import APIKeyCookie
from psycopg_pool import ConnectionPool

from localiz.adapters.repository import (
    PostgresBlogRepository,
    PostgresContactRepository,
    PostgresDealRepository,
    PostgresListingRepository,
    PostgresPendingRegistrationRepository,
    PostgresPostalCodeRepository,
    PostgresRatingRepository,
    PostgresUserRepository,
)
from localiz.api.cookies import SESSION_COOKIE
from localiz.config.settings import Settings
from localiz.domain.accounts import AccountService, AdminService
from localiz.domain.contact import ContactService
from localiz.domain.exceptions import Forbidden
from localiz.domain.marketplace import BlogService, DealService, ListingService
from localiz.domain.models import User
from localiz.domain.ports import EmailSender, TokenIssuer
from localiz.domain.ratings import RatingService
from localiz.domain.registration import RegistrationService
from localiz.domain.towns import TownService


def get_app_settings(request: Request) -> Settings:
    """Settings the app was created with."""
    return request.app.state.settings


def get_pool(request: Request) -> ConnectionPool:
    """
    Get connection pool from app state.

    The pool is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.pool


def get_token_issuer(request: Request) -> TokenIssuer:
    return request.app.state.tokens


def get_email_sender(request: Request) -> EmailSender:
    return request.app.state.email_sender


def get_registration_service(request: Request) -> RegistrationService:
    """
    Create registration service with injected dependencies.

    Wires together both account stores, the token issuer and the email
    sender for the domain service.
    """
    settings = get_app_settings(request)
    pool = get_pool(request)
    return RegistrationService(
        pending=PostgresPendingRegistrationRepository(pool, settings.pending_ttl_seconds),
        users=PostgresUserRepository(pool),
        tokens=get_token_issuer(request),
        email_sender=get_email_sender(request),
        policy=request.app.state.policy,
        bcrypt_cost=settings.bcrypt_cost,
    )


def get_account_service(request: Request) -> AccountService:
    settings = get_app_settings(request)
    return AccountService(
        users=PostgresUserRepository(get_pool(request)),
        tokens=get_token_issuer(request),
        email_sender=get_email_sender(request),
        policy=request.app.state.policy,
        bcrypt_cost=settings.bcrypt_cost,
        reset_ttl_seconds=settings.password_reset_ttl_seconds,
    )


def get_admin_service(request: Request) -> AdminService:
    return AdminService(users=PostgresUserRepository(get_pool(request)))


def get_deal_service(request: Request) -> DealService:
    return DealService(deals=PostgresDealRepository(get_pool(request)))


def get_listing_service(request: Request) -> ListingService:
    return ListingService(listings=PostgresListingRepository(get_pool(request)))


def get_blog_service(request: Request) -> BlogService:
    return BlogService(posts=PostgresBlogRepository(get_pool(request)))


def get_rating_service(request: Request) -> RatingService:
    pool = get_pool(request)
    return RatingService(ratings=PostgresRatingRepository(pool), users=PostgresUserRepository(pool))


def get_contact_service(request: Request) -> ContactService:
    return ContactService(
        messages=PostgresContactRepository(get_pool(request)),
        email_sender=get_email_sender(request),
    )


def get_town_service(request: Request) -> TownService:
    settings = get_app_settings(request)
    return TownService(
        cache=PostgresPostalCodeRepository(get_pool(request)),
        directory=request.app.state.town_directory,
        cache_ttl=timedelta(days=settings.postal_cache_ttl_days),
    )


# Session cookie security scheme for OpenAPI documentation
session_cookie = APIKeyCookie(name=SESSION_COOKIE, auto_error=False)


def get_current_user(
    token: str | None = Depends(session_cookie),
    accounts: AccountService = Depends(get_account_service),
) -> User:
    """
    Resolve the session cookie to the calling user.

    Raises:
        NotAuthenticated: no cookie, bad or expired token, unknown user
    """
    return accounts.authenticate(token)


def require_admin(user: User = Depends(get_current_user)) -> User:
    """Allow admins only."""
    if not user.is_admin:
        raise Forbidden("Access restricted to administrators")
    return user
