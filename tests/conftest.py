"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- Domain services wired to in-memory fakes and a controllable clock
- A FastAPI app whose services are overridden with those fakes
- A PostgreSQL pool for integration/adversarial tests (skipped when unreachable)
"""

from collections.abc import Callable, Generator
from datetime import date

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from psycopg_pool import ConnectionPool, PoolTimeout

from localiz.adapters.repository import run_migrations
from localiz.adapters.tokens.jwt_tokens import JwtTokenIssuer
from localiz.api import dependencies
from localiz.api.main import create_app
from localiz.config.settings import Settings, get_settings
from localiz.domain.accounts import AccountService, AdminService
from localiz.domain.contact import ContactService
from localiz.domain.marketplace import BlogService, DealService, ListingService
from localiz.domain.models import Profile, Role, User
from localiz.domain.passwords import hash_password
from localiz.domain.policy import RegistrationPolicy
from localiz.domain.ratings import RatingService
from localiz.domain.registration import RegistrationService
from localiz.domain.towns import TownService
from tests.fakes import (
    FixedClock,
    InMemoryBlogRepository,
    InMemoryContactRepository,
    InMemoryDealRepository,
    InMemoryListingRepository,
    InMemoryPendingRegistrationRepository,
    InMemoryPostalCodeRepository,
    InMemoryRatingRepository,
    InMemoryUserRepository,
    RecordingEmailSender,
    StubTownDirectory,
    TEST_PASSWORD,
)

TEST_SECRET = "test-secret"


# --- Domain wiring ----------------------------------------------------------


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def pending_repo(clock: FixedClock) -> InMemoryPendingRegistrationRepository:
    return InMemoryPendingRegistrationRepository(clock, ttl_seconds=3600)


@pytest.fixture
def user_repo(clock: FixedClock) -> InMemoryUserRepository:
    return InMemoryUserRepository(clock)


@pytest.fixture
def email_sender() -> RecordingEmailSender:
    return RecordingEmailSender()


@pytest.fixture
def tokens(clock: FixedClock) -> JwtTokenIssuer:
    return JwtTokenIssuer(TEST_SECRET, verification_ttl_seconds=3600, clock=clock)


@pytest.fixture
def policy() -> RegistrationPolicy:
    return RegistrationPolicy()


@pytest.fixture
def registration_service(
    pending_repo: InMemoryPendingRegistrationRepository,
    user_repo: InMemoryUserRepository,
    tokens: JwtTokenIssuer,
    email_sender: RecordingEmailSender,
    policy: RegistrationPolicy,
    clock: FixedClock,
) -> RegistrationService:
    return RegistrationService(
        pending=pending_repo,
        users=user_repo,
        tokens=tokens,
        email_sender=email_sender,
        policy=policy,
        clock=clock,
    )


@pytest.fixture
def account_service(
    user_repo: InMemoryUserRepository,
    tokens: JwtTokenIssuer,
    email_sender: RecordingEmailSender,
    policy: RegistrationPolicy,
    clock: FixedClock,
) -> AccountService:
    return AccountService(
        users=user_repo,
        tokens=tokens,
        email_sender=email_sender,
        policy=policy,
        reset_ttl_seconds=3600,
        clock=clock,
    )


@pytest.fixture
def postal_repo(clock: FixedClock) -> InMemoryPostalCodeRepository:
    return InMemoryPostalCodeRepository(clock)


@pytest.fixture
def town_directory() -> StubTownDirectory:
    return StubTownDirectory({"62000": "Arras", "59000": "Lille"})


@pytest.fixture
def town_service(
    postal_repo: InMemoryPostalCodeRepository, town_directory: StubTownDirectory, clock: FixedClock
) -> TownService:
    return TownService(cache=postal_repo, directory=town_directory, clock=clock)


@pytest.fixture
def create_user(user_repo: InMemoryUserRepository) -> Callable[..., User]:
    """Factory adding an active account whose password is TEST_PASSWORD."""
    password_hash = hash_password(TEST_PASSWORD)

    def _create(
        username: str = "bob",
        email: str | None = None,
        role: Role = Role.USER,
        phone: str | None = None,
    ) -> User:
        return user_repo.add(
            User(
                username=username,
                email=email or f"{username}@example.com",
                password_hash=password_hash,
                birthday=date(1990, 5, 17),
                profile=Profile(first_name="Bob", phone=phone),
                role=role,
            )
        )

    return _create


# --- API wiring -------------------------------------------------------------


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        secret_key=TEST_SECRET,
        client_url="http://front.test",
        deploy_front_url="https://localiz.example",
    )


@pytest.fixture
def app(
    settings: Settings,
    registration_service: RegistrationService,
    account_service: AccountService,
    user_repo: InMemoryUserRepository,
    email_sender: RecordingEmailSender,
    town_service: TownService,
) -> Generator[FastAPI, None, None]:
    """Application with every service backed by the in-memory fakes."""
    application = create_app(settings)
    deals = DealService(deals=InMemoryDealRepository())
    listings = ListingService(listings=InMemoryListingRepository())
    blog = BlogService(posts=InMemoryBlogRepository())
    ratings = RatingService(ratings=InMemoryRatingRepository(), users=user_repo)
    contact = ContactService(messages=InMemoryContactRepository(), email_sender=email_sender)

    overrides = application.dependency_overrides
    overrides[dependencies.get_registration_service] = lambda: registration_service
    overrides[dependencies.get_account_service] = lambda: account_service
    overrides[dependencies.get_admin_service] = lambda: AdminService(users=user_repo)
    overrides[dependencies.get_deal_service] = lambda: deals
    overrides[dependencies.get_listing_service] = lambda: listings
    overrides[dependencies.get_blog_service] = lambda: blog
    overrides[dependencies.get_rating_service] = lambda: ratings
    overrides[dependencies.get_contact_service] = lambda: contact
    overrides[dependencies.get_town_service] = lambda: town_service
    try:
        yield application
    finally:
        overrides.clear()


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Test client without lifespan (no database)."""
    return TestClient(app)


@pytest.fixture
def login_as(client: TestClient) -> Callable[[User], TestClient]:
    """Log a user in; the client then carries the session cookie."""

    def _login(user: User) -> TestClient:
        response = client.post("/user/login", json={"data": user.email, "password": TEST_PASSWORD})
        assert response.status_code == 200, response.text
        return client

    return _login


# --- PostgreSQL -------------------------------------------------------------


@pytest.fixture(scope="session")
def pg_pool() -> Generator[ConnectionPool, None, None]:
    """Connection pool on DATABASE_URL with migrations applied."""
    pool = ConnectionPool(
        conninfo=get_settings().database_url,
        min_size=1,
        max_size=10,
        open=False,
    )
    try:
        pool.open(wait=True, timeout=3)
    except PoolTimeout:
        pool.close()
        pytest.skip("PostgreSQL is not reachable")
    run_migrations(pool)
    yield pool
    pool.close()


@pytest.fixture
def clean_database(pg_pool: ConnectionPool) -> Generator[ConnectionPool, None, None]:
    """Empty every table before the test."""
    with pg_pool.connection() as conn:
        conn.execute(
            "TRUNCATE pending_registrations, users, deals, listings, blog_posts, "
            "ratings, contact_messages, postal_codes CASCADE"
        )
        conn.commit()
    yield pg_pool
