"""
Unit tests for domain entities, exceptions, policy and password helpers.

Tests verify:
- Error taxonomy carries the right HTTP statuses
- Public user projection never exposes secrets
- Registration policy rules (forbidden words, minimum age)
- Password hashing
- Domain purity (zero framework imports)
"""

import subprocess
from dataclasses import FrozenInstanceError
from datetime import date, datetime, timezone
from pathlib import Path

import pytest

from localiz.domain.exceptions import (
    AlreadyRegistered,
    ConfirmationPending,
    ConsentRequired,
    DuplicateKey,
    EmailDeliveryFailure,
    Forbidden,
    ForbiddenContent,
    InvalidBirthday,
    InvalidToken,
    LocalizError,
    MissingFields,
    NotAuthenticated,
    RegistrationError,
    ResourceNotFound,
    TokenExpired,
    UnderageRegistrant,
    UserNotFound,
)
from localiz.domain.models import Page, Profile, Role, User
from localiz.domain.notifications import send_best_effort
from localiz.domain.passwords import hash_password, verify_password
from localiz.domain.policy import (
    RegistrationPolicy,
    age_on,
    capitalize_name,
    normalize_email,
    parse_birthday,
)

DOMAIN_DIR = Path(__file__).resolve().parents[2] / "localiz" / "domain"


class TestDomainExceptions:
    """Tests for the error taxonomy."""

    @pytest.mark.parametrize(
        "error, status",
        [
            (MissingFields(["email"]), 400),
            (ConsentRequired(), 400),
            (ForbiddenContent(), 400),
            (InvalidBirthday(), 400),
            (UnderageRegistrant(), 400),
            (AlreadyRegistered(), 400),
            (ConfirmationPending(), 400),
            (DuplicateKey(), 400),
            (InvalidToken(), 400),
            (TokenExpired(), 410),
            (NotAuthenticated(), 401),
            (Forbidden(), 403),
            (UserNotFound(), 404),
            (ResourceNotFound(), 404),
        ],
    )
    def test_status_codes(self, error: LocalizError, status: int) -> None:
        assert error.status_code == status

    def test_registration_errors_share_a_base(self) -> None:
        for cls in (MissingFields, ConsentRequired, ForbiddenContent, UnderageRegistrant, AlreadyRegistered):
            assert issubclass(cls, RegistrationError)

    def test_default_and_custom_messages(self) -> None:
        assert ConfirmationPending().message == "Please check your inbox to confirm your registration."
        assert InvalidToken("Missing token").message == "Missing token"
        assert str(InvalidToken("Missing token")) == "Missing token"

    def test_missing_fields_keeps_names(self) -> None:
        error = MissingFields(["username", "birthday"])

        assert error.missing == ["username", "birthday"]


class TestUserProjection:
    """Tests for User.public()."""

    def test_public_has_no_secrets(self) -> None:
        user = User(
            id="u1",
            username="alice",
            email="alice@example.com",
            password_hash="$2b$10$secret",
            birthday=date(2000, 1, 1),
            profile=Profile(first_name="Alice", postal_code="62400"),
            reset_password_token="reset",
            created_at=datetime(2025, 6, 1, tzinfo=timezone.utc),
        )

        public = user.public()

        assert public["username"] == "alice"
        assert public["firstName"] == "Alice"
        assert public["postalCode"] == "62400"
        assert public["birthday"] == "2000-01-01"
        assert public["role"] == "user"
        assert "password" not in public
        assert "passwordHash" not in public
        assert "$2b$10$secret" not in public.values()
        assert "reset" not in public.values()

    def test_is_admin(self) -> None:
        user = User(username="a", email="a@x.io", password_hash="h", birthday=date(2000, 1, 1), role=Role.ADMIN)

        assert user.is_admin

    def test_page_count(self) -> None:
        assert Page(items=[], total=41, page=1, limit=20).pages == 3
        assert Page(items=[], total=0, page=1, limit=20).pages == 0


class TestNormalization:
    """Tests for the small normalization helpers."""

    def test_normalize_email(self) -> None:
        assert normalize_email("  User@Example.COM ") == "user@example.com"

    def test_capitalize_name(self) -> None:
        assert capitalize_name("jean DUPONT") == "Jean Dupont"

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("1990-05-17", date(1990, 5, 17)),
            ("1990-05-17T00:00:00.000Z", date(1990, 5, 17)),
            (date(1990, 5, 17), date(1990, 5, 17)),
            (datetime(1990, 5, 17, 8, 30), date(1990, 5, 17)),
        ],
    )
    def test_parse_birthday(self, value, expected: date) -> None:
        assert parse_birthday(value) == expected

    def test_parse_birthday_rejects_garbage(self) -> None:
        with pytest.raises(InvalidBirthday):
            parse_birthday("yesterday")

    def test_age_on_birthday_eve(self) -> None:
        assert age_on(date(2000, 6, 2), date(2016, 6, 1)) == 15
        assert age_on(date(2000, 6, 1), date(2016, 6, 1)) == 16


class TestRegistrationPolicy:
    """Tests for RegistrationPolicy."""

    def test_username_substring_match(self) -> None:
        policy = RegistrationPolicy()

        assert policy.username_is_forbidden("SuperMERDE")
        assert not policy.username_is_forbidden("alice")

    def test_name_whole_word_match(self) -> None:
        policy = RegistrationPolicy()

        assert policy.name_is_forbidden("Putain")
        assert not policy.name_is_forbidden("Bordelais")
        assert not policy.name_is_forbidden(None)

    def test_custom_words(self) -> None:
        policy = RegistrationPolicy(forbidden_words=(" Spam ", ""))

        assert policy.forbidden_words == ("spam",)
        assert policy.username_is_forbidden("spammer")
        assert not policy.username_is_forbidden("merde")

    def test_empty_word_list(self) -> None:
        policy = RegistrationPolicy(forbidden_words=())

        assert not policy.username_is_forbidden("anything")
        assert not policy.name_is_forbidden("anything")

    def test_is_underage(self) -> None:
        policy = RegistrationPolicy(min_age=18)

        assert policy.is_underage(date(2008, 1, 1), date(2025, 6, 1))
        assert not policy.is_underage(date(2007, 6, 1), date(2025, 6, 1))

    def test_policy_is_immutable(self) -> None:
        policy = RegistrationPolicy()

        with pytest.raises(FrozenInstanceError):
            policy.min_age = 0


class TestPasswords:
    """Tests for bcrypt helpers."""

    def test_hash_and_verify(self) -> None:
        password_hash = hash_password("SecurePass123!")

        assert password_hash.startswith("$2b$10$")
        assert verify_password("SecurePass123!", password_hash)
        assert not verify_password("wrong", password_hash)

    def test_cost_never_below_ten(self) -> None:
        assert hash_password("x", rounds=4).startswith("$2b$10$")

    def test_malformed_hash_does_not_verify(self) -> None:
        assert not verify_password("x", "not-a-hash")


class TestSendBestEffort:
    """Tests for send_best_effort()."""

    def test_delivery_failure_is_swallowed(self) -> None:
        def send(*args: object) -> None:
            raise EmailDeliveryFailure("timeout")

        assert send_best_effort("welcome", send, "a@b.c") is False

    def test_other_errors_propagate(self) -> None:
        def send(*args: object) -> None:
            raise RuntimeError("bug")

        with pytest.raises(RuntimeError):
            send_best_effort("welcome", send)

    def test_success(self) -> None:
        calls = []

        assert send_best_effort("welcome", lambda *a: calls.append(a), "a@b.c", "alice") is True
        assert calls == [("a@b.c", "alice")]


class TestDomainPurity:
    """Tests for domain purity - zero framework imports."""

    @pytest.mark.parametrize(
        "pattern",
        [
            "from fastapi",
            "import fastapi",
            "from pydantic",
            "import pydantic",
            "from psycopg",
            "import psycopg",
            "import httpx",
        ],
    )
    def test_no_framework_imports_in_domain(self, pattern: str) -> None:
        result = subprocess.run(
            ["grep", "-r", pattern, str(DOMAIN_DIR)],
            capture_output=True,
            text=True,
        )
        assert result.returncode != 0, f"Framework import found: {result.stdout}"
