"""
Unit tests for RegistrationService domain logic.

Tests domain logic with in-memory ports and a fixed clock to verify:
- Input validation order and error types
- Email/username/name normalization
- Cross-store uniqueness (pending vs active)
- Pending persistence, token issuance and best-effort mail
- Confirmation round trip, expiry boundary and idempotence
"""

import logging
from datetime import date, timedelta
from unittest.mock import Mock

import bcrypt
import pytest

from localiz.domain.exceptions import (
    AlreadyRegistered,
    ConfirmationPending,
    ConsentRequired,
    DuplicateKey,
    ForbiddenContent,
    InvalidBirthday,
    InvalidToken,
    MissingFields,
    TokenExpired,
    UnderageRegistrant,
)
from localiz.domain.registration import RegistrationRequest, RegistrationService
from tests.fakes import RecordingEmailSender


def make_request(**overrides) -> RegistrationRequest:
    values = {
        "username": "alice",
        "email": "alice@example.com",
        "password": "SecurePass123!",
        "birthday": "2000-01-01",
        "agree_to_terms": True,
    }
    values.update(overrides)
    return RegistrationRequest(**values)


class TestRegisterValidation:
    """Tests for the input checks that run before anything is stored."""

    def test_all_missing_fields_are_reported(self, registration_service: RegistrationService) -> None:
        """Every absent required field is listed, in a stable order."""
        with pytest.raises(MissingFields) as exc_info:
            registration_service.register(RegistrationRequest(agree_to_terms=True))

        assert exc_info.value.missing == ["username", "email", "password", "birthday"]

    def test_whitespace_only_counts_as_missing(self, registration_service: RegistrationService) -> None:
        with pytest.raises(MissingFields) as exc_info:
            registration_service.register(make_request(username="   "))

        assert exc_info.value.missing == ["username"]

    def test_missing_fields_checked_before_consent(self, registration_service: RegistrationService) -> None:
        with pytest.raises(MissingFields):
            registration_service.register(make_request(email=None, agree_to_terms=False))

    def test_consent_required_persists_nothing(
        self, registration_service: RegistrationService, pending_repo, email_sender
    ) -> None:
        """agree_to_terms=False is rejected and leaves no trace."""
        with pytest.raises(ConsentRequired):
            registration_service.register(make_request(agree_to_terms=False))

        assert pending_repo.rows == {}
        assert email_sender.sent == []

    def test_forbidden_word_in_username(self, registration_service: RegistrationService) -> None:
        """Usernames are matched on substrings, case-insensitively."""
        with pytest.raises(ForbiddenContent):
            registration_service.register(make_request(username="XXMerdeXX"))

    def test_forbidden_whole_word_in_name(self, registration_service: RegistrationService) -> None:
        with pytest.raises(ForbiddenContent) as exc_info:
            registration_service.register(make_request(last_name="connard"))

        assert "first or last name" in exc_info.value.message

    def test_name_containing_forbidden_substring_is_accepted(
        self, registration_service: RegistrationService, pending_repo
    ) -> None:
        """Names are matched on whole words only."""
        registration_service.register(make_request(last_name="bordelais"))

        (pending,) = pending_repo.rows.values()
        assert pending.profile.last_name == "Bordelais"

    def test_forbidden_checked_before_birthday(self, registration_service: RegistrationService) -> None:
        with pytest.raises(ForbiddenContent):
            registration_service.register(make_request(username="putain42", birthday="not-a-date"))

    def test_invalid_birthday(self, registration_service: RegistrationService) -> None:
        with pytest.raises(InvalidBirthday):
            registration_service.register(make_request(birthday="31/12/2000"))

    def test_underage_is_rejected(self, registration_service: RegistrationService, pending_repo) -> None:
        """Clock is 2025-06-01: someone born 2010-01-01 is 15."""
        with pytest.raises(UnderageRegistrant):
            registration_service.register(make_request(birthday="2010-01-01"))

        assert pending_repo.rows == {}

    def test_sixteenth_birthday_today_is_accepted(self, registration_service: RegistrationService) -> None:
        receipt = registration_service.register(make_request(birthday="2009-06-01"))

        assert receipt.email == "alice@example.com"

    def test_one_day_short_of_sixteen_is_rejected(self, registration_service: RegistrationService) -> None:
        with pytest.raises(UnderageRegistrant):
            registration_service.register(make_request(birthday="2009-06-02"))

    def test_iso_datetime_birthday_is_accepted(
        self, registration_service: RegistrationService, pending_repo
    ) -> None:
        registration_service.register(make_request(birthday="2000-01-01T00:00:00.000Z"))

        (pending,) = pending_repo.rows.values()
        assert pending.birthday == date(2000, 1, 1)


class TestRegisterNormalization:
    """Tests for normalization applied before storage."""

    def test_email_is_stripped_and_lowercased(
        self, registration_service: RegistrationService, pending_repo
    ) -> None:
        receipt = registration_service.register(make_request(email="  Alice@Example.COM  "))

        assert receipt.email == "alice@example.com"
        (pending,) = pending_repo.rows.values()
        assert pending.email == "alice@example.com"

    def test_username_is_stripped(self, registration_service: RegistrationService, pending_repo) -> None:
        registration_service.register(make_request(username="  alice  "))

        (pending,) = pending_repo.rows.values()
        assert pending.username == "alice"

    def test_names_are_capitalized_per_word(
        self, registration_service: RegistrationService, pending_repo
    ) -> None:
        registration_service.register(make_request(first_name="marie claire", last_name="DUPONT"))

        (pending,) = pending_repo.rows.values()
        assert pending.profile.first_name == "Marie Claire"
        assert pending.profile.last_name == "Dupont"

    def test_blank_optional_fields_become_none(
        self, registration_service: RegistrationService, pending_repo
    ) -> None:
        registration_service.register(make_request(phone="  ", city=""))

        (pending,) = pending_repo.rows.values()
        assert pending.profile.phone is None
        assert pending.profile.city is None


class TestRegisterUniqueness:
    """Tests for the cross-store existence checks."""

    def test_second_registration_while_pending(self, registration_service: RegistrationService) -> None:
        registration_service.register(make_request())

        with pytest.raises(ConfirmationPending):
            registration_service.register(make_request())

    def test_same_username_other_email_while_pending(
        self, registration_service: RegistrationService
    ) -> None:
        registration_service.register(make_request())

        with pytest.raises(ConfirmationPending):
            registration_service.register(make_request(email="other@example.com"))

    def test_second_registration_once_confirmed(
        self, registration_service: RegistrationService, email_sender: RecordingEmailSender
    ) -> None:
        registration_service.register(make_request())
        token = email_sender.sent[0][2]
        registration_service.confirm(token)

        with pytest.raises(AlreadyRegistered):
            registration_service.register(make_request())

    def test_phone_held_by_active_user(self, registration_service: RegistrationService, create_user) -> None:
        create_user("bob", phone="0600000000")

        with pytest.raises(AlreadyRegistered):
            registration_service.register(make_request(phone="0600000000"))

    def test_active_match_wins_over_pending_match(
        self, registration_service: RegistrationService, create_user
    ) -> None:
        """Email held by an active account, username held by a pending row."""
        registration_service.register(make_request(username="carol", email="carol@example.com"))
        create_user("dave", email="alice@example.com")

        with pytest.raises(AlreadyRegistered):
            registration_service.register(make_request(username="carol"))

    def test_expired_pending_frees_the_slot(
        self, registration_service: RegistrationService, pending_repo, clock
    ) -> None:
        registration_service.register(make_request())
        clock.advance(3600)

        registration_service.register(make_request())

        assert len(pending_repo.rows) == 1

    def test_lost_insert_race_raises_duplicate_key(
        self, user_repo, tokens, email_sender, clock
    ) -> None:
        """Both existence checks passed, but a concurrent insert won."""
        pending = Mock()
        pending.exists.return_value = False
        pending.add.side_effect = DuplicateKey()
        service = RegistrationService(
            pending=pending, users=user_repo, tokens=tokens, email_sender=email_sender, clock=clock
        )

        with pytest.raises(DuplicateKey):
            service.register(make_request())

        assert email_sender.sent == []


class TestRegisterSideEffects:
    """Tests for what a successful registration stores and sends."""

    def test_password_is_stored_as_bcrypt_hash(
        self, registration_service: RegistrationService, pending_repo
    ) -> None:
        registration_service.register(make_request())

        (pending,) = pending_repo.rows.values()
        assert pending.password_hash != "SecurePass123!"
        assert pending.password_hash.startswith("$2")
        assert bcrypt.checkpw(b"SecurePass123!", pending.password_hash.encode())

    def test_confirmation_email_carries_stored_token(
        self, registration_service: RegistrationService, pending_repo, email_sender
    ) -> None:
        registration_service.register(make_request())

        (pending,) = pending_repo.rows.values()
        assert email_sender.sent == [("confirmation", "alice@example.com", pending.verification_token)]

    def test_receipt_expiry_is_one_hour_ahead(self, registration_service: RegistrationService, clock) -> None:
        receipt = registration_service.register(make_request())

        assert receipt.expires_at == clock() + timedelta(seconds=3600)

    def test_mail_failure_keeps_pending_registration(
        self, pending_repo, user_repo, tokens, clock, caplog
    ) -> None:
        """Delivery failure is logged, registration still succeeds."""
        service = RegistrationService(
            pending=pending_repo,
            users=user_repo,
            tokens=tokens,
            email_sender=RecordingEmailSender(fail=True),
            clock=clock,
        )

        with caplog.at_level(logging.WARNING):
            receipt = service.register(make_request())

        assert receipt.email == "alice@example.com"
        assert len(pending_repo.rows) == 1
        assert "Email delivery failed" in caplog.text


class TestConfirm:
    """Tests for confirm() - promotion of a pending registration."""

    def _register(self, service: RegistrationService, sender: RecordingEmailSender) -> str:
        service.register(make_request(first_name="alice", phone="0611111111"))
        return sender.sent[-1][2]

    def test_round_trip_creates_exactly_one_user(
        self, registration_service: RegistrationService, pending_repo, user_repo, email_sender
    ) -> None:
        token = self._register(registration_service, email_sender)
        (pending,) = pending_repo.rows.values()

        confirmation = registration_service.confirm(token)

        assert len(user_repo.rows) == 1
        assert pending_repo.rows == {}
        user = confirmation.user
        assert user.username == "alice"
        assert user.email == "alice@example.com"
        assert user.password_hash == pending.password_hash
        assert user.profile.first_name == "Alice"
        assert user.profile.phone == "0611111111"

    def test_confirm_sends_welcome_and_issues_session(
        self, registration_service: RegistrationService, email_sender, tokens
    ) -> None:
        token = self._register(registration_service, email_sender)

        confirmation = registration_service.confirm(token)

        assert email_sender.kinds() == ["confirmation", "welcome"]
        assert tokens.decode_session_token(confirmation.session.token) == confirmation.user.id

    def test_confirm_twice_is_invalid(self, registration_service: RegistrationService, email_sender) -> None:
        token = self._register(registration_service, email_sender)
        registration_service.confirm(token)

        with pytest.raises(InvalidToken):
            registration_service.confirm(token)

    def test_confirm_at_exact_expiry_is_expired(
        self, registration_service: RegistrationService, email_sender, clock, user_repo
    ) -> None:
        token = self._register(registration_service, email_sender)
        clock.advance(3600)

        with pytest.raises(TokenExpired):
            registration_service.confirm(token)

        assert user_repo.rows == {}

    def test_confirm_just_before_expiry(
        self, registration_service: RegistrationService, email_sender, clock
    ) -> None:
        token = self._register(registration_service, email_sender)
        clock.advance(3599)

        confirmation = registration_service.confirm(token)

        assert confirmation.user.username == "alice"

    def test_blank_token(self, registration_service: RegistrationService) -> None:
        with pytest.raises(InvalidToken) as exc_info:
            registration_service.confirm("  ")

        assert exc_info.value.message == "Missing token"

    def test_garbage_token(self, registration_service: RegistrationService) -> None:
        with pytest.raises(InvalidToken):
            registration_service.confirm("not-a-jwt")

    def test_session_token_is_not_a_verification_token(
        self, registration_service: RegistrationService, tokens
    ) -> None:
        session = tokens.issue_session_token("some-user-id")

        with pytest.raises(InvalidToken):
            registration_service.confirm(session.token)

    def test_valid_token_without_pending_row(
        self, registration_service: RegistrationService, tokens
    ) -> None:
        """Signature is fine but nothing is pending for that email."""
        issued = tokens.issue_verification_token("ghost@example.com")

        with pytest.raises(InvalidToken):
            registration_service.confirm(issued.token)

    def test_pending_delete_failure_is_logged_and_ignored(
        self, registration_service: RegistrationService, pending_repo, email_sender, caplog
    ) -> None:
        token = self._register(registration_service, email_sender)
        pending_repo.fail_delete = True

        with caplog.at_level(logging.ERROR):
            confirmation = registration_service.confirm(token)

        assert confirmation.user.username == "alice"
        assert "Failed to delete pending registration" in caplog.text

    def test_welcome_mail_failure_does_not_fail_confirmation(
        self, registration_service: RegistrationService, email_sender, user_repo
    ) -> None:
        token = self._register(registration_service, email_sender)
        email_sender.fail = True

        registration_service.confirm(token)

        assert len(user_repo.rows) == 1

    def test_active_account_created_meanwhile(
        self, registration_service: RegistrationService, email_sender, create_user
    ) -> None:
        """Two-store race: the confirm loses to an account created in between."""
        token = self._register(registration_service, email_sender)
        create_user("alice", email="alice-other@example.com")

        with pytest.raises(DuplicateKey):
            registration_service.confirm(token)
