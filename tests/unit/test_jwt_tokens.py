"""
Unit tests for JwtTokenIssuer.

Tests verify:
- Verification and session tokens round-trip their claim
- A token of one purpose is refused for the other
- Expiry boundary is exclusive (now >= exp is expired)
- Tampered or foreign-signed tokens are invalid
"""

from datetime import timedelta

import jwt
import pytest

from localiz.adapters.tokens.jwt_tokens import JwtTokenIssuer
from localiz.domain.exceptions import InvalidToken, TokenExpired
from tests.fakes import FixedClock


@pytest.fixture
def issuer(clock: FixedClock) -> JwtTokenIssuer:
    return JwtTokenIssuer("s3cret", verification_ttl_seconds=3600, session_ttl_seconds=600, clock=clock)


class TestVerificationTokens:
    """Tests for verification tokens."""

    def test_round_trip(self, issuer: JwtTokenIssuer, clock: FixedClock) -> None:
        issued = issuer.issue_verification_token("alice@example.com")

        assert issued.expires_at == clock().replace(microsecond=0) + timedelta(seconds=3600)
        assert issuer.decode_verification_token(issued.token) == "alice@example.com"

    def test_surrounding_whitespace_is_ignored(self, issuer: JwtTokenIssuer) -> None:
        token = issuer.issue_verification_token("alice@example.com").token

        assert issuer.decode_verification_token(f"  {token}\n") == "alice@example.com"

    def test_one_second_before_expiry(self, issuer: JwtTokenIssuer, clock: FixedClock) -> None:
        token = issuer.issue_verification_token("alice@example.com").token
        clock.advance(3599)

        assert issuer.decode_verification_token(token) == "alice@example.com"

    def test_expired_at_exact_instant(self, issuer: JwtTokenIssuer, clock: FixedClock) -> None:
        token = issuer.issue_verification_token("alice@example.com").token
        clock.advance(3600)

        with pytest.raises(TokenExpired):
            issuer.decode_verification_token(token)

    def test_session_token_is_not_a_verification_token(self, issuer: JwtTokenIssuer) -> None:
        token = issuer.issue_session_token("user-1").token

        with pytest.raises(InvalidToken):
            issuer.decode_verification_token(token)


class TestSessionTokens:
    """Tests for session tokens."""

    def test_round_trip(self, issuer: JwtTokenIssuer) -> None:
        token = issuer.issue_session_token("user-1").token

        assert issuer.decode_session_token(token) == "user-1"

    def test_expiry(self, issuer: JwtTokenIssuer, clock: FixedClock) -> None:
        token = issuer.issue_session_token("user-1").token
        clock.advance(600)

        with pytest.raises(TokenExpired):
            issuer.decode_session_token(token)

    def test_verification_token_is_not_a_session(self, issuer: JwtTokenIssuer) -> None:
        token = issuer.issue_verification_token("alice@example.com").token

        with pytest.raises(InvalidToken):
            issuer.decode_session_token(token)


class TestTamperedTokens:
    """Tests for tokens not signed by this issuer."""

    @pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
    def test_malformed(self, issuer: JwtTokenIssuer, token: str) -> None:
        with pytest.raises(InvalidToken):
            issuer.decode_verification_token(token)

    def test_foreign_secret(self, issuer: JwtTokenIssuer, clock: FixedClock) -> None:
        exp = int(clock().timestamp()) + 3600
        token = jwt.encode({"email": "eve@example.com", "purpose": "verify_email", "exp": exp}, "other", "HS256")

        with pytest.raises(InvalidToken):
            issuer.decode_verification_token(token)

    def test_missing_exp(self, issuer: JwtTokenIssuer) -> None:
        token = jwt.encode({"email": "eve@example.com", "purpose": "verify_email"}, "s3cret", "HS256")

        with pytest.raises(InvalidToken):
            issuer.decode_verification_token(token)

    def test_missing_email_claim(self, issuer: JwtTokenIssuer, clock: FixedClock) -> None:
        exp = int(clock().timestamp()) + 3600
        token = jwt.encode({"purpose": "verify_email", "exp": exp}, "s3cret", "HS256")

        with pytest.raises(InvalidToken):
            issuer.decode_verification_token(token)


def test_empty_secret_is_refused() -> None:
    with pytest.raises(ValueError):
        JwtTokenIssuer("")
