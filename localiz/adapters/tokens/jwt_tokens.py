"""
JWT token adapter - Implements TokenIssuer protocol with PyJWT.

Two kinds of HS256 tokens are signed with the same secret and told
apart by a ``purpose`` claim:

- verification tokens embed the registrant's email
- session tokens carry the user id as ``sub``

Expiry is checked here against the injected clock rather than by
PyJWT, so that a token presented at exactly its expiry instant is
rejected (``now >= exp``).
"""

import logging
from collections.abc import Callable
from datetime import datetime, timezone

import jwt

from localiz.domain.exceptions import InvalidToken, TokenExpired
from localiz.domain.ports import IssuedToken

logger = logging.getLogger(__name__)

VERIFY_EMAIL = "verify_email"
SESSION = "session"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JwtTokenIssuer:
    """
    Implements TokenIssuer protocol via PyJWT.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        verification_ttl_seconds: int = 3600,
        session_ttl_seconds: int = 7 * 24 * 3600,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if not secret:
            raise ValueError("A signing secret is required")
        self._secret = secret
        self._algorithm = algorithm
        self._verification_ttl = verification_ttl_seconds
        self._session_ttl = session_ttl_seconds
        self._clock = clock

    def issue_verification_token(self, email: str) -> IssuedToken:
        return self._issue({"email": email}, VERIFY_EMAIL, self._verification_ttl)

    def decode_verification_token(self, token: str) -> str:
        payload = self._decode(token, VERIFY_EMAIL)
        email = payload.get("email")
        if not isinstance(email, str) or not email:
            raise InvalidToken()
        return email

    def issue_session_token(self, user_id: str) -> IssuedToken:
        return self._issue({"sub": str(user_id)}, SESSION, self._session_ttl)

    def decode_session_token(self, token: str) -> str:
        payload = self._decode(token, SESSION)
        user_id = payload.get("sub")
        if not isinstance(user_id, str) or not user_id:
            raise InvalidToken()
        return user_id

    def _issue(self, claims: dict, purpose: str, ttl_seconds: int) -> IssuedToken:
        exp = int(self._clock().timestamp()) + ttl_seconds
        payload = {**claims, "purpose": purpose, "exp": exp}
        raw = jwt.encode(payload, self._secret, algorithm=self._algorithm)
        token = raw if isinstance(raw, str) else raw.decode("utf-8")
        return IssuedToken(token=token, expires_at=datetime.fromtimestamp(exp, tz=timezone.utc))

    def _decode(self, token: str, purpose: str) -> dict:
        try:
            payload = jwt.decode(
                token.strip(),
                self._secret,
                algorithms=[self._algorithm],
                options={"verify_exp": False, "require": ["exp"]},
            )
        except jwt.PyJWTError as e:
            logger.debug("Rejected token: %s", e)
            raise InvalidToken() from None

        if payload.get("purpose") != purpose:
            raise InvalidToken()
        exp = payload.get("exp")
        if not isinstance(exp, (int, float)):
            raise InvalidToken()
        if self._clock().timestamp() >= exp:
            raise TokenExpired()
        return payload
