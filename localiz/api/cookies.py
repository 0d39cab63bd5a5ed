"""Session cookie helpers."""

from fastapi import Response

from localiz.config.settings import Settings
from localiz.domain.ports import IssuedToken

SESSION_COOKIE = "token"


def set_session_cookie(response: Response, session: IssuedToken, settings: Settings) -> None:
    """
    Attach the session token as an HttpOnly cookie.

    Production serves the front end from another origin, which needs
    SameSite=None (and therefore Secure).
    """
    response.set_cookie(
        key=SESSION_COOKIE,
        value=session.token,
        max_age=settings.session_ttl_seconds,
        httponly=True,
        secure=settings.is_production,
        samesite="none" if settings.is_production else "lax",
        path="/",
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=SESSION_COOKIE,
        httponly=True,
        secure=settings.is_production,
        samesite="none" if settings.is_production else "lax",
        path="/",
    )
