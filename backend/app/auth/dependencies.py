"""
Authentication dependencies for FastAPI routes.

Supports both:
- Bearer token in Authorization header (for API clients)
- HttpOnly cookie set by the OAuth callback (for browsers)

API routes use get_current_user (401 for guests). Page routes use
require_browser_user, which sends guests to GitHub and remembers where
they were headed.
"""

from fastapi import Cookie, Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from core.constants import ACCESS_TOKEN_COOKIE, SESSION_INTENDED_URL
from core.repositories import TokenBlacklistRepository, UserRepository

from ..database import get_db
from ..models import User
from .jwt import decode_access_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/github", auto_error=False)


class LoginRequired(Exception):
    """Raised by page routes when a guest must sign in first."""

    pass


def _resolve_user(db: Session, token: str | None) -> User | None:
    """Return the user behind a valid, non-revoked token, else None."""
    if not token:
        return None

    try:
        payload = decode_access_token(token)
    except ValueError:
        return None

    jti = payload.get("jti")
    if jti and TokenBlacklistRepository(db).is_blacklisted(jti):
        return None

    user_id = payload.get("sub")
    if not user_id:
        return None

    return UserRepository(db).get_by_id(int(user_id))


def get_token_from_request(
    token_header: str | None = Depends(oauth2_scheme),
    access_token_cookie: str | None = Cookie(None, alias=ACCESS_TOKEN_COOKIE),
) -> str | None:
    """Authorization header first, then the HttpOnly cookie."""
    return token_header or access_token_cookie


def get_current_user(
    token: str | None = Depends(get_token_from_request),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the authenticated user or raise 401."""
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = _resolve_user(db, token)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def get_optional_user(
    token: str | None = Depends(get_token_from_request),
    db: Session = Depends(get_db),
) -> User | None:
    """Get the current user if authenticated, otherwise return None."""
    return _resolve_user(db, token)


def require_browser_user(
    request: Request,
    user: User | None = Depends(get_optional_user),
) -> User:
    """
    Page-route guard.

    Guests get the requested path stored as the intended URL and are sent
    to the GitHub login; the OAuth callback redirects back to it.
    """
    if user is not None:
        return user

    target = request.url.path
    if request.url.query:
        target = f"{target}?{request.url.query}"
    request.session[SESSION_INTENDED_URL] = target
    raise LoginRequired()
