"""
Authentication router for the GitHub OAuth flow.

Flow:
1. GET /auth/github stores a CSRF state in the session and redirects to GitHub
2. GitHub redirects back to /auth/github/callback with code and state
3. The callback validates the state, exchanges the code, upserts the user,
   signs them in with an HttpOnly JWT cookie and redirects to the page they
   originally asked for (or home)

Any failure on the way sends the visitor home as a guest.
"""

import secrets

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.orm import Session

from core.constants import (
    ACCESS_TOKEN_COOKIE,
    AUTH_PREFIX,
    CALLBACK_PATH,
    LOGIN_PATH,
    SESSION_INTENDED_URL,
    SESSION_OAUTH_STATE,
)
from core.events import EventBus, GithubCredentialsUpdated, get_event_bus
from core.logging import get_logger
from core.models.base import utcnow
from core.repositories import TokenBlacklistRepository, UserRepository

from ..auth.dependencies import get_current_user, get_optional_user, get_token_from_request
from ..auth.github_oauth import OAuthError, exchange_code_for_token, get_github_user, get_oauth_authorize_url
from ..auth.jwt import create_access_token, decode_access_token, get_token_expiry
from ..config import get_settings
from ..database import get_db
from ..models import User
from ..schemas import UserResponse

logger = get_logger("auth")

router = APIRouter(prefix=AUTH_PREFIX, tags=["auth"])


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=302)


def _safe_intended_url(value: str | None) -> str | None:
    """Only same-site relative paths may be used as post-login targets."""
    if not value or not value.startswith("/") or value.startswith("//"):
        return None
    return value


def _set_auth_cookie(response: RedirectResponse, token: str) -> None:
    settings = get_settings()
    response.set_cookie(
        key=ACCESS_TOKEN_COOKIE,
        value=token,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        max_age=settings.access_token_expire_minutes * 60,
        path="/",
    )


@router.get(LOGIN_PATH.removeprefix(AUTH_PREFIX))
def redirect_to_github(request: Request, user: User | None = Depends(get_optional_user)):
    """Redirect guests to GitHub's authorization page."""
    if user is not None:
        return _redirect(get_settings().home_url)

    state = secrets.token_urlsafe(32)
    request.session[SESSION_OAUTH_STATE] = state
    return _redirect(get_oauth_authorize_url(state))


@router.get(CALLBACK_PATH.removeprefix(AUTH_PREFIX))
def github_callback(
    request: Request,
    code: str | None = Query(None),
    state: str | None = Query(None),
    db: Session = Depends(get_db),
    event_bus: EventBus = Depends(get_event_bus),
):
    """
    Handle GitHub's redirect back.

    New users are created, returning users matched by their GitHub account
    id. GithubCredentialsUpdated is published only when the user is new or
    their GitHub login/token changed.
    """
    home_url = get_settings().home_url
    expected_state = request.session.pop(SESSION_OAUTH_STATE, None)

    if not state or not expected_state or not secrets.compare_digest(state, expected_state):
        logger.warning(
            "oauth_state_invalid",
            has_state=bool(state),
            has_expected_state=bool(expected_state),
        )
        return _redirect(home_url)

    if not code:
        logger.warning("oauth_missing_code")
        return _redirect(home_url)

    try:
        access_token = exchange_code_for_token(code)
        github_user = get_github_user(access_token)
    except OAuthError as e:
        logger.warning("oauth_exchange_failed", error=str(e))
        return _redirect(home_url)

    if not github_user.get("github_api_id") or not github_user.get("github_api_login"):
        logger.warning("oauth_missing_github_id")
        return _redirect(home_url)

    user, credentials_changed = UserRepository(db).create_or_update_from_github(
        github_api_id=int(github_user["github_api_id"]),
        github_api_login=github_user["github_api_login"],
        access_token=access_token,
        name=github_user.get("name"),
        email=github_user.get("email"),
        avatar_url=github_user.get("avatar_url"),
    )
    db.commit()

    if credentials_changed:
        event_bus.publish(
            GithubCredentialsUpdated(user_id=user.id, github_api_login=user.github_api_login)
        )

    target = _safe_intended_url(request.session.pop(SESSION_INTENDED_URL, None)) or home_url

    logger.info("oauth_login_success", user_id=user.id, login=user.github_api_login)
    response = _redirect(target)
    _set_auth_cookie(response, create_access_token(user.id))
    return response


@router.get("/me", response_model=UserResponse)
def current_user(user: User = Depends(get_current_user)) -> User:
    """Get current authenticated user."""
    return user


@router.post("/logout")
def logout(
    request: Request,
    token: str | None = Depends(get_token_from_request),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Revoke the current JWT, clear the auth cookie and the session."""
    payload = decode_access_token(token) if token else {}
    jti = payload.get("jti")

    if jti:
        expiry = get_token_expiry(token) or utcnow()
        TokenBlacklistRepository(db).blacklist_token(jti, expiry)
        db.commit()

    request.session.clear()
    logger.info("logout", user_id=user.id)

    response = JSONResponse(content={"status": "logged_out"})
    response.delete_cookie(
        key=ACCESS_TOKEN_COOKIE,
        path="/",
        secure=get_settings().is_production,
        samesite="lax",
    )
    return response
