"""
Utility functions for GitHub OAuth flow.
"""

from typing import Any, Dict

import httpx

from core.constants import GITHUB_ACCESS_TOKEN_URL, GITHUB_API_BASE, GITHUB_AUTHORIZE_URL, USER_AGENT

from ..config import get_settings


class OAuthError(Exception):
    """Raised when GitHub refuses or fails the authorization code exchange."""

    pass


def get_oauth_authorize_url(state: str) -> str:
    """Build GitHub OAuth authorize URL with client settings, scopes and state."""
    settings = get_settings()
    params = {
        "client_id": settings.github_client_id,
        "redirect_uri": str(settings.github_redirect_uri) if settings.github_redirect_uri else "",
        "scope": " ".join(settings.github_scopes),
        "state": state,
    }
    return str(httpx.URL(GITHUB_AUTHORIZE_URL, params={k: v for k, v in params.items() if v}))


def exchange_code_for_token(code: str) -> str:
    """
    Exchange GitHub OAuth code for an access token.

    Raises:
        OAuthError when the request fails or GitHub returns no token
        (expired or already used code, wrong client secret).
    """
    settings = get_settings()
    payload = {
        "client_id": settings.github_client_id,
        "client_secret": settings.github_client_secret,
        "code": code,
    }
    if settings.github_redirect_uri:
        payload["redirect_uri"] = str(settings.github_redirect_uri)

    headers = {"Accept": "application/json", "User-Agent": USER_AGENT}
    try:
        response = httpx.post(GITHUB_ACCESS_TOKEN_URL, json=payload, headers=headers, timeout=30)
        response.raise_for_status()
    except httpx.HTTPError as exc:
        raise OAuthError(f"GitHub OAuth token exchange failed: {exc}") from exc

    data = response.json()
    access_token = data.get("access_token")
    if not access_token:
        raise OAuthError(data.get("error_description") or "GitHub OAuth token exchange failed")
    return access_token


def get_github_user(access_token: str) -> Dict[str, Any]:
    """Fetch the GitHub profile belonging to the OAuth token."""
    headers = {
        "Authorization": f"Bearer {access_token}",
        "Accept": "application/vnd.github+json",
        "User-Agent": USER_AGENT,
    }
    try:
        with httpx.Client(timeout=30) as client:
            user_resp = client.get(f"{GITHUB_API_BASE}/user", headers=headers)
            user_resp.raise_for_status()
            user_data = user_resp.json()
    except httpx.HTTPError as exc:
        raise OAuthError(f"Fetching the GitHub profile failed: {exc}") from exc

    return {
        "github_api_id": user_data.get("id"),
        "github_api_login": user_data.get("login"),
        "name": user_data.get("name"),
        "email": user_data.get("email"),
        "avatar_url": user_data.get("avatar_url"),
    }
