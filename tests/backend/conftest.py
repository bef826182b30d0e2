from collections.abc import Callable, Iterator
from urllib.parse import parse_qs, urlparse

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from backend.app.auth.jwt import create_access_token
from backend.app.main import create_app
from backend.app.routers import auth as auth_router
from core.events import get_event_bus


@pytest.fixture
def test_app_client(test_db, event_bus) -> Iterator[tuple[TestClient, sessionmaker]]:
    _, TestingSessionLocal, _ = test_db

    app = create_app()
    app.dependency_overrides[get_event_bus] = lambda: event_bus

    with TestClient(app) as client:
        yield client, TestingSessionLocal


@pytest.fixture
def github_user(github_identity) -> dict:
    """Profile returned by the mocked GitHub OAuth exchange; tests may mutate it."""
    return {
        "access_token": github_identity["token"],
        "github_api_id": github_identity["id"],
        "github_api_login": github_identity["login"],
        "name": "Claudio Dekker",
        "email": "claudio@example.com",
        "avatar_url": "https://avatars.githubusercontent.com/u/1752195",
    }


@pytest.fixture
def mock_github_oauth(monkeypatch, github_user) -> list[str]:
    """Replace the GitHub code exchange and profile fetch; returns the exchanged codes."""
    exchanged_codes: list[str] = []

    def fake_exchange(code):
        exchanged_codes.append(code)
        return github_user["access_token"]

    def fake_get_user(token):  # noqa: ARG001
        return {key: value for key, value in github_user.items() if key != "access_token"}

    monkeypatch.setattr(auth_router, "exchange_code_for_token", fake_exchange)
    monkeypatch.setattr(auth_router, "get_github_user", fake_get_user)
    return exchanged_codes


@pytest.fixture
def start_github_login() -> Callable[[TestClient], str]:
    """Visit the login route and return the state GitHub would echo back."""

    def _start(client: TestClient) -> str:
        resp = client.get("/auth/github", follow_redirects=False)
        assert resp.status_code == 302
        query = parse_qs(urlparse(resp.headers["location"]).query)
        return query["state"][0]

    return _start


@pytest.fixture
def login_via_github(mock_github_oauth, start_github_login):
    """Run the whole OAuth round trip and return the callback response."""

    def _login(client: TestClient, code: str = "github-code"):
        state = start_github_login(client)
        return client.get(
            "/auth/github/callback",
            params={"code": code, "state": state},
            follow_redirects=False,
        )

    return _login


@pytest.fixture
def auth_headers() -> Callable[[int], dict]:
    def _headers(user_id: int) -> dict:
        token = create_access_token(user_id)
        return {"Authorization": f"Bearer {token}"}

    return _headers
