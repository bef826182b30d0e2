"""GitHub API client for sponsorship lookups."""

import requests  # type: ignore[import-untyped]

from core.config import get_settings
from core.constants import GITHUB_GRAPHQL_ENDPOINT, USER_AGENT
from core.logging import get_logger

logger = get_logger("github")

# Sponsorable is implemented by both User and Organization, so the sponsored
# account may be either.
IS_SPONSORED_BY_QUERY = """
query($sponsorable: String!, $sponsor: String!) {
    repositoryOwner(login: $sponsorable) {
        ... on Sponsorable {
            isSponsoredBy(accountLogin: $sponsor)
        }
    }
}
"""


class GitHubAPIError(Exception):
    """Raised when GitHub could not answer a request (network, 5xx, rate limits)."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class BadCredentialsError(GitHubAPIError):
    """Raised when GitHub rejects the access token (revoked or expired)."""


def _get_headers(access_token: str) -> dict[str, str]:
    return {
        "Accept": "application/json",
        "Authorization": f"bearer {access_token}",
        "User-Agent": USER_AGENT,
    }


def _graphql(access_token: str, query: str, variables: dict) -> dict:
    """
    Run a GraphQL query with the given token.

    Raises:
        BadCredentialsError: token rejected
        GitHubAPIError: any other failure
    """
    settings = get_settings()

    try:
        response = requests.post(
            GITHUB_GRAPHQL_ENDPOINT,
            headers=_get_headers(access_token),
            json={"query": query, "variables": variables},
            timeout=settings.github_api_timeout,
        )
    except requests.RequestException as e:
        logger.error("graphql_exception", error=str(e))
        raise GitHubAPIError(f"GitHub request failed: {e}") from e

    if response.status_code == 401:
        logger.warning("api_auth_failed")
        raise BadCredentialsError("Bad credentials", status_code=401)
    if response.status_code != 200:
        logger.error("api_error", status=response.status_code)
        raise GitHubAPIError(
            f"GitHub GraphQL request failed with status {response.status_code}",
            status_code=response.status_code,
        )

    data = response.json()
    errors = data.get("errors") or []
    if errors:
        messages = [error.get("message", "Unknown") for error in errors]
        logger.warning("graphql_error", errors=messages)
        if any("bad credentials" in message.lower() for message in messages):
            raise BadCredentialsError("Bad credentials", status_code=401)
        raise GitHubAPIError("; ".join(messages))

    return data.get("data") or {}


def is_sponsoring(access_token: str, sponsor_login: str, sponsorable_login: str | None = None) -> bool:
    """
    Check whether sponsor_login currently sponsors the sponsorable account.

    Args:
        access_token: OAuth token of the (potential) sponsor
        sponsor_login: GitHub login of the (potential) sponsor
        sponsorable_login: Sponsored account, defaults to GITHUB_SPONSORABLE_LOGIN

    Raises:
        BadCredentialsError: when the token is no longer valid
        GitHubAPIError: on other API failures
    """
    sponsorable = sponsorable_login or get_settings().github_sponsorable_login
    if not sponsorable:
        raise GitHubAPIError("GITHUB_SPONSORABLE_LOGIN is not configured")

    data = _graphql(
        access_token,
        IS_SPONSORED_BY_QUERY,
        {"sponsorable": sponsorable, "sponsor": sponsor_login},
    )

    owner = data.get("repositoryOwner")
    if owner is None:
        logger.error("sponsorable_not_found", sponsorable=sponsorable)
        raise GitHubAPIError(f"Sponsorable account '{sponsorable}' not found")

    sponsoring = bool(owner.get("isSponsoredBy"))
    logger.debug("sponsorship_checked", sponsor=sponsor_login, sponsoring=sponsoring)
    return sponsoring
