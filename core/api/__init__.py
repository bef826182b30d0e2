# GitHub API integration module

from .github_api import BadCredentialsError, GitHubAPIError, is_sponsoring

__all__ = [
    "BadCredentialsError",
    "GitHubAPIError",
    "is_sponsoring",
]
