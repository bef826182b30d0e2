"""Authentication domain events."""

from dataclasses import dataclass

from .base import DomainEvent


@dataclass(frozen=True, kw_only=True, slots=True)
class GithubCredentialsUpdated(DomainEvent):
    """A user signed in for the first time or with a new GitHub login/token."""

    user_id: int
    github_api_login: str
