"""Sponsorship domain events."""

from dataclasses import dataclass

from .base import DomainEvent


@dataclass(frozen=True, kw_only=True, slots=True)
class UserStartedSponsoring(DomainEvent):
    """A user became (or became again) an active sponsor."""

    user_id: int
    sponsor_id: int


@dataclass(frozen=True, kw_only=True, slots=True)
class UserStoppedSponsoring(DomainEvent):
    """An active sponsor is no longer sponsoring on GitHub."""

    user_id: int
    sponsor_id: int
