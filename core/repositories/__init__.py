"""
Repository pattern implementations for data access.

Usage:
    from core.repositories import SponsorRepository
    from core.db import db

    with db.session() as session:
        sponsor, exists = SponsorRepository(session).first_or_new(github_api_id)
"""

from .base import BaseRepository
from .sponsor_repository import SponsorRepository
from .user_repository import TokenBlacklistRepository, UserRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "TokenBlacklistRepository",
    "SponsorRepository",
]
