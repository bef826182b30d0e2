"""
SQLAlchemy models for the Sponsors Portal.

Usage:
    from core.models import User, Sponsor
"""

from .base import Base
from .sponsor import Sponsor
from .user import TokenBlacklist, User

__all__ = [
    "Base",
    "User",
    "TokenBlacklist",
    "Sponsor",
]
