"""
SQLAlchemy ORM models for the web app.

Re-exports the models from core.models:
    from core.models import User, Sponsor
"""

from core.models import Base, Sponsor, TokenBlacklist, User

__all__ = [
    "Base",
    "User",
    "Sponsor",
    "TokenBlacklist",
]
