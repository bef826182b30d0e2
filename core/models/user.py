"""
User-related SQLAlchemy models.
"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, utcnow

if TYPE_CHECKING:
    from .sponsor import Sponsor


class User(Base):
    """
    User model representing accounts authenticated through GitHub.

    Attributes:
        github_api_id: Unique numeric GitHub account ID
        github_api_login: GitHub login (can change on GitHub's side)
        github_api_access_token: OAuth access token, encrypted when a key is configured
        sponsor_id: Linked Sponsor record, set once the user sponsored
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    github_api_id: Mapped[int] = mapped_column(BigInteger, unique=True, index=True)
    github_api_login: Mapped[str] = mapped_column(String(255), index=True)
    github_api_access_token: Mapped[str | None] = mapped_column(String(512), nullable=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    sponsor_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("sponsors.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    sponsor: Mapped["Sponsor | None"] = relationship("Sponsor", back_populates="users")

    @property
    def is_sponsor(self) -> bool:
        return self.sponsor is not None and self.sponsor.is_active


class TokenBlacklist(Base):
    """
    Store invalidated JWT tokens until they expire.

    Used for logout functionality to invalidate tokens before expiry.
    """

    __tablename__ = "token_blacklist"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    token_jti: Mapped[str] = mapped_column(String(256), unique=True, index=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
