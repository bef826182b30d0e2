"""
Sponsor model mirroring a GitHub Sponsors relationship.
"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, DateTime, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, as_utc, utcnow

if TYPE_CHECKING:
    from .user import User


class Sponsor(Base):
    """
    Local record of a GitHub account sponsoring the configured account.

    A sponsor is active while expires_at is null or in the future. Stopping
    a sponsorship stamps expires_at instead of deleting the row, so a later
    re-sponsorship reuses the same record.
    """

    __tablename__ = "sponsors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    github_api_id: Mapped[int] = mapped_column(BigInteger, unique=True, index=True)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    users: Mapped[list["User"]] = relationship("User", back_populates="sponsor")

    @property
    def has_expired(self) -> bool:
        expires_at = as_utc(self.expires_at)
        return expires_at is not None and expires_at <= utcnow()

    @property
    def is_active(self) -> bool:
        return not self.has_expired

    def __repr__(self) -> str:
        return f"<Sponsor id={self.id} github_api_id={self.github_api_id} expires_at={self.expires_at}>"
