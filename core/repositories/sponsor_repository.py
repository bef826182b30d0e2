"""Sponsor repository."""

from sqlalchemy import or_

from core.models import Sponsor
from core.models.base import utcnow

from .base import BaseRepository


class SponsorRepository(BaseRepository[Sponsor]):
    """Repository for Sponsor records."""

    model = Sponsor

    def get_by_github_api_id(self, github_api_id: int) -> Sponsor | None:
        return self.session.query(Sponsor).filter(Sponsor.github_api_id == github_api_id).first()

    def first_or_new(self, github_api_id: int) -> tuple[Sponsor, bool]:
        """
        Look up a sponsor by GitHub account ID or build an unsaved one.

        Returns:
            Tuple of (sponsor, exists). A new sponsor is not added to the
            session until save() is called.
        """
        sponsor = self.get_by_github_api_id(github_api_id)
        if sponsor is not None:
            return sponsor, True
        return Sponsor(github_api_id=github_api_id), False

    def list_active(self) -> list[Sponsor]:
        """Sponsors with no expiry or an expiry in the future."""
        return (
            self.session.query(Sponsor)
            .filter(or_(Sponsor.expires_at.is_(None), Sponsor.expires_at > utcnow()))
            .order_by(Sponsor.id)
            .all()
        )
