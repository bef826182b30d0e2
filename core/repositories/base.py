"""Base repository class with common CRUD operations."""

from typing import Generic, TypeVar

from sqlalchemy import func
from sqlalchemy.orm import Session

from core.db import Base

T = TypeVar("T", bound=Base)


class BaseRepository(Generic[T]):
    """
    Base repository providing common CRUD operations.

    Usage:
        class UserRepository(BaseRepository[User]):
            model = User

        repo = UserRepository(session)
        user = repo.get_by_id(1)
    """

    model: type[T]

    def __init__(self, session: Session):
        self.session = session

    def get_by_id(self, id: int) -> T | None:
        """Get a single record by ID."""
        return self.session.get(self.model, id)

    def save(self, instance: T) -> T:
        """Persist a new or modified instance and assign its primary key."""
        self.session.add(instance)
        self.session.flush()
        return instance

    def _filtered(self, query, filters: dict):
        for key, value in filters.items():
            if not hasattr(self.model, key):
                raise ValueError(f"Unknown filter key for {self.model.__name__}: {key}")
            query = query.filter(getattr(self.model, key) == value)
        return query

    def count(self, **filters) -> int:
        """Get count of records, optionally filtered."""
        query = self.session.query(func.count(self.model.id))  # type: ignore[attr-defined]
        return self._filtered(query, filters).scalar() or 0

    def exists_where(self, **filters) -> bool:
        """Check if any record exists matching filters."""
        query = self._filtered(self.session.query(self.model), filters)
        result = self.session.query(query.exists()).scalar()
        return bool(result) if result is not None else False
