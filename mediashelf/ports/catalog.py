"""Catalog port — the store the recommendation engine reads from and rating writes go to."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class UserRecord:
    id: int
    username: str
    recommendation_version: int


@dataclass(frozen=True)
class WorkRecord:
    """A catalog work together with its rating aggregates."""

    id: int
    title: str
    type: str
    year: int | None = None
    genres: tuple[str, ...] = field(default_factory=tuple)
    rating: float = 0.0
    rating_count: int = 0


@dataclass(frozen=True)
class RatingRecord:
    id: int
    user_id: int
    work_id: int
    score: float
    rated_at: datetime


class CatalogPort(ABC):
    """
    Abstraction over users, works and ratings.

    Lookups of a missing user, work or rating raise NotFoundError.
    Store failures propagate unchanged; callers add no retries.
    """

    @abstractmethod
    async def get_user(self, user_id: int) -> UserRecord:
        ...

    @abstractmethod
    async def get_user_ratings(self, user_id: int) -> list[RatingRecord]:
        ...

    @abstractmethod
    async def get_work(self, work_id: int) -> WorkRecord:
        ...

    @abstractmethod
    async def list_works(self) -> list[WorkRecord]:
        """Return the whole catalog ordered by work id."""
        ...

    @abstractmethod
    async def upsert_rating(self, user_id: int, work_id: int, score: float) -> RatingRecord:
        """Create the (user, work) rating or overwrite its score and rated_at."""
        ...

    @abstractmethod
    async def bump_version(self, user_id: int) -> int:
        """Atomically increment the user's recommendation version and return it."""
        ...

    @abstractmethod
    async def current_version(self, user_id: int) -> int:
        ...

    @abstractmethod
    async def get_rating(self, rating_id: int) -> RatingRecord:
        ...

    @abstractmethod
    async def list_ratings(self, work_id: int | None = None) -> list[RatingRecord]:
        ...

    @abstractmethod
    async def update_rating(self, rating_id: int, score: float) -> RatingRecord:
        ...

    @abstractmethod
    async def delete_rating(self, rating_id: int) -> RatingRecord:
        """Remove a rating and return what was deleted."""
        ...
