"""Work catalog service: CRUD, filtered listing, popular and similar works."""

import logging
from dataclasses import dataclass

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from mediashelf.adapters.catalog.sql import works_with_aggregates
from mediashelf.api.schemas import WorkCreateRequest, WorkUpdateRequest
from mediashelf.domain.models import Rating, Work
from mediashelf.errors import NotFoundError
from mediashelf.ports.catalog import CatalogPort

logger = logging.getLogger(__name__)

POPULAR_WORKS_LIMIT = 10
SIMILAR_WORKS_LIMIT = 10

# Non-nullable columns: a null in an update request leaves them unchanged.
_REQUIRED_FIELDS = frozenset({"title", "type", "genres"})


@dataclass
class WorkView:
    """A work row together with its rating aggregates."""

    work: Work
    rating: float
    rating_count: int


class WorkService:
    """Handles catalog reads and writes."""

    def __init__(self, session: AsyncSession, store: CatalogPort) -> None:
        self._session = session
        self._store = store

    async def list_works(
        self,
        type: str | None = None,
        year: int | None = None,
        genres: list[str] | None = None,
    ) -> list[WorkView]:
        """List works, optionally filtered by type, minimum year and any-of genres."""
        stmt = works_with_aggregates().order_by(Work.id)
        if type:
            stmt = stmt.where(Work.type == type)
        if year is not None:
            stmt = stmt.where(Work.year >= year)
        views = await self._fetch(stmt)
        if genres:
            wanted = set(genres)
            views = [v for v in views if wanted.intersection(v.work.genres or ())]
        return views

    async def get_work(self, work_id: int) -> WorkView:
        views = await self._fetch(works_with_aggregates().where(Work.id == work_id))
        if not views:
            raise NotFoundError("Work not found")
        return views[0]

    async def create_work(self, data: WorkCreateRequest) -> WorkView:
        work = Work(**data.model_dump())
        self._session.add(work)
        await self._session.flush()
        logger.info("Created work %d (%s)", work.id, work.title)
        return WorkView(work=work, rating=0.0, rating_count=0)

    async def update_work(self, work_id: int, data: WorkUpdateRequest) -> WorkView:
        view = await self.get_work(work_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            if value is None and field in _REQUIRED_FIELDS:
                continue
            setattr(view.work, field, value)
        await self._session.flush()
        return view

    async def delete_work(self, work_id: int) -> None:
        """
        Delete a work and its ratings.

        Every user who had rated the work loses a rating, so each of them
        gets a recommendation version bump.
        """
        view = await self.get_work(work_id)
        result = await self._session.execute(
            select(Rating.user_id)
            .where(Rating.work_id == work_id)
            .distinct()
            .order_by(Rating.user_id)
        )
        for user_id in result.scalars().all():
            await self._store.bump_version(user_id)
        await self._session.execute(delete(Rating).where(Rating.work_id == work_id))
        await self._session.delete(view.work)
        await self._session.flush()
        logger.info("Deleted work %d", work_id)

    async def popular_works(self) -> list[WorkView]:
        """Top works by mean rating, then by number of ratings."""
        views = await self._fetch(works_with_aggregates().order_by(Work.id))
        views.sort(key=lambda v: (v.rating, v.rating_count), reverse=True)
        return views[:POPULAR_WORKS_LIMIT]

    async def similar_works(self, work_id: int) -> list[WorkView]:
        """Works sharing the type or at least one genre with the given work."""
        source = (await self.get_work(work_id)).work
        source_genres = set(source.genres or ())
        views = await self._fetch(
            works_with_aggregates().where(Work.id != work_id).order_by(Work.id)
        )
        similar = [
            v for v in views
            if v.work.type == source.type or source_genres.intersection(v.work.genres or ())
        ]
        return similar[:SIMILAR_WORKS_LIMIT]

    async def _fetch(self, stmt) -> list[WorkView]:
        result = await self._session.execute(stmt)
        return [
            WorkView(work=row.Work, rating=float(row.rating or 0.0), rating_count=row.rating_count)
            for row in result
        ]
