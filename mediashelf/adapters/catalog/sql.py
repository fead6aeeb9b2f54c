"""SQLAlchemy catalog store (PostgreSQL via asyncpg, SQLite via aiosqlite)."""

import logging

from sqlalchemy import func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from mediashelf.domain.models import Rating, User, Work, check_score, utcnow
from mediashelf.errors import NotFoundError
from mediashelf.ports.catalog import CatalogPort, RatingRecord, UserRecord, WorkRecord

logger = logging.getLogger(__name__)

_INSERTS = {"postgresql": pg_insert, "sqlite": sqlite_insert}


def to_work_record(work: Work, rating: float | None = 0.0, rating_count: int = 0) -> WorkRecord:
    return WorkRecord(
        id=work.id,
        title=work.title,
        type=work.type.value,
        year=work.year,
        genres=tuple(work.genres or ()),
        rating=float(rating or 0.0),
        rating_count=int(rating_count or 0),
    )


def to_rating_record(rating: Rating) -> RatingRecord:
    return RatingRecord(
        id=rating.id,
        user_id=rating.user_id,
        work_id=rating.work_id,
        score=rating.score,
        rated_at=rating.rated_at,
    )


def works_with_aggregates():
    """SELECT Work, mean score (0 when unrated), rating count — one row per work."""
    return (
        select(
            Work,
            func.coalesce(func.avg(Rating.score), 0.0).label("rating"),
            func.count(Rating.id).label("rating_count"),
        )
        .outerjoin(Rating, Rating.work_id == Work.id)
        .group_by(Work.id)
    )


class SqlCatalogStore(CatalogPort):
    """
    Catalog store on top of the request's AsyncSession.

    Writes are flushed, never committed: the request's session dependency
    commits the rating write and its version bump together.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_user(self, user_id: int) -> UserRecord:
        user = await self._session.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return UserRecord(
            id=user.id,
            username=user.username,
            recommendation_version=user.recommendation_version,
        )

    async def get_user_ratings(self, user_id: int) -> list[RatingRecord]:
        result = await self._session.execute(
            select(Rating).where(Rating.user_id == user_id).order_by(Rating.work_id)
        )
        return [to_rating_record(r) for r in result.scalars().all()]

    async def get_work(self, work_id: int) -> WorkRecord:
        result = await self._session.execute(
            works_with_aggregates().where(Work.id == work_id)
        )
        row = result.one_or_none()
        if row is None:
            raise NotFoundError("Work not found")
        return to_work_record(row.Work, row.rating, row.rating_count)

    async def list_works(self) -> list[WorkRecord]:
        result = await self._session.execute(works_with_aggregates().order_by(Work.id))
        return [to_work_record(row.Work, row.rating, row.rating_count) for row in result]

    async def upsert_rating(self, user_id: int, work_id: int, score: float) -> RatingRecord:
        score = check_score(score)
        await self.get_user(user_id)
        if await self._session.get(Work, work_id) is None:
            raise NotFoundError("Work not found")

        now = utcnow()
        dialect = self._session.bind.dialect.name
        stmt = _INSERTS[dialect](Rating).values(
            user_id=user_id, work_id=work_id, score=score, rated_at=now
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[Rating.user_id, Rating.work_id],
            set_={"score": score, "rated_at": now},
        )
        await self._session.execute(stmt)

        result = await self._session.execute(
            select(Rating)
            .where(Rating.user_id == user_id, Rating.work_id == work_id)
            .execution_options(populate_existing=True)
        )
        return to_rating_record(result.scalar_one())

    async def bump_version(self, user_id: int) -> int:
        result = await self._session.execute(
            update(User)
            .where(User.id == user_id)
            .values(recommendation_version=User.recommendation_version + 1)
            .returning(User.recommendation_version)
            .execution_options(synchronize_session="fetch")
        )
        version = result.scalar_one_or_none()
        if version is None:
            raise NotFoundError("User not found")
        return version

    async def current_version(self, user_id: int) -> int:
        result = await self._session.execute(
            select(User.recommendation_version).where(User.id == user_id)
        )
        version = result.scalar_one_or_none()
        if version is None:
            raise NotFoundError("User not found")
        return version

    async def get_rating(self, rating_id: int) -> RatingRecord:
        return to_rating_record(await self._load_rating(rating_id))

    async def list_ratings(self, work_id: int | None = None) -> list[RatingRecord]:
        stmt = select(Rating).order_by(Rating.id)
        if work_id is not None:
            stmt = stmt.where(Rating.work_id == work_id)
        result = await self._session.execute(stmt)
        return [to_rating_record(r) for r in result.scalars().all()]

    async def update_rating(self, rating_id: int, score: float) -> RatingRecord:
        score = check_score(score)
        rating = await self._load_rating(rating_id)
        rating.score = score
        rating.rated_at = utcnow()
        await self._session.flush()
        return to_rating_record(rating)

    async def delete_rating(self, rating_id: int) -> RatingRecord:
        rating = await self._load_rating(rating_id)
        record = to_rating_record(rating)
        await self._session.delete(rating)
        await self._session.flush()
        return record

    async def _load_rating(self, rating_id: int) -> Rating:
        rating = await self._session.get(Rating, rating_id)
        if rating is None:
            raise NotFoundError("Rating not found")
        return rating
