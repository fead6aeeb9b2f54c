"""In-process catalog store with per-user locking."""

import asyncio
import logging
from collections import defaultdict
from dataclasses import replace
from itertools import count

from mediashelf.domain.models import INITIAL_RECOMMENDATION_VERSION, check_score, utcnow
from mediashelf.errors import NotFoundError
from mediashelf.ports.catalog import CatalogPort, RatingRecord, UserRecord, WorkRecord

logger = logging.getLogger(__name__)


class InMemoryCatalogStore(CatalogPort):
    """
    Catalog store kept entirely in process memory.

    Used to exercise the recommendation engine without a database.
    Rating writes and version bumps for one user are serialized by a
    per-user asyncio.Lock; different users never wait on each other.
    """

    def __init__(self) -> None:
        self._users: dict[int, UserRecord] = {}
        self._works: dict[int, WorkRecord] = {}
        self._ratings: dict[int, RatingRecord] = {}
        self._user_ids = count(1)
        self._work_ids = count(1)
        self._rating_ids = count(1)
        self._locks: defaultdict[int, asyncio.Lock] = defaultdict(asyncio.Lock)

    # ── Seeding ────────────────────────────────────

    def add_user(self, username: str) -> UserRecord:
        user = UserRecord(
            id=next(self._user_ids),
            username=username,
            recommendation_version=INITIAL_RECOMMENDATION_VERSION,
        )
        self._users[user.id] = user
        return user

    def add_work(
        self,
        title: str,
        type: str = "movie",
        genres: tuple[str, ...] = (),
        year: int | None = None,
    ) -> WorkRecord:
        work = WorkRecord(
            id=next(self._work_ids), title=title, type=type, year=year, genres=tuple(genres)
        )
        self._works[work.id] = work
        return work

    # ── Reads ──────────────────────────────────────

    async def get_user(self, user_id: int) -> UserRecord:
        try:
            return self._users[user_id]
        except KeyError:
            raise NotFoundError("User not found") from None

    async def get_user_ratings(self, user_id: int) -> list[RatingRecord]:
        await self.get_user(user_id)
        return [r for r in self._ratings.values() if r.user_id == user_id]

    async def get_work(self, work_id: int) -> WorkRecord:
        if work_id not in self._works:
            raise NotFoundError("Work not found")
        return self._with_aggregates(self._works[work_id])

    async def list_works(self) -> list[WorkRecord]:
        return [self._with_aggregates(self._works[wid]) for wid in sorted(self._works)]

    async def current_version(self, user_id: int) -> int:
        return (await self.get_user(user_id)).recommendation_version

    async def get_rating(self, rating_id: int) -> RatingRecord:
        try:
            return self._ratings[rating_id]
        except KeyError:
            raise NotFoundError("Rating not found") from None

    async def list_ratings(self, work_id: int | None = None) -> list[RatingRecord]:
        return [
            r for r in self._ratings.values() if work_id is None or r.work_id == work_id
        ]

    # ── Writes ─────────────────────────────────────

    async def upsert_rating(self, user_id: int, work_id: int, score: float) -> RatingRecord:
        score = check_score(score)
        await self.get_user(user_id)
        await self.get_work(work_id)
        async with self._locks[user_id]:
            existing = next(
                (r for r in self._ratings.values()
                 if r.user_id == user_id and r.work_id == work_id),
                None,
            )
            if existing is None:
                rating = RatingRecord(
                    id=next(self._rating_ids),
                    user_id=user_id,
                    work_id=work_id,
                    score=score,
                    rated_at=utcnow(),
                )
            else:
                rating = replace(existing, score=score, rated_at=utcnow())
            self._ratings[rating.id] = rating
            return rating

    async def update_rating(self, rating_id: int, score: float) -> RatingRecord:
        score = check_score(score)
        rating = await self.get_rating(rating_id)
        async with self._locks[rating.user_id]:
            rating = replace(await self.get_rating(rating_id), score=score, rated_at=utcnow())
            self._ratings[rating_id] = rating
            return rating

    async def delete_rating(self, rating_id: int) -> RatingRecord:
        rating = await self.get_rating(rating_id)
        async with self._locks[rating.user_id]:
            await self.get_rating(rating_id)
            return self._ratings.pop(rating_id)

    async def bump_version(self, user_id: int) -> int:
        await self.get_user(user_id)
        async with self._locks[user_id]:
            user = self._users[user_id]
            bumped = replace(user, recommendation_version=user.recommendation_version + 1)
            self._users[user_id] = bumped
        logger.debug("User %d recommendation version -> %d", user_id, bumped.recommendation_version)
        return bumped.recommendation_version

    # ── Helpers ────────────────────────────────────

    def _with_aggregates(self, work: WorkRecord) -> WorkRecord:
        scores = [r.score for r in self._ratings.values() if r.work_id == work.id]
        mean = sum(scores) / len(scores) if scores else 0.0
        return replace(work, rating=mean, rating_count=len(scores))
