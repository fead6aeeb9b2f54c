"""Rating submission and administration; every change bumps the owner's recommendation version."""

import logging

from mediashelf.ports.catalog import CatalogPort, RatingRecord

logger = logging.getLogger(__name__)


class RatingService:
    """Handles rating writes and reads through the catalog port."""

    def __init__(self, store: CatalogPort) -> None:
        self._store = store

    async def submit_rating(self, user_id: int, work_id: int, score: float) -> RatingRecord:
        """
        Create or update the user's rating of a work.

        The user is resolved first, so an unknown user is reported as
        NotFoundError before anything is written. The version bump only
        happens once the rating write has gone through.
        """
        await self._store.get_user(user_id)
        rating = await self._store.upsert_rating(user_id, work_id, score)
        version = await self._store.bump_version(user_id)
        logger.info(
            "User %d rated work %d with %.1f (recommendation version %d)",
            user_id, work_id, rating.score, version,
        )
        return rating

    async def get_user_ratings(self, user_id: int) -> dict[int, RatingRecord]:
        """Return work_id -> rating for a user. An existing user with no ratings gets {}."""
        await self._store.get_user(user_id)
        ratings = await self._store.get_user_ratings(user_id)
        return {rating.work_id: rating for rating in ratings}

    async def get_work_ratings(self, work_id: int) -> list[RatingRecord]:
        await self._store.get_work(work_id)
        return await self._store.list_ratings(work_id=work_id)

    async def get_work_average(self, work_id: int) -> tuple[float, int]:
        """Mean score and number of ratings for a work; (0.0, 0) when unrated."""
        ratings = await self.get_work_ratings(work_id)
        if not ratings:
            return 0.0, 0
        return sum(r.score for r in ratings) / len(ratings), len(ratings)

    async def list_ratings(self) -> list[RatingRecord]:
        return await self._store.list_ratings()

    async def get_rating(self, rating_id: int) -> RatingRecord:
        return await self._store.get_rating(rating_id)

    async def update_rating(self, rating_id: int, score: float) -> RatingRecord:
        rating = await self._store.update_rating(rating_id, score)
        version = await self._store.bump_version(rating.user_id)
        logger.info("Rating %d updated to %.1f (user %d version %d)",
                    rating_id, rating.score, rating.user_id, version)
        return rating

    async def delete_rating(self, rating_id: int) -> None:
        rating = await self._store.delete_rating(rating_id)
        version = await self._store.bump_version(rating.user_id)
        logger.info("Rating %d deleted (user %d version %d)", rating_id, rating.user_id, version)
