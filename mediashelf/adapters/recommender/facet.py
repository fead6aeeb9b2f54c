"""Facet-based recommender: popularity list plus taste-profile list, tagged with a version."""

import logging

from mediashelf.adapters.recommender.ranking import (
    PopularityStrategy,
    ProfileStrategy,
    RankingStrategy,
    rank,
    select_candidates,
)
from mediashelf.adapters.recommender.taste import build_taste_profile
from mediashelf.ports.catalog import CatalogPort
from mediashelf.ports.recommender import RecommendationResult, RecommenderPort

logger = logging.getLogger(__name__)


class FacetRecommenderAdapter(RecommenderPort):
    """
    Builds the two published recommendation lists for a user.

    - current: popularity ranking of the works the user has not rated.
    - profile: the same candidates ranked by taste-profile affinity, or by
      popularity when the user has no ratings yet.

    Reading recommendations never writes to the store.
    """

    def __init__(self, store: CatalogPort) -> None:
        self._store = store

    async def recommend(self, user_id: int) -> RecommendationResult:
        user = await self._store.get_user(user_id)
        ratings = await self._store.get_user_ratings(user.id)
        works = await self._store.list_works()

        profile = build_taste_profile(ratings, {work.id: work for work in works})
        rated_ids = {rating.work_id for rating in ratings}
        candidates = list(select_candidates(works, rated_ids))

        popularity = PopularityStrategy()
        personal: RankingStrategy = ProfileStrategy(profile) if profile else popularity

        current = rank(candidates, popularity)
        personalized = rank(candidates, personal)
        version = await self._store.current_version(user.id)

        logger.debug(
            "Recommendations for user %d: %d candidates, profile strategy=%s, version=%d",
            user.id,
            len(candidates),
            personal.name,
            version,
        )
        return RecommendationResult(current=current, profile=personalized, version=version)
