"""Candidate selection, ranking strategies and the shared top-N routine."""

import heapq
from abc import ABC, abstractmethod
from collections.abc import Collection, Iterable, Iterator

from mediashelf.adapters.recommender.taste import TasteProfile
from mediashelf.ports.catalog import WorkRecord

RECOMMENDATION_LIMIT = 5


def select_candidates(
    works: Iterable[WorkRecord], rated_work_ids: Collection[int]
) -> Iterator[WorkRecord]:
    """Lazily yield the works the user has not rated yet."""
    return (work for work in works if work.id not in rated_work_ids)


class RankingStrategy(ABC):
    """Scores a work; larger keys rank first."""

    name: str

    @abstractmethod
    def key(self, work: WorkRecord) -> tuple[float, ...]:
        ...


class PopularityStrategy(RankingStrategy):
    """Number of ratings received, then mean rating."""

    name = "popularity"

    def key(self, work: WorkRecord) -> tuple[float, ...]:
        return (work.rating_count, work.rating)


class ProfileStrategy(RankingStrategy):
    """Facet affinity with the user's taste profile, then popularity."""

    name = "profile"

    def __init__(self, profile: TasteProfile) -> None:
        self._profile = profile
        self._popularity = PopularityStrategy()

    def key(self, work: WorkRecord) -> tuple[float, ...]:
        return (self._profile.affinity(work), *self._popularity.key(work))


def rank(
    candidates: Iterable[WorkRecord],
    strategy: RankingStrategy,
    limit: int = RECOMMENDATION_LIMIT,
) -> list[WorkRecord]:
    """
    Return up to `limit` candidates ordered by descending strategy key.

    Equal keys fall back to ascending work id, so the order is total and
    the result is deterministic for a fixed catalog and rating set.
    """

    def sort_key(work: WorkRecord) -> tuple[tuple[float, ...], int]:
        return tuple(-part for part in strategy.key(work)), work.id

    return heapq.nsmallest(limit, candidates, key=sort_key)
