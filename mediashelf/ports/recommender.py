"""Recommender port — abstract interface for the recommendation engine."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from mediashelf.ports.catalog import WorkRecord


@dataclass(frozen=True)
class RecommendationResult:
    """Both published lists plus the version they were computed at."""

    current: list[WorkRecord]
    profile: list[WorkRecord]
    version: int


class RecommenderPort(ABC):
    """Abstraction for the work recommendation engine."""

    @abstractmethod
    async def recommend(self, user_id: int) -> RecommendationResult:
        """Return the ranked recommendation lists for a user."""
        ...
