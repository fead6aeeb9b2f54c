"""Taste profile construction: a user's ratings folded into facet weights."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from mediashelf.ports.catalog import RatingRecord, WorkRecord

# Midpoint of the 1-5 scale; scores above it promote a work's facets, below suppress them.
RATING_MIDPOINT = 3.0


def work_facets(work: WorkRecord) -> list[str]:
    """Facets of a work: each distinct genre plus its type, namespaced by kind."""
    facets = [f"genre:{genre}" for genre in dict.fromkeys(work.genres)]
    facets.append(f"type:{work.type}")
    return facets


@dataclass
class TasteProfile:
    """
    Facet -> accumulated weight for one user.

    An empty profile means the user has no usable ratings (cold start).
    Weights are only compared against each other, so they are not normalized.
    """

    weights: dict[str, float] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return bool(self.weights)

    def weight(self, facet: str) -> float:
        return self.weights.get(facet, 0.0)

    def affinity(self, work: WorkRecord) -> float:
        """Sum of the weights of the work's facets; unknown facets count as 0."""
        return sum(self.weight(facet) for facet in work_facets(work))


def build_taste_profile(
    ratings: Iterable[RatingRecord],
    works_by_id: Mapping[int, WorkRecord],
) -> TasteProfile:
    """Fold ratings into a TasteProfile. Ratings of works missing from the catalog are skipped."""
    weights: dict[str, float] = {}
    for rating in ratings:
        work = works_by_id.get(rating.work_id)
        if work is None:
            continue
        deviation = rating.score - RATING_MIDPOINT
        for facet in work_facets(work):
            weights[facet] = weights.get(facet, 0.0) + deviation
    return TasteProfile(weights=weights)
