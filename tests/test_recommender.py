"""Tests for the facet recommender: taste profile, ranking and the version counter."""

import asyncio
from datetime import datetime

import pytest

from mediashelf.adapters.catalog.memory import InMemoryCatalogStore
from mediashelf.adapters.recommender.facet import FacetRecommenderAdapter
from mediashelf.adapters.recommender.ranking import (
    RECOMMENDATION_LIMIT,
    PopularityStrategy,
    ProfileStrategy,
    rank,
    select_candidates,
)
from mediashelf.adapters.recommender.taste import TasteProfile, build_taste_profile, work_facets
from mediashelf.errors import NotFoundError, ValidationError
from mediashelf.ports.catalog import RatingRecord, WorkRecord
from mediashelf.services.rating import RatingService


def work(id: int, genres=("Drama",), type="movie", rating=0.0, rating_count=0) -> WorkRecord:
    return WorkRecord(
        id=id,
        title=f"Work {id}",
        type=type,
        genres=tuple(genres),
        rating=rating,
        rating_count=rating_count,
    )


def rated(work_id: int, score: float) -> RatingRecord:
    return RatingRecord(id=work_id, user_id=1, work_id=work_id, score=score, rated_at=datetime(2026, 1, 1))


@pytest.fixture
def store() -> InMemoryCatalogStore:
    return InMemoryCatalogStore()


@pytest.fixture
def recommender(store: InMemoryCatalogStore) -> FacetRecommenderAdapter:
    return FacetRecommenderAdapter(store=store)


# ── Taste Profile ──────────────────────────────────


def test_work_facets_are_namespaced_and_deduplicated():
    assert work_facets(work(1, genres=("Drama", "Drama", "Crime"), type="book")) == [
        "genre:Drama",
        "genre:Crime",
        "type:book",
    ]


def test_empty_ratings_give_empty_profile():
    profile = build_taste_profile([], {1: work(1)})
    assert not profile
    assert profile.weights == {}


def test_profile_accumulates_deviation_from_midpoint():
    works = {1: work(1, genres=("Drama",)), 2: work(2, genres=("Drama", "Comedy"), type="series")}
    profile = build_taste_profile([rated(1, 5), rated(2, 1)], works)

    assert profile.weight("genre:Drama") == 0.0
    assert profile.weight("genre:Comedy") == -2.0
    assert profile.weight("type:movie") == 2.0
    assert profile.weight("type:series") == -2.0
    assert profile.weight("genre:Horror") == 0.0


def test_midpoint_rating_is_not_cold_start():
    profile = build_taste_profile([rated(1, 3)], {1: work(1)})
    assert profile
    assert profile.affinity(work(2)) == 0.0


def test_ratings_of_unknown_works_are_skipped():
    assert not build_taste_profile([rated(99, 5)], {1: work(1)})


# ── Candidates & Ranking ───────────────────────────


def test_select_candidates_excludes_rated():
    works = [work(1), work(2), work(3)]
    assert [w.id for w in select_candidates(works, {2})] == [1, 3]


def test_popularity_ranks_by_count_then_mean_then_id():
    works = [
        work(1, rating=5.0, rating_count=1),
        work(2, rating=3.0, rating_count=4),
        work(3, rating=4.0, rating_count=4),
        work(4, rating=4.0, rating_count=4),
    ]
    assert [w.id for w in rank(works, PopularityStrategy())] == [3, 4, 2, 1]


def test_profile_ties_fall_back_to_popularity_then_id():
    profile = TasteProfile(weights={"genre:Drama": 2.0, "type:movie": 0.0})
    works = [
        work(5, genres=("Comedy",)),
        work(4, genres=("Drama",)),
        work(3, genres=("Drama",), rating=4.0, rating_count=2),
        work(2, genres=("Comedy",), rating=5.0, rating_count=9),
    ]
    assert [w.id for w in rank(works, ProfileStrategy(profile))] == [3, 4, 2, 5]


def test_rank_truncates_and_handles_short_input():
    works = [work(n) for n in range(1, 9)]
    assert len(rank(works, PopularityStrategy())) == RECOMMENDATION_LIMIT
    assert rank(works[:2], PopularityStrategy()) == works[:2]
    assert rank([], PopularityStrategy()) == []


# ── Orchestrator ───────────────────────────────────


@pytest.mark.asyncio
async def test_unknown_user_is_not_found(recommender: FacetRecommenderAdapter):
    with pytest.raises(NotFoundError):
        await recommender.recommend(999999)


@pytest.mark.asyncio
async def test_cold_start_profile_equals_current(store, recommender):
    user = store.add_user("fresh")
    for n in range(7):
        store.add_work(f"Work {n}", genres=("Drama",))

    result = await recommender.recommend(user.id)
    assert len(result.current) == RECOMMENDATION_LIMIT
    assert result.profile == result.current
    assert result.version == user.recommendation_version


@pytest.mark.asyncio
async def test_empty_catalog_degrades_to_empty_lists(store, recommender):
    user = store.add_user("lonely")
    result = await recommender.recommend(user.id)
    assert result.current == []
    assert result.profile == []


@pytest.mark.asyncio
async def test_liked_genre_ranks_first(store, recommender):
    user = store.add_user("drama-fan")
    liked = store.add_work("A", genres=("Drama",))
    comedy = store.add_work("D", genres=("Comedy",))
    drama = store.add_work("C", genres=("Drama",))
    await RatingService(store).submit_rating(user.id, liked.id, 5)

    result = await recommender.recommend(user.id)
    assert [w.id for w in result.profile] == [drama.id, comedy.id]
    assert liked.id not in {w.id for w in result.current + result.profile}


@pytest.mark.asyncio
async def test_disliked_type_sinks(store, recommender):
    user = store.add_user("no-music")
    disliked = store.add_work("Bad album", type="music", genres=())
    album = store.add_work("Album", type="music", genres=())
    book = store.add_work("Book", type="book", genres=())
    await RatingService(store).submit_rating(user.id, disliked.id, 1)

    result = await recommender.recommend(user.id)
    assert [w.id for w in result.profile] == [book.id, album.id]


@pytest.mark.asyncio
async def test_reads_are_idempotent_and_do_not_bump(store, recommender):
    user = store.add_user("reader")
    works = [store.add_work(f"W{n}", genres=("Drama", "Comedy")[: n % 2 + 1]) for n in range(6)]
    await RatingService(store).submit_rating(user.id, works[1].id, 4)

    first = await recommender.recommend(user.id)
    second = await recommender.recommend(user.id)
    assert first == second
    assert await store.current_version(user.id) == first.version


# ── Version Counter ────────────────────────────────


@pytest.mark.asyncio
async def test_each_submission_bumps_version_once(store):
    user = store.add_user("rater")
    work_a = store.add_work("A")
    service = RatingService(store)
    start = await store.current_version(user.id)

    await service.submit_rating(user.id, work_a.id, 4)
    assert await store.current_version(user.id) == start + 1
    await service.submit_rating(user.id, work_a.id, 4)
    assert await store.current_version(user.id) == start + 2
    assert len(await store.get_user_ratings(user.id)) == 1


@pytest.mark.asyncio
async def test_failed_submission_does_not_bump(store):
    user = store.add_user("rater")
    work_a = store.add_work("A")
    service = RatingService(store)
    start = await store.current_version(user.id)

    with pytest.raises(ValidationError):
        await service.submit_rating(user.id, work_a.id, 6)
    with pytest.raises(NotFoundError):
        await service.submit_rating(user.id, 999, 3)
    with pytest.raises(NotFoundError):
        await service.submit_rating(999, work_a.id, 3)
    assert await store.current_version(user.id) == start


@pytest.mark.asyncio
async def test_concurrent_bumps_are_not_lost(store):
    user = store.add_user("busy")
    other = store.add_user("other")
    start = await store.current_version(user.id)

    versions = await asyncio.gather(*(store.bump_version(user.id) for _ in range(50)))
    assert sorted(versions) == list(range(start + 1, start + 51))
    assert await store.current_version(other.id) == other.recommendation_version


@pytest.mark.asyncio
async def test_concurrent_submissions_each_bump(store):
    user = store.add_user("busy")
    works = [store.add_work(f"W{n}") for n in range(10)]
    service = RatingService(store)
    start = await store.current_version(user.id)

    await asyncio.gather(*(service.submit_rating(user.id, w.id, 5) for w in works))
    assert await store.current_version(user.id) == start + len(works)


@pytest.mark.asyncio
async def test_bump_unknown_user_is_not_found(store):
    with pytest.raises(NotFoundError):
        await store.bump_version(42)
    with pytest.raises(NotFoundError):
        await store.current_version(42)
