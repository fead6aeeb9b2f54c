"""Tests for the SQLAlchemy catalog store."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from mediashelf.adapters.catalog.sql import SqlCatalogStore
from mediashelf.domain.models import INITIAL_RECOMMENDATION_VERSION, User, Work, WorkType
from mediashelf.errors import NotFoundError, ValidationError
from mediashelf.services.user import UserService
from mediashelf.services.work import WorkService


async def seed(session: AsyncSession) -> tuple[User, User, Work, Work]:
    alice = User(username="alice", email="alice@example.com", hashed_password="x")
    bob = User(username="bob", email="bob@example.com", hashed_password="x")
    drama = Work(title="Drama", type=WorkType.MOVIE, genres=["Drama"])
    album = Work(title="Album", type=WorkType.MUSIC, genres=["Comedy"], year=2020)
    session.add_all([alice, bob, drama, album])
    await session.flush()
    return alice, bob, drama, album


@pytest.mark.asyncio
async def test_new_user_starts_at_initial_version(session: AsyncSession):
    alice, *_ = await seed(session)
    store = SqlCatalogStore(session)
    assert await store.current_version(alice.id) == INITIAL_RECOMMENDATION_VERSION


@pytest.mark.asyncio
async def test_upsert_updates_existing_pair(session: AsyncSession):
    alice, _, drama, _ = await seed(session)
    store = SqlCatalogStore(session)

    first = await store.upsert_rating(alice.id, drama.id, 4)
    second = await store.upsert_rating(alice.id, drama.id, 2)

    assert second.id == first.id
    assert second.score == 2.0
    assert second.rated_at >= first.rated_at
    assert len(await store.get_user_ratings(alice.id)) == 1


@pytest.mark.asyncio
async def test_upsert_validates_before_writing(session: AsyncSession):
    alice, _, drama, _ = await seed(session)
    store = SqlCatalogStore(session)

    with pytest.raises(ValidationError):
        await store.upsert_rating(alice.id, drama.id, 5.5)
    with pytest.raises(NotFoundError):
        await store.upsert_rating(alice.id, 999, 3)
    with pytest.raises(NotFoundError):
        await store.upsert_rating(999, drama.id, 3)
    assert await store.list_ratings() == []


@pytest.mark.asyncio
async def test_list_works_carries_aggregates(session: AsyncSession):
    alice, bob, drama, album = await seed(session)
    store = SqlCatalogStore(session)
    await store.upsert_rating(alice.id, drama.id, 5)
    await store.upsert_rating(bob.id, drama.id, 2)

    works = await store.list_works()
    assert [w.id for w in works] == [drama.id, album.id]
    assert works[0].rating == 3.5
    assert works[0].rating_count == 2
    assert works[0].genres == ("Drama",)
    assert works[0].type == "movie"
    assert works[1].rating == 0.0
    assert works[1].rating_count == 0


@pytest.mark.asyncio
async def test_bump_version_is_per_user(session: AsyncSession):
    alice, bob, *_ = await seed(session)
    store = SqlCatalogStore(session)

    assert await store.bump_version(alice.id) == INITIAL_RECOMMENDATION_VERSION + 1
    assert await store.bump_version(alice.id) == INITIAL_RECOMMENDATION_VERSION + 2
    assert await store.current_version(bob.id) == INITIAL_RECOMMENDATION_VERSION
    assert (await store.get_user(alice.id)).recommendation_version == INITIAL_RECOMMENDATION_VERSION + 2

    with pytest.raises(NotFoundError):
        await store.bump_version(999)


@pytest.mark.asyncio
async def test_rating_admin_operations(session: AsyncSession):
    alice, _, drama, album = await seed(session)
    store = SqlCatalogStore(session)
    kept = await store.upsert_rating(alice.id, drama.id, 3)
    dropped = await store.upsert_rating(alice.id, album.id, 4)

    updated = await store.update_rating(kept.id, 5)
    assert updated.score == 5.0

    deleted = await store.delete_rating(dropped.id)
    assert deleted.work_id == album.id
    assert [r.id for r in await store.list_ratings()] == [kept.id]
    assert await store.list_ratings(work_id=album.id) == []

    with pytest.raises(NotFoundError):
        await store.get_rating(dropped.id)


class RecordingStore(SqlCatalogStore):
    """SqlCatalogStore that remembers the order of version bumps."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.bumped: list[int] = []

    async def bump_version(self, user_id: int) -> int:
        self.bumped.append(user_id)
        return await super().bump_version(user_id)


@pytest.mark.asyncio
async def test_delete_work_bumps_raters_in_user_id_order(session: AsyncSession):
    alice, bob, drama, _ = await seed(session)
    store = RecordingStore(session)
    await store.upsert_rating(bob.id, drama.id, 4)
    await store.upsert_rating(alice.id, drama.id, 2)

    await WorkService(session, store).delete_work(drama.id)

    assert store.bumped == sorted([alice.id, bob.id])
    assert await store.current_version(alice.id) == INITIAL_RECOMMENDATION_VERSION + 1
    assert await store.current_version(bob.id) == INITIAL_RECOMMENDATION_VERSION + 1
    assert await store.list_ratings() == []


@pytest.mark.asyncio
async def test_delete_user_removes_their_ratings(session: AsyncSession):
    alice, bob, drama, album = await seed(session)
    store = SqlCatalogStore(session)
    await store.upsert_rating(alice.id, drama.id, 5)
    await store.upsert_rating(alice.id, album.id, 3)
    kept = await store.upsert_rating(bob.id, drama.id, 4)

    await UserService(session).delete_user(alice.id)

    assert [r.id for r in await store.list_ratings()] == [kept.id]
    with pytest.raises(NotFoundError):
        await store.get_user(alice.id)
    assert (await store.get_work(drama.id)).rating_count == 1
