"""Work catalog and per-work rating routes."""

from fastapi import APIRouter, Depends, Path, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from mediashelf.adapters.catalog.sql import SqlCatalogStore
from mediashelf.api.schemas import (
    RatingResponse,
    WorkAverageResponse,
    WorkCreateRequest,
    WorkRatingRequest,
    WorkRatingsResponse,
    WorkResponse,
    WorkUpdateRequest,
)
from mediashelf.database import get_session
from mediashelf.domain.models import WorkType
from mediashelf.services.rating import RatingService
from mediashelf.services.work import WorkService, WorkView

router = APIRouter(prefix="/works", tags=["Works"])


def _work_service(session: AsyncSession) -> WorkService:
    return WorkService(session, SqlCatalogStore(session))


def _to_response(view: WorkView) -> WorkResponse:
    return WorkResponse.model_validate(view.work).model_copy(
        update={"rating": view.rating, "rating_count": view.rating_count}
    )


@router.get("", response_model=list[WorkResponse])
async def list_works(
    type: WorkType | None = None,
    year: int | None = Query(default=None, description="Minimum release year"),
    genres: str | None = Query(default=None, description="Comma-separated, matches any"),
    session: AsyncSession = Depends(get_session),
) -> list[WorkResponse]:
    genre_list = [g.strip() for g in genres.split(",") if g.strip()] if genres else None
    views = await _work_service(session).list_works(type=type, year=year, genres=genre_list)
    return [_to_response(v) for v in views]


@router.post("", response_model=WorkResponse, status_code=status.HTTP_201_CREATED)
async def create_work(
    data: WorkCreateRequest,
    session: AsyncSession = Depends(get_session),
) -> WorkResponse:
    return _to_response(await _work_service(session).create_work(data))


@router.get("/popular", response_model=list[WorkResponse])
async def popular_works(session: AsyncSession = Depends(get_session)) -> list[WorkResponse]:
    """Highest rated works, most rated first among equal averages."""
    return [_to_response(v) for v in await _work_service(session).popular_works()]


@router.get("/{work_id}", response_model=WorkResponse)
async def get_work(
    work_id: int = Path(ge=1),
    session: AsyncSession = Depends(get_session),
) -> WorkResponse:
    return _to_response(await _work_service(session).get_work(work_id))


@router.put("/{work_id}", response_model=WorkResponse)
async def update_work(
    data: WorkUpdateRequest,
    work_id: int = Path(ge=1),
    session: AsyncSession = Depends(get_session),
) -> WorkResponse:
    return _to_response(await _work_service(session).update_work(work_id, data))


@router.delete("/{work_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_work(
    work_id: int = Path(ge=1),
    session: AsyncSession = Depends(get_session),
) -> Response:
    await _work_service(session).delete_work(work_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{work_id}/similar", response_model=list[WorkResponse])
async def similar_works(
    work_id: int = Path(ge=1),
    session: AsyncSession = Depends(get_session),
) -> list[WorkResponse]:
    return [_to_response(v) for v in await _work_service(session).similar_works(work_id)]


@router.get("/{work_id}/ratings", response_model=WorkRatingsResponse)
async def get_work_ratings(
    work_id: int = Path(ge=1),
    session: AsyncSession = Depends(get_session),
) -> WorkRatingsResponse:
    ratings = await RatingService(SqlCatalogStore(session)).get_work_ratings(work_id)
    return WorkRatingsResponse(ratings=[RatingResponse.model_validate(r) for r in ratings])


@router.post("/{work_id}/ratings", response_model=RatingResponse)
async def submit_work_rating(
    data: WorkRatingRequest,
    work_id: int = Path(ge=1),
    session: AsyncSession = Depends(get_session),
) -> RatingResponse:
    """Rate this work on behalf of `user_id`. Bumps that user's recommendation version."""
    rating = await RatingService(SqlCatalogStore(session)).submit_rating(
        data.user_id, work_id, data.score
    )
    return RatingResponse.model_validate(rating)


@router.get("/{work_id}/ratings/average", response_model=WorkAverageResponse)
async def get_work_average(
    work_id: int = Path(ge=1),
    session: AsyncSession = Depends(get_session),
) -> WorkAverageResponse:
    average, total = await RatingService(SqlCatalogStore(session)).get_work_average(work_id)
    return WorkAverageResponse(
        work_id=work_id, average_rating=round(average, 2), total_ratings=total
    )
