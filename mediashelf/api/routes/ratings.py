"""Rating administration routes."""

from fastapi import APIRouter, Depends, Path, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from mediashelf.adapters.catalog.sql import SqlCatalogStore
from mediashelf.api.schemas import RatingResponse, RatingUpdateRequest
from mediashelf.database import get_session
from mediashelf.services.rating import RatingService

router = APIRouter(prefix="/ratings", tags=["Ratings"])


def _service(session: AsyncSession) -> RatingService:
    return RatingService(SqlCatalogStore(session))


@router.get("", response_model=list[RatingResponse])
async def list_ratings(session: AsyncSession = Depends(get_session)) -> list[RatingResponse]:
    return [RatingResponse.model_validate(r) for r in await _service(session).list_ratings()]


@router.get("/{rating_id}", response_model=RatingResponse)
async def get_rating(
    rating_id: int = Path(ge=1),
    session: AsyncSession = Depends(get_session),
) -> RatingResponse:
    return RatingResponse.model_validate(await _service(session).get_rating(rating_id))


@router.put("/{rating_id}", response_model=RatingResponse)
async def update_rating(
    data: RatingUpdateRequest,
    rating_id: int = Path(ge=1),
    session: AsyncSession = Depends(get_session),
) -> RatingResponse:
    rating = await _service(session).update_rating(rating_id, data.score)
    return RatingResponse.model_validate(rating)


@router.delete("/{rating_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_rating(
    rating_id: int = Path(ge=1),
    session: AsyncSession = Depends(get_session),
) -> Response:
    await _service(session).delete_rating(rating_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
