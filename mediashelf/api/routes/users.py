"""User and per-user rating routes."""

from fastapi import APIRouter, Depends, Path, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from mediashelf.adapters.catalog.sql import SqlCatalogStore
from mediashelf.api.schemas import (
    RatedWorkEntry,
    RatingResponse,
    UserCreateRequest,
    UserRatingRequest,
    UserResponse,
    UserUpdateRequest,
)
from mediashelf.database import get_session
from mediashelf.services.rating import RatingService
from mediashelf.services.user import UserService

router = APIRouter(prefix="/users", tags=["Users"])


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    data: UserCreateRequest,
    session: AsyncSession = Depends(get_session),
) -> UserResponse:
    """Register a new user with an empty rating history."""
    user = await UserService(session).create_user(data)
    return UserResponse.model_validate(user)


@router.get("", response_model=list[UserResponse])
async def list_users(session: AsyncSession = Depends(get_session)) -> list[UserResponse]:
    users = await UserService(session).list_users()
    return [UserResponse.model_validate(u) for u in users]


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int = Path(ge=1),
    session: AsyncSession = Depends(get_session),
) -> UserResponse:
    user = await UserService(session).get_user(user_id)
    return UserResponse.model_validate(user)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    data: UserUpdateRequest,
    user_id: int = Path(ge=1),
    session: AsyncSession = Depends(get_session),
) -> UserResponse:
    """Change username, email or password. Ratings and recommendation version are untouched."""
    user = await UserService(session).update_user(user_id, data)
    return UserResponse.model_validate(user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: int = Path(ge=1),
    session: AsyncSession = Depends(get_session),
) -> Response:
    await UserService(session).delete_user(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{user_id}/ratings", response_model=dict[int, RatedWorkEntry])
async def get_user_ratings(
    user_id: int = Path(ge=1),
    session: AsyncSession = Depends(get_session),
) -> dict[int, RatedWorkEntry]:
    """Map of work id to the user's score and rating time."""
    ratings = await RatingService(SqlCatalogStore(session)).get_user_ratings(user_id)
    return {work_id: RatedWorkEntry.model_validate(r) for work_id, r in ratings.items()}


@router.post("/{user_id}/ratings", response_model=RatingResponse)
async def add_user_rating(
    data: UserRatingRequest,
    user_id: int = Path(ge=1),
    session: AsyncSession = Depends(get_session),
) -> RatingResponse:
    """Rate a work (or re-rate it). Bumps the user's recommendation version."""
    rating = await RatingService(SqlCatalogStore(session)).submit_rating(
        user_id, data.work_id, data.score
    )
    return RatingResponse.model_validate(rating)
