"""Pydantic request and response schemas."""

from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field

from mediashelf.domain.models import GENRES, SCORE_MAX, SCORE_MIN, WorkType, utcnow

YEAR_MIN = 1900


def _check_genres(genres: list[str] | None) -> list[str] | None:
    if genres is None:
        return genres
    unknown = [g for g in genres if g not in GENRES]
    if unknown:
        raise ValueError(f"Invalid genre provided: {', '.join(unknown)}")
    return list(dict.fromkeys(genres))


def _check_year(year: int | None) -> int | None:
    if year is None:
        return year
    latest = utcnow().year + 5
    if not YEAR_MIN <= year <= latest:
        raise ValueError(f"year must be between {YEAR_MIN} and {latest}")
    return year


GenreList = Annotated[list[str], AfterValidator(_check_genres)]
Year = Annotated[int | None, AfterValidator(_check_year)]


# ── Users ──────────────────────────────────────────


class UserCreateRequest(BaseModel):
    username: str = Field(min_length=3, max_length=20)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)


class UserUpdateRequest(BaseModel):
    username: str | None = Field(default=None, min_length=3, max_length=20)
    email: EmailStr | None = None
    password: str | None = Field(default=None, min_length=6, max_length=128)


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    rated_works: int = 0
    created_at: datetime | None = None


# ── Works ──────────────────────────────────────────


class WorkCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=500)
    type: WorkType
    year: Year = None
    genres: GenreList = Field(default_factory=list)
    description: str | None = None
    creator: str | None = Field(default=None, max_length=300)
    cover_url: str | None = Field(default=None, max_length=1000)


class WorkUpdateRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=500)
    type: WorkType | None = None
    year: Year = None
    genres: GenreList | None = None
    description: str | None = None
    creator: str | None = Field(default=None, max_length=300)
    cover_url: str | None = Field(default=None, max_length=1000)


class WorkResponse(BaseModel):
    """A catalog work. Built from ORM rows and from recommendation records alike."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    type: WorkType
    year: int | None = None
    genres: list[str] = Field(default_factory=list)
    description: str | None = None
    creator: str | None = None
    cover_url: str | None = None
    rating: float = 0.0
    rating_count: int = 0


# ── Ratings ────────────────────────────────────────


class UserRatingRequest(BaseModel):
    work_id: int = Field(ge=1)
    score: float = Field(ge=SCORE_MIN, le=SCORE_MAX)


class WorkRatingRequest(BaseModel):
    user_id: int = Field(ge=1)
    score: float = Field(ge=SCORE_MIN, le=SCORE_MAX)


class RatingUpdateRequest(BaseModel):
    score: float = Field(ge=SCORE_MIN, le=SCORE_MAX)


class RatingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    work_id: int
    score: float
    rated_at: datetime


class RatedWorkEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    score: float
    rated_at: datetime


class WorkRatingsResponse(BaseModel):
    ratings: list[RatingResponse]


class WorkAverageResponse(BaseModel):
    work_id: int
    average_rating: float
    total_ratings: int


# ── Recommendations ────────────────────────────────


class RecommendationsResponse(BaseModel):
    current: list[WorkResponse]
    profile: list[WorkResponse]
    version: int
