"""SQLAlchemy ORM models and catalog constants."""

import enum
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, relationship

from mediashelf.errors import ValidationError

SCORE_MIN = 1.0
SCORE_MAX = 5.0
INITIAL_RECOMMENDATION_VERSION = 1

GENRES = (
    "Action",
    "Adventure",
    "Animation",
    "Biography",
    "Comedy",
    "Crime",
    "Documentary",
    "Drama",
    "Fantasy",
    "History",
    "Horror",
    "Mystery",
    "Romance",
    "Sci-Fi",
    "Thriller",
)


class WorkType(str, enum.Enum):
    MOVIE = "movie"
    SERIES = "series"
    MUSIC = "music"
    BOOK = "book"
    GRAPHIC_NOVEL = "graphic-novel"


def check_score(score: float) -> float:
    """Return the score as float or raise ValidationError if it is outside [1, 5]."""
    if score is None:
        raise ValidationError(errors=["score is required"])
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        raise ValidationError(errors=["score must be a number"])
    if not SCORE_MIN <= score <= SCORE_MAX:
        raise ValidationError(
            errors=[f"score must be between {SCORE_MIN:g} and {SCORE_MAX:g}"]
        )
    return float(score)


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Base(DeclarativeBase):
    pass


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(20), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    recommendation_version = Column(
        Integer, nullable=False, default=INITIAL_RECOMMENDATION_VERSION
    )
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    ratings = relationship(
        "Rating",
        back_populates="user",
        lazy="selectin",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def rated_works(self) -> int:
        return len(self.ratings)


class Work(Base):
    __tablename__ = "works"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(500), nullable=False, index=True)
    type = Column(
        Enum(
            WorkType,
            name="work_type_enum",
            values_callable=lambda members: [m.value for m in members],
        ),
        nullable=False,
    )
    year = Column(Integer, nullable=True)
    genres = Column(JSON, nullable=False, default=list)
    description = Column(Text, nullable=True)
    creator = Column(String(300), nullable=True)
    cover_url = Column(String(1000), nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    ratings = relationship("Rating", back_populates="work", passive_deletes=True)


class Rating(Base):
    __tablename__ = "ratings"
    __table_args__ = (UniqueConstraint("user_id", "work_id", name="uq_rating_user_work"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    work_id = Column(Integer, ForeignKey("works.id", ondelete="CASCADE"), nullable=False, index=True)
    score = Column(Float, nullable=False)
    rated_at = Column(DateTime, nullable=False, default=utcnow)

    user = relationship("User", back_populates="ratings")
    work = relationship("Work", back_populates="ratings")
