"""User lifecycle service."""

import logging

from passlib.context import CryptContext
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from mediashelf.api.schemas import UserCreateRequest, UserUpdateRequest
from mediashelf.domain.models import INITIAL_RECOMMENDATION_VERSION, Rating, User
from mediashelf.errors import ConflictError, NotFoundError

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


class UserService:
    """Handles user registration, lookup, update and removal."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create_user(self, data: UserCreateRequest) -> User:
        """Register a new user. Raises ConflictError if the email or username is taken."""
        result = await self._session.execute(
            select(User).where(
                or_(User.email == data.email, User.username == data.username)
            )
        )
        existing = result.scalars().first()
        if existing is not None:
            field = "Email" if existing.email == data.email else "Username"
            raise ConflictError(f"{field} already exists")

        user = User(
            username=data.username,
            email=data.email,
            hashed_password=hash_password(data.password),
            recommendation_version=INITIAL_RECOMMENDATION_VERSION,
            ratings=[],
        )
        self._session.add(user)
        await self._session.flush()
        return user

    async def get_user(self, user_id: int) -> User:
        user = await self._session.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def list_users(self) -> list[User]:
        result = await self._session.execute(select(User).order_by(User.id))
        return list(result.scalars().all())

    async def update_user(self, user_id: int, data: UserUpdateRequest) -> User:
        """Apply a partial update. Raises ConflictError if the new email or username is taken."""
        user = await self.get_user(user_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        clashes = []
        if "email" in changes:
            clashes.append(User.email == changes["email"])
        if "username" in changes:
            clashes.append(User.username == changes["username"])
        if clashes:
            result = await self._session.execute(
                select(User).where(or_(*clashes), User.id != user_id)
            )
            existing = result.scalars().first()
            if existing is not None:
                field = "Email" if existing.email == changes.get("email") else "Username"
                raise ConflictError(f"{field} already exists")

        password = changes.pop("password", None)
        if password is not None:
            user.hashed_password = hash_password(password)
        for field, value in changes.items():
            setattr(user, field, value)
        await self._session.flush()
        logger.info("Updated user %d (%s)", user.id, ", ".join(sorted(data.model_fields_set)))
        return user

    async def delete_user(self, user_id: int) -> None:
        """Delete a user together with all of the user's ratings."""
        user = await self.get_user(user_id)
        result = await self._session.execute(select(Rating).where(Rating.user_id == user_id))
        for rating in result.scalars().all():
            await self._session.delete(rating)
        await self._session.delete(user)
        await self._session.flush()
        logger.info("Deleted user %d", user_id)
