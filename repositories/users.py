from typing import Iterable, List

from pydantic import BaseModel
from sqlalchemy import select

from errors import EntityNotFoundError
from models.models import User
from repositories.base import BaseRepository


class UserIn(BaseModel):
    id: str
    name: str
    is_active: bool = True
    team_id: str


class UserRepository(BaseRepository):
    async def get_by_id(self, user_id: str) -> User:
        async with self.session() as session:
            result = await session.execute(
                select(User).where(User.id == user_id)
            )
            user = result.scalar_one_or_none()
        if user is None:
            raise EntityNotFoundError("user", user_id)
        return user

    async def get_by_ids(self, user_ids: Iterable[str]) -> List[User]:
        user_ids = list(user_ids)
        if not user_ids:
            return []
        async with self.session() as session:
            result = await session.execute(
                select(User).where(User.id.in_(user_ids))
            )
            return list(result.scalars().all())

    async def get_by_team_id(self, team_id: str) -> List[User]:
        async with self.session() as session:
            result = await session.execute(
                select(User)
                .where(User.team_id == team_id)
                .order_by(User.created_at, User.id)
            )
            return list(result.scalars().all())

    async def get_active_by_team_id(self, team_id: str) -> List[User]:
        async with self.session() as session:
            result = await session.execute(
                select(User)
                .where(User.team_id == team_id, User.is_active.is_(True))
                .order_by(User.created_at, User.id)
            )
            return list(result.scalars().all())

    async def update(self, user_in: UserIn) -> User:
        updated = await self.update_batch([user_in])
        if not updated:
            raise EntityNotFoundError("user", user_in.id)
        return updated[0]

    async def save_batch(self, users: List[UserIn]) -> List[User]:
        now = self.clock.now()
        new_users = [
            User(
                id=user_in.id,
                name=user_in.name,
                is_active=user_in.is_active,
                team_id=user_in.team_id,
                created_at=now,
            )
            for user_in in users
        ]
        async with self.session() as session:
            session.add_all(new_users)
            await session.flush()
        return new_users

    async def update_batch(self, users: List[UserIn]) -> List[User]:
        """Overwrite name, activity and team. Ids without a row are ignored."""
        if not users:
            return []
        by_id = {user_in.id: user_in for user_in in users}
        async with self.session() as session:
            result = await session.execute(
                select(User).where(User.id.in_(list(by_id)))
            )
            existing = {user.id: user for user in result.scalars().all()}
            updated = []
            for user_id, user_in in by_id.items():
                user = existing.get(user_id)
                if user is None:
                    continue
                user.name = user_in.name
                user.is_active = user_in.is_active
                user.team_id = user_in.team_id
                updated.append(user)
            await session.flush()
        return updated
