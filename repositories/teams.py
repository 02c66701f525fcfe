from sqlalchemy import select

from errors import EntityNotFoundError
from models.models import Team
from repositories.base import BaseRepository, new_id


class TeamRepository(BaseRepository):
    async def save(self, name: str) -> Team:
        team = Team(id=new_id(), name=name, created_at=self.clock.now())
        async with self.session() as session:
            session.add(team)
            await session.flush()
        return team

    async def get_by_id(self, team_id: str) -> Team:
        async with self.session() as session:
            team = await session.get(Team, team_id)
        if team is None:
            raise EntityNotFoundError("team", team_id)
        return team

    async def get_by_name(self, name: str) -> Team:
        async with self.session() as session:
            result = await session.execute(
                select(Team).where(Team.name == name)
            )
            team = result.scalar_one_or_none()
        if team is None:
            raise EntityNotFoundError("team", name)
        return team
