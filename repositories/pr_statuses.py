from typing import Iterable, List

from sqlalchemy import select

from errors import EntityNotFoundError
from models.models import PRStatus
from repositories.base import BaseRepository, new_id


class PRStatusRepository(BaseRepository):
    async def save(self, status: str) -> PRStatus:
        pr_status = PRStatus(id=new_id(), status=status)
        async with self.session() as session:
            session.add(pr_status)
            await session.flush()
        return pr_status

    async def get_by_id(self, status_id: str) -> PRStatus:
        async with self.session() as session:
            pr_status = await session.get(PRStatus, status_id)
        if pr_status is None:
            raise EntityNotFoundError("pr status", status_id)
        return pr_status

    async def get_by_ids(self, status_ids: Iterable[str]) -> List[PRStatus]:
        status_ids = list(status_ids)
        if not status_ids:
            return []
        async with self.session() as session:
            result = await session.execute(
                select(PRStatus).where(PRStatus.id.in_(status_ids))
            )
            return list(result.scalars().all())

    async def update_by_id(self, status_id: str, status: str) -> PRStatus:
        async with self.session() as session:
            pr_status = await session.get(PRStatus, status_id)
            if pr_status is None:
                raise EntityNotFoundError("pr status", status_id)
            pr_status.status = status
            await session.flush()
        return pr_status
