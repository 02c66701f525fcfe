from typing import Iterable, List

from pydantic import BaseModel
from sqlalchemy import select

from errors import EntityNotFoundError
from models.models import PullRequest
from repositories.base import BaseRepository


class PullRequestIn(BaseModel):
    id: str
    name: str
    author_id: str
    status_id: str


class PullRequestRepository(BaseRepository):
    async def save(self, pr_in: PullRequestIn) -> PullRequest:
        pr = PullRequest(
            id=pr_in.id,
            name=pr_in.name,
            author_id=pr_in.author_id,
            status_id=pr_in.status_id,
            created_at=self.clock.now(),
            merged_at=None,
        )
        async with self.session() as session:
            session.add(pr)
            await session.flush()
        return pr

    async def get_by_id(self, pr_id: str) -> PullRequest:
        async with self.session() as session:
            pr = await session.get(PullRequest, pr_id)
        if pr is None:
            raise EntityNotFoundError("pull request", pr_id)
        return pr

    async def get_by_ids(self, pr_ids: Iterable[str]) -> List[PullRequest]:
        pr_ids = list(pr_ids)
        if not pr_ids:
            return []
        async with self.session() as session:
            result = await session.execute(
                select(PullRequest)
                .where(PullRequest.id.in_(pr_ids))
                .order_by(PullRequest.created_at, PullRequest.id)
            )
            return list(result.scalars().all())

    async def mark_merged(self, pr_id: str) -> PullRequest:
        async with self.session() as session:
            pr = await session.get(PullRequest, pr_id)
            if pr is None:
                raise EntityNotFoundError("pull request", pr_id)
            pr.merged_at = self.clock.now()
            await session.flush()
        return pr
