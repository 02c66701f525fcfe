from typing import Iterable, List

from sqlalchemy import delete, select

from models.models import PRReviewer
from repositories.base import BaseRepository, new_id


class PRReviewerRepository(BaseRepository):
    """Reviewer assignments. Reads return an empty list when nothing matches."""

    async def save(self, pr_id: str, reviewer_id: str) -> PRReviewer:
        pr_reviewer = PRReviewer(id=new_id(), pr_id=pr_id, reviewer_id=reviewer_id)
        async with self.session() as session:
            session.add(pr_reviewer)
            await session.flush()
        return pr_reviewer

    async def get_by_pr_id(self, pr_id: str) -> List[PRReviewer]:
        async with self.session() as session:
            result = await session.execute(
                select(PRReviewer).where(PRReviewer.pr_id == pr_id)
            )
            return list(result.scalars().all())

    async def get_by_reviewer_id(self, reviewer_id: str) -> List[PRReviewer]:
        async with self.session() as session:
            result = await session.execute(
                select(PRReviewer).where(PRReviewer.reviewer_id == reviewer_id)
            )
            return list(result.scalars().all())

    async def get_by_reviewer_ids(self, reviewer_ids: Iterable[str]) -> List[PRReviewer]:
        reviewer_ids = list(reviewer_ids)
        if not reviewer_ids:
            return []
        async with self.session() as session:
            result = await session.execute(
                select(PRReviewer).where(PRReviewer.reviewer_id.in_(reviewer_ids))
            )
            return list(result.scalars().all())

    async def get_all(self) -> List[PRReviewer]:
        async with self.session() as session:
            result = await session.execute(select(PRReviewer))
            return list(result.scalars().all())

    async def delete_by_pr_and_reviewer(self, pr_id: str, reviewer_id: str) -> int:
        async with self.session() as session:
            result = await session.execute(
                delete(PRReviewer).where(
                    PRReviewer.pr_id == pr_id,
                    PRReviewer.reviewer_id == reviewer_id,
                )
            )
            return result.rowcount
