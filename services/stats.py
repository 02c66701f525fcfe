from collections import Counter

from errors import ErrorKind, RepositoryError, ServiceError
from repositories.pr_reviewers import PRReviewerRepository
from services.contracts import ReviewerStatsOut, ReviewerStatsRecord


class ReviewerStatsService:
    """
    GET /statistics/reviewers
    Number of pull requests each reviewer is assigned to, busiest first
    """

    def __init__(self, pr_reviewers: PRReviewerRepository):
        self.pr_reviewers = pr_reviewers

    async def run(self) -> ReviewerStatsOut:
        try:
            assignments = await self.pr_reviewers.get_all()
        except RepositoryError as e:
            raise ServiceError(ErrorKind.GET_REVIEWERS_FAILED) from e
        if not assignments:
            raise ServiceError(ErrorKind.PRS_REVIEWERS_NOT_FOUND)

        counts = Counter(row.reviewer_id for row in assignments)
        ordered = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
        return ReviewerStatsOut(reviewers=[
            ReviewerStatsRecord(reviewer_id=reviewer_id, assignment_count=count)
            for reviewer_id, count in ordered
        ])
