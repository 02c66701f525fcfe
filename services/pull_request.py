import logging
from functools import partial

from errors import EntityNotFoundError, ErrorKind, RepositoryError, ServiceError
from metrics import BusinessMetrics
from models.database import TransactionManager
from models.models import MERGED_STATUS, OPEN_STATUS
from repositories.pr_reviewers import PRReviewerRepository
from repositories.pr_statuses import PRStatusRepository
from repositories.pull_requests import PullRequestIn, PullRequestRepository
from repositories.users import UserRepository
from services.common import (
    assign_reviewer,
    load_active_team_members,
    load_author,
    load_pull_request,
    load_reviewer_ids,
    load_status,
    pull_request_record,
    remove_reviewer,
)
from services.contracts import (
    CreatePullRequestIn,
    MergePullRequestIn,
    PullRequestRecord,
    ReassignReviewerIn,
    ReassignReviewerOut,
)
from services.reviewers import ReviewerSelector


logger = logging.getLogger(__name__)


class CreatePullRequestService:
    """
    POST /pullRequest/create
    Create a PR and assign up to ``max_reviewers`` reviewers from the author's team
    """

    def __init__(
        self,
        users: UserRepository,
        pull_requests: PullRequestRepository,
        pr_reviewers: PRReviewerRepository,
        statuses: PRStatusRepository,
        selector: ReviewerSelector,
        max_reviewers: int,
        trm: TransactionManager,
        metrics: BusinessMetrics,
    ):
        self.users = users
        self.pull_requests = pull_requests
        self.pr_reviewers = pr_reviewers
        self.statuses = statuses
        self.selector = selector
        self.max_reviewers = max_reviewers
        self.trm = trm
        self.metrics = metrics

    async def run(self, request: CreatePullRequestIn) -> PullRequestRecord:
        result = await self.trm.run(partial(self._run, request))
        self.metrics.pr_created(len(result.assigned_reviewers))
        return result

    async def _run(self, request: CreatePullRequestIn) -> PullRequestRecord:
        logger.debug("Check if pull request %s already exists", request.pull_request_id)
        try:
            await self.pull_requests.get_by_id(request.pull_request_id)
        except EntityNotFoundError:
            pass
        except RepositoryError as e:
            raise ServiceError(ErrorKind.GET_PULL_REQUEST_FAILED, request.pull_request_id) from e
        else:
            raise ServiceError(ErrorKind.PULL_REQUEST_EXISTS, request.pull_request_id)

        logger.debug("Get author %s", request.author_id)
        author = await load_author(self.users, request.author_id)

        logger.debug("Get active members of team %s", author.team_id)
        team_members = await load_active_team_members(self.users, author.team_id)

        try:
            status = await self.statuses.save(OPEN_STATUS)
        except RepositoryError as e:
            raise ServiceError(ErrorKind.SET_STATUS_FAILED) from e

        logger.debug("Create pull request %s", request.pull_request_id)
        try:
            pr = await self.pull_requests.save(PullRequestIn(
                id=request.pull_request_id,
                name=request.pull_request_name,
                author_id=author.id,
                status_id=status.id,
            ))
        except RepositoryError as e:
            raise ServiceError(ErrorKind.SAVE_PULL_REQUEST_FAILED, request.pull_request_id) from e

        selected = self.selector.select(
            team_members,
            exclude_author=author.id,
            exclude_current=(),
            max_count=self.max_reviewers,
        )
        logger.debug("Assign %d reviewers to %s", len(selected), pr.id)
        assigned = []
        for reviewer in selected:
            await assign_reviewer(self.pr_reviewers, pr.id, reviewer.id)
            assigned.append(reviewer.id)

        return pull_request_record(pr, status.status, assigned)


class MergePullRequestService:
    """
    POST /pullRequest/merge
    Mark a PR as MERGED. Merging an already merged PR returns it unchanged.
    """

    def __init__(
        self,
        pull_requests: PullRequestRepository,
        pr_reviewers: PRReviewerRepository,
        statuses: PRStatusRepository,
        trm: TransactionManager,
    ):
        self.pull_requests = pull_requests
        self.pr_reviewers = pr_reviewers
        self.statuses = statuses
        self.trm = trm

    async def run(self, request: MergePullRequestIn) -> PullRequestRecord:
        return await self.trm.run(partial(self._run, request))

    async def _run(self, request: MergePullRequestIn) -> PullRequestRecord:
        pr = await load_pull_request(self.pull_requests, request.pull_request_id)
        status = await load_status(self.statuses, pr.status_id)
        reviewer_ids = await load_reviewer_ids(self.pr_reviewers, pr.id)

        if status.status == MERGED_STATUS:
            logger.debug("Pull request %s already merged", pr.id)
            return pull_request_record(pr, status.status, reviewer_ids)

        try:
            status = await self.statuses.update_by_id(status.id, MERGED_STATUS)
        except (EntityNotFoundError, RepositoryError) as e:
            raise ServiceError(ErrorKind.UPDATE_STATUS_FAILED, pr.id) from e

        try:
            pr = await self.pull_requests.mark_merged(pr.id)
        except (EntityNotFoundError, RepositoryError) as e:
            raise ServiceError(ErrorKind.UPDATE_PULL_REQUEST_FAILED, pr.id) from e

        logger.debug("Pull request %s merged", pr.id)
        return pull_request_record(pr, status.status, reviewer_ids)


class ReassignReviewerService:
    """
    POST /pullRequest/reassign
    Replace one assigned reviewer with another active member of the author's team
    """

    def __init__(
        self,
        users: UserRepository,
        pull_requests: PullRequestRepository,
        pr_reviewers: PRReviewerRepository,
        statuses: PRStatusRepository,
        selector: ReviewerSelector,
        trm: TransactionManager,
        metrics: BusinessMetrics,
    ):
        self.users = users
        self.pull_requests = pull_requests
        self.pr_reviewers = pr_reviewers
        self.statuses = statuses
        self.selector = selector
        self.trm = trm
        self.metrics = metrics

    async def run(self, request: ReassignReviewerIn) -> ReassignReviewerOut:
        result = await self.trm.run(partial(self._run, request))
        self.metrics.reviewers_reassigned()
        return result

    async def _run(self, request: ReassignReviewerIn) -> ReassignReviewerOut:
        logger.debug("Get pull request %s", request.pull_request_id)
        pr = await load_pull_request(self.pull_requests, request.pull_request_id)

        status = await load_status(self.statuses, pr.status_id)
        if status.status == MERGED_STATUS:
            raise ServiceError(ErrorKind.PULL_REQUEST_ALREADY_MERGED, f"pr_id {pr.id}")

        current_reviewer_ids = await load_reviewer_ids(self.pr_reviewers, pr.id)
        if request.old_reviewer_id not in current_reviewer_ids:
            raise ServiceError(ErrorKind.REVIEWER_NOT_FOUND, f"reviewer_id {request.old_reviewer_id}")

        author = await load_author(self.users, pr.author_id)
        team_members = await load_active_team_members(self.users, author.team_id)

        selected = self.selector.select(
            team_members,
            exclude_author=author.id,
            exclude_current=current_reviewer_ids,
            max_count=1,
        )
        if not selected:
            raise ServiceError(ErrorKind.NO_AVAILABLE_REVIEWERS, f"team_id {author.team_id}")
        new_reviewer = selected[0]

        logger.debug("Replace reviewer %s with %s on %s", request.old_reviewer_id, new_reviewer.id, pr.id)
        await remove_reviewer(self.pr_reviewers, pr.id, request.old_reviewer_id)
        await assign_reviewer(self.pr_reviewers, pr.id, new_reviewer.id)

        reviewer_ids = await load_reviewer_ids(self.pr_reviewers, pr.id)
        return ReassignReviewerOut(
            pr=pull_request_record(pr, status.status, reviewer_ids),
            replaced_by=new_reviewer.id,
        )
