import logging
from functools import partial

from errors import EntityNotFoundError, ErrorKind, RepositoryError, ServiceError
from models.database import TransactionManager
from models.models import User
from repositories.pr_reviewers import PRReviewerRepository
from repositories.pr_statuses import PRStatusRepository
from repositories.pull_requests import PullRequestRepository
from repositories.teams import TeamRepository
from repositories.users import UserIn, UserRepository
from services.common import pull_request_short_record
from services.contracts import GetReviewIn, GetReviewOut, SetIsActiveIn, UserRecord


logger = logging.getLogger(__name__)


async def _get_user(users: UserRepository, user_id: str) -> User:
    try:
        return await users.get_by_id(user_id)
    except EntityNotFoundError as e:
        raise ServiceError(ErrorKind.USER_NOT_FOUND, f"user_id {user_id}") from e
    except RepositoryError as e:
        raise ServiceError(ErrorKind.GET_USER_FAILED, user_id) from e


class SetIsActiveService:
    """
    POST /users/setIsActive
    Update user's is_active flag
    """

    def __init__(self, teams: TeamRepository, users: UserRepository, trm: TransactionManager):
        self.teams = teams
        self.users = users
        self.trm = trm

    async def run(self, request: SetIsActiveIn) -> UserRecord:
        return await self.trm.run(partial(self._run, request))

    async def _run(self, request: SetIsActiveIn) -> UserRecord:
        user = await _get_user(self.users, request.user_id)

        try:
            team = await self.teams.get_by_id(user.team_id)
        except (EntityNotFoundError, RepositoryError) as e:
            raise ServiceError(ErrorKind.GET_TEAM_FAILED, f"team_id {user.team_id}") from e

        if user.is_active == request.is_active:
            logger.debug("User %s already has is_active=%s", user.id, request.is_active)
            raise ServiceError(ErrorKind.USER_DONT_NEED_CHANGE, f"user_id {user.id}")

        try:
            updated = await self.users.update(UserIn(
                id=user.id,
                name=user.name,
                is_active=request.is_active,
                team_id=user.team_id,
            ))
        except (EntityNotFoundError, RepositoryError) as e:
            raise ServiceError(ErrorKind.UPDATE_USER_FAILED, user.id) from e

        return UserRecord(
            user_id=updated.id,
            username=updated.name,
            team_name=team.name,
            is_active=updated.is_active,
        )


class GetReviewService:
    """
    GET /users/getReview
    Get PRs where the user is a reviewer
    """

    def __init__(
        self,
        users: UserRepository,
        pull_requests: PullRequestRepository,
        pr_reviewers: PRReviewerRepository,
        statuses: PRStatusRepository,
    ):
        self.users = users
        self.pull_requests = pull_requests
        self.pr_reviewers = pr_reviewers
        self.statuses = statuses

    async def run(self, request: GetReviewIn) -> GetReviewOut:
        await _get_user(self.users, request.user_id)

        try:
            assignments = await self.pr_reviewers.get_by_reviewer_id(request.user_id)
        except RepositoryError as e:
            raise ServiceError(ErrorKind.GET_REVIEWERS_FAILED, f"user_id {request.user_id}") from e
        if not assignments:
            raise ServiceError(ErrorKind.NO_ACTIVE_REVIEWERS, f"user_id {request.user_id}")

        try:
            prs = await self.pull_requests.get_by_ids(row.pr_id for row in assignments)
        except RepositoryError as e:
            raise ServiceError(ErrorKind.GET_PULL_REQUEST_FAILED) from e
        try:
            statuses = await self.statuses.get_by_ids(pr.status_id for pr in prs)
        except RepositoryError as e:
            raise ServiceError(ErrorKind.GET_STATUS_FAILED) from e
        status_by_id = {status.id: status.status for status in statuses}

        pull_requests = []
        for pr in prs:
            status = status_by_id.get(pr.status_id)
            if status is None:
                logger.debug("Status %s not found for %s, skipping", pr.status_id, pr.id)
                continue
            pull_requests.append(pull_request_short_record(pr, status))

        return GetReviewOut(user_id=request.user_id, pull_requests=pull_requests)
