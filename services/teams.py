import logging
from functools import partial
from typing import Dict, List, Sequence, Set

from errors import EntityNotFoundError, ErrorKind, RepositoryError, ServiceError
from metrics import BusinessMetrics
from models.database import TransactionManager
from models.models import OPEN_STATUS, Team, User
from repositories.pr_reviewers import PRReviewerRepository
from repositories.pr_statuses import PRStatusRepository
from repositories.pull_requests import PullRequestRepository
from repositories.teams import TeamRepository
from repositories.users import UserIn, UserRepository
from services.common import (
    assign_reviewer,
    load_active_team_members,
    load_author,
    load_reviewer_ids,
    pull_request_short_record,
    remove_reviewer,
)
from services.contracts import (
    AddTeamIn,
    DeactivateTeamUsersIn,
    DeactivateTeamUsersOut,
    GetTeamIn,
    PullRequestShortRecord,
    TeamMemberRecord,
    TeamRecord,
)
from services.reviewers import ReviewerSelector


logger = logging.getLogger(__name__)


def _members(users: Sequence[User]) -> List[TeamMemberRecord]:
    return [
        TeamMemberRecord(user_id=user.id, username=user.name, is_active=user.is_active)
        for user in users
    ]


async def _get_team_by_name(teams: TeamRepository, team_name: str) -> Team:
    try:
        return await teams.get_by_name(team_name)
    except EntityNotFoundError as e:
        raise ServiceError(ErrorKind.TEAM_NOT_FOUND, f"team {team_name}") from e
    except RepositoryError as e:
        raise ServiceError(ErrorKind.GET_TEAM_FAILED, team_name) from e


async def _get_team_members(users: UserRepository, team_id: str) -> List[User]:
    try:
        return await users.get_by_team_id(team_id)
    except RepositoryError as e:
        raise ServiceError(ErrorKind.GET_USERS_FAILED, f"team_id {team_id}") from e


def _needs_update(user: User, user_in: UserIn) -> bool:
    return (
        user.name != user_in.name
        or user.is_active != user_in.is_active
        or user.team_id != user_in.team_id
    )


class AddTeamService:
    """
    POST /team/add
    Create the team if it is new, then create or update its members
    """

    def __init__(
        self,
        teams: TeamRepository,
        users: UserRepository,
        trm: TransactionManager,
        metrics: BusinessMetrics,
    ):
        self.teams = teams
        self.users = users
        self.trm = trm
        self.metrics = metrics

    async def run(self, request: AddTeamIn) -> TeamRecord:
        result = await self.trm.run(partial(self._run, request))
        self.metrics.team_created(len(result.members))
        return result

    async def _run(self, request: AddTeamIn) -> TeamRecord:
        seen = set()
        for member in request.members:
            if member.user_id in seen:
                raise ServiceError(ErrorKind.DUPLICATE_USERS, f"duplicate user_id {member.user_id}")
            seen.add(member.user_id)

        logger.debug("Get team %s", request.team_name)
        try:
            team = await self.teams.get_by_name(request.team_name)
        except EntityNotFoundError:
            logger.debug("Create team %s", request.team_name)
            try:
                team = await self.teams.save(request.team_name)
            except RepositoryError as e:
                raise ServiceError(ErrorKind.SAVE_TEAM_FAILED, request.team_name) from e
        except RepositoryError as e:
            raise ServiceError(ErrorKind.GET_TEAM_FAILED, request.team_name) from e

        try:
            existing = {user.id: user for user in await self.users.get_by_ids(seen)}
        except RepositoryError as e:
            raise ServiceError(ErrorKind.GET_USERS_FAILED) from e

        to_create: List[UserIn] = []
        to_update: List[UserIn] = []
        for member in request.members:
            user_in = UserIn(
                id=member.user_id,
                name=member.username,
                is_active=member.is_active,
                team_id=team.id,
            )
            user = existing.get(member.user_id)
            if user is None:
                to_create.append(user_in)
            elif _needs_update(user, user_in):
                to_update.append(user_in)
            else:
                logger.debug("User %s does not need update", member.user_id)

        processed: List[User] = []
        if to_create:
            try:
                processed.extend(await self.users.save_batch(to_create))
            except RepositoryError as e:
                raise ServiceError(ErrorKind.SAVE_USERS_FAILED) from e
        if to_update:
            try:
                processed.extend(await self.users.update_batch(to_update))
            except RepositoryError as e:
                raise ServiceError(ErrorKind.UPDATE_USERS_FAILED) from e

        if not processed:
            raise ServiceError(ErrorKind.NO_USERS_WERE_UPDATED, request.team_name)

        logger.debug("Team %s saved with %d changed members", team.name, len(processed))
        return TeamRecord(team_name=team.name, members=_members(processed))


class GetTeamService:
    """
    GET /team/get
    Team with all of its members
    """

    def __init__(self, teams: TeamRepository, users: UserRepository):
        self.teams = teams
        self.users = users

    async def run(self, request: GetTeamIn) -> TeamRecord:
        team = await _get_team_by_name(self.teams, request.team_name)
        members = await _get_team_members(self.users, team.id)
        return TeamRecord(team_name=team.name, members=_members(members))


class DeactivateTeamUsersService:
    """
    PATCH /team/deactivateUsers

    Deactivates the given members of a team and repairs the open pull requests
    they review. Every vacated reviewer slot is backfilled from the author's
    remaining active teammates; when nobody is left the slot is dropped.
    """

    def __init__(
        self,
        teams: TeamRepository,
        users: UserRepository,
        pull_requests: PullRequestRepository,
        pr_reviewers: PRReviewerRepository,
        statuses: PRStatusRepository,
        selector: ReviewerSelector,
        trm: TransactionManager,
        metrics: BusinessMetrics,
    ):
        self.teams = teams
        self.users = users
        self.pull_requests = pull_requests
        self.pr_reviewers = pr_reviewers
        self.statuses = statuses
        self.selector = selector
        self.trm = trm
        self.metrics = metrics

    async def run(self, request: DeactivateTeamUsersIn) -> DeactivateTeamUsersOut:
        result, replaced = await self.trm.run(partial(self._run, request))
        if replaced:
            self.metrics.reviewers_reassigned(replaced)
        return result

    async def _run(self, request: DeactivateTeamUsersIn):
        team = await _get_team_by_name(self.teams, request.team_name)

        user_ids = list(dict.fromkeys(request.user_ids))
        if not user_ids:
            raise ServiceError(ErrorKind.USERS_BY_IDS_NOT_FOUND, "empty user list")

        logger.debug("Get %d users of team %s", len(user_ids), team.name)
        try:
            users = await self.users.get_by_ids(user_ids)
        except RepositoryError as e:
            raise ServiceError(ErrorKind.GET_USERS_FAILED) from e

        found = set()
        for user in users:
            if user.team_id != team.id:
                raise ServiceError(
                    ErrorKind.USER_NOT_BELONGS_TO_TEAM,
                    f"user {user.id} not in team {team.name}",
                )
            found.add(user.id)
        for user_id in user_ids:
            if user_id not in found:
                raise ServiceError(ErrorKind.USER_NOT_FOUND, f"user {user_id}")

        deactivated = set(user_ids)
        open_prs = await self._find_open_prs(deactivated)

        to_deactivate = [
            UserIn(id=user.id, name=user.name, is_active=False, team_id=user.team_id)
            for user in users
            if user.is_active
        ]
        if to_deactivate:
            logger.debug("Deactivate %d users", len(to_deactivate))
            try:
                await self.users.update_batch(to_deactivate)
            except RepositoryError as e:
                raise ServiceError(ErrorKind.UPDATE_USERS_FAILED) from e

        affected, replaced = await self._reassign(open_prs, deactivated)

        members = await _get_team_members(self.users, team.id)
        logger.debug(
            "Team %s: %d users deactivated, %d pull requests affected",
            team.name, len(to_deactivate), len(affected),
        )
        result = DeactivateTeamUsersOut(
            team=TeamRecord(team_name=team.name, members=_members(members)),
            affected_pull_requests=affected,
        )
        return result, replaced

    async def _find_open_prs(self, user_ids: Set[str]) -> List[PullRequestShortRecord]:
        try:
            assignments = await self.pr_reviewers.get_by_reviewer_ids(user_ids)
        except RepositoryError as e:
            raise ServiceError(ErrorKind.GET_REVIEWERS_FAILED) from e
        if not assignments:
            raise ServiceError(ErrorKind.NO_USERS_ASSIGNED_TO_PRS)

        pr_ids = list(dict.fromkeys(row.pr_id for row in assignments))
        try:
            prs = await self.pull_requests.get_by_ids(pr_ids)
        except RepositoryError as e:
            raise ServiceError(ErrorKind.GET_PULL_REQUEST_FAILED) from e
        try:
            statuses = await self.statuses.get_by_ids(pr.status_id for pr in prs)
        except RepositoryError as e:
            raise ServiceError(ErrorKind.GET_STATUS_FAILED) from e
        status_by_id: Dict[str, str] = {status.id: status.status for status in statuses}

        open_prs = []
        for pr in prs:
            status = status_by_id.get(pr.status_id)
            if status is None:
                logger.debug("Status %s not found for %s, skipping", pr.status_id, pr.id)
                continue
            if status == OPEN_STATUS:
                open_prs.append(pull_request_short_record(pr, status))

        logger.debug("Found %d pull requests, %d open", len(prs), len(open_prs))
        if not open_prs:
            raise ServiceError(ErrorKind.NO_PRS_TO_AFFECT)
        return open_prs

    async def _reassign(self, open_prs: List[PullRequestShortRecord], deactivated: Set[str]):
        affected: List[PullRequestShortRecord] = []
        replaced = 0
        for pr in open_prs:
            current = await load_reviewer_ids(self.pr_reviewers, pr.pull_request_id)
            if not current:
                affected.append(pr)
                continue

            vacated = [reviewer_id for reviewer_id in current if reviewer_id in deactivated]
            if not vacated:
                continue

            author = await load_author(self.users, pr.author_id)
            team_members = await load_active_team_members(self.users, author.team_id)
            selected = self.selector.select(
                team_members,
                exclude_author=author.id,
                exclude_current=current,
                max_count=len(vacated),
            )

            if not selected:
                logger.warning(
                    "No available reviewers for %s in team %s, removing %d reviewers",
                    pr.pull_request_id, author.team_id, len(vacated),
                )
            for reviewer in selected:
                await assign_reviewer(self.pr_reviewers, pr.pull_request_id, reviewer.id)
            for reviewer_id in vacated:
                await remove_reviewer(self.pr_reviewers, pr.pull_request_id, reviewer_id)

            replaced += len(selected)
            affected.append(pr)
            logger.debug(
                "Pull request %s: removed %d reviewers, added %d",
                pr.pull_request_id, len(vacated), len(selected),
            )
        return affected, replaced
