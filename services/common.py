"""Lookups shared by the workflows, classified into ServiceError kinds."""

from typing import Iterable, List

from errors import EntityNotFoundError, ErrorKind, RepositoryError, ServiceError
from models.models import PRStatus, PullRequest, User
from repositories.pr_reviewers import PRReviewerRepository
from repositories.pr_statuses import PRStatusRepository
from repositories.pull_requests import PullRequestRepository
from repositories.users import UserRepository
from services.contracts import PullRequestRecord, PullRequestShortRecord


async def load_pull_request(pull_requests: PullRequestRepository, pr_id: str) -> PullRequest:
    try:
        return await pull_requests.get_by_id(pr_id)
    except EntityNotFoundError as e:
        raise ServiceError(ErrorKind.PULL_REQUEST_NOT_FOUND, pr_id) from e
    except RepositoryError as e:
        raise ServiceError(ErrorKind.GET_PULL_REQUEST_FAILED, pr_id) from e


async def load_status(statuses: PRStatusRepository, status_id: str) -> PRStatus:
    try:
        return await statuses.get_by_id(status_id)
    except (EntityNotFoundError, RepositoryError) as e:
        raise ServiceError(ErrorKind.GET_STATUS_FAILED, f"status_id {status_id}") from e


async def load_reviewer_ids(pr_reviewers: PRReviewerRepository, pr_id: str) -> List[str]:
    try:
        rows = await pr_reviewers.get_by_pr_id(pr_id)
    except RepositoryError as e:
        raise ServiceError(ErrorKind.GET_REVIEWERS_FAILED, f"pr_id {pr_id}") from e
    return [row.reviewer_id for row in rows]


async def load_author(users: UserRepository, author_id: str) -> User:
    try:
        return await users.get_by_id(author_id)
    except EntityNotFoundError as e:
        raise ServiceError(ErrorKind.AUTHOR_NOT_FOUND, author_id) from e
    except RepositoryError as e:
        raise ServiceError(ErrorKind.GET_USER_FAILED, author_id) from e


async def load_active_team_members(users: UserRepository, team_id: str) -> List[User]:
    try:
        return await users.get_active_by_team_id(team_id)
    except RepositoryError as e:
        raise ServiceError(ErrorKind.GET_USERS_FAILED, f"team_id {team_id}") from e


async def assign_reviewer(pr_reviewers: PRReviewerRepository, pr_id: str, reviewer_id: str):
    try:
        await pr_reviewers.save(pr_id, reviewer_id)
    except RepositoryError as e:
        raise ServiceError(ErrorKind.ASSIGN_REVIEWER_FAILED, f"reviewer {reviewer_id}") from e


async def remove_reviewer(pr_reviewers: PRReviewerRepository, pr_id: str, reviewer_id: str):
    try:
        await pr_reviewers.delete_by_pr_and_reviewer(pr_id, reviewer_id)
    except RepositoryError as e:
        raise ServiceError(ErrorKind.REMOVE_REVIEWER_FAILED, f"reviewer_id {reviewer_id}") from e


def pull_request_record(pr: PullRequest, status: str, reviewer_ids: Iterable[str]) -> PullRequestRecord:
    return PullRequestRecord(
        pull_request_id=pr.id,
        pull_request_name=pr.name,
        author_id=pr.author_id,
        status=status,
        assigned_reviewers=list(reviewer_ids),
        created_at=pr.created_at,
        merged_at=pr.merged_at,
    )


def pull_request_short_record(pr: PullRequest, status: str) -> PullRequestShortRecord:
    return PullRequestShortRecord(
        pull_request_id=pr.id,
        pull_request_name=pr.name,
        author_id=pr.author_id,
        status=status,
    )
