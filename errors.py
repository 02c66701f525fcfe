from enum import Enum
from typing import Optional


class EntityNotFoundError(Exception):
    """Repository lookup for a single row matched nothing."""

    def __init__(self, entity: str, key):
        super().__init__(f"{entity} not found: {key}")
        self.entity = entity
        self.key = key


class RepositoryError(Exception):
    """Any storage failure. The driver exception is chained as ``__cause__``."""


class ErrorKind(str, Enum):
    # not found
    TEAM_NOT_FOUND = "TEAM_NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    PULL_REQUEST_NOT_FOUND = "PULL_REQUEST_NOT_FOUND"
    AUTHOR_NOT_FOUND = "AUTHOR_NOT_FOUND"
    REVIEWER_NOT_FOUND = "REVIEWER_NOT_FOUND"
    USERS_BY_IDS_NOT_FOUND = "USERS_BY_IDS_NOT_FOUND"
    PRS_REVIEWERS_NOT_FOUND = "PRS_REVIEWERS_NOT_FOUND"

    # business rules
    PULL_REQUEST_EXISTS = "PULL_REQUEST_EXISTS"
    PULL_REQUEST_ALREADY_MERGED = "PULL_REQUEST_ALREADY_MERGED"
    USER_NOT_BELONGS_TO_TEAM = "USER_NOT_BELONGS_TO_TEAM"
    DUPLICATE_USERS = "DUPLICATE_USERS"
    USER_DONT_NEED_CHANGE = "USER_DONT_NEED_CHANGE"
    NO_AVAILABLE_REVIEWERS = "NO_AVAILABLE_REVIEWERS"
    NO_ACTIVE_REVIEWERS = "NO_ACTIVE_REVIEWERS"
    NO_PRS_TO_AFFECT = "NO_PRS_TO_AFFECT"
    NO_USERS_ASSIGNED_TO_PRS = "NO_USERS_ASSIGNED_TO_PRS"
    NO_USERS_WERE_UPDATED = "NO_USERS_WERE_UPDATED"

    # infrastructure
    GET_TEAM_FAILED = "GET_TEAM_FAILED"
    SAVE_TEAM_FAILED = "SAVE_TEAM_FAILED"
    GET_USER_FAILED = "GET_USER_FAILED"
    GET_USERS_FAILED = "GET_USERS_FAILED"
    SAVE_USERS_FAILED = "SAVE_USERS_FAILED"
    UPDATE_USER_FAILED = "UPDATE_USER_FAILED"
    UPDATE_USERS_FAILED = "UPDATE_USERS_FAILED"
    GET_PULL_REQUEST_FAILED = "GET_PULL_REQUEST_FAILED"
    SAVE_PULL_REQUEST_FAILED = "SAVE_PULL_REQUEST_FAILED"
    UPDATE_PULL_REQUEST_FAILED = "UPDATE_PULL_REQUEST_FAILED"
    GET_STATUS_FAILED = "GET_STATUS_FAILED"
    SET_STATUS_FAILED = "SET_STATUS_FAILED"
    UPDATE_STATUS_FAILED = "UPDATE_STATUS_FAILED"
    GET_REVIEWERS_FAILED = "GET_REVIEWERS_FAILED"
    ASSIGN_REVIEWER_FAILED = "ASSIGN_REVIEWER_FAILED"
    REMOVE_REVIEWER_FAILED = "REMOVE_REVIEWER_FAILED"


INFRASTRUCTURE_KINDS = frozenset(kind for kind in ErrorKind if kind.value.endswith("_FAILED"))


class ServiceError(Exception):
    """Classified workflow failure. Routes map ``kind`` to an HTTP response."""

    def __init__(self, kind: ErrorKind, detail: Optional[str] = None):
        message = kind.value if detail is None else f"{kind.value}: {detail}"
        super().__init__(message)
        self.kind = kind
        self.detail = detail

    @property
    def is_infrastructure(self) -> bool:
        return self.kind in INFRASTRUCTURE_KINDS
