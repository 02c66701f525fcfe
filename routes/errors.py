import logging

from fastapi import HTTPException, status

from errors import ErrorKind, ServiceError


logger = logging.getLogger(__name__)


# kind -> (status code, error code, message)
ERROR_RESPONSES = {
    ErrorKind.TEAM_NOT_FOUND: (status.HTTP_404_NOT_FOUND, "NOT_FOUND", "team not found"),
    ErrorKind.USER_NOT_FOUND: (status.HTTP_404_NOT_FOUND, "NOT_FOUND", "user not found"),
    ErrorKind.PULL_REQUEST_NOT_FOUND: (status.HTTP_404_NOT_FOUND, "NOT_FOUND", "PR not found"),
    ErrorKind.AUTHOR_NOT_FOUND: (status.HTTP_404_NOT_FOUND, "NOT_FOUND", "author not found"),
    ErrorKind.REVIEWER_NOT_FOUND: (status.HTTP_404_NOT_FOUND, "NOT_ASSIGNED", "reviewer is not assigned to this PR"),
    ErrorKind.USERS_BY_IDS_NOT_FOUND: (status.HTTP_404_NOT_FOUND, "NOT_FOUND", "users not found by provided IDs"),
    ErrorKind.PRS_REVIEWERS_NOT_FOUND: (status.HTTP_404_NOT_FOUND, "NOT_FOUND", "no reviewer assignments found"),
    ErrorKind.PULL_REQUEST_EXISTS: (status.HTTP_409_CONFLICT, "PR_EXISTS", "PR id already exists"),
    ErrorKind.PULL_REQUEST_ALREADY_MERGED: (status.HTTP_409_CONFLICT, "PR_MERGED", "cannot reassign on merged PR"),
    ErrorKind.USER_NOT_BELONGS_TO_TEAM: (status.HTTP_409_CONFLICT, "BAD_REQUEST", "user does not belong to the specified team"),
    ErrorKind.DUPLICATE_USERS: (status.HTTP_400_BAD_REQUEST, "BAD_REQUEST", "duplicate user ids in request"),
    ErrorKind.USER_DONT_NEED_CHANGE: (status.HTTP_304_NOT_MODIFIED, "NOT_MODIFIED", "user already has this is_active value"),
    ErrorKind.NO_AVAILABLE_REVIEWERS: (status.HTTP_404_NOT_FOUND, "NO_CANDIDATE", "no active replacement candidate in team"),
    ErrorKind.NO_ACTIVE_REVIEWERS: (status.HTTP_404_NOT_FOUND, "NOT_FOUND", "user is not assigned to any PR"),
    ErrorKind.NO_PRS_TO_AFFECT: (status.HTTP_404_NOT_FOUND, "NOT_FOUND", "no open pull requests to affect"),
    ErrorKind.NO_USERS_ASSIGNED_TO_PRS: (status.HTTP_404_NOT_FOUND, "NOT_FOUND", "no users assigned to pull requests"),
    ErrorKind.NO_USERS_WERE_UPDATED: (status.HTTP_400_BAD_REQUEST, "TEAM_EXISTS", "team_name already exists"),
}

INTERNAL_ERROR = (status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL", "internal server error")


def http_error(e: ServiceError) -> HTTPException:
    if e.is_infrastructure or e.kind not in ERROR_RESPONSES:
        status_code, code, message = INTERNAL_ERROR
        logger.error("Request failed: %s", e, exc_info=e)
        message = f"{message}: {e.kind.value.lower().replace('_', ' ')}"
    else:
        status_code, code, message = ERROR_RESPONSES[e.kind]
    return HTTPException(
        status_code=status_code,
        detail={"error": {"code": code, "message": message}}
    )
