"""
Request and response bodies of the HTTP API.
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


PullRequestStatus = Literal["OPEN", "MERGED"]


class ErrorDetail(BaseModel):
    code: str = Field(..., description="Machine readable error code, e.g. PR_EXISTS")
    message: str


class ErrorResponse(BaseModel):
    """Body of every 4xx/5xx answer, nested under ``detail``."""

    error: ErrorDetail


class HealthResponse(BaseModel):
    status: str
    database: str


# teams

class TeamMember(BaseModel):
    user_id: str = Field(..., min_length=1)
    username: str
    is_active: bool = True


class TeamRequest(BaseModel):
    """Request model for creating a team or updating its members."""

    team_name: str = Field(..., min_length=1, description="Unique team name")
    members: List[TeamMember] = Field(default_factory=list)


class TeamResponse(BaseModel):
    team_name: str
    members: List[TeamMember]


class TeamCreateResponse(BaseModel):
    team: TeamResponse


class DeactivateTeamUsersRequest(BaseModel):
    team_name: str = Field(..., min_length=1)
    user_ids: List[str] = Field(..., description="Members of the team to deactivate")


# users

class SetIsActiveRequest(BaseModel):
    user_id: str
    is_active: bool


class UserResponse(BaseModel):
    user_id: str
    username: str
    team_name: str
    is_active: bool


class UserUpdateResponse(BaseModel):
    user: UserResponse


# pull requests

class PullRequestShort(BaseModel):
    """Pull request without reviewers and timestamps."""

    pull_request_id: str
    pull_request_name: str
    author_id: str
    status: PullRequestStatus


class PullRequestResponse(PullRequestShort):
    assigned_reviewers: List[str] = Field(
        default_factory=list, description="Active members of the author's team, capped by MAX_PR_REVIEWERS"
    )
    createdAt: Optional[datetime] = None
    mergedAt: Optional[datetime] = None


class PullRequestCreateRequest(BaseModel):
    pull_request_id: str = Field(..., min_length=1)
    pull_request_name: str = Field(..., min_length=1)
    author_id: str = Field(..., min_length=1)


class PullRequestCreateResponse(BaseModel):
    pr: PullRequestResponse


class PullRequestMergeRequest(BaseModel):
    pull_request_id: str


class PullRequestMergeResponse(BaseModel):
    pr: PullRequestResponse


class PullRequestReassignRequest(BaseModel):
    pull_request_id: str
    old_reviewer_id: str = Field(..., description="Reviewer to take off the pull request")


class PullRequestReassignResponse(BaseModel):
    pr: PullRequestResponse
    replaced_by: str = Field(..., description="Reviewer put in place of the old one")


class GetReviewResponse(BaseModel):
    user_id: str
    pull_requests: List[PullRequestShort]


class DeactivateTeamUsersResponse(BaseModel):
    team: TeamResponse
    affected_pull_requests: List[PullRequestShort] = Field(
        default_factory=list, description="Open pull requests whose reviewers were changed"
    )


# statistics

class ReviewerStats(BaseModel):
    reviewer_id: str
    assignment_count: int


class ReviewersStatsResponse(BaseModel):
    """Reviewers ordered by number of assignments, busiest first."""

    reviewers: List[ReviewerStats]
