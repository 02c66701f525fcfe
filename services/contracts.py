"""Input and output records of the service workflows."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class TeamMemberRecord(BaseModel):
    user_id: str
    username: str
    is_active: bool


class TeamRecord(BaseModel):
    team_name: str
    members: List[TeamMemberRecord] = Field(default_factory=list)


class PullRequestRecord(BaseModel):
    pull_request_id: str
    pull_request_name: str
    author_id: str
    status: str
    assigned_reviewers: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    merged_at: Optional[datetime] = None


class PullRequestShortRecord(BaseModel):
    pull_request_id: str
    pull_request_name: str
    author_id: str
    status: str


class UserRecord(BaseModel):
    user_id: str
    username: str
    team_name: str
    is_active: bool


# pull requests

class CreatePullRequestIn(BaseModel):
    pull_request_id: str
    pull_request_name: str
    author_id: str


class MergePullRequestIn(BaseModel):
    pull_request_id: str


class ReassignReviewerIn(BaseModel):
    pull_request_id: str
    old_reviewer_id: str


class ReassignReviewerOut(BaseModel):
    pr: PullRequestRecord
    replaced_by: str


# teams

class AddTeamIn(BaseModel):
    team_name: str
    members: List[TeamMemberRecord]


class GetTeamIn(BaseModel):
    team_name: str


class DeactivateTeamUsersIn(BaseModel):
    team_name: str
    user_ids: List[str]


class DeactivateTeamUsersOut(BaseModel):
    team: TeamRecord
    affected_pull_requests: List[PullRequestShortRecord] = Field(default_factory=list)


# users

class SetIsActiveIn(BaseModel):
    user_id: str
    is_active: bool


class GetReviewIn(BaseModel):
    user_id: str


class GetReviewOut(BaseModel):
    user_id: str
    pull_requests: List[PullRequestShortRecord] = Field(default_factory=list)


# statistics

class ReviewerStatsRecord(BaseModel):
    reviewer_id: str
    assignment_count: int


class ReviewerStatsOut(BaseModel):
    reviewers: List[ReviewerStatsRecord] = Field(default_factory=list)
