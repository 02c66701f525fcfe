from typing import Optional

from fastapi import Request
from prometheus_client import CollectorRegistry
from sqlalchemy.ext.asyncio import async_sessionmaker

from clock import Clock, SystemClock
from config import Settings
from metrics import BusinessMetrics
from models.database import Database, TransactionManager
from repositories.pr_reviewers import PRReviewerRepository
from repositories.pr_statuses import PRStatusRepository
from repositories.pull_requests import PullRequestRepository
from repositories.teams import TeamRepository
from repositories.users import UserRepository
from services.pull_request import CreatePullRequestService, MergePullRequestService, ReassignReviewerService
from services.reviewers import Randomizer, ReviewerSelector
from services.stats import ReviewerStatsService
from services.teams import AddTeamService, DeactivateTeamUsersService, GetTeamService
from services.users import GetReviewService, SetIsActiveService


class Container:
    """Wires repositories and collaborators into the workflow services."""

    def __init__(
        self,
        settings: Settings,
        session_maker: async_sessionmaker,
        randomizer: Optional[Randomizer] = None,
        clock: Optional[Clock] = None,
        registry: Optional[CollectorRegistry] = None,
    ):
        self.settings = settings
        self.database = Database(session_maker)
        self.trm = TransactionManager(self.database)
        self.clock = clock or SystemClock()
        self.registry = registry or CollectorRegistry()
        self.metrics = BusinessMetrics(self.registry)
        self.selector = ReviewerSelector(randomizer or Randomizer())

        self.teams = TeamRepository(self.database, self.clock)
        self.users = UserRepository(self.database, self.clock)
        self.pull_requests = PullRequestRepository(self.database, self.clock)
        self.statuses = PRStatusRepository(self.database, self.clock)
        self.pr_reviewers = PRReviewerRepository(self.database, self.clock)

        self.add_team = AddTeamService(self.teams, self.users, self.trm, self.metrics)
        self.get_team = GetTeamService(self.teams, self.users)
        self.deactivate_team_users = DeactivateTeamUsersService(
            self.teams, self.users, self.pull_requests, self.pr_reviewers,
            self.statuses, self.selector, self.trm, self.metrics,
        )
        self.set_is_active = SetIsActiveService(self.teams, self.users, self.trm)
        self.get_review = GetReviewService(self.users, self.pull_requests, self.pr_reviewers, self.statuses)
        self.create_pull_request = CreatePullRequestService(
            self.users, self.pull_requests, self.pr_reviewers, self.statuses,
            self.selector, settings.MAX_PR_REVIEWERS, self.trm, self.metrics,
        )
        self.merge_pull_request = MergePullRequestService(
            self.pull_requests, self.pr_reviewers, self.statuses, self.trm,
        )
        self.reassign_reviewer = ReassignReviewerService(
            self.users, self.pull_requests, self.pr_reviewers, self.statuses,
            self.selector, self.trm, self.metrics,
        )
        self.reviewer_stats = ReviewerStatsService(self.pr_reviewers)


def get_container(request: Request) -> Container:
    return request.app.state.container
