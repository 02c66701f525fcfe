"""
Business metrics for the reviewer service.

Counters live on a registry handed in by the caller, so every application
instance (and every test) owns its own set.
"""

from prometheus_client import CollectorRegistry, Counter


class BusinessMetrics:
    def __init__(self, registry: CollectorRegistry):
        self.registry = registry
        self.created_prs = Counter(
            "created_prs_total",
            "Total number of created pull requests",
            registry=registry,
        )
        self.assigned_reviewers = Counter(
            "assigned_reviewers_total",
            "Total number of reviewers assigned on pull request creation",
            registry=registry,
        )
        self.reassigned_reviewers = Counter(
            "reassigned_reviewers_total",
            "Total number of reviewers put in place of another reviewer",
            registry=registry,
        )
        self.created_teams = Counter(
            "created_teams_total",
            "Total number of created teams",
            registry=registry,
        )
        self.created_users = Counter(
            "created_users_total",
            "Total number of created or updated users",
            registry=registry,
        )

    def pr_created(self, reviewers_count: int):
        self.created_prs.inc()
        self.assigned_reviewers.inc(reviewers_count)

    def reviewers_reassigned(self, count: int = 1):
        self.reassigned_reviewers.inc(count)

    def team_created(self, users_count: int):
        self.created_teams.inc()
        self.created_users.inc(users_count)
