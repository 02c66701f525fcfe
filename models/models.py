from sqlalchemy.orm import declarative_base
from sqlalchemy import *


Base = declarative_base()

OPEN_STATUS = "OPEN"
MERGED_STATUS = "MERGED"


class Team(Base):
    __tablename__ = 'teams'

    id = Column(String(36), primary_key=True)
    name = Column(String(100), unique=True, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False)


class User(Base):
    __tablename__ = 'users'

    id = Column(String(50), primary_key=True)
    name = Column(String(100), nullable=False)
    is_active = Column(Boolean(), nullable=False, default=True)
    team_id = Column(String(36), ForeignKey('teams.id'), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False)


class PRStatus(Base):
    __tablename__ = 'pr_statuses'

    id = Column(String(36), primary_key=True)
    status = Column(String(20), nullable=False, default=OPEN_STATUS)


class PullRequest(Base):
    __tablename__ = 'pull_requests'

    id = Column(String(50), primary_key=True)
    name = Column(String(255), nullable=False)
    author_id = Column(String(50), ForeignKey('users.id'), nullable=False, index=True)
    status_id = Column(String(36), ForeignKey('pr_statuses.id'), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    merged_at = Column(DateTime(timezone=True), nullable=True)


class PRReviewer(Base):
    __tablename__ = 'pr_reviewers'

    id = Column(String(36), primary_key=True)
    pr_id = Column(String(50), ForeignKey('pull_requests.id'), nullable=False, index=True)
    reviewer_id = Column(String(50), ForeignKey('users.id'), nullable=False, index=True)

    __table_args__ = (
        UniqueConstraint('pr_id', 'reviewer_id', name='uq_pr_reviewers_pr_reviewer'),
    )
