from datetime import timedelta

import pytest

from errors import EntityNotFoundError, ErrorKind, RepositoryError, ServiceError
from models.models import MERGED_STATUS, OPEN_STATUS
from services.contracts import MergePullRequestIn, ReassignReviewerIn
from conftest import add_team, create_pr, reviewer_ids


@pytest.mark.asyncio
async def test_create_assigns_capped_reviewers(container, randomizer):
    await add_team(container, "backend", [("u1", True), ("u2", True), ("u3", True), ("u4", True)])

    pr = await create_pr(container, "pr-1", "u1")

    assert pr.status == OPEN_STATUS
    assert pr.assigned_reviewers == ["u4", "u3"]
    assert "u1" not in pr.assigned_reviewers
    assert randomizer.calls == [3]
    assert await reviewer_ids(container, "pr-1") == ["u3", "u4"]
    assert container.registry.get_sample_value("created_prs_total") == 1.0
    assert container.registry.get_sample_value("assigned_reviewers_total") == 2.0


@pytest.mark.asyncio
async def test_create_without_teammates_assigns_nobody(container, randomizer):
    await add_team(container, "solo", [("u1", True)])

    pr = await create_pr(container, "pr-1", "u1")

    assert pr.assigned_reviewers == []
    assert randomizer.calls == []
    stored = await container.pull_requests.get_by_id("pr-1")
    assert stored.author_id == "u1"


@pytest.mark.asyncio
async def test_create_skips_inactive_teammates(container, randomizer):
    await add_team(container, "backend", [("u1", True), ("u2", False), ("u3", True), ("u4", True)])

    pr = await create_pr(container, "pr-1", "u1")

    assert sorted(pr.assigned_reviewers) == ["u3", "u4"]
    assert randomizer.calls == []


@pytest.mark.asyncio
async def test_create_rejects_existing_pr(container):
    await add_team(container, "backend", [("u1", True), ("u2", True)])
    await create_pr(container, "pr-1", "u1")

    with pytest.raises(ServiceError) as exc:
        await create_pr(container, "pr-1", "u2")

    assert exc.value.kind == ErrorKind.PULL_REQUEST_EXISTS


@pytest.mark.asyncio
async def test_create_with_unknown_author(container):
    with pytest.raises(ServiceError) as exc:
        await create_pr(container, "pr-1", "ghost")

    assert exc.value.kind == ErrorKind.AUTHOR_NOT_FOUND


@pytest.mark.asyncio
async def test_create_rolls_back_when_assignment_fails(container, monkeypatch):
    await add_team(container, "backend", [("u1", True), ("u2", True), ("u3", True)])
    original_save = container.pr_reviewers.save
    calls = []

    async def flaky_save(pr_id, reviewer_id):
        calls.append(reviewer_id)
        if len(calls) > 1:
            raise RepositoryError("connection lost")
        return await original_save(pr_id, reviewer_id)

    monkeypatch.setattr(container.pr_reviewers, "save", flaky_save)

    with pytest.raises(ServiceError) as exc:
        await create_pr(container, "pr-1", "u1")

    assert exc.value.kind == ErrorKind.ASSIGN_REVIEWER_FAILED
    assert isinstance(exc.value.__cause__, RepositoryError)
    with pytest.raises(EntityNotFoundError):
        await container.pull_requests.get_by_id("pr-1")
    assert await container.pr_reviewers.get_all() == []
    assert container.registry.get_sample_value("created_prs_total") == 0.0


def naive(value):
    return value.replace(tzinfo=None)


@pytest.mark.asyncio
async def test_merge_is_idempotent(container, clock):
    opened_at = clock.current
    await add_team(container, "backend", [("u1", True), ("u2", True)])
    created = await create_pr(container, "pr-1", "u1")
    clock.current = opened_at + timedelta(hours=3)

    merged = await container.merge_pull_request.run(MergePullRequestIn(pull_request_id="pr-1"))
    clock.current = opened_at + timedelta(days=1)
    again = await container.merge_pull_request.run(MergePullRequestIn(pull_request_id="pr-1"))

    assert naive(created.created_at) == naive(opened_at)
    assert created.merged_at is None
    assert merged.status == MERGED_STATUS
    assert naive(merged.created_at) == naive(opened_at)
    assert naive(merged.merged_at) == naive(opened_at + timedelta(hours=3))
    assert again.status == MERGED_STATUS
    assert naive(again.merged_at) == naive(opened_at + timedelta(hours=3))
    assert again.assigned_reviewers == ["u2"]


@pytest.mark.asyncio
async def test_merge_unknown_pr(container):
    with pytest.raises(ServiceError) as exc:
        await container.merge_pull_request.run(MergePullRequestIn(pull_request_id="missing"))

    assert exc.value.kind == ErrorKind.PULL_REQUEST_NOT_FOUND


@pytest.mark.asyncio
async def test_reassign_swaps_one_reviewer(container, randomizer):
    await add_team(container, "backend", [("u1", True), ("u2", True), ("u3", True), ("u4", True)])
    await create_pr(container, "pr-1", "u1")
    randomizer.calls.clear()

    result = await container.reassign_reviewer.run(
        ReassignReviewerIn(pull_request_id="pr-1", old_reviewer_id="u4")
    )

    assert result.replaced_by == "u2"
    assert sorted(result.pr.assigned_reviewers) == ["u2", "u3"]
    assert "u4" not in result.pr.assigned_reviewers
    assert "u1" not in result.pr.assigned_reviewers
    assert randomizer.calls == []
    assert await reviewer_ids(container, "pr-1") == ["u2", "u3"]
    assert container.registry.get_sample_value("reassigned_reviewers_total") == 1.0


@pytest.mark.asyncio
async def test_reassign_picks_randomly_among_several(container, randomizer):
    await add_team(container, "backend", [(f"u{i}", True) for i in range(1, 7)])
    await create_pr(container, "pr-1", "u1")
    randomizer.calls.clear()

    result = await container.reassign_reviewer.run(
        ReassignReviewerIn(pull_request_id="pr-1", old_reviewer_id="u6")
    )

    # candidates u2, u3, u4 reversed
    assert result.replaced_by == "u4"
    assert randomizer.calls == [3]
    assert await reviewer_ids(container, "pr-1") == ["u4", "u5"]


@pytest.mark.asyncio
async def test_reassign_reviewer_not_assigned(container):
    await add_team(container, "backend", [("u1", True), ("u2", True), ("u3", True), ("u4", True)])
    await create_pr(container, "pr-1", "u1")

    with pytest.raises(ServiceError) as exc:
        await container.reassign_reviewer.run(
            ReassignReviewerIn(pull_request_id="pr-1", old_reviewer_id="u2")
        )

    assert exc.value.kind == ErrorKind.REVIEWER_NOT_FOUND
    assert await reviewer_ids(container, "pr-1") == ["u3", "u4"]


@pytest.mark.asyncio
async def test_reassign_on_merged_pr(container):
    await add_team(container, "backend", [("u1", True), ("u2", True), ("u3", True)])
    await create_pr(container, "pr-1", "u1")
    await container.merge_pull_request.run(MergePullRequestIn(pull_request_id="pr-1"))

    with pytest.raises(ServiceError) as exc:
        await container.reassign_reviewer.run(
            ReassignReviewerIn(pull_request_id="pr-1", old_reviewer_id="u2")
        )

    assert exc.value.kind == ErrorKind.PULL_REQUEST_ALREADY_MERGED
    assert await reviewer_ids(container, "pr-1") == ["u2", "u3"]


@pytest.mark.asyncio
async def test_reassign_without_candidates(container):
    await add_team(container, "backend", [("u1", True), ("u2", True), ("u3", True)])
    await create_pr(container, "pr-1", "u1")

    with pytest.raises(ServiceError) as exc:
        await container.reassign_reviewer.run(
            ReassignReviewerIn(pull_request_id="pr-1", old_reviewer_id="u2")
        )

    assert exc.value.kind == ErrorKind.NO_AVAILABLE_REVIEWERS
    assert await reviewer_ids(container, "pr-1") == ["u2", "u3"]


@pytest.mark.asyncio
async def test_reassign_unknown_pr(container):
    with pytest.raises(ServiceError) as exc:
        await container.reassign_reviewer.run(
            ReassignReviewerIn(pull_request_id="missing", old_reviewer_id="u2")
        )

    assert exc.value.kind == ErrorKind.PULL_REQUEST_NOT_FOUND


@pytest.mark.asyncio
async def test_reassign_rolls_back_removed_reviewer(container, monkeypatch):
    await add_team(container, "backend", [("u1", True), ("u2", True), ("u3", True), ("u4", True)])
    await create_pr(container, "pr-1", "u1")

    async def failing_save(pr_id, reviewer_id):
        raise RepositoryError("connection lost")

    monkeypatch.setattr(container.pr_reviewers, "save", failing_save)

    with pytest.raises(ServiceError) as exc:
        await container.reassign_reviewer.run(
            ReassignReviewerIn(pull_request_id="pr-1", old_reviewer_id="u4")
        )

    assert exc.value.kind == ErrorKind.ASSIGN_REVIEWER_FAILED
    assert await reviewer_ids(container, "pr-1") == ["u3", "u4"]
    assert container.registry.get_sample_value("reassigned_reviewers_total") == 0.0
