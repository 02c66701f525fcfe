import random

from models.models import User
from services.reviewers import Randomizer, ReviewerSelector
from conftest import ReversingRandomizer, SpyRandomizer


def make_pool(*members):
    return [User(id=user_id, name=user_id, is_active=active, team_id="t1") for user_id, active in members]


def ids(users):
    return [user.id for user in users]


def test_excludes_author_inactive_and_current():
    pool = make_pool(("u1", True), ("u2", True), ("u3", False), ("u4", True), ("u5", True))
    selector = ReviewerSelector(SpyRandomizer())

    candidates = selector.eligible(pool, exclude_author="u1", exclude_current={"u4"})

    assert ids(candidates) == ["u2", "u5"]


def test_no_shuffle_when_pool_fits_cap():
    randomizer = SpyRandomizer()
    selector = ReviewerSelector(randomizer)
    pool = make_pool(("u1", True), ("u2", True), ("u3", True))

    selected = selector.select(pool, exclude_author="u1", max_count=2)

    assert ids(selected) == ["u2", "u3"]
    assert randomizer.calls == []


def test_single_candidate_never_calls_randomizer():
    randomizer = SpyRandomizer()
    selector = ReviewerSelector(randomizer)
    pool = make_pool(("u1", True), ("u2", True), ("u3", True))

    selected = selector.select(pool, exclude_author="u1", exclude_current=["u2"], max_count=1)

    assert ids(selected) == ["u3"]
    assert randomizer.calls == []


def test_shuffles_full_candidate_list_and_truncates():
    randomizer = ReversingRandomizer()
    selector = ReviewerSelector(randomizer)
    pool = make_pool(("u1", True), ("u2", True), ("u3", True), ("u4", True))

    selected = selector.select(pool, exclude_author="u1", max_count=2)

    assert ids(selected) == ["u4", "u3"]
    assert randomizer.calls == [3]


def test_selection_does_not_reorder_pool():
    selector = ReviewerSelector(ReversingRandomizer())
    pool = make_pool(("u1", True), ("u2", True), ("u3", True), ("u4", True))

    selector.select(pool, exclude_author="u1", max_count=1)

    assert ids(pool) == ["u1", "u2", "u3", "u4"]


def test_zero_cap_selects_nobody():
    randomizer = SpyRandomizer()
    selector = ReviewerSelector(randomizer)
    pool = make_pool(("u1", True), ("u2", True))

    assert selector.select(pool, exclude_author="u1", max_count=0) == []
    assert randomizer.calls == []


def test_empty_pool():
    selector = ReviewerSelector(SpyRandomizer())

    assert selector.select([], exclude_author="u1", max_count=2) == []


def test_random_selection_respects_cap_and_excludes_author():
    selector = ReviewerSelector(Randomizer(random.Random(7)))
    pool = make_pool(*[(f"u{i}", True) for i in range(1, 9)])

    for _ in range(50):
        selected = ids(selector.select(pool, exclude_author="u3", exclude_current={"u5"}, max_count=2))
        assert len(selected) == 2
        assert len(set(selected)) == 2
        assert "u3" not in selected
        assert "u5" not in selected


def test_randomizer_produces_permutation():
    randomizer = Randomizer(random.Random(1))
    items = list(range(10))

    def swap(i, j):
        items[i], items[j] = items[j], items[i]

    randomizer.shuffle(len(items), swap)

    assert sorted(items) == list(range(10))
