import random
from typing import Callable, Collection, List, Optional, Sequence

from models.models import User


class Randomizer:
    """Fisher-Yates shuffle driven through a caller supplied swap."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def shuffle(self, n: int, swap: Callable[[int, int], None]):
        for i in range(n - 1, 0, -1):
            j = self.rng.randint(0, i)
            swap(i, j)


class ReviewerSelector:
    """
    Picks reviewers for a pull request out of a pool of team members.

    Eligible candidates are active users that are neither the author nor
    already assigned. When there are no more candidates than requested the
    candidates come back in pool order and the randomizer is not called;
    otherwise the whole candidate list is shuffled and truncated.
    """

    def __init__(self, randomizer: Randomizer):
        self.randomizer = randomizer

    @staticmethod
    def eligible(
        pool: Sequence[User],
        exclude_author: str,
        exclude_current: Collection[str] = (),
    ) -> List[User]:
        excluded = set(exclude_current)
        return [
            user for user in pool
            if user.id != exclude_author and user.is_active and user.id not in excluded
        ]

    def select(
        self,
        pool: Sequence[User],
        exclude_author: str,
        exclude_current: Collection[str] = (),
        max_count: int = 1,
    ) -> List[User]:
        if max_count <= 0:
            return []

        candidates = self.eligible(pool, exclude_author, exclude_current)
        if len(candidates) <= max_count:
            return candidates

        shuffled = list(candidates)

        def swap(i: int, j: int):
            shuffled[i], shuffled[j] = shuffled[j], shuffled[i]

        self.randomizer.shuffle(len(shuffled), swap)
        return shuffled[:max_count]
