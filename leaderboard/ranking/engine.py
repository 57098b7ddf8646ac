"""
Leaderboard ordering.

Results are ordered by score descending, then by completion time ascending, so
on equal scores the earlier game ranks higher. The rank of a result is one
plus the number of results strictly ahead of it under that order; two results
with the same score and the same completion time share a rank. The same rule
applies to any population: the whole board or one player's games.
"""

from datetime import datetime
from typing import Iterable, List, Tuple

from sortedcontainers import SortedList

from ..models.data import LeaderboardEntry, StoredResult

SortKey = Tuple[int, datetime]


def sort_key(result: StoredResult) -> SortKey:
    return (-result.score, result.completed_at)


def _check_window(limit: int, offset: int):
    if limit < 0:
        raise ValueError(f"limit must not be negative, got {limit}")
    if offset < 0:
        raise ValueError(f"offset must not be negative, got {offset}")


class RankEngine:
    """Stateless rank and page computation over an arbitrary population"""

    @staticmethod
    def rank(result: StoredResult, population: Iterable[StoredResult]) -> int:
        return RankEngine.rank_of(result.score, result.completed_at, population)

    @staticmethod
    def rank_of(score: int, completed_at: datetime, population: Iterable[StoredResult]) -> int:
        ahead = sum(
            1 for other in population
            if other.score > score or (other.score == score and other.completed_at < completed_at)
        )
        return ahead + 1

    @staticmethod
    def page(population: Iterable[StoredResult], limit: int, offset: int = 0) -> List[LeaderboardEntry]:
        return RankedIndex(population).page(limit, offset)


class RankedIndex:
    """Incrementally maintained population with logarithmic rank lookups"""

    def __init__(self, results: Iterable[StoredResult] = ()):
        self._results = SortedList(key=lambda r: (sort_key(r), r.id))
        self._keys = SortedList()
        for result in results:
            self.add(result)

    def add(self, result: StoredResult):
        self._results.add(result)
        self._keys.add(sort_key(result))

    def discard(self, result: StoredResult):
        if result in self._results:
            self._results.remove(result)
            self._keys.remove(sort_key(result))

    def __len__(self) -> int:
        return len(self._results)

    def __iter__(self):
        return iter(self._results)

    def rank_of(self, score: int, completed_at: datetime) -> int:
        return self._keys.bisect_left((-score, completed_at)) + 1

    def rank(self, result: StoredResult) -> int:
        return self.rank_of(result.score, result.completed_at)

    def page(self, limit: int, offset: int = 0) -> List[LeaderboardEntry]:
        _check_window(limit, offset)
        return [
            LeaderboardEntry(result, self.rank(result))
            for result in self._results.islice(offset, offset + limit)
        ]
