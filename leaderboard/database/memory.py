import asyncio
from typing import Dict, List, Optional
from ..core.errors import PersistenceError
from ..models.data import LeaderboardEntry, PlayerStats, StoredResult, Totals
from ..ranking.engine import RankedIndex
from ..logger import get_logger

logger = get_logger()

class _PlayerRecord:
    __slots__ = ('total_games', 'best_score', 'created_at', 'updated_at')
    def __init__(self, total_games: int, best_score: int, created_at, updated_at):
        self.total_games = total_games
        self.best_score = best_score
        self.created_at = created_at
        self.updated_at = updated_at

class MemoryResultStore:
    """Process-local result store with the same contract as the Postgres store"""

    def __init__(self):
        self._lock = asyncio.Lock()
        self._ids = set()
        self._board = RankedIndex()
        self._by_player: Dict[str, RankedIndex] = {}
        self._players: Dict[str, _PlayerRecord] = {}

    async def initialize(self):
        logger.info("Using in-memory result store")

    async def close(self):
        pass

    async def record_result(self, result: StoredResult) -> StoredResult:
        async with self._lock:
            if result.id in self._ids:
                raise PersistenceError(f"Game {result.id} already recorded", conflict=True)

            current = self._players.get(result.player_name)
            if current is None:
                updated = _PlayerRecord(1, result.score, result.completed_at, result.completed_at)
            else:
                updated = _PlayerRecord(
                    current.total_games + 1,
                    max(current.best_score, result.score),
                    current.created_at,
                    result.completed_at,
                )

            games = self._by_player.get(result.player_name)
            if games is None:
                games = RankedIndex()
            try:
                self._board.add(result)
                games.add(result)
            except Exception as e:
                # Undo the partial insert so the board and aggregates stay in step.
                self._board.discard(result)
                games.discard(result)
                logger.error(f"Failed to record game {result.id}: {e}")
                raise PersistenceError(f"Failed to submit score: {e}") from e

            self._by_player[result.player_name] = games
            self._ids.add(result.id)
            self._players[result.player_name] = updated
        return result

    async def leaderboard_page(self, limit: int, offset: int = 0) -> List[LeaderboardEntry]:
        async with self._lock:
            return self._board.page(limit, offset)

    async def player_games(self, player_name: str, limit: int = 50) -> List[LeaderboardEntry]:
        async with self._lock:
            games = self._by_player.get(player_name)
            if games is None:
                return []
            return [
                LeaderboardEntry(entry.result, self._board.rank(entry.result), entry.rank)
                for entry in games.page(limit)
            ]

    async def player_stats(self, player_name: str) -> Optional[PlayerStats]:
        async with self._lock:
            record = self._players.get(player_name)
            games = list(self._by_player.get(player_name, ()))
        if record is None or not games:
            return None

        count = len(games)
        return PlayerStats(
            player_name=player_name,
            total_games=record.total_games,
            best_score=record.best_score,
            avg_score=sum(g.score for g in games) / count,
            avg_rounds=sum(g.rounds for g in games) / count,
            best_rounds=min(g.rounds for g in games),
            avg_duration=sum(g.game_duration_seconds for g in games) / count,
            first_played_at=min(g.completed_at for g in games),
            last_played_at=max(g.completed_at for g in games),
        )

    async def totals(self) -> Totals:
        async with self._lock:
            return Totals(len(self._board), len(self._players))
