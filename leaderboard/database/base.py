from typing import List, Optional, Protocol
from ..models.data import LeaderboardEntry, PlayerStats, StoredResult, Totals
from .connection import DatabaseConnection
from .score_manager import ScoreManager
from ..logger import get_logger

logger = get_logger()

class ResultStore(Protocol):
    """Durable home of accepted results and the per-player aggregates"""

    async def initialize(self) -> None: ...

    async def close(self) -> None: ...

    async def record_result(self, result: StoredResult) -> StoredResult:
        """Store the result and update the player's aggregates, all or nothing"""
        ...

    async def leaderboard_page(self, limit: int, offset: int = 0) -> List[LeaderboardEntry]: ...

    async def player_games(self, player_name: str, limit: int = 50) -> List[LeaderboardEntry]: ...

    async def player_stats(self, player_name: str) -> Optional[PlayerStats]: ...

    async def totals(self) -> Totals: ...

class PostgresResultStore:
    def __init__(self, db_connection: Optional[DatabaseConnection] = None):
        self.db_connection = db_connection or DatabaseConnection()
        self.score_manager = ScoreManager(self.db_connection)
        self._initialized = False

    async def initialize(self):
        """Initialize all components"""
        if self._initialized:
            return
        try:
            await self.db_connection.initialize()
            self._initialized = True
            logger.info("Postgres result store initialized successfully")
        except Exception as e:
            logger.error(f"Failed to initialize result store: {e}")
            await self.close()
            raise

    async def close(self):
        if self.db_connection:
            await self.db_connection.close()
        self._initialized = False

    async def record_result(self, result: StoredResult) -> StoredResult:
        return await self.score_manager.record_result(result)

    async def leaderboard_page(self, limit: int, offset: int = 0) -> List[LeaderboardEntry]:
        return await self.score_manager.leaderboard_page(limit, offset)

    async def player_games(self, player_name: str, limit: int = 50) -> List[LeaderboardEntry]:
        return await self.score_manager.player_games(player_name, limit)

    async def player_stats(self, player_name: str) -> Optional[PlayerStats]:
        return await self.score_manager.player_stats(player_name)

    async def totals(self) -> Totals:
        return await self.score_manager.totals()
