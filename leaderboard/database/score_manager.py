from typing import List, Optional
import asyncio
import asyncpg
from ..core.errors import PersistenceError
from ..models.data import LeaderboardEntry, PlayerStats, StoredResult, Totals
from ..logger import get_logger

logger = get_logger()

# RANK() counts the rows strictly ahead under (score DESC, completed_at ASC),
# which is the leaderboard ordering used everywhere else.
RANK_WINDOW = 'RANK() OVER (ORDER BY score DESC, completed_at ASC)'
PERSONAL_RANK_WINDOW = 'RANK() OVER (PARTITION BY player_name ORDER BY score DESC, completed_at ASC)'

GAME_COLUMNS = '''
    id, player_name, score, rounds, final_progress, final_bugs, final_tech_debt,
    game_duration_seconds, completed_at, game_state_hash, cards_played
'''

DB_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError)

def _result_from_row(row) -> StoredResult:
    return StoredResult(
        id=row['id'],
        player_name=row['player_name'],
        score=row['score'],
        rounds=row['rounds'],
        final_progress=row['final_progress'],
        final_bugs=row['final_bugs'],
        final_tech_debt=row['final_tech_debt'],
        game_duration_seconds=row['game_duration_seconds'],
        cards_played=row['cards_played'],
        completed_at=row['completed_at'],
        fingerprint=row['game_state_hash'],
    )

class ScoreManager:
    def __init__(self, db_connection):
        self.db = db_connection

    async def record_result(self, result: StoredResult) -> StoredResult:
        """Insert the game and bump the player's aggregates in one transaction"""
        try:
            async with self.db.connection() as conn:
                async with conn.transaction():
                    await conn.execute('''
                        INSERT INTO players (name, total_games, best_score, created_at, updated_at)
                        VALUES ($1, 1, $2, $3, $3)
                        ON CONFLICT (name)
                        DO UPDATE SET
                            total_games = players.total_games + 1,
                            best_score = GREATEST(players.best_score, EXCLUDED.best_score),
                            updated_at = EXCLUDED.updated_at
                    ''', result.player_name, result.score, result.completed_at)
                    await conn.execute(f'''
                        INSERT INTO games ({GAME_COLUMNS})
                        VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11)
                    ''', result.id, result.player_name, result.score, result.rounds,
                        result.final_progress, result.final_bugs, result.final_tech_debt,
                        result.game_duration_seconds, result.completed_at,
                        result.fingerprint, list(result.cards_played))
        except asyncpg.UniqueViolationError as e:
            logger.warning(f"Duplicate game {result.id}: {e}")
            raise PersistenceError(f"Game {result.id} already recorded", conflict=True) from e
        except DB_ERRORS as e:
            logger.error(f"Database error recording game {result.id}: {e}")
            raise PersistenceError(f"Failed to submit score: {e}") from e
        return result

    async def leaderboard_page(self, limit: int, offset: int = 0) -> List[LeaderboardEntry]:
        try:
            async with self.db.connection() as conn:
                rows = await conn.fetch(f'''
                    SELECT {GAME_COLUMNS}, {RANK_WINDOW} AS rank
                    FROM games
                    ORDER BY score DESC, completed_at ASC, id
                    LIMIT $1 OFFSET $2
                ''', limit, offset)
        except DB_ERRORS as e:
            logger.error(f"Database error reading leaderboard: {e}")
            raise PersistenceError(f"Failed to get leaderboard: {e}") from e
        return [LeaderboardEntry(_result_from_row(row), row['rank']) for row in rows]

    async def player_games(self, player_name: str, limit: int = 50) -> List[LeaderboardEntry]:
        """A player's games in leaderboard order with global and personal ranks"""
        try:
            async with self.db.connection() as conn:
                rows = await conn.fetch(f'''
                    WITH ranked AS (
                        SELECT {GAME_COLUMNS},
                               {RANK_WINDOW} AS rank,
                               {PERSONAL_RANK_WINDOW} AS personal_rank
                        FROM games
                    )
                    SELECT * FROM ranked
                    WHERE player_name = $1
                    ORDER BY score DESC, completed_at ASC, id
                    LIMIT $2
                ''', player_name, limit)
        except DB_ERRORS as e:
            logger.error(f"Database error reading games for {player_name}: {e}")
            raise PersistenceError(f"Failed to get player games: {e}") from e
        return [
            LeaderboardEntry(_result_from_row(row), row['rank'], row['personal_rank'])
            for row in rows
        ]

    async def player_stats(self, player_name: str) -> Optional[PlayerStats]:
        try:
            async with self.db.connection() as conn:
                row = await conn.fetchrow('''
                    SELECT p.name,
                           p.total_games,
                           p.best_score,
                           AVG(g.score)::float AS avg_score,
                           AVG(g.rounds)::float AS avg_rounds,
                           MIN(g.rounds) AS best_rounds,
                           AVG(g.game_duration_seconds)::float AS avg_duration,
                           MIN(g.completed_at) AS first_played_at,
                           MAX(g.completed_at) AS last_played_at
                    FROM players p
                    JOIN games g ON g.player_name = p.name
                    WHERE p.name = $1
                    GROUP BY p.name, p.total_games, p.best_score
                ''', player_name)
        except DB_ERRORS as e:
            logger.error(f"Database error reading stats for {player_name}: {e}")
            raise PersistenceError(f"Failed to get player stats: {e}") from e

        if not row:
            return None
        return PlayerStats(
            player_name=row['name'],
            total_games=row['total_games'],
            best_score=row['best_score'],
            avg_score=row['avg_score'],
            avg_rounds=row['avg_rounds'],
            best_rounds=row['best_rounds'],
            avg_duration=row['avg_duration'],
            first_played_at=row['first_played_at'],
            last_played_at=row['last_played_at'],
        )

    async def totals(self) -> Totals:
        try:
            async with self.db.connection() as conn:
                row = await conn.fetchrow('''
                    SELECT (SELECT COUNT(*) FROM games) AS total_games,
                           (SELECT COUNT(*) FROM players) AS total_players
                ''')
        except DB_ERRORS as e:
            logger.error(f"Database error reading totals: {e}")
            raise PersistenceError(f"Failed to get leaderboard stats: {e}") from e
        return Totals(row['total_games'], row['total_players'])
