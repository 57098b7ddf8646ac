import asyncpg
import asyncio
from contextlib import asynccontextmanager
from ..config import database
from ..logger import get_logger

logger = get_logger()

SCHEMA = [
    '''
    CREATE TABLE IF NOT EXISTS players (
        name VARCHAR(50) PRIMARY KEY,
        total_games INTEGER NOT NULL DEFAULT 0,
        best_score INTEGER NOT NULL DEFAULT 0,
        created_at TIMESTAMPTZ NOT NULL,
        updated_at TIMESTAMPTZ NOT NULL
    )
    ''',
    '''
    CREATE TABLE IF NOT EXISTS games (
        id VARCHAR(36) PRIMARY KEY,
        player_name VARCHAR(50) NOT NULL REFERENCES players(name),
        score INTEGER NOT NULL,
        rounds INTEGER NOT NULL,
        final_progress INTEGER NOT NULL,
        final_bugs INTEGER NOT NULL,
        final_tech_debt INTEGER NOT NULL,
        game_duration_seconds INTEGER NOT NULL,
        completed_at TIMESTAMPTZ NOT NULL,
        game_state_hash VARCHAR(16) NOT NULL,
        cards_played TEXT[] NOT NULL
    )
    ''',
    'CREATE INDEX IF NOT EXISTS idx_games_player_name ON games(player_name)',
    'CREATE INDEX IF NOT EXISTS idx_games_rank_order ON games(score DESC, completed_at ASC)',
    'CREATE INDEX IF NOT EXISTS idx_games_player_rank_order ON games(player_name, score DESC, completed_at ASC)',
]

class DatabaseConnection:
    def __init__(self, max_concurrent_queries: int = 50):
        self.pool = None
        self._connection_semaphore = None
        self.max_concurrent_queries = max_concurrent_queries
        self._initialized = False
        self._init_lock = asyncio.Lock()

    async def initialize(self):
        """Create the connection pool and make sure the schema exists"""
        if self._initialized:
            return

        async with self._init_lock:
            if self._initialized:  # Double check after acquiring lock
                return

            try:
                self.pool = await asyncpg.create_pool(
                    host=database.HOST,
                    port=database.PORT,
                    database=database.DB,
                    user=database.USER,
                    password=database.PASSWORD,
                    min_size=database.MIN_POOL_SIZE,
                    max_size=database.MAX_POOL_SIZE,
                    command_timeout=database.COMMAND_TIMEOUT,
                    max_inactive_connection_lifetime=300.0,
                    setup=self._setup_connection
                )

                self._connection_semaphore = asyncio.Semaphore(self.max_concurrent_queries)

                async with self.pool.acquire() as conn:
                    async with conn.transaction():
                        for statement in SCHEMA:
                            await conn.execute(statement)

                self._initialized = True
                logger.info("Database connection initialized successfully")
            except Exception as e:
                logger.error(f"Failed to initialize database connection: {e}")
                await self.close()
                raise

    async def _setup_connection(self, connection):
        """Setup connection with proper settings"""
        await connection.execute('SET statement_timeout = 30000')
        await connection.execute('SET idle_in_transaction_session_timeout = 30000')
        await connection.execute('SET lock_timeout = 10000')

    async def close(self):
        """Close database connections"""
        if self.pool:
            await self.pool.close()
            self.pool = None
        self._initialized = False

    @asynccontextmanager
    async def connection(self):
        """Acquire a pooled connection, bounded by the connection semaphore"""
        if not self._initialized:
            await self.initialize()
        async with self._connection_semaphore:
            async with self.pool.acquire() as conn:
                yield conn
