from datetime import datetime
from pydantic import BaseModel
from typing import List, Literal, Optional

class GameRecord(BaseModel):
    id: str
    player_name: str
    score: int
    rounds: int
    final_progress: int
    final_bugs: int
    final_tech_debt: int
    game_duration_seconds: int
    cards_played: List[str]
    completed_at: datetime
    fingerprint: str

class LeaderboardEntry(GameRecord):
    rank: int
    personal_rank: Optional[int] = None

class Pagination(BaseModel):
    limit: int
    offset: int
    has_more: bool

class LeaderboardPage(BaseModel):
    entries: List[LeaderboardEntry]
    pagination: Pagination

class PlayerStats(BaseModel):
    player_name: str
    total_games: int
    best_score: int
    avg_score: float
    avg_rounds: float
    best_rounds: int
    avg_duration: float
    first_played_at: datetime
    last_played_at: datetime

class PlayerHistory(BaseModel):
    player_name: str
    stats: PlayerStats
    games: List[LeaderboardEntry]

class LeaderboardTotals(BaseModel):
    total_games: int
    total_players: int

class ScoreResponse(BaseModel):
    success: Literal[True] = True
    data: GameRecord
    message: str

class HealthResponse(BaseModel):
    status: Literal["healthy"] = "healthy"
    uptime: float
