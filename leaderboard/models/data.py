from datetime import datetime, timezone
from typing import Optional, Tuple
import uuid

from .score import ScoreSubmission

class StoredResult:
    """An accepted game; never changed after it is written"""
    __slots__ = ('id', 'player_name', 'score', 'rounds', 'final_progress', 'final_bugs',
                 'final_tech_debt', 'game_duration_seconds', 'cards_played',
                 'completed_at', 'fingerprint')

    def __init__(self, id: str, player_name: str, score: int, rounds: int,
                 final_progress: int, final_bugs: int, final_tech_debt: int,
                 game_duration_seconds: int, cards_played: Tuple[str, ...],
                 completed_at: datetime, fingerprint: str):
        object.__setattr__(self, 'id', id)
        object.__setattr__(self, 'player_name', player_name)
        object.__setattr__(self, 'score', int(score))
        object.__setattr__(self, 'rounds', int(rounds))
        object.__setattr__(self, 'final_progress', int(final_progress))
        object.__setattr__(self, 'final_bugs', int(final_bugs))
        object.__setattr__(self, 'final_tech_debt', int(final_tech_debt))
        object.__setattr__(self, 'game_duration_seconds', int(game_duration_seconds))
        object.__setattr__(self, 'cards_played', tuple(cards_played))
        object.__setattr__(self, 'completed_at', completed_at)
        object.__setattr__(self, 'fingerprint', fingerprint)

    def __setattr__(self, name, value):
        raise AttributeError(f"StoredResult is immutable, cannot set {name!r}")

    def __eq__(self, other):
        if not isinstance(other, StoredResult):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __hash__(self):
        return hash(self.id)

    def __repr__(self):
        return f"StoredResult(id={self.id!r}, player_name={self.player_name!r}, score={self.score})"

    @classmethod
    def from_submission(cls, submission: ScoreSubmission, fingerprint: str,
                        completed_at: Optional[datetime] = None,
                        id: Optional[str] = None) -> 'StoredResult':
        return cls(
            id=id or str(uuid.uuid4()),
            player_name=submission.player_name,
            score=submission.score,
            rounds=submission.rounds,
            final_progress=submission.final_progress,
            final_bugs=submission.final_bugs,
            final_tech_debt=submission.final_tech_debt,
            game_duration_seconds=submission.game_duration_seconds,
            cards_played=submission.cards_played,
            completed_at=completed_at or datetime.now(timezone.utc),
            fingerprint=fingerprint,
        )

    def to_dict(self):
        return {
            'id': self.id,
            'player_name': self.player_name,
            'score': self.score,
            'rounds': self.rounds,
            'final_progress': self.final_progress,
            'final_bugs': self.final_bugs,
            'final_tech_debt': self.final_tech_debt,
            'game_duration_seconds': self.game_duration_seconds,
            'cards_played': list(self.cards_played),
            'completed_at': self.completed_at,
            'fingerprint': self.fingerprint,
        }

class LeaderboardEntry:
    __slots__ = ('result', 'rank', 'personal_rank')
    def __init__(self, result: StoredResult, rank: int, personal_rank: Optional[int] = None):
        self.result = result
        self.rank = rank
        self.personal_rank = personal_rank

    def to_dict(self):
        data = self.result.to_dict()
        data['rank'] = self.rank
        if self.personal_rank is not None:
            data['personal_rank'] = self.personal_rank
        return data

class PlayerStats:
    __slots__ = ('player_name', 'total_games', 'best_score', 'avg_score', 'avg_rounds',
                 'best_rounds', 'avg_duration', 'first_played_at', 'last_played_at')
    def __init__(self, player_name: str, total_games: int, best_score: int,
                 avg_score: float, avg_rounds: float, best_rounds: int,
                 avg_duration: float, first_played_at: datetime, last_played_at: datetime):
        self.player_name = player_name
        self.total_games = total_games
        self.best_score = best_score
        self.avg_score = avg_score
        self.avg_rounds = avg_rounds
        self.best_rounds = best_rounds
        self.avg_duration = avg_duration
        self.first_played_at = first_played_at
        self.last_played_at = last_played_at

    def to_dict(self):
        return {slot: getattr(self, slot) for slot in self.__slots__}

class Totals:
    __slots__ = ('total_games', 'total_players')
    def __init__(self, total_games: int, total_players: int):
        self.total_games = total_games
        self.total_players = total_players
