from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from leaderboard.config import KafkaConfig
from leaderboard.database import MemoryResultStore
from leaderboard.integrity.rate_gate import InMemoryRateGate, LimitPolicy, LimiterClass
from leaderboard.kafka.publisher import ScoreEventPublisher
from leaderboard.main import create_app
from leaderboard.models.data import StoredResult
from leaderboard.models.score import ScoreSubmission

EPOCH = datetime(2026, 1, 1, tzinfo=timezone.utc)


class FakeClock:
    """Millisecond clock the tests move by hand"""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float):
        self.now += ms


def make_submission(**overrides) -> ScoreSubmission:
    fields = dict(
        player_name='alice',
        score=1500,
        rounds=6,
        final_progress=100,
        final_bugs=0,
        final_tech_debt=20,
        game_duration_seconds=300,
        cards_played=['refactor', 'deploy', 'coffee-break', 'pair-program', 'hotfix', 'code-review'],
    )
    fields.update(overrides)
    return ScoreSubmission(**fields)


def make_result(score: int, minute: int, player_name: str = 'alice', id: str = None) -> StoredResult:
    return StoredResult(
        id=id or f'{player_name}-{score}-{minute}',
        player_name=player_name,
        score=score,
        rounds=6,
        final_progress=100,
        final_bugs=0,
        final_tech_debt=10,
        game_duration_seconds=300,
        cards_played=('deploy',) * 6,
        completed_at=EPOCH + timedelta(minutes=minute),
        fingerprint='abc123',
    )


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def gate(clock):
    return InMemoryRateGate(
        {
            LimiterClass.GENERAL: LimitPolicy(max_requests=60, window_ms=60000),
            LimiterClass.SCORE_SUBMISSION: LimitPolicy(max_requests=10, window_ms=60000),
        },
        clock=clock,
    )


@pytest.fixture()
def submission():
    return make_submission()


@pytest.fixture()
def store():
    return MemoryResultStore()


@pytest.fixture()
def client(gate, store):
    publisher = ScoreEventPublisher(KafkaConfig(enabled=False))
    app = create_app(store=store, gate=gate, publisher=publisher)
    with TestClient(app) as test_client:
        yield test_client
