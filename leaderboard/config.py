from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .integrity.rate_gate import LimitPolicy, LimiterClass
from .integrity.validator import PlausibilityRules

class DatabaseConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix='POSTGRES_')

    HOST: str = 'localhost'
    PORT: int = 5432
    DB: str = 'leaderboard'
    USER: str = 'postgres'
    PASSWORD: str = 'postgres'
    MIN_POOL_SIZE: int = 5
    MAX_POOL_SIZE: int = 20
    COMMAND_TIMEOUT: float = 10

database = DatabaseConfig()

class KafkaConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix='KAFKA_')

    enabled: bool = False
    bootstrap_servers: str = 'localhost:9092'
    topic: str = 'score-audit'
    client_id: str = 'leaderboard-producer'
    request_timeout_ms: int = 1000
    retry_backoff_ms: int = 100
    max_retries: int = 3
    retry_delay: int = 1

    def producer_config(self) -> dict:
        return {
            'bootstrap_servers': self.bootstrap_servers,
            'request_timeout_ms': self.request_timeout_ms,
            'retry_backoff_ms': self.retry_backoff_ms,
            'security_protocol': "PLAINTEXT",
            'client_id': self.client_id,
        }

kafka = KafkaConfig()

class RateLimitConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix='RATE_LIMIT_')

    general_max_requests: int = 60
    general_window_ms: int = 60000
    score_max_requests: int = 10
    score_window_ms: int = 60000
    sweep_limit: int = 1000

    @model_validator(mode='after')
    def check_score_is_tighter(self):
        if self.score_max_requests >= self.general_max_requests:
            raise ValueError('score-submission limit must be stricter than the general limit')
        return self

    def policies(self) -> dict:
        return {
            LimiterClass.GENERAL: LimitPolicy(self.general_max_requests, self.general_window_ms),
            LimiterClass.SCORE_SUBMISSION: LimitPolicy(self.score_max_requests, self.score_window_ms),
        }

rate_limits = RateLimitConfig()

class PlausibilityConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix='PLAUSIBILITY_')

    required_progress: int = 100
    max_final_bugs: int = 0
    base_score: int = 1000
    max_rounds: int = 100
    per_round_bonus: int = 10
    min_seconds_per_round: int = 10

    def rules(self) -> PlausibilityRules:
        return PlausibilityRules(
            required_progress=self.required_progress,
            max_final_bugs=self.max_final_bugs,
            base_score=self.base_score,
            max_rounds=self.max_rounds,
            per_round_bonus=self.per_round_bonus,
            min_seconds_per_round=self.min_seconds_per_round,
        )

plausibility = PlausibilityConfig()

class ServiceConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix='LEADERBOARD_')

    store_backend: str = 'postgres'
    host: str = '0.0.0.0'
    port: int = 8000
    shutdown_timeout: float = 5.0

service = ServiceConfig()
