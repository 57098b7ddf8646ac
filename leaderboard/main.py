import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse

from .config import plausibility, rate_limits, service
from .core.events import shutdown_event, startup_event
from .database import ResultStore, create_store
from .integrity.pipeline import SubmissionPipeline
from .integrity.rate_gate import InMemoryRateGate, RateGate
from .integrity.validator import PlausibilityValidator
from .kafka.publisher import ScoreEventPublisher
from .routes import health, leaderboard, players, score
from .routes.deps import validation_error_handler
from .logger import get_logger, logging_config

logger = get_logger()

def create_app(
    store: Optional[ResultStore] = None,
    gate: Optional[RateGate] = None,
    publisher: Optional[ScoreEventPublisher] = None,
    validator: Optional[PlausibilityValidator] = None,
) -> FastAPI:
    """Build the service with its integrity pipeline wired to the given collaborators"""
    if gate is None:
        gate = InMemoryRateGate(rate_limits.policies(), sweep_limit=rate_limits.sweep_limit)
    if validator is None:
        validator = PlausibilityValidator(plausibility.rules())
    if store is None:
        store = create_store(service.store_backend)
    if publisher is None:
        publisher = ScoreEventPublisher()

    pipeline = SubmissionPipeline(gate=gate, validator=validator, store=store, publisher=publisher)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await startup_event(app)
        yield
        await shutdown_event(app)

    app = FastAPI(
        default_response_class=ORJSONResponse,
        title="Ship It Leaderboard",
        description="Leaderboard service with plausibility-checked score submission",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.pipeline = pipeline
    app.state.start_time = time.time()
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    app.include_router(score.router)
    app.include_router(leaderboard.router)
    app.include_router(players.router)
    app.include_router(health.router)
    return app

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "leaderboard.main:create_app",
        factory=True,
        host=service.host,
        port=service.port,
        limit_concurrency=1000,
        backlog=1024,
        log_level=logging_config.log_level.lower()
    )
