"""
Write path for submitted games.

A submission passes the rate gate, then the plausibility checks, and only then
gets a fingerprint and goes to the result store. Both checks run before any
write, so rejected input leaves nothing behind except the rate counter.
"""

import asyncio
import math
from datetime import datetime, timezone
from typing import Callable, Optional, Set

from ..core.errors import ImplausibleSubmissionError, RateLimitedError
from ..database.base import ResultStore
from ..kafka.publisher import ScoreEventPublisher
from ..logger import get_logger
from ..models.data import StoredResult
from ..models.score import ScoreSubmission
from .fingerprint import fingerprint
from .rate_gate import LimiterClass, RateGate
from .validator import PlausibilityValidator

logger = get_logger()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SubmissionPipeline:
    def __init__(
        self,
        gate: RateGate,
        validator: PlausibilityValidator,
        store: ResultStore,
        publisher: Optional[ScoreEventPublisher] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.gate = gate
        self.validator = validator
        self.store = store
        self.publisher = publisher
        self.clock = clock
        self._pending: Set[asyncio.Task] = set()

    def admit(self, caller_key: str, limiter_class: LimiterClass = LimiterClass.GENERAL):
        """Raise RateLimitedError if the caller has used up its window"""
        limiter_class = LimiterClass(limiter_class)
        if self.gate.try_admit(caller_key, limiter_class):
            return
        logger.warning(f"Rate limit hit for {caller_key} ({limiter_class.value})")
        raise RateLimitedError(limiter_class.value, self._retry_after(caller_key, limiter_class))

    async def submit(self, caller_key: str, submission: ScoreSubmission) -> StoredResult:
        self.admit(caller_key, LimiterClass.SCORE_SUBMISSION)

        verdict = self.validator.validate(submission)
        if not verdict.valid:
            logger.warning(f"Rejected game from {submission.player_name}: {verdict.reason}")
            raise ImplausibleSubmissionError(verdict.reason)

        result = StoredResult.from_submission(
            submission,
            fingerprint=fingerprint(submission),
            completed_at=self.clock(),
        )
        stored = await self.store.record_result(result)
        logger.info(f"Recorded game {stored.id} for {stored.player_name} with score {stored.score}")

        if self.publisher is not None and self.publisher.enabled:
            self._schedule_publish(stored)
        return stored

    @property
    def pending_publishes(self) -> int:
        return len(self._pending)

    async def drain(self, timeout: Optional[float] = None):
        """Wait for queued audit events, cancelling any still running after timeout"""
        if not self._pending:
            return
        _, pending = await asyncio.wait(set(self._pending), timeout=timeout)
        for task in pending:
            task.cancel()
        if pending:
            logger.warning(f"Cancelled {len(pending)} unfinished audit publishes")
            await asyncio.gather(*pending, return_exceptions=True)

    def _schedule_publish(self, stored: StoredResult):
        # Audit delivery runs after the response; the result is already durable.
        task = asyncio.create_task(self.publisher.publish(stored))
        self._pending.add(task)
        task.add_done_callback(self._publish_done)

    def _publish_done(self, task: asyncio.Task):
        self._pending.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Audit publish failed: {error}")

    def _retry_after(self, caller_key: str, limiter_class: LimiterClass) -> Optional[int]:
        # Only gates that expose their windows can say when the caller may retry.
        retry_after_ms = getattr(self.gate, 'retry_after_ms', None)
        if retry_after_ms is None:
            return None
        remaining = retry_after_ms(caller_key, limiter_class)
        if remaining is None:
            return None
        return max(1, math.ceil(remaining / 1000))
