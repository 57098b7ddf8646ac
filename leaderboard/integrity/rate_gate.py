"""
Fixed-window request governance.

Every caller key gets one counter per limiter class. A window opens on the
first request, admits up to ``max_requests`` calls, and is replaced by a fresh
window on the first request after it ends. Because the windows are fixed
rather than sliding, a caller can land ``max_requests`` calls just before a
window ends and another ``max_requests`` just after it.

State is process local and starts empty. Deployments running several
instances need a shared counter store behind the same ``RateGate`` protocol.
"""

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Mapping, Optional, Protocol

from ..logger import get_logger

logger = get_logger()


class LimiterClass(str, Enum):
    GENERAL = "general"
    SCORE_SUBMISSION = "score-submission"


@dataclass(frozen=True)
class LimitPolicy:
    max_requests: int
    window_ms: int

    def __post_init__(self):
        if self.max_requests <= 0:
            raise ValueError(f"max_requests must be positive, got {self.max_requests}")
        if self.window_ms <= 0:
            raise ValueError(f"window_ms must be positive, got {self.window_ms}")


@dataclass
class RateWindow:
    count: int
    window_ends_at: float


class RateGate(Protocol):
    def try_admit(self, key: str, limiter_class: LimiterClass) -> bool:
        ...


def monotonic_ms() -> float:
    return time.monotonic() * 1000


class InMemoryRateGate:
    """Single-process ``RateGate`` with an injectable millisecond clock."""

    def __init__(
        self,
        policies: Mapping[LimiterClass, LimitPolicy],
        clock: Callable[[], float] = monotonic_ms,
        sweep_limit: int = 1000,
    ):
        general = policies.get(LimiterClass.GENERAL)
        score = policies.get(LimiterClass.SCORE_SUBMISSION)
        if general is None or score is None:
            raise ValueError("policies for both limiter classes are required")
        if score.max_requests >= general.max_requests:
            raise ValueError("score-submission max_requests must be lower than general max_requests")
        if sweep_limit <= 0:
            raise ValueError("sweep_limit must be positive")

        self._policies: Dict[LimiterClass, LimitPolicy] = dict(policies)
        self._clock = clock
        self._sweep_limit = sweep_limit
        self._lock = threading.Lock()
        # Insertion order tracks window creation, so within one class the
        # oldest window_ends_at is always at the front.
        self._windows: Dict[LimiterClass, "OrderedDict[str, RateWindow]"] = {
            limiter_class: OrderedDict() for limiter_class in self._policies
        }

    def policy(self, limiter_class: LimiterClass) -> LimitPolicy:
        return self._policies[LimiterClass(limiter_class)]

    def try_admit(self, key: str, limiter_class: LimiterClass) -> bool:
        limiter_class = LimiterClass(limiter_class)
        policy = self._policies[limiter_class]
        windows = self._windows[limiter_class]

        with self._lock:
            now = self._clock()
            window = windows.get(key)

            if window is None or now > window.window_ends_at:
                windows.pop(key, None)
                windows[key] = RateWindow(count=1, window_ends_at=now + policy.window_ms)
                self._sweep_locked(now)
                return True

            if window.count >= policy.max_requests:
                return False

            window.count += 1
            return True

    def retry_after_ms(self, key: str, limiter_class: LimiterClass) -> Optional[float]:
        """Milliseconds until the caller's current window ends, if one is open"""
        limiter_class = LimiterClass(limiter_class)
        with self._lock:
            window = self._windows[limiter_class].get(key)
            if window is None:
                return None
            return max(0.0, window.window_ends_at - self._clock())

    def window(self, key: str, limiter_class: LimiterClass) -> Optional[RateWindow]:
        with self._lock:
            window = self._windows[LimiterClass(limiter_class)].get(key)
            if window is None:
                return None
            return RateWindow(window.count, window.window_ends_at)

    def sweep(self) -> int:
        """Drop expired windows across every limiter class"""
        with self._lock:
            return self._sweep_locked(self._clock())

    def reset(self):
        with self._lock:
            for windows in self._windows.values():
                windows.clear()

    def __len__(self) -> int:
        with self._lock:
            return sum(len(windows) for windows in self._windows.values())

    def _sweep_locked(self, now: float) -> int:
        # One sweep_limit budget is shared by every limiter class.
        removed = 0
        for limiter_class, windows in self._windows.items():
            swept = 0
            while windows and removed < self._sweep_limit:
                key, window = next(iter(windows.items()))
                if now <= window.window_ends_at:
                    break
                del windows[key]
                swept += 1
                removed += 1
            if swept:
                logger.debug(f"Swept {swept} expired {limiter_class.value} windows")
        return removed
