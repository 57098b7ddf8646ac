from typing import Optional


class LeaderboardError(Exception):
    """Base class for errors surfaced to API callers"""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class RateLimitedError(LeaderboardError):
    """The rate gate denied the request; retry once the window elapses"""
    status_code = 429

    def __init__(self, limiter_class: str, retry_after_seconds: Optional[int] = None):
        super().__init__(f"Rate limit exceeded. Too many {limiter_class} requests.")
        self.limiter_class = limiter_class
        self.retry_after_seconds = retry_after_seconds


class ImplausibleSubmissionError(LeaderboardError):
    """The submission is internally inconsistent; resending it unchanged will fail again"""
    status_code = 400

    def __init__(self, reason: str):
        super().__init__(f"Invalid game state: {reason}")
        self.reason = reason


class PersistenceError(LeaderboardError):
    """The result store failed; conflicts are known constraint violations"""

    def __init__(self, message: str, conflict: bool = False):
        super().__init__(message)
        self.conflict = conflict
        self.status_code = 409 if conflict else 500


class NotFoundError(LeaderboardError):
    status_code = 404
