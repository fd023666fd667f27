"""
Forge Error Taxonomy.

Classified failures raised by the GitHub client. Only these three conditions
are given special meaning; every other failure (timeouts, connection errors,
unexpected statuses, malformed payloads) propagates as the original exception.
"""

from datetime import datetime, timezone
from typing import Optional


class ForgeError(Exception):
    """Base class for classified forge failures."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class NotFound(ForgeError):
    """The requested repository, path or resource does not exist."""

    def __init__(self, resource: str, status: Optional[int] = 404):
        super().__init__(f"Not found: {resource}", status)
        self.resource = resource


class AuthorizationDenied(ForgeError):
    """The forge refused the request (401/403) for a reason other than quota."""

    def __init__(self, resource: str, status: Optional[int] = None):
        super().__init__(f"Authorization denied for {resource}", status)
        self.resource = resource


class RateLimitExceeded(ForgeError):
    """
    The forge's API quota is exhausted.

    Attributes:
        reset_time (datetime): When the quota resets (aware, UTC)
        limit (int): Configured quota for the current credential
        remaining (int): Remaining quota, always 0
    """

    def __init__(
        self,
        reset_time: datetime,
        limit: int,
        remaining: int = 0,
        status: Optional[int] = 403,
    ):
        self.reset_time = reset_time
        self.limit = limit
        self.remaining = remaining
        super().__init__(self.describe(), status)

    def seconds_until_reset(self, now: Optional[datetime] = None) -> float:
        """Seconds left before the quota resets, never negative."""
        now = now or datetime.now(timezone.utc)
        return max(0.0, (self.reset_time - now).total_seconds())

    def describe(self, now: Optional[datetime] = None) -> str:
        """Human-readable message with a countdown and a remediation hint."""
        minutes = self.seconds_until_reset(now) / 60
        return (
            f"GitHub API rate limit of {self.limit} requests exhausted. "
            f"Resets at {self.reset_time.isoformat()} (in {minutes:.1f} minutes). "
            "Wait for the reset or supply a GitHub token for a higher limit."
        )
