"""When the site probe retries, and how long it waits in between.

A site counts as available when it answers with a status below 500 that
is not rate limiting. Gateway errors, 503 and 429 are transient and
retried; other 5xx answers (501, 505, ...) are final.
"""

from dataclasses import dataclass, field
from typing import Optional

import requests

RETRYABLE_STATUSES = frozenset({429, 500, 502, 503, 504})


@dataclass
class RetryPolicy:
    """Retry rules for reachability probes, with exponential backoff."""
    max_retries: int = 2
    initial_delay: float = 1.0
    backoff_factor: float = 2.0
    max_delay: float = 10.0
    retry_statuses: frozenset = field(default_factory=lambda: RETRYABLE_STATUSES)
    retry_on_timeout: bool = True

    def is_available(self, status_code: int) -> bool:
        """Whether an HTTP answer means the site is up."""
        return status_code < 500 and status_code not in self.retry_statuses

    def should_retry(
        self,
        attempt: int,
        status_code: Optional[int] = None,
        error: Optional[Exception] = None,
    ) -> bool:
        """Decide whether a failed attempt (0-indexed) is worth repeating."""
        if attempt >= self.max_retries:
            return False
        if error is not None:
            if isinstance(error, requests.Timeout) and not isinstance(error, requests.ConnectionError):
                return self.retry_on_timeout
            return isinstance(error, requests.RequestException)
        return status_code in self.retry_statuses

    def get_delay(self, attempt: int, retry_after: Optional[str] = None) -> float:
        """Seconds to wait before the next attempt.

        Args:
            attempt: Current attempt number (0 = first retry).
            retry_after: ``Retry-After`` header of the failed answer, if any.
                Only the delta-seconds form is honoured.

        Returns:
            Delay in seconds, never above ``max_delay``.
        """
        if retry_after is not None:
            try:
                return min(max(float(retry_after), 0.0), self.max_delay)
            except (TypeError, ValueError):
                pass
        delay = self.initial_delay * (self.backoff_factor ** attempt)
        return min(delay, self.max_delay)


def default_retry_policy() -> RetryPolicy:
    """Create default retry policy.

    2 retries, 1s initial delay, 2x backoff, 10s max.
    """
    return RetryPolicy()


def no_retry_policy() -> RetryPolicy:
    """Create a no-retry policy (fail immediately)."""
    return RetryPolicy(max_retries=0)
