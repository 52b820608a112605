"""Reachability probe for the site under test.

Checked before launching browsers so that an unreachable site fails
fast instead of timing out in every test.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

import requests

from .retry_policy import RetryPolicy, default_retry_policy

logger = logging.getLogger(__name__)

USER_AGENT = "carwale-e2e-preflight/0.1"


@dataclass
class ProbeResult:
    """Outcome of a reachability probe."""
    url: str
    reachable: bool
    status_code: Optional[int] = None
    elapsed_ms: int = 0
    attempts: int = 0
    error: Optional[str] = None

    def __str__(self) -> str:
        if self.reachable:
            return f"{self.url} reachable (HTTP {self.status_code}, {self.elapsed_ms}ms)"
        return f"{self.url} unreachable: {self.error}"


class SiteProbe:
    """Probes a base URL with retries."""

    def __init__(
        self,
        retry_policy: Optional[RetryPolicy] = None,
        request_timeout: float = 10.0,
        verify_tls: bool = True,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize site probe.

        Args:
            retry_policy: Retry policy for failed requests.
            request_timeout: Per-request timeout in seconds.
            verify_tls: Verify TLS certificates.
            sleep: Sleep function used between retries.
        """
        self.retry_policy = retry_policy or default_retry_policy()
        self.request_timeout = request_timeout
        self.verify_tls = verify_tls
        self._sleep = sleep
        self._session = requests.Session()
        self._session.headers.update({
            "User-Agent": USER_AGENT,
            "Accept": "text/html",
        })

    def probe(self, url: str) -> ProbeResult:
        """Request ``url`` until the site answers or the retry policy gives up.

        Network errors are reported in the result, not raised.
        """
        policy = self.retry_policy
        start_time = time.time()
        result = ProbeResult(url=url, reachable=False)

        for attempt in range(policy.max_retries + 1):
            result.attempts = attempt + 1
            retry_after = None
            try:
                response = self._session.get(
                    url,
                    timeout=self.request_timeout,
                    allow_redirects=True,
                    verify=self.verify_tls,
                )
                result.status_code = response.status_code
                if policy.is_available(response.status_code):
                    result.reachable = True
                    result.error = None
                    break
                result.error = f"HTTP {response.status_code}"
                retry_after = response.headers.get("Retry-After")
                retry = policy.should_retry(attempt, status_code=response.status_code)

            except requests.ConnectionError as e:
                result.error = f"Connection failed: {e}"
                retry = policy.should_retry(attempt, error=e)

            except requests.Timeout as e:
                result.error = f"Timed out after {self.request_timeout}s"
                retry = policy.should_retry(attempt, error=e)

            if not retry:
                break
            delay = policy.get_delay(attempt, retry_after)
            logger.info("Probe of %s failed (%s), retrying in %.1fs", url, result.error, delay)
            self._sleep(delay)
        result.elapsed_ms = int((time.time() - start_time) * 1000)
        return result

    def close(self) -> None:
        """Close the HTTP session."""
        self._session.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
