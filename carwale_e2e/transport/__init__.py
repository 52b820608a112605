"""Transport module - HTTP reachability checks."""

from .retry_policy import RetryPolicy, default_retry_policy, no_retry_policy
from .site_probe import ProbeResult, SiteProbe

__all__ = [
    "RetryPolicy",
    "default_retry_policy",
    "no_retry_policy",
    "ProbeResult",
    "SiteProbe",
]
