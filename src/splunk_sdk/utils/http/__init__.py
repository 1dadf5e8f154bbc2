"""HTTP utilities public API (barrel module).

This package provides:
- Client construction with package-wide timeout and limit defaults
- Retry decorator with a fixed delay and a retry predicate

Recommended import pattern for consumers:
    from splunk_sdk.utils.http import create_client, async_retry
"""

from .client_manager import (
    DEFAULT_LIMITS,
    DEFAULT_TIMEOUT,
    create_client,
    create_limits,
    create_timeout,
)
from .retry import async_retry

__all__ = [
    "DEFAULT_LIMITS",
    "DEFAULT_TIMEOUT",
    "create_client",
    "create_timeout",
    "create_limits",
    "async_retry",
]
