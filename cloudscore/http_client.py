"""
Standardized HTTP client configuration with proper timeouts.

Provides consistent timeout and session management for the SDK's aiohttp
transport. Sessions should be created through these utilities rather than
directly.

Usage:
    from cloudscore.http_client import create_client_session

    async with create_client_session() as session:
        await session.get(url)
"""

from __future__ import annotations

import platform

import aiohttp
from aiohttp import ClientTimeout

from cloudscore.__version__ import __version__

__all__ = [
    "DEFAULT_TIMEOUT",
    "DEFAULT_CONNECTIONS_PER_HOST",
    "attempt_timeout",
    "create_client_session",
    "default_user_agent",
]

# Default timeout for SDK requests; per-request totals override it
DEFAULT_TIMEOUT = ClientTimeout(
    total=60,  # Total time for the entire request
    connect=10,  # Time to establish connection
    sock_read=50,  # Time to read response
)

DEFAULT_CONNECTIONS_PER_HOST = 8


def attempt_timeout(seconds: float) -> ClientTimeout:
    """Timeout for a single attempt, never allowing connect to exceed the total."""
    return ClientTimeout(total=seconds, connect=min(seconds, DEFAULT_TIMEOUT.connect or seconds))


def default_user_agent() -> str:
    """User agent identifying the SDK version and the operating system."""
    os_name = " ".join(part for part in (platform.system(), platform.release()) if part)
    return f"cloudscore-python/{__version__} ({os_name or 'Unknown'})"


def create_client_session(
    timeout: ClientTimeout | None = None,
    **kwargs,
) -> aiohttp.ClientSession:
    """Create an aiohttp ClientSession with proper timeout configuration.

    Args:
        timeout: Optional custom timeout. Uses DEFAULT_TIMEOUT if not specified.
        **kwargs: Additional arguments passed to ClientSession.

    Returns:
        Configured aiohttp.ClientSession. Must be created inside a running
        event loop.
    """
    if timeout is None:
        timeout = DEFAULT_TIMEOUT
    if "connector" not in kwargs:
        kwargs["connector"] = aiohttp.TCPConnector(limit_per_host=DEFAULT_CONNECTIONS_PER_HOST)
    return aiohttp.ClientSession(timeout=timeout, **kwargs)
