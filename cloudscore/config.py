"""
Client configuration.

Provides the immutable settings a Cloud client runs with, with support for
environment variable overrides.

Environment variables:
    CLOUDSCORE_API_KEY: API key of the game
    CLOUDSCORE_API_SECRET: API secret of the game
    CLOUDSCORE_SERVER: Server URL, may contain an ``[id]`` placeholder
    CLOUDSCORE_LB_COUNT: Number of load-balanced server instances
    CLOUDSCORE_TIMEOUT_SECONDS: Request timeout
    CLOUDSCORE_VERBOSE: Log request and response bodies ("1", "true", "yes")
"""

from __future__ import annotations

import os
import random
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Optional

from cloudscore.exceptions import ConfigurationError
from cloudscore.types import FailureHook

SANDBOX_SERVER = "https://sandbox-api[id].clanofthecloud.mobi"
PRODUCTION_SERVER = "https://prod-api[id].clanofthecloud.mobi"

LOAD_BALANCER_PLACEHOLDER = "[id]"


class TimeoutPolicy(str, Enum):
    """How the request timeout applies when the failure hook retries.

    PER_ATTEMPT: every attempt gets the full timeout.
    SHARED_DEADLINE: one deadline covers the first attempt, all retries
        and the delays between them.
    """

    PER_ATTEMPT = "per_attempt"
    SHARED_DEADLINE = "shared_deadline"


@dataclass(frozen=True)
class ClientConfig:
    """Configuration for a Cloud client instance.

    Attributes:
        api_key: API key identifying the game.
        api_secret: API secret of the game.
        server: Base URL of the backend. An ``[id]`` placeholder is replaced
            by a random instance number in ``1..load_balancer_count``.
        load_balancer_count: Number of server instances behind ``[id]``.
        timeout_seconds: Request timeout, see ``timeout_policy``.
        timeout_policy: Whether retries share one deadline.
        failure_hook: Called on recoverable failures to decide retry or
            abort. None aborts every such failure.
        verbose: Log request and response bodies at DEBUG level.

    Example:
        config = ClientConfig(
            api_key="cloudscore.test",
            api_secret="s3cr3t",
            failure_hook=retry_with_backoff(max_retries=3),
        )
    """

    api_key: str
    api_secret: str
    server: str = SANDBOX_SERVER
    load_balancer_count: int = 2
    timeout_seconds: float = 60.0
    timeout_policy: TimeoutPolicy = TimeoutPolicy.PER_ATTEMPT
    failure_hook: Optional[FailureHook] = None
    verbose: bool = False

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not self.api_key:
            raise ConfigurationError("ClientConfig", "api_key is required")
        if not self.api_secret:
            raise ConfigurationError("ClientConfig", "api_secret is required")
        if not self.server.startswith(("http://", "https://")):
            raise ConfigurationError("ClientConfig", f"server must be an http(s) URL: {self.server}")
        if self.load_balancer_count < 1:
            raise ConfigurationError("ClientConfig", "load_balancer_count must be at least 1")
        if self.timeout_seconds <= 0:
            raise ConfigurationError("ClientConfig", "timeout_seconds must be positive")
        if self.failure_hook is not None and not callable(self.failure_hook):
            raise ConfigurationError("ClientConfig", "failure_hook must be callable")

    def with_overrides(self, **overrides: Any) -> ClientConfig:
        """Create a new config with the given fields replaced.

        None values are ignored, except for ``failure_hook`` which may be
        explicitly cleared.
        """
        changes = {
            name: value
            for name, value in overrides.items()
            if value is not None or name == "failure_hook"
        }
        return replace(self, **changes)

    def resolve_server(self) -> str:
        """Return the server base URL for one request."""
        server = self.server.rstrip("/")
        if LOAD_BALANCER_PLACEHOLDER not in server:
            return server
        instance = random.randint(1, self.load_balancer_count)
        return server.replace(LOAD_BALANCER_PLACEHOLDER, f"-{instance:02d}")


def _get_env_int(name: str) -> Optional[int]:
    """Get an integer from environment variable, or None if not set/invalid."""
    value = os.environ.get(name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _get_env_float(name: str) -> Optional[float]:
    """Get a float from environment variable, or None if not set/invalid."""
    value = os.environ.get(name)
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def _get_env_bool(name: str) -> Optional[bool]:
    value = os.environ.get(name)
    if value is None:
        return None
    return value.strip().lower() in ("1", "true", "yes", "on")


def get_client_config(**overrides: Any) -> ClientConfig:
    """Build a ClientConfig from the environment.

    Resolution order:
    1. Explicit keyword overrides
    2. Environment variables
    3. ClientConfig defaults

    Args:
        **overrides: Any ClientConfig field.

    Returns:
        ClientConfig with the resolved settings

    Raises:
        ConfigurationError: If api_key or api_secret cannot be resolved.
    """
    env_values: dict[str, Any] = {
        "api_key": os.environ.get("CLOUDSCORE_API_KEY"),
        "api_secret": os.environ.get("CLOUDSCORE_API_SECRET"),
        "server": os.environ.get("CLOUDSCORE_SERVER"),
        "load_balancer_count": _get_env_int("CLOUDSCORE_LB_COUNT"),
        "timeout_seconds": _get_env_float("CLOUDSCORE_TIMEOUT_SECONDS"),
        "verbose": _get_env_bool("CLOUDSCORE_VERBOSE"),
    }
    merged = {name: value for name, value in env_values.items() if value is not None}
    merged.update({name: value for name, value in overrides.items() if value is not None})

    return ClientConfig(
        api_key=merged.pop("api_key", ""),
        api_secret=merged.pop("api_secret", ""),
        **merged,
    )


__all__ = [
    "ClientConfig",
    "TimeoutPolicy",
    "get_client_config",
    "SANDBOX_SERVER",
    "PRODUCTION_SERVER",
]
