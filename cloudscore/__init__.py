"""
cloudscore: leaderboard client for a hosted game backend.

Lists, previews and posts scores on named, implicitly created boards.

FEATURES:
- Paged board listings with rank continuity and previous/next continuations
- Page holding the current gamer (offset CURRENT_GAMER_PAGE)
- Friend scores and best scores across boards
- Rank preview without recording a score
- Score posting with board order and force-save
- Domain scoping through immutable accessors (GamerScores.with_domain)
- Pluggable failure hook deciding retry or abort on recoverable errors
- Per-attempt or shared-deadline request timeouts

Quickstart:
    import asyncio
    from cloudscore import ClientConfig, Cloud, ScoreOrder

    async def main():
        config = ClientConfig(api_key="...", api_secret="...")
        async with Cloud(config) as cloud:
            scores = cloud.gamer(gamer_id, gamer_secret).scores
            await scores.post(1200, "arena", ScoreOrder.HIGH_TO_LOW)
            page = await scores.list("arena", limit=10)
            print([(s.rank, s.value) for s in page])

    asyncio.run(main())
"""

from __future__ import annotations

import importlib
from typing import Any

from cloudscore.__version__ import __version__

_EXPORT_MAP = {
    'AiohttpTransport': ('cloudscore.dispatcher', 'AiohttpTransport'),
    'ClientConfig': ('cloudscore.config', 'ClientConfig'),
    'Cloud': ('cloudscore.cloud', 'Cloud'),
    'CloudScoreError': ('cloudscore.exceptions', 'CloudScoreError'),
    'ConfigurationError': ('cloudscore.exceptions', 'ConfigurationError'),
    'CURRENT_GAMER_PAGE': ('cloudscore.scores', 'CURRENT_GAMER_PAGE'),
    'DecodingError': ('cloudscore.exceptions', 'DecodingError'),
    'Dispatcher': ('cloudscore.dispatcher', 'Dispatcher'),
    'Done': ('cloudscore.models', 'Done'),
    'ErrorKind': ('cloudscore.exceptions', 'ErrorKind'),
    'FailedRequest': ('cloudscore.dispatcher', 'FailedRequest'),
    'FailureDecision': ('cloudscore.dispatcher', 'FailureDecision'),
    'Gamer': ('cloudscore.cloud', 'Gamer'),
    'GamerScores': ('cloudscore.scores', 'GamerScores'),
    'InputValidationError': ('cloudscore.exceptions', 'InputValidationError'),
    'PagedList': ('cloudscore.models', 'PagedList'),
    'PageRequest': ('cloudscore.models', 'PageRequest'),
    'PostedGameScore': ('cloudscore.models', 'PostedGameScore'),
    'Promise': ('cloudscore.promise', 'Promise'),
    'RawResponse': ('cloudscore.dispatcher', 'RawResponse'),
    'RequestDescriptor': ('cloudscore.request', 'RequestDescriptor'),
    'RequestError': ('cloudscore.exceptions', 'RequestError'),
    'RetryStrategy': ('cloudscore.resilience', 'RetryStrategy'),
    'Score': ('cloudscore.models', 'Score'),
    'ScoreOrder': ('cloudscore.models', 'ScoreOrder'),
    'ServerError': ('cloudscore.exceptions', 'ServerError'),
    'TimeoutPolicy': ('cloudscore.config', 'TimeoutPolicy'),
    'Transport': ('cloudscore.dispatcher', 'Transport'),
    'TransportError': ('cloudscore.exceptions', 'TransportError'),
    'ValidationError': ('cloudscore.exceptions', 'ValidationError'),
    'abort_on_failure': ('cloudscore.resilience', 'abort_on_failure'),
    'configure_logging': ('cloudscore.logging_config', 'configure_logging'),
    'get_client_config': ('cloudscore.config', 'get_client_config'),
    'retry_always': ('cloudscore.resilience', 'retry_always'),
    'retry_with_backoff': ('cloudscore.resilience', 'retry_with_backoff'),
}


def __getattr__(name: str) -> Any:
    """Lazily import public symbols so importing the package stays cheap."""
    try:
        module_name, attr_name = _EXPORT_MAP[name]
    except KeyError as exc:
        raise AttributeError(f"module 'cloudscore' has no attribute {name!r}") from exc
    module = importlib.import_module(module_name)
    value = getattr(module, attr_name)
    globals()[name] = value
    return value


def __dir__() -> list[str]:
    return sorted(set(globals()) | set(__all__))


__all__ = [
    "__version__",
    # Client
    "Cloud",
    "Gamer",
    "GamerScores",
    "CURRENT_GAMER_PAGE",
    # Results
    "Score",
    "ScoreOrder",
    "PagedList",
    "PageRequest",
    "PostedGameScore",
    "Done",
    "Promise",
    # Configuration
    "ClientConfig",
    "TimeoutPolicy",
    "get_client_config",
    "configure_logging",
    # Dispatch
    "Dispatcher",
    "Transport",
    "AiohttpTransport",
    "RequestDescriptor",
    "RawResponse",
    "FailedRequest",
    "FailureDecision",
    # Failure hooks
    "RetryStrategy",
    "abort_on_failure",
    "retry_always",
    "retry_with_backoff",
    # Errors
    "CloudScoreError",
    "ConfigurationError",
    "ValidationError",
    "InputValidationError",
    "ErrorKind",
    "RequestError",
    "TransportError",
    "ServerError",
    "DecodingError",
]
