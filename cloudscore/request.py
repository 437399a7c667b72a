"""
Request descriptors.

A RequestDescriptor is the logical description of one HTTP call: method,
path, query parameters, JSON body and headers. Operation code builds one
with UrlBuilder; the Dispatcher completes it (server URL, credentials,
timeout, failure hook) and hands it to the transport.

Usage:
    url = UrlBuilder("/v2.6/gamer/scores").path(domain).path(board)
    url.query_param("count", 30).query_param("page", "me")
    descriptor = RequestDescriptor(path=url.build_path(), query=url.query)
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Mapping, Optional
from urllib.parse import quote

from cloudscore.config import TimeoutPolicy
from cloudscore.types import FailureHook, Headers, QueryParams

IDEMPOTENT_METHODS = frozenset({"GET", "HEAD", "PUT", "DELETE", "OPTIONS"})


def render_query_value(value: Any) -> str:
    """Render a query parameter the way the backend parses it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class UrlBuilder:
    """Incrementally builds a request path and its query string."""

    def __init__(self, base_path: str):
        self._segments = [base_path.rstrip("/")]
        self._query: QueryParams = {}

    def path(self, segment: str) -> "UrlBuilder":
        """Append one path segment, percent-encoded."""
        self._segments.append(quote(str(segment), safe=""))
        return self

    def query_param(self, name: str, value: Any) -> "UrlBuilder":
        self._query[name] = render_query_value(value)
        return self

    def build_path(self) -> str:
        return "/".join(self._segments)

    @property
    def query(self) -> QueryParams:
        return dict(self._query)

    def descriptor(self, method: str = "GET", json_body: Any = None) -> "RequestDescriptor":
        """Shortcut for a RequestDescriptor of the current path and query."""
        return RequestDescriptor(
            method=method, path=self.build_path(), query=self.query, json_body=json_body
        )


@dataclass(frozen=True)
class RequestDescriptor:
    """Immutable description of one HTTP request.

    Fields below ``headers`` are filled in by the Dispatcher; a descriptor
    with an empty ``url`` has not been prepared yet.

    Attributes:
        method: HTTP verb.
        path: Server-relative path, starting with '/'.
        query: Query string parameters.
        json_body: Body serialized as JSON, or None for no body.
        headers: Headers sent with the request.
        url: Absolute URL (server + path).
        timeout: Seconds allowed for the request, per attempt or overall
            depending on ``timeout_policy``.
        timeout_policy: Whether ``timeout`` applies to each attempt or to
            all of them together.
        verbose: Log query, request body and response body.
        failure_hook: Strategy consulted on recoverable failures, captured
            when the descriptor was prepared.
    """

    path: str
    method: str = "GET"
    query: QueryParams = field(default_factory=dict)
    json_body: Any = None
    headers: Headers = field(default_factory=dict)
    url: str = ""
    timeout: float = 60.0
    timeout_policy: TimeoutPolicy = TimeoutPolicy.PER_ATTEMPT
    verbose: bool = False
    failure_hook: Optional[FailureHook] = field(default=None, compare=False)

    @property
    def prepared(self) -> bool:
        return bool(self.url)

    @property
    def idempotent(self) -> bool:
        """Whether re-sending the request cannot record anything twice."""
        return self.method.upper() in IDEMPOTENT_METHODS

    @property
    def user_agent(self) -> Optional[str]:
        return self.headers.get("User-Agent")

    def with_headers(self, headers: Mapping[str, str]) -> "RequestDescriptor":
        """Return a copy with extra headers merged over the existing ones."""
        return replace(self, headers={**self.headers, **headers})

    def describe(self) -> str:
        target = self.url or self.path
        return f"{self.method} {target}"


__all__ = ["UrlBuilder", "RequestDescriptor", "render_query_value", "IDEMPOTENT_METHODS"]
