"""
Shared type definitions for cloudscore.

This module provides type aliases and NewTypes for common patterns
across the SDK.

Usage:
    from cloudscore.types import BoardName, Domain

    def board_path(domain: Domain, board: BoardName) -> str:
        ...
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, NewType, TypeAlias, TypeVar

# === Semantic String Types ===

BoardName = NewType("BoardName", str)
"""Name of a leaderboard (e.g., 'arena'). Boards are created by the first post."""

Domain = NewType("Domain", str)
"""Namespace scoping leaderboard data (e.g., 'private')."""

GamerId = NewType("GamerId", str)
"""Server-issued identifier of a gamer."""

# === Common Type Aliases ===

JsonDict: TypeAlias = dict[str, Any]
"""A JSON-serializable dictionary."""

QueryParams: TypeAlias = dict[str, str]
"""Query string parameters, already rendered to strings."""

Headers: TypeAlias = dict[str, str]
"""HTTP headers sent with a request."""

# === Callback Types ===

FailureHook: TypeAlias = "Callable[[FailedRequest], FailureDecision]"
"""Called synchronously on a recoverable failure; decides retry or abort."""

# === Generic Type Variables ===

T = TypeVar("T")
"""Generic type variable for promise payloads."""

U = TypeVar("U")
"""Second generic type variable, for transforms."""

if TYPE_CHECKING:
    from cloudscore.dispatcher import FailedRequest, FailureDecision

# === Constants ===

PRIVATE_DOMAIN: Domain = Domain("private")
"""Default per-game domain."""

__all__ = [
    "BoardName",
    "Domain",
    "GamerId",
    "JsonDict",
    "QueryParams",
    "Headers",
    "FailureHook",
    "T",
    "U",
    "PRIVATE_DOMAIN",
]
