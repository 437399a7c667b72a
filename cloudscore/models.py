"""
Result types returned by the leaderboard API.

All of them are immutable and created fresh for every response.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Iterator, Mapping, Optional, Sequence, overload

from cloudscore.exceptions import InputValidationError
from cloudscore.promise import Promise
from cloudscore.serialization import SerializableMixin
from cloudscore.types import BoardName, Domain, JsonDict, T


class ScoreOrder(str, Enum):
    """Sorting order of a board, fixed by the first score posted to it."""

    HIGH_TO_LOW = "hightolow"  # Highest score first
    LOW_TO_HIGH = "lowtohigh"  # Lowest score first


@dataclass(frozen=True)
class Score(SerializableMixin):
    """One entry of a leaderboard.

    ``gamer_info`` holds whatever the server reports about the gamer who
    made the score (gamer_id, profile...). It is None in best-score listings.
    """

    rank: int
    value: float
    info: Optional[str] = None
    posted_at: Optional[datetime] = None
    gamer_info: Optional[Mapping[str, Any]] = None


@dataclass(frozen=True)
class PostedGameScore(SerializableMixin):
    """Outcome of a score submission."""

    rank: int
    saved: bool


@dataclass(frozen=True)
class Done(SerializableMixin):
    """Outcome of an operation that returns no data."""

    successful: bool
    body: Optional[JsonDict] = None


@dataclass(frozen=True)
class PageRequest(SerializableMixin):
    """Parameters of one page fetch, kept as a value so it can be inspected.

    Calling the request runs ``fetch(self)`` and returns its Promise.
    """

    board: BoardName
    limit: int
    offset: int
    domain: Domain
    fetch: Callable[["PageRequest"], "Promise[PagedList[Score]]"] = field(
        compare=False, repr=False
    )

    _exclude_fields = ("fetch",)

    def __call__(self) -> "Promise[PagedList[Score]]":
        return self.fetch(self)


@dataclass(frozen=True)
class PagedList(SerializableMixin, Sequence[T]):
    """One page of a leaderboard.

    Attributes:
        items: Entries of this page, in rank order.
        offset: Index of the first entry within the whole board.
        total: Best known number of entries on the board.
        previous_page: Request for the page before this one, if any.
        next_page: Request for the page after this one, if any.
    """

    items: tuple[T, ...]
    offset: int
    total: int
    previous_page: Optional[PageRequest] = None
    next_page: Optional[PageRequest] = None

    @overload
    def __getitem__(self, index: int) -> T: ...

    @overload
    def __getitem__(self, index: slice) -> Sequence[T]: ...

    def __getitem__(self, index):
        return self.items[index]

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[T]:
        return iter(self.items)

    @property
    def has_previous(self) -> bool:
        return self.previous_page is not None

    @property
    def has_next(self) -> bool:
        return self.next_page is not None

    def fetch_previous(self) -> "Promise[PagedList[T]]":
        """Fetch the page before this one."""
        return self._follow(self.previous_page, "previous_page")

    def fetch_next(self) -> "Promise[PagedList[T]]":
        """Fetch the page after this one."""
        return self._follow(self.next_page, "next_page")

    @staticmethod
    def _follow(request: Optional[PageRequest], name: str) -> "Promise[Any]":
        if request is None:
            return Promise.rejected(InputValidationError(name, "no such page"))
        return request()


__all__ = [
    "ScoreOrder",
    "Score",
    "PostedGameScore",
    "Done",
    "PageRequest",
    "PagedList",
]
