"""
Leaderboard operations.

GamerScores lists, previews and posts scores on named boards, scoped to a
domain. Boards are not registered anywhere: the first score posted to a
name creates the board with the order given at that time.

Usage:
    scores = gamer.scores                      # private domain
    shared = gamer.scores.with_domain("global")

    page = await scores.list("arena", limit=10)
    for score in page:
        print(score.rank, score.value)
    if page.has_next:
        page = await page.fetch_next()

    # Page holding the current gamer
    mine = await scores.list("arena", limit=10, offset=CURRENT_GAMER_PAGE)

    posted = await scores.post(1200, "arena", ScoreOrder.HIGH_TO_LOW, info="level 3")

All operations must be called from the event loop that awaits them.
Invalid arguments reject the returned Promise without sending anything.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from cloudscore.decoder import (
    BoardPage,
    decode_best_scores,
    decode_board_page,
    decode_friend_scores,
    decode_posted_score,
    decode_rank,
)
from cloudscore.dispatcher import Dispatcher
from cloudscore.exceptions import InputValidationError
from cloudscore.logging_config import LogContext
from cloudscore.models import PagedList, PageRequest, PostedGameScore, Score, ScoreOrder
from cloudscore.promise import Promise
from cloudscore.request import RequestDescriptor, UrlBuilder
from cloudscore.types import PRIVATE_DOMAIN, BoardName, Domain

logger = logging.getLogger(__name__)

SCORES_PATH = "/v2.6/gamer/scores"
BEST_SCORES_PATH = "/v2.6/gamer/bestscores"

DEFAULT_PAGE_SIZE = 30
CURRENT_GAMER_PAGE = -1


def validate_page_bounds(limit: int, offset: int) -> None:
    """Check that ``offset`` addresses a page of ``limit`` entries.

    Raises:
        InputValidationError: limit is not positive, or offset is neither
            the CURRENT_GAMER_PAGE sentinel nor a non-negative multiple of limit.
    """
    if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
        raise InputValidationError("limit", f"must be a positive integer, got {limit!r}")
    if isinstance(offset, bool) or not isinstance(offset, int):
        raise InputValidationError("offset", f"must be an integer, got {offset!r}")
    if offset == CURRENT_GAMER_PAGE:
        return
    if offset < 0:
        raise InputValidationError("offset", f"must be >= 0 or {CURRENT_GAMER_PAGE}, got {offset}")
    if offset % limit:
        raise InputValidationError("offset", f"{offset} is not a multiple of limit {limit}")


def _validate_board(board: Any) -> BoardName:
    if not isinstance(board, str) or not board:
        raise InputValidationError("board", "must be a non-empty string")
    return BoardName(board)


def _validate_score(score: Any) -> None:
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        raise InputValidationError("score", f"must be a number, got {score!r}")


def resolve_page_window(page: BoardPage, limit: int, offset: int) -> tuple[int, int, bool]:
    """Compute (offset, total, has_more) for a fetched page.

    A request for CURRENT_GAMER_PAGE is placed on the page boundary that
    holds its first rank. ``total`` is the best known entry count. A short
    page is the last one, so the board ends with it. Otherwise the total is
    the server's page bound, never less than what has been seen.
    """
    count = len(page.scores)
    if offset == CURRENT_GAMER_PAGE:
        offset = ((max(page.rank_of_first, 1) - 1) // limit) * limit if count else 0
    if count < limit:
        total = offset + count
    else:
        total = max(page.max_page * limit, offset + count)
    has_more = count == limit and offset + count < total
    return offset, total, has_more


class GamerScores:
    """Leaderboard operations on behalf of one gamer, scoped to one domain.

    Instances are immutable: with_domain() returns a new accessor.
    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        credentials: Optional[Mapping[str, str]] = None,
        domain: str = PRIVATE_DOMAIN,
    ):
        self._dispatcher = dispatcher
        self._credentials = dict(credentials or {})
        self._domain = Domain(domain)

    @property
    def domain(self) -> Domain:
        return self._domain

    def with_domain(self, domain: str) -> "GamerScores":
        """Return an accessor scoped to ``domain``. This accessor is unchanged."""
        if not isinstance(domain, str) or not domain:
            raise InputValidationError("domain", "must be a non-empty string")
        return GamerScores(self._dispatcher, self._credentials, domain)

    def __repr__(self) -> str:
        return f"GamerScores(domain={self._domain!r})"

    # ------------------------------------------------------------------
    # Request building
    # ------------------------------------------------------------------

    def _board_url(self, board: BoardName) -> UrlBuilder:
        return UrlBuilder(SCORES_PATH).path(self._domain).path(board)

    def _prepare(self, descriptor: RequestDescriptor) -> RequestDescriptor:
        return self._dispatcher.prepare(descriptor, self._credentials)

    # ------------------------------------------------------------------
    # Paged listing
    # ------------------------------------------------------------------

    def list(
        self,
        board: str,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> Promise[PagedList[Score]]:
        """Fetch one page of a board.

        Args:
            board: Name of the board.
            limit: Maximum number of entries per page.
            offset: Index of the first entry; a multiple of ``limit``, or
                CURRENT_GAMER_PAGE for the page holding the current gamer.

        Returns:
            Promise of the page, with continuations to the adjacent pages.
        """
        try:
            board = _validate_board(board)
            validate_page_bounds(limit, offset)
        except InputValidationError as e:
            return Promise.rejected(e)
        return Promise.run(self._list(board, limit, offset))

    async def _list(self, board: BoardName, limit: int, offset: int) -> PagedList[Score]:
        url = self._board_url(board).query_param("count", limit)
        if offset == CURRENT_GAMER_PAGE:
            url.query_param("page", "me")
        else:
            url.query_param("page", offset // limit + 1)
        descriptor = self._prepare(url.descriptor())

        with LogContext(board=board, domain=self._domain):
            page = await self._dispatcher.call(
                descriptor, lambda response: decode_board_page(response.body, board)
            )
            resolved_offset, total, has_more = resolve_page_window(page, limit, offset)
            logger.debug(
                f"Fetched {len(page.scores)} scores at offset {resolved_offset} "
                f"(total {total}, requested offset {offset})"
            )

        return PagedList(
            items=tuple(page.scores),
            offset=resolved_offset,
            total=total,
            previous_page=(
                self._page_request(board, limit, resolved_offset - limit)
                if resolved_offset > 0
                else None
            ),
            next_page=(
                self._page_request(board, limit, resolved_offset + limit) if has_more else None
            ),
        )

    def _page_request(self, board: BoardName, limit: int, offset: int) -> PageRequest:
        return PageRequest(
            board=board, limit=limit, offset=offset, domain=self._domain, fetch=self.fetch_page
        )

    def fetch_page(self, request: PageRequest) -> Promise[PagedList[Score]]:
        """Run a PageRequest, in the domain it names."""
        scoped = self if request.domain == self._domain else self.with_domain(request.domain)
        return scoped.list(request.board, request.limit, request.offset)

    # ------------------------------------------------------------------
    # Flat listings
    # ------------------------------------------------------------------

    def list_friend_scores(self, board: str) -> Promise[list[Score]]:
        """Fetch the best scores of the gamer's friends on ``board``.

        The server returns the whole set; there is no pagination.
        """
        try:
            board = _validate_board(board)
        except InputValidationError as e:
            return Promise.rejected(e)
        url = self._board_url(board).query_param("type", "friendscore")
        descriptor = self._prepare(url.descriptor())
        return self._dispatcher.run(
            descriptor, lambda response: decode_friend_scores(response.body, board)
        )

    def list_user_best_scores(self) -> Promise[dict[str, Score]]:
        """Fetch the gamer's best score on every board they posted to.

        The returned scores never carry gamer information.
        """
        url = UrlBuilder(BEST_SCORES_PATH).path(self._domain)
        descriptor = self._prepare(url.descriptor())
        return self._dispatcher.run(descriptor, lambda response: decode_best_scores(response.body))

    # ------------------------------------------------------------------
    # One-shot operations
    # ------------------------------------------------------------------

    def get_rank(self, score: float, board: str) -> Promise[int]:
        """Rank ``score`` would have on ``board``, without recording it.

        The board must already hold at least one score.
        """
        try:
            board = _validate_board(board)
            _validate_score(score)
        except InputValidationError as e:
            return Promise.rejected(e)
        descriptor = self._prepare(
            self._board_url(board).descriptor(method="PUT", json_body={"score": score})
        )
        return self._dispatcher.run(descriptor, lambda response: decode_rank(response.body))

    def post(
        self,
        score: float,
        board: str,
        order: ScoreOrder,
        info: Optional[str] = None,
        force_save: bool = False,
    ) -> Promise[PostedGameScore]:
        """Post a score.

        Args:
            score: Value to record.
            board: Name of the board; created by the first post.
            order: Sorting order of the board. Only the first post to a board
                sets it, but it must be passed every time.
            info: Optional description of the score.
            force_save: Record the score even if it does not improve on the
                gamer's best.

        Returns:
            Promise of the new rank and whether the score was recorded.
        """
        try:
            board = _validate_board(board)
            _validate_score(score)
            try:
                order = ScoreOrder(order)
            except ValueError:
                raise InputValidationError("order", f"must be a ScoreOrder, got {order!r}") from None
            if info is not None and not isinstance(info, str):
                raise InputValidationError("info", "must be a string")
        except InputValidationError as e:
            return Promise.rejected(e)

        url = self._board_url(board).query_param("order", order.value)
        url.query_param("mayvary", bool(force_save))
        descriptor = self._prepare(
            url.descriptor(method="POST", json_body={"score": score, "info": info})
        )
        return self._dispatcher.run(descriptor, lambda response: decode_posted_score(response.body))


__all__ = [
    "GamerScores",
    "resolve_page_window",
    "validate_page_bounds",
    "CURRENT_GAMER_PAGE",
    "DEFAULT_PAGE_SIZE",
    "SCORES_PATH",
    "BEST_SCORES_PATH",
]
