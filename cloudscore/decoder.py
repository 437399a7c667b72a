"""
Decoding of leaderboard response bodies into result types.

Every function takes the decoded JSON body of a successful response and
raises DecodingError when it does not have the expected shape. Score
entries are accepted in two layouts:

    {"rank": 3, "score": {"score": 1200, "info": "...", "timestamp": 1700000000000},
     "gamer_id": "...", "profile": {...}}

    {"rank": 3, "score": 1200, "info": "..."}

Keys other than rank and score details are kept as the gamer information.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from cloudscore.exceptions import DecodingError
from cloudscore.models import Done, PostedGameScore, Score
from cloudscore.types import JsonDict

_SCORE_KEYS = frozenset({"rank", "score", "info", "timestamp"})


@dataclass(frozen=True)
class BoardPage:
    """Raw page content of one board, ranks already assigned."""

    scores: list[Score]
    max_page: int
    rank_of_first: int


def _fail(message: str, body: Any) -> DecodingError:
    return DecodingError(message, body=body)


def _require_object(value: Any, what: str, body: Any) -> JsonDict:
    if not isinstance(value, dict):
        raise _fail(f"Expected an object for {what}, got {type(value).__name__}", body)
    return value


def _require_int(value: Any, what: str, body: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or int(value) != value:
        raise _fail(f"Expected an integer for {what}, got {value!r}", body)
    return int(value)


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


def decode_score(entry: Any, rank: Optional[int] = None, body: Any = None) -> Score:
    """Decode one score entry.

    Args:
        entry: The entry object.
        rank: Rank to assign. When None, the entry's own ``rank`` is used.
        body: Whole response body, attached to errors for diagnostics.
    """
    body = entry if body is None else body
    entry = _require_object(entry, "score entry", body)

    details = entry.get("score")
    if isinstance(details, dict):
        value = details.get("score")
        info = details.get("info")
        timestamp = details.get("timestamp")
    else:
        value = details
        info = entry.get("info")
        timestamp = entry.get("timestamp")

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise _fail(f"Score entry has no numeric score: {value!r}", body)

    if rank is None:
        if "rank" not in entry:
            raise _fail("Score entry has no rank", body)
        rank = _require_int(entry["rank"], "rank", body)

    gamer_info = {k: v for k, v in entry.items() if k not in _SCORE_KEYS} or None

    return Score(
        rank=rank,
        value=value,
        info=info if info is None else str(info),
        posted_at=_parse_timestamp(timestamp),
        gamer_info=gamer_info,
    )


def decode_board_page(body: Any, board: str) -> BoardPage:
    """Decode a paged listing: ``{board: {scores, maxpage, rankOfFirst}}``.

    Ranks are assigned from ``rankOfFirst``, one per entry, in response order.
    """
    root = _require_object(body, "response", body)
    if board not in root:
        raise _fail(f"Response has no data for board '{board}'", body)
    board_data = _require_object(root[board], f"board '{board}'", body)

    entries = board_data.get("scores")
    if not isinstance(entries, list):
        raise _fail(f"Board '{board}' has no score list", body)
    max_page = _require_int(board_data.get("maxpage", 0), "maxpage", body)
    rank_of_first = _require_int(board_data.get("rankOfFirst", 1), "rankOfFirst", body)

    scores = [
        decode_score(entry, rank=rank_of_first + index, body=body)
        for index, entry in enumerate(entries)
    ]
    return BoardPage(scores=scores, max_page=max_page, rank_of_first=rank_of_first)


def decode_friend_scores(body: Any, board: str) -> list[Score]:
    """Decode a friend listing: ``{board: [entry, ...]}``, ranks from the entries."""
    root = _require_object(body, "response", body)
    entries = root.get(board)
    if not isinstance(entries, list):
        raise _fail(f"Response has no friend score list for board '{board}'", body)
    return [decode_score(entry, body=body) for entry in entries]


def decode_best_scores(body: Any) -> dict[str, Score]:
    """Decode best scores: ``{board: entry, ...}``. Gamer information is dropped."""
    root = _require_object(body, "response", body)
    best: dict[str, Score] = {}
    for board, entry in root.items():
        score = decode_score(entry, body=body)
        best[board] = Score(
            rank=score.rank,
            value=score.value,
            info=score.info,
            posted_at=score.posted_at,
            gamer_info=None,
        )
    return best


def decode_rank(body: Any) -> int:
    root = _require_object(body, "response", body)
    if "rank" not in root:
        raise _fail("Response has no rank", body)
    return _require_int(root["rank"], "rank", body)


def decode_posted_score(body: Any) -> PostedGameScore:
    """Decode a submission result: ``{rank, done}``."""
    root = _require_object(body, "response", body)
    saved = root.get("done", root.get("scoreSaved"))
    if not isinstance(saved, bool):
        raise _fail(f"Response has no boolean save flag: {saved!r}", body)
    return PostedGameScore(rank=decode_rank(root), saved=saved)


def decode_done(body: Any) -> Done:
    if body is None:
        return Done(successful=True)
    root = _require_object(body, "response", body)
    return Done(successful=bool(root.get("done", True)), body=root)


__all__ = [
    "BoardPage",
    "decode_score",
    "decode_board_page",
    "decode_friend_scores",
    "decode_best_scores",
    "decode_rank",
    "decode_posted_score",
    "decode_done",
]
