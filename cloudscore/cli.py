"""
cloudscore command line - query and post leaderboard scores.

Usage:
    python -m cloudscore ping
    python -m cloudscore list <board> [--limit 30] [--offset 0 | --me] [--all]
    python -m cloudscore friends <board>
    python -m cloudscore best
    python -m cloudscore rank <board> <score>
    python -m cloudscore post <board> <score> --order hightolow [--info TEXT] [--force]

Game credentials come from CLOUDSCORE_API_KEY / CLOUDSCORE_API_SECRET
(and optionally CLOUDSCORE_SERVER). Gamer credentials come from
--gamer-id / --gamer-secret or CLOUDSCORE_GAMER_ID / CLOUDSCORE_GAMER_SECRET.

Examples:
    # Top 10 of the arena board
    python -m cloudscore list arena --limit 10

    # The page holding the current gamer, in the shared domain
    python -m cloudscore --domain global list arena --me

    # Post a score even if it is not the gamer's best
    python -m cloudscore post arena 1200 --order hightolow --force
"""

from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from typing import Any, Optional, Sequence

from cloudscore.cloud import Cloud
from cloudscore.config import get_client_config
from cloudscore.exceptions import CloudScoreError
from cloudscore.logging_config import configure_logging
from cloudscore.models import ScoreOrder
from cloudscore.resilience import retry_with_backoff
from cloudscore.scores import CURRENT_GAMER_PAGE, DEFAULT_PAGE_SIZE, GamerScores
from cloudscore.serialization import serialize_value


def _print_json(value: Any) -> None:
    print(json.dumps(serialize_value(value), indent=2, default=str))


def _gamer_scores(cloud: Cloud, args: argparse.Namespace) -> GamerScores:
    gamer_id = args.gamer_id or os.environ.get("CLOUDSCORE_GAMER_ID")
    gamer_secret = args.gamer_secret or os.environ.get("CLOUDSCORE_GAMER_SECRET")
    if not gamer_id or not gamer_secret:
        raise CloudScoreError("Gamer credentials required (--gamer-id/--gamer-secret)")
    return cloud.gamer(gamer_id, gamer_secret).scores.with_domain(args.domain)


async def cmd_ping(cloud: Cloud, args: argparse.Namespace) -> int:
    done = await cloud.ping()
    _print_json(done)
    return 0 if done.successful else 1


async def cmd_list(cloud: Cloud, args: argparse.Namespace) -> int:
    scores = _gamer_scores(cloud, args)
    offset = CURRENT_GAMER_PAGE if args.me else args.offset
    page = await scores.list(args.board, limit=args.limit, offset=offset)
    pages = [page]
    while args.all and page.has_next:
        page = await page.fetch_next()
        pages.append(page)
    _print_json(pages if args.all else page)
    return 0


async def cmd_friends(cloud: Cloud, args: argparse.Namespace) -> int:
    _print_json(await _gamer_scores(cloud, args).list_friend_scores(args.board))
    return 0


async def cmd_best(cloud: Cloud, args: argparse.Namespace) -> int:
    _print_json(await _gamer_scores(cloud, args).list_user_best_scores())
    return 0


async def cmd_rank(cloud: Cloud, args: argparse.Namespace) -> int:
    rank = await _gamer_scores(cloud, args).get_rank(args.score, args.board)
    _print_json({"board": args.board, "score": args.score, "rank": rank})
    return 0


async def cmd_post(cloud: Cloud, args: argparse.Namespace) -> int:
    posted = await _gamer_scores(cloud, args).post(
        args.score,
        args.board,
        ScoreOrder(args.order),
        info=args.info,
        force_save=args.force,
    )
    _print_json(posted)
    return 0


COMMANDS = {
    "ping": cmd_ping,
    "list": cmd_list,
    "friends": cmd_friends,
    "best": cmd_best,
    "rank": cmd_rank,
    "post": cmd_post,
}


def _number(value: str) -> float:
    number = float(value)
    return int(number) if number.is_integer() else number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cloudscore",
        description="cloudscore leaderboard CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--gamer-id", default=None, help="Gamer identifier")
    parser.add_argument("--gamer-secret", default=None, help="Gamer secret")
    parser.add_argument("--domain", default="private", help="Domain (default: private)")
    parser.add_argument("--server", default=None, help="Override the server URL")
    parser.add_argument("--timeout", type=float, default=None, help="Request timeout in seconds")
    parser.add_argument(
        "--retries",
        type=int,
        default=0,
        help="Retry recoverable failures this many times (default: 0)",
    )
    parser.add_argument("--log-level", default="WARNING", help="Log level (default: WARNING)")

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("ping", help="Check that the server is up")

    list_parser = subparsers.add_parser("list", help="List one page of a board")
    list_parser.add_argument("board", help="Board name")
    list_parser.add_argument("--limit", type=int, default=DEFAULT_PAGE_SIZE, help="Page size")
    list_parser.add_argument("--offset", type=int, default=0, help="First entry (multiple of limit)")
    list_parser.add_argument("--me", action="store_true", help="Page holding the current gamer")
    list_parser.add_argument("--all", action="store_true", help="Follow next pages to the end")

    friends_parser = subparsers.add_parser("friends", help="Best scores of the gamer's friends")
    friends_parser.add_argument("board", help="Board name")

    subparsers.add_parser("best", help="Best score of the gamer on every board")

    rank_parser = subparsers.add_parser("rank", help="Rank a score would have, without posting")
    rank_parser.add_argument("board", help="Board name")
    rank_parser.add_argument("score", type=_number, help="Score value")

    post_parser = subparsers.add_parser("post", help="Post a score")
    post_parser.add_argument("board", help="Board name")
    post_parser.add_argument("score", type=_number, help="Score value")
    post_parser.add_argument(
        "--order",
        required=True,
        choices=[o.value for o in ScoreOrder],
        help="Board order, applied when the board is created",
    )
    post_parser.add_argument("--info", default=None, help="Description of the score")
    post_parser.add_argument(
        "--force", action="store_true", help="Save even if not the gamer's best"
    )

    return parser


async def _run(args: argparse.Namespace) -> int:
    config = get_client_config(
        server=args.server,
        timeout_seconds=args.timeout,
        failure_hook=retry_with_backoff(max_retries=args.retries) if args.retries > 0 else None,
    )
    async with Cloud(config) as cloud:
        return await COMMANDS[args.command](cloud, args)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(level=args.log_level, json_output=False)

    try:
        return asyncio.run(_run(args))
    except CloudScoreError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
