"""
Root client of the SDK.

Cloud holds the configuration and the HTTP transport. It answers ping
requests and hands out Gamer objects, which scope leaderboard operations
to a gamer's credentials.

Usage:
    async with Cloud(ClientConfig(api_key="...", api_secret="...")) as cloud:
        await cloud.ping()
        gamer = cloud.gamer(gamer_id, gamer_secret)
        page = await gamer.scores.list("arena")
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import aiohttp

from cloudscore.config import ClientConfig, get_client_config
from cloudscore.decoder import decode_done
from cloudscore.dispatcher import Dispatcher, Transport
from cloudscore.exceptions import InputValidationError
from cloudscore.models import Done
from cloudscore.promise import Promise
from cloudscore.request import RequestDescriptor
from cloudscore.scores import GamerScores
from cloudscore.types import FailureHook, GamerId

logger = logging.getLogger(__name__)

PING_PATH = "/v1/ping"


class Gamer:
    """A logged-in gamer. Requests made through it carry the gamer's credentials.

    Obtaining ``gamer_id`` and ``gamer_secret`` (login) is outside this SDK.
    """

    def __init__(self, dispatcher: Dispatcher, gamer_id: str, gamer_secret: str):
        if not gamer_id or not gamer_secret:
            raise InputValidationError("gamer", "gamer_id and gamer_secret are required")
        self._dispatcher = dispatcher
        self.gamer_id = GamerId(gamer_id)
        try:
            authorization = aiohttp.encode_basic_auth(gamer_id, gamer_secret)
        except ValueError as e:
            raise InputValidationError("gamer_id", str(e)) from e
        self._credentials = {aiohttp.hdrs.AUTHORIZATION: authorization}

    @property
    def scores(self) -> GamerScores:
        """Leaderboard operations in the private domain."""
        return GamerScores(self._dispatcher, self._credentials)

    def __repr__(self) -> str:
        return f"Gamer(gamer_id={self.gamer_id!r})"


class Cloud:
    """Entry point of the SDK; owns the configuration and the transport."""

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        transport: Optional[Transport] = None,
    ):
        self._dispatcher = Dispatcher(config or get_client_config(), transport)

    @classmethod
    def from_env(cls, transport: Optional[Transport] = None, **overrides: Any) -> "Cloud":
        """Build a client from CLOUDSCORE_* environment variables."""
        return cls(get_client_config(**overrides), transport)

    @property
    def config(self) -> ClientConfig:
        return self._dispatcher.config

    @property
    def dispatcher(self) -> Dispatcher:
        return self._dispatcher

    def configure(self, **overrides: Any) -> ClientConfig:
        """Replace configuration fields for requests built from now on.

        Requests already built keep the settings they were built with.
        """
        config = self.config.with_overrides(**overrides)
        self._dispatcher.reconfigure(config)
        logger.debug(f"Client reconfigured: {sorted(overrides)}")
        return config

    @property
    def failure_hook(self) -> Optional[FailureHook]:
        return self.config.failure_hook

    @failure_hook.setter
    def failure_hook(self, hook: Optional[FailureHook]) -> None:
        """Set the hook consulted on recoverable failures of later requests."""
        self.configure(failure_hook=hook)

    def ping(self) -> Promise[Done]:
        """Check that the server is up. Sent without gamer credentials."""
        descriptor = self._dispatcher.prepare(RequestDescriptor(path=PING_PATH))
        return self._dispatcher.run(descriptor, lambda response: decode_done(response.body))

    def gamer(self, gamer_id: str, gamer_secret: str) -> Gamer:
        return Gamer(self._dispatcher, gamer_id, gamer_secret)

    async def close(self) -> None:
        await self._dispatcher.close()

    async def __aenter__(self) -> "Cloud":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()


__all__ = ["Cloud", "Gamer", "PING_PATH"]
