"""
Single-resolution promise used to deliver SDK results.

Every public SDK operation returns a Promise. A Promise is resolved (or
rejected) exactly once; later attempts are ignored and logged. It can be
awaited from the event loop that owns it, and resolved from any thread.

Usage:
    page = await scores.list("arena")

    # Callback style
    scores.list("arena").add_done_callback(lambda p: print(p.result()))

    # Chaining a synchronous transform
    ranks = scores.list("arena").then(lambda page: [s.rank for s in page])
"""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Awaitable, Callable, Generator, Generic, Optional

from cloudscore.types import T, U

logger = logging.getLogger(__name__)


class Promise(Generic[T]):
    """Exactly-once result holder bound to an asyncio event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop or asyncio.get_running_loop()
        self._future: asyncio.Future[T] = self._loop.create_future()
        self._lock = threading.Lock()
        self._settled = False
        # Keeps the producing task alive until it finishes
        self._task: Optional[asyncio.Task] = None

    @classmethod
    def run(
        cls,
        coro: Awaitable[T],
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> "Promise[T]":
        """Schedule a coroutine and return a Promise for its outcome."""
        promise: Promise[T] = cls(loop)
        promise._task = promise._loop.create_task(promise._drive(coro))
        return promise

    @classmethod
    def resolved(cls, value: T, loop: Optional[asyncio.AbstractEventLoop] = None) -> "Promise[T]":
        promise: Promise[T] = cls(loop)
        promise.resolve(value)
        return promise

    @classmethod
    def rejected(
        cls, error: BaseException, loop: Optional[asyncio.AbstractEventLoop] = None
    ) -> "Promise[Any]":
        promise: Promise[Any] = cls(loop)
        promise.reject(error)
        return promise

    async def _drive(self, coro: Awaitable[T]) -> None:
        try:
            value = await coro
        except asyncio.CancelledError:
            self._cancel()
            raise
        except Exception as e:
            self.reject(e)
        else:
            self.resolve(value)

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve(self, value: T) -> bool:
        """Resolve with a value. Returns False if already settled."""
        return self._settle(value, None)

    def reject(self, error: BaseException) -> bool:
        """Reject with an exception. Returns False if already settled."""
        return self._settle(None, error)

    def _settle(self, value: Any, error: Optional[BaseException]) -> bool:
        with self._lock:
            if self._settled:
                logger.warning(
                    "Ignoring second resolution of promise "
                    f"({'rejection' if error else 'value'})"
                )
                return False
            self._settled = True

        if self._on_loop_thread():
            self._apply(value, error)
        else:
            self._loop.call_soon_threadsafe(self._apply, value, error)
        return True

    def _apply(self, value: Any, error: Optional[BaseException]) -> None:
        # The awaiting side may have cancelled the future; nothing to deliver
        if self._future.done():
            return
        if error is not None:
            self._future.set_exception(error)
        else:
            self._future.set_result(value)

    def _cancel(self) -> None:
        with self._lock:
            self._settled = True
        if not self._future.done():
            self._future.cancel()

    def _on_loop_thread(self) -> bool:
        try:
            return asyncio.get_running_loop() is self._loop
        except RuntimeError:
            return False

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    def __await__(self) -> Generator[Any, None, T]:
        return self._future.__await__()

    def done(self) -> bool:
        return self._future.done()

    def result(self) -> T:
        """Return the value, or raise the rejection. Raises if still pending."""
        return self._future.result()

    def exception(self) -> Optional[BaseException]:
        return self._future.exception()

    def add_done_callback(self, callback: Callable[["Promise[T]"], None]) -> None:
        """Call ``callback(self)`` on the loop once the promise settles."""
        self._future.add_done_callback(lambda _fut: callback(self))

    def then(self, transform: Callable[[T], U]) -> "Promise[U]":
        """Return a new Promise resolved with ``transform(value)``.

        Rejections pass through untouched; an exception raised by the
        transform rejects the derived promise.
        """
        derived: Promise[U] = Promise(self._loop)

        def _chain(fut: asyncio.Future) -> None:
            if fut.cancelled():
                derived._cancel()
                return
            error = fut.exception()
            if error is not None:
                derived.reject(error)
                return
            try:
                derived.resolve(transform(fut.result()))
            except Exception as e:
                derived.reject(e)

        self._future.add_done_callback(_chain)
        return derived

    def __repr__(self) -> str:
        if not self._future.done():
            state = "pending"
        elif self._future.cancelled():
            state = "cancelled"
        elif self._future.exception() is not None:
            state = f"rejected={type(self._future.exception()).__name__}"
        else:
            state = "resolved"
        return f"<Promise {state}>"


__all__ = ["Promise"]
