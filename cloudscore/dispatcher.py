"""
Authenticated request dispatch.

The Dispatcher completes a RequestDescriptor with the game credentials, the
SDK version, the user agent, the timeout and the configured failure hook,
then sends it through a Transport and classifies the outcome:

- 2xx: returned to the caller.
- Connection errors, timeouts and 5xx answers are recoverable. The failure
  hook captured in the descriptor decides whether to retry (after an
  optional delay) or abort. Without a hook the request aborts.
- 4xx answers and malformed requests fail immediately with no retry.

Usage:
    dispatcher = Dispatcher(config)
    response = await dispatcher.send(dispatcher.prepare(descriptor))

    # Or with decoding, delivered through a Promise
    promise = dispatcher.run(descriptor, decode_rank)
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Mapping, Optional, Protocol, runtime_checkable

import aiohttp

from cloudscore.__version__ import SDK_PROTOCOL_VERSION
from cloudscore.config import ClientConfig, TimeoutPolicy
from cloudscore.exceptions import DecodingError, ServerError, TransportError
from cloudscore.http_client import attempt_timeout, create_client_session, default_user_agent
from cloudscore.logging_config import LogContext, get_logger, new_request_id
from cloudscore.promise import Promise
from cloudscore.request import RequestDescriptor
from cloudscore.types import Headers, T

logger = get_logger(__name__)

HEADER_API_KEY = "x-apikey"
HEADER_API_SECRET = "x-apisecret"
HEADER_SDK_VERSION = "x-sdkversion"
HEADER_USER_AGENT = "User-Agent"

# Failures worth handing to the failure hook
RECOVERABLE_ERRORS: tuple[type[BaseException], ...] = (
    aiohttp.ClientConnectionError,
    aiohttp.ClientPayloadError,
    asyncio.TimeoutError,
)


@dataclass(frozen=True)
class RawResponse:
    """HTTP answer as received from the transport.

    Attributes:
        status: HTTP status code.
        body: Decoded JSON body, or None when the body is empty or not JSON.
        text: Raw body text.
        headers: Response headers.
    """

    status: int
    body: Any = None
    text: str = ""
    headers: Headers = field(default_factory=dict)

    @classmethod
    def from_text(cls, status: int, text: str, headers: Optional[Mapping[str, str]] = None) -> "RawResponse":
        body = None
        if text:
            try:
                body = json.loads(text)
            except ValueError:
                body = None
        return cls(status=status, body=body, text=text, headers=dict(headers or {}))

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def is_server_error(self) -> bool:
        return self.status >= 500

    @property
    def diagnostic_body(self) -> Any:
        """Best-effort body for error reports."""
        return self.body if self.body is not None else (self.text or None)


@dataclass(frozen=True)
class FailureDecision:
    """Outcome of a failure hook: retry after ``delay`` seconds, or abort."""

    should_retry: bool
    delay: float = 0.0

    @classmethod
    def retry_in(cls, delay: float = 0.0) -> "FailureDecision":
        if delay < 0:
            raise ValueError("delay must not be negative")
        return cls(should_retry=True, delay=delay)

    @classmethod
    def abort(cls) -> "FailureDecision":
        return cls(should_retry=False)


@dataclass(frozen=True)
class FailedRequest:
    """Context handed to the failure hook for one recoverable failure.

    Attributes:
        descriptor: The request that failed; a retry re-sends it unchanged.
        attempt: 1 for the first attempt, incremented on each retry.
        error: Transport exception, or None for a 5xx answer.
        response: The 5xx answer, or None for a transport exception.
    """

    descriptor: RequestDescriptor
    attempt: int
    error: Optional[BaseException] = None
    response: Optional[RawResponse] = None

    @property
    def status(self) -> Optional[int]:
        return self.response.status if self.response is not None else None

    @property
    def body(self) -> Any:
        return self.response.diagnostic_body if self.response is not None else None

    @property
    def reason(self) -> str:
        if self.error is not None:
            return f"{type(self.error).__name__}: {self.error}".rstrip(": ")
        return f"HTTP {self.status}"

    def retry_in(self, delay: float = 0.0) -> FailureDecision:
        return FailureDecision.retry_in(delay)

    def abort(self) -> FailureDecision:
        return FailureDecision.abort()


@runtime_checkable
class Transport(Protocol):
    """Sends prepared descriptors.

    Implementations return a RawResponse for every HTTP answer, whatever its
    status, and raise aiohttp errors or asyncio.TimeoutError when no answer
    was obtained.
    """

    async def send(self, descriptor: RequestDescriptor, timeout: float) -> RawResponse:
        ...

    async def close(self) -> None:
        ...


class AiohttpTransport:
    """Transport backed by a shared aiohttp.ClientSession.

    The session is created lazily inside the running loop unless one is
    supplied; a supplied session is never closed by the transport.
    """

    def __init__(self, session: Optional[aiohttp.ClientSession] = None):
        self._session = session
        self._owns_session = session is None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = create_client_session()
            self._owns_session = True
        return self._session

    async def send(self, descriptor: RequestDescriptor, timeout: float) -> RawResponse:
        session = self._get_session()
        async with session.request(
            descriptor.method,
            descriptor.url,
            params=descriptor.query or None,
            json=descriptor.json_body,
            headers=descriptor.headers,
            timeout=attempt_timeout(timeout),
        ) as resp:
            text = await resp.text()
            return RawResponse.from_text(resp.status, text, resp.headers)

    async def close(self) -> None:
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None


class Dispatcher:
    """Attaches credentials to descriptors and sends them with retry handling."""

    def __init__(self, config: ClientConfig, transport: Optional[Transport] = None):
        self._config = config
        self._transport: Transport = transport or AiohttpTransport()
        self._user_agent = default_user_agent()

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def transport(self) -> Transport:
        return self._transport

    def reconfigure(self, config: ClientConfig) -> None:
        """Swap the configuration. Already prepared descriptors keep theirs."""
        self._config = config

    def prepare(
        self,
        descriptor: RequestDescriptor,
        extra_headers: Optional[Mapping[str, str]] = None,
    ) -> RequestDescriptor:
        """Return a copy of ``descriptor`` ready to be sent.

        The server instance, timeout, timeout policy, verbosity and failure
        hook are read from the current configuration once, here; retries of
        the returned descriptor reuse them.
        """
        config = self._config
        headers = {
            HEADER_API_KEY: config.api_key,
            HEADER_API_SECRET: config.api_secret,
            HEADER_SDK_VERSION: SDK_PROTOCOL_VERSION,
            HEADER_USER_AGENT: self._user_agent,
            **descriptor.headers,
            **(extra_headers or {}),
        }
        return replace(
            descriptor,
            url=config.resolve_server() + descriptor.path,
            headers=headers,
            timeout=config.timeout_seconds,
            timeout_policy=config.timeout_policy,
            verbose=config.verbose,
            failure_hook=config.failure_hook,
        )

    async def send(self, descriptor: RequestDescriptor) -> RawResponse:
        """Send a descriptor, consulting its failure hook on recoverable errors.

        Raises:
            TransportError: Recoverable failure that was aborted, a
                malformed request the transport refused, or a failure hook
                that raised.
            ServerError: The server answered with a non-2xx, non-5xx status.
        """
        if not descriptor.prepared:
            descriptor = self.prepare(descriptor)

        policy = descriptor.timeout_policy
        verbose = descriptor.verbose
        loop = asyncio.get_running_loop()
        deadline = loop.time() + descriptor.timeout
        attempt = 0
        last_failure: Optional[FailedRequest] = None

        with LogContext(request_id=new_request_id()):
            while True:
                attempt += 1
                timeout = descriptor.timeout
                if policy == TimeoutPolicy.SHARED_DEADLINE:
                    timeout = deadline - loop.time()
                    if timeout <= 0:
                        raise self._abort_error(last_failure, attempt - 1, "deadline exceeded")

                logger.debug("Sending request", request=descriptor.describe(), attempt=attempt)
                if verbose:
                    logger.debug("Request body", query=descriptor.query, body=descriptor.json_body)

                try:
                    response = await self._transport.send(descriptor, timeout)
                except RECOVERABLE_ERRORS as e:
                    failure = FailedRequest(descriptor=descriptor, attempt=attempt, error=e)
                except aiohttp.ClientError as e:
                    logger.warning("Request refused by transport", request=descriptor.describe(), error=str(e))
                    raise TransportError(
                        f"{descriptor.describe()} could not be sent: {e}",
                        cause=e,
                        url=descriptor.url,
                    ) from e
                else:
                    if verbose:
                        logger.debug("Response received", status=response.status, body=response.text)
                    if response.ok:
                        logger.debug("Request completed", status=response.status, attempts=attempt)
                        return response
                    if not response.is_server_error:
                        raise self._rejection_error(descriptor, response)
                    failure = FailedRequest(descriptor=descriptor, attempt=attempt, response=response)

                last_failure = failure
                decision = self._decide(failure)
                if not decision.should_retry:
                    raise self._abort_error(failure, attempt, "aborted")
                logger.info(
                    "Retrying request",
                    request=descriptor.describe(),
                    attempt=attempt,
                    reason=failure.reason,
                    delay=decision.delay,
                )
                if decision.delay > 0:
                    await asyncio.sleep(decision.delay)

    def dispatch(self, descriptor: RequestDescriptor) -> Promise[RawResponse]:
        """Send ``descriptor`` in the background; the Promise carries the answer."""
        return Promise.run(self.send(descriptor))

    async def call(self, descriptor: RequestDescriptor, decode: Callable[[RawResponse], T]) -> T:
        """Send ``descriptor`` and decode the answer.

        Shape mismatches raised by ``decode`` as KeyError, TypeError or
        ValueError are reported as DecodingError.
        """
        response = await self.send(descriptor)
        try:
            return decode(response)
        except DecodingError:
            raise
        except (KeyError, TypeError, ValueError) as e:
            raise DecodingError(
                f"Unexpected response to {descriptor.describe()}: {type(e).__name__}: {e}",
                cause=e,
                status=response.status,
                body=response.diagnostic_body,
                url=descriptor.url,
            ) from e

    def run(self, descriptor: RequestDescriptor, decode: Callable[[RawResponse], T]) -> Promise[T]:
        """Promise-returning form of call()."""
        return Promise.run(self.call(descriptor, decode))

    async def close(self) -> None:
        await self._transport.close()

    def _decide(self, failure: FailedRequest) -> FailureDecision:
        hook = failure.descriptor.failure_hook
        if hook is None:
            return FailureDecision.abort()
        try:
            decision = hook(failure)
        except Exception as e:
            logger.warning(
                "Failure hook raised, aborting",
                request=failure.descriptor.describe(),
                error=f"{type(e).__name__}: {e}",
            )
            raise TransportError(
                f"Failure hook raised while handling {failure.descriptor.describe()}: "
                f"{type(e).__name__}: {e}",
                cause=e,
                status=failure.status,
                body=failure.body,
                url=failure.descriptor.url,
            ) from e
        if not isinstance(decision, FailureDecision):
            logger.warning(
                "Failure hook returned an unexpected value, aborting",
                returned=type(decision).__name__,
            )
            return FailureDecision.abort()
        return decision

    @staticmethod
    def _abort_error(failure: Optional[FailedRequest], attempts: int, outcome: str) -> TransportError:
        if failure is None:
            return TransportError(f"Request {outcome} before any attempt completed")
        descriptor = failure.descriptor
        logger.warning(
            "Request failed",
            request=descriptor.describe(),
            attempts=attempts,
            reason=failure.reason,
            outcome=outcome,
        )
        error = TransportError(
            f"{descriptor.describe()} failed after {attempts} attempt(s) ({outcome}): {failure.reason}",
            cause=failure.error,
            status=failure.status,
            body=failure.body,
            url=descriptor.url,
        )
        if failure.error is not None:
            error.__cause__ = failure.error
        return error

    @staticmethod
    def _rejection_error(descriptor: RequestDescriptor, response: RawResponse) -> ServerError:
        detail = ""
        if isinstance(response.body, dict) and response.body.get("message"):
            detail = f": {response.body['message']}"
        logger.warning("Request rejected", request=descriptor.describe(), status=response.status)
        return ServerError(
            f"{descriptor.describe()} rejected with HTTP {response.status}{detail}",
            status=response.status,
            body=response.diagnostic_body,
            url=descriptor.url,
        )


__all__ = [
    "RawResponse",
    "FailureDecision",
    "FailedRequest",
    "Transport",
    "AiohttpTransport",
    "Dispatcher",
    "RECOVERABLE_ERRORS",
    "HEADER_API_KEY",
    "HEADER_API_SECRET",
    "HEADER_SDK_VERSION",
    "HEADER_USER_AGENT",
]
