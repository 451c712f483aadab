"""JoernClient — async client for the Joern query server."""

from __future__ import annotations

import asyncio
import base64
import enum
import logging
from typing import TYPE_CHECKING, Any, Awaitable, TypeVar
from uuid import UUID

import httpx
from pydantic import BaseModel, ValidationError
from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import WebSocketException

from joern.client.stream import Receiver, StopReason
from joern.config import ClientConfig
from joern.errors import (
    CancellationError,
    ConnectionError,
    DecodeError,
    RemoteError,
    TransportError,
)
from joern.models import QueryRequest, QueryResponse, QueryResult
from joern.protocol import EP_QUERY, EP_RESULT, WS_CONNECT

if TYPE_CHECKING:
    from joern.client.tracker import CompletionTracker

log = logging.getLogger(__name__)

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)


class ConnectionState(enum.Enum):
    UNOPENED = "unopened"
    OPEN = "open"
    CLOSED = "closed"


async def _until_cancelled(aw: Awaitable[T], cancel: asyncio.Event | None) -> T:
    """Await *aw*, abandoning it with CancellationError once *cancel* is set."""
    if cancel is None:
        return await aw
    if cancel.is_set():
        if asyncio.iscoroutine(aw):
            aw.close()
        raise CancellationError("cancelled before start")

    work = asyncio.ensure_future(aw)
    waiter = asyncio.ensure_future(cancel.wait())
    try:
        await asyncio.wait({work, waiter}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        waiter.cancel()
        if not work.done():
            work.cancel()
    if work.done() and not work.cancelled():
        return work.result()
    await asyncio.gather(work, return_exceptions=True)
    raise CancellationError("cancelled while in flight")


class JoernClient:
    """Client for a Joern server: HTTP for queries, a WebSocket for completions.

    Queries go out with :meth:`send` and come back with :meth:`result`. The
    server announces each finished query by pushing its UUID on the
    WebSocket opened with :meth:`open`; :meth:`receive` drains it into a
    queue. Matching UUIDs to queries is up to the caller, or to a
    :class:`~joern.client.tracker.CompletionTracker`.

    Constructing a client does no network I/O.
    """

    def __init__(self, config: ClientConfig | None = None) -> None:
        self.config = config or ClientConfig()
        auth = None
        if self.config.has_credentials:
            auth = httpx.BasicAuth(self.config.username, self.config.password)
        self._http = httpx.AsyncClient(
            base_url=self.config.http_url,
            timeout=self.config.timeout,
            auth=auth,
        )
        self._ws: ClientConnection | None = None
        self.state = ConnectionState.UNOPENED

    @staticmethod
    def message_queue() -> asyncio.Queue[str]:
        """A queue that holds one message, so a slow consumer stalls the receiver."""
        return asyncio.Queue(maxsize=1)

    async def __aenter__(self) -> JoernClient:
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        try:
            await self.close()
        finally:
            await self._http.aclose()

    # --- Push channel -------------------------------------------------------

    def _ws_headers(self) -> dict[str, str]:
        if not self.config.has_credentials:
            return {}
        token = f"{self.config.username}:{self.config.password}".encode()
        return {"Authorization": "Basic " + base64.b64encode(token).decode("ascii")}

    async def open(self, cancel: asyncio.Event | None = None) -> None:
        """Dial the push channel. Call at most once per open/close cycle."""
        if self._ws is not None:
            raise ConnectionError("push channel is already open")

        url = self.config.ws_url + WS_CONNECT
        dial = connect(
            url,
            additional_headers=self._ws_headers() or None,
            open_timeout=self.config.timeout,
        )
        try:
            self._ws = await _until_cancelled(dial, cancel)
        except CancellationError as exc:
            raise ConnectionError(f"dial {url} cancelled") from exc
        except (WebSocketException, OSError, asyncio.TimeoutError) as exc:
            raise ConnectionError(f"dial {url} failed: {exc}") from exc

        self.state = ConnectionState.OPEN
        log.info("push channel open at %s", url)

    async def close(self) -> None:
        """Close the push channel, making a waiting :meth:`receive` return."""
        if self._ws is None:
            return
        try:
            await self._ws.close()
        except (WebSocketException, OSError) as exc:
            raise ConnectionError(f"close failed: {exc}") from exc

        self._ws = None
        self.state = ConnectionState.CLOSED
        log.info("push channel closed")

    async def receive(
        self,
        out: asyncio.Queue[str],
        cancel: asyncio.Event | None = None,
    ) -> StopReason:
        """Drain the push channel into *out*; meant to run as its own task.

        Never raises on read failure. Returns why it stopped, which is
        ``StopReason.CLOSED`` straight away if nothing is open.
        """
        if self._ws is None:
            return StopReason.CLOSED
        return await Receiver(self._ws, self.config.buffer_size).run(out, cancel)

    # --- Queries ------------------------------------------------------------

    async def _exchange(
        self,
        method: str,
        path: str,
        cancel: asyncio.Event | None,
        **kwargs: Any,
    ) -> httpx.Response:
        log.debug("%s %s", method, path)
        try:
            resp = await _until_cancelled(
                self._http.request(method, path, **kwargs), cancel,
            )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise TransportError(f"{method} {path} failed: {exc}") from exc

        if resp.status_code != httpx.codes.OK:
            raise RemoteError(
                f"{resp.status_code} {resp.reason_phrase}",
                status_code=resp.status_code,
                body=resp.text,
            )
        return resp

    @staticmethod
    def _decode(model: type[M], resp: httpx.Response) -> M:
        try:
            return model.model_validate_json(resp.content)
        except ValidationError as exc:
            raise DecodeError(
                f"unexpected {model.__name__} body: {exc}", body=resp.text,
            ) from exc

    async def send(self, query: str, cancel: asyncio.Event | None = None) -> UUID:
        """Submit *query* and return the UUID the server assigned to it."""
        resp = await self._exchange(
            "POST", EP_QUERY, cancel, json=QueryRequest(query=query).model_dump(),
        )
        return self._decode(QueryResponse, resp).uuid

    async def result(
        self,
        identifier: UUID | str,
        cancel: asyncio.Event | None = None,
    ) -> QueryResult:
        """Fetch the result of a query. A single attempt, no retry."""
        resp = await self._exchange("GET", f"{EP_RESULT}/{identifier}", cancel)
        return self._decode(QueryResult, resp)

    async def query(
        self,
        query: str,
        tracker: CompletionTracker,
        cancel: asyncio.Event | None = None,
    ) -> QueryResult:
        """Send *query*, wait for its completion on *tracker*, fetch the result.

        The tracker must be running against this client's receive queue.
        """
        identifier = await self.send(query, cancel)
        try:
            await _until_cancelled(tracker.wait(identifier), cancel)
        except BaseException:
            tracker.forget(identifier)
            raise
        return await self.result(identifier, cancel)
