"""Receiver — drains the Joern push channel into an asyncio queue."""

from __future__ import annotations

import asyncio
import codecs
import enum
import logging

from websockets.asyncio.client import ClientConnection
from websockets.exceptions import ConnectionClosedOK, WebSocketException

log = logging.getLogger(__name__)


class StopReason(enum.Enum):
    """Why a receive loop returned."""

    CANCELLED = "cancelled"
    CLOSED = "closed"
    FAILED = "failed"


class Receiver:
    """Reads a WebSocket as a byte stream, ``buffer_size`` bytes at a time.

    Each read hands out at most ``buffer_size`` bytes of the current frame, so
    a frame longer than the buffer comes out as several messages. Frames are
    never merged. Text is decoded incrementally within a frame, so a
    multi-byte character cut by the buffer boundary is carried into the next
    message of the same frame. Bytes that are not valid UTF-8 come out as
    surrogate escapes; ``text.encode("utf-8", "surrogateescape")`` gives the
    original bytes back.

    Usage::

        queue = JoernClient.message_queue()
        task = asyncio.create_task(client.receive(queue))
        print(await queue.get())   # "connected"
    """

    def __init__(self, ws: ClientConnection, buffer_size: int) -> None:
        self._ws = ws
        self._buffer_size = buffer_size
        self._pending = b""
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="surrogateescape")

    async def read(self) -> bytes:
        """Return the next chunk of at most ``buffer_size`` bytes.

        May return ``b""`` for an empty frame. Raises
        :class:`websockets.exceptions.ConnectionClosed` once the connection
        is gone.
        """
        if not self._pending:
            self._pending = await self._ws.recv(decode=False)
        chunk = self._pending[: self._buffer_size]
        self._pending = self._pending[self._buffer_size :]
        return chunk

    async def run(
        self,
        out: asyncio.Queue[str],
        cancel: asyncio.Event | None = None,
    ) -> StopReason:
        """Forward chunks to *out* until cancelled or the connection ends.

        *cancel* is checked once per iteration; it does not interrupt a read
        that is already waiting. Closing the connection does.
        """
        while True:
            if cancel is not None and cancel.is_set():
                log.debug("receiver cancelled")
                return StopReason.CANCELLED

            try:
                chunk = await self.read()
            except ConnectionClosedOK:
                log.debug("receiver stopped: connection closed")
                return StopReason.CLOSED
            except (WebSocketException, OSError) as exc:
                log.debug("receiver stopped: %s", exc)
                return StopReason.FAILED

            if not chunk:
                continue
            # flush the decoder at the end of each frame
            text = self._decoder.decode(chunk, final=not self._pending)
            if text:
                log.debug("received %r", text)
                await out.put(text)
