"""CompletionTracker — matches pushed UUIDs to the queries waiting on them."""

from __future__ import annotations

import asyncio
import logging
from collections import OrderedDict
from uuid import UUID

from joern.protocol import CONNECTED

log = logging.getLogger(__name__)

DEFAULT_MAX_UNCLAIMED = 1024


def _as_uuid(identifier: UUID | str) -> UUID:
    return identifier if isinstance(identifier, UUID) else UUID(str(identifier))


class CompletionTracker:
    """Consumes a receive queue and resolves one future per query UUID.

    A completion may be pushed before anyone asks for it (the server can
    finish a query before :meth:`~joern.client.client.JoernClient.send`
    returns), so completions are remembered until claimed by :meth:`wait`.
    At most ``max_unclaimed`` of them are kept; the oldest go first.

    One waiter per identifier: :meth:`wait` forgets the identifier when it
    returns, times out or is cancelled.

    Usage::

        queue = JoernClient.message_queue()
        tracker = CompletionTracker(queue)
        asyncio.create_task(client.receive(queue))
        asyncio.create_task(tracker.run())
        result = await client.query("help", tracker)
    """

    def __init__(
        self,
        queue: asyncio.Queue[str],
        max_unclaimed: int = DEFAULT_MAX_UNCLAIMED,
    ) -> None:
        self._queue = queue
        self._max_unclaimed = max_unclaimed
        self._waiting: dict[UUID, asyncio.Future[None]] = {}
        self._completed: OrderedDict[UUID, None] = OrderedDict()
        self.connected = asyncio.Event()

    def feed(self, message: str) -> None:
        """Handle one message from the push channel."""
        if message == CONNECTED:
            self.connected.set()
            return
        try:
            identifier = UUID(message)
        except ValueError:
            log.warning("ignoring unexpected push message %r", message)
            return

        fut = self._waiting.pop(identifier, None)
        if fut is not None and not fut.done():
            fut.set_result(None)
        self._completed[identifier] = None
        while len(self._completed) > self._max_unclaimed:
            dropped, _ = self._completed.popitem(last=False)
            log.debug("dropping unclaimed completion %s", dropped)

    async def run(self) -> None:
        """Feed every queued message until the task is cancelled."""
        while True:
            self.feed(await self._queue.get())

    def expect(self, identifier: UUID | str) -> asyncio.Future[None]:
        """Future resolved when *identifier* is pushed (or already was)."""
        identifier = _as_uuid(identifier)
        fut = self._waiting.get(identifier)
        if fut is None:
            fut = asyncio.get_running_loop().create_future()
            if identifier in self._completed:
                fut.set_result(None)
            else:
                self._waiting[identifier] = fut
        return fut

    def is_done(self, identifier: UUID | str) -> bool:
        return _as_uuid(identifier) in self._completed

    def forget(self, identifier: UUID | str) -> None:
        """Drop everything held for *identifier*."""
        identifier = _as_uuid(identifier)
        self._waiting.pop(identifier, None)
        self._completed.pop(identifier, None)

    async def wait(self, identifier: UUID | str, timeout: float | None = None) -> None:
        """Wait for *identifier* to complete, then forget it."""
        identifier = _as_uuid(identifier)
        try:
            await asyncio.wait_for(asyncio.shield(self.expect(identifier)), timeout)
        finally:
            self.forget(identifier)

    async def wait_connected(self, timeout: float | None = None) -> None:
        await asyncio.wait_for(self.connected.wait(), timeout)
