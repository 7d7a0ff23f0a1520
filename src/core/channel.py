"""
Fragment Channel - bounded producer/consumer hand-off for streamed text.

A producer task drains the upstream fragment iterator into a bounded
asyncio.Queue; the response body consumes from the queue. This gives the
streaming paths an explicit backpressure point (the producer blocks once
`maxsize` fragments are waiting) and an explicit cancellation point
(aclose() cancels the producer and closes the upstream iterator, which
releases the upstream HTTP connection).

Fragments are delivered in production order. An upstream exception is
delivered in-band after the fragments that preceded it and re-raised at
the consumer.

Example:
    >>> async with FragmentChannel(client.stream(params), maxsize=16) as channel:
    ...     async for fragment in channel:
    ...         await send(fragment)
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import AsyncIterator, Optional

logger = logging.getLogger(__name__)

DEFAULT_MAXSIZE = 16

_END = object()


@dataclass(frozen=True)
class _Failure:
    error: Exception


class FragmentChannel:
    """
    Async-iterable channel fed by a background producer task.

    Args:
        source: Upstream fragment iterator (usually an async generator).
        maxsize: Maximum number of fragments buffered ahead of the consumer.
    """

    def __init__(self, source: AsyncIterator[str], maxsize: int = DEFAULT_MAXSIZE) -> None:
        self._source = source
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self._producer: Optional[asyncio.Task] = None
        self._finished = False
        self._closed = False

    async def __aenter__(self) -> "FragmentChannel":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    def start(self) -> None:
        """Start the producer task (idempotent)."""
        if self._producer is None:
            self._producer = asyncio.create_task(self._produce())

    async def _produce(self) -> None:
        try:
            async for fragment in self._source:
                await self._queue.put(fragment)
        except Exception as e:
            await self._queue.put(_Failure(e))
            return
        await self._queue.put(_END)

    def __aiter__(self) -> "FragmentChannel":
        return self

    async def __anext__(self) -> str:
        if self._finished:
            raise StopAsyncIteration
        self.start()

        item = await self._queue.get()
        if item is _END:
            self._finished = True
            raise StopAsyncIteration
        if isinstance(item, _Failure):
            self._finished = True
            raise item.error
        return item

    @property
    def producer_done(self) -> bool:
        return self._producer is not None and self._producer.done()

    async def aclose(self) -> None:
        """
        Stop the producer and close the upstream iterator.

        Safe to call more than once; a producer that already finished is
        left alone.
        """
        if self._closed:
            return
        self._closed = True

        if self._producer is not None and not self._producer.done():
            self._producer.cancel()
            try:
                await self._producer
            except asyncio.CancelledError:
                logger.debug("Fragment producer cancelled")

        aclose = getattr(self._source, "aclose", None)
        if aclose is not None:
            await aclose()
