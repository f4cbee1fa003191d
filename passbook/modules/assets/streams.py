"""Paused fan-out stream over an asset source.

No bytes flow until ``release()`` is called, so every consumer can be attached
first and none of them misses the start of the content.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator

from passbook.core.exceptions import AssetIOError

from .models import AssetSource

logger = logging.getLogger(__name__)

_EOF = object()


class _SinkFeed:
    """Bounded queue consumed as an async iterator by one attached sink."""

    def __init__(self, maxsize: int) -> None:
        self._queue: asyncio.Queue[object] = asyncio.Queue(maxsize=maxsize)
        self._finished = False

    async def put(self, chunk: bytes) -> None:
        await self._queue.put(chunk)

    async def close(self) -> None:
        await self._queue.put(_EOF)

    def fail(self, exc: BaseException) -> None:
        # Undelivered chunks are worthless once the source has failed.
        while not self._queue.empty():
            self._queue.get_nowait()
        self._queue.put_nowait(exc)

    def __aiter__(self) -> "_SinkFeed":
        return self

    async def __anext__(self) -> bytes:
        if self._finished:
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _EOF:
            self._finished = True
            raise StopAsyncIteration
        if isinstance(item, BaseException):
            self._finished = True
            raise item
        return item  # type: ignore[return-value]


class PausedAssetStream:
    def __init__(self, name: str, source: AssetSource, *, chunk_size: int = 64 * 1024, queue_size: int = 8) -> None:
        self.name = name
        self.source = source
        self._chunk_size = chunk_size
        self._queue_size = queue_size
        self._sinks: list[_SinkFeed] = []
        self._released = False

    @property
    def paused(self) -> bool:
        return not self._released

    def attach(self) -> AsyncIterator[bytes]:
        """Register a consumer; every attached consumer sees every chunk."""
        if self._released:
            raise RuntimeError(f"asset stream {self.name} has already been released")
        feed = _SinkFeed(self._queue_size)
        self._sinks.append(feed)
        return feed

    async def release(self) -> int:
        """Start the flow of bytes to the attached consumers.

        Returns the number of bytes delivered. A source failure is delivered to
        every consumer and re-raised here as ``AssetIOError``.
        """
        if self._released:
            raise RuntimeError(f"asset stream {self.name} has already been released")
        if not self._sinks:
            raise RuntimeError(f"asset stream {self.name} has no consumers attached")
        self._released = True

        total = 0
        chunks = self.source.chunks(self.name, self._chunk_size)
        try:
            async for chunk in chunks:
                total += len(chunk)
                for sink in self._sinks:
                    await sink.put(chunk)
        except AssetIOError as exc:
            logger.warning("asset.read_failed name=%s error=%s", self.name, exc)
            for sink in self._sinks:
                sink.fail(exc)
            raise
        finally:
            # Closes the source even when release() is cancelled mid-stream.
            await chunks.aclose()

        for sink in self._sinks:
            await sink.close()
        logger.debug("asset.released name=%s kind=%s bytes=%d", self.name, self.source.kind, total)
        return total
