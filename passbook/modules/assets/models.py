"""Asset content sources.

Every image handed to a pass is one of three things: bytes already in memory,
a filesystem path, or a readable stream. Each variant knows how to yield its
content as chunks; path and stream failures surface as ``AssetIOError``.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import AsyncIterator
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar, Union

from passbook.core.exceptions import AssetIOError

if TYPE_CHECKING:
    from .streams import PausedAssetStream

_BYTES_TYPES = (bytes, bytearray, memoryview)


@dataclass(frozen=True, slots=True)
class BufferSource:
    data: bytes

    kind: ClassVar[str] = "buffer"

    async def chunks(self, name: str, chunk_size: int) -> AsyncIterator[bytes]:
        view = memoryview(self.data)
        for start in range(0, len(view), chunk_size):
            yield bytes(view[start : start + chunk_size])


@dataclass(frozen=True, slots=True)
class PathSource:
    path: Path

    kind: ClassVar[str] = "path"

    async def chunks(self, name: str, chunk_size: int) -> AsyncIterator[bytes]:
        # Opened only once the stream is released.
        try:
            handle = await asyncio.to_thread(self.path.open, "rb")
        except OSError as exc:
            raise AssetIOError(name, f"cannot open {self.path}: {exc.strerror or exc}") from exc
        try:
            while True:
                try:
                    chunk = await asyncio.to_thread(handle.read, chunk_size)
                except OSError as exc:
                    raise AssetIOError(name, f"cannot read {self.path}: {exc.strerror or exc}") from exc
                if not chunk:
                    break
                yield chunk
        finally:
            handle.close()


@dataclass(frozen=True, slots=True)
class StreamSource:
    """A caller-owned stream; it is read to the end but never closed here."""

    stream: Any

    kind: ClassVar[str] = "stream"

    async def chunks(self, name: str, chunk_size: int) -> AsyncIterator[bytes]:
        raw = self._iter_raw(chunk_size)
        try:
            async for chunk in raw:
                if not isinstance(chunk, _BYTES_TYPES):
                    raise AssetIOError(name, f"stream produced {type(chunk).__name__}, expected bytes")
                if chunk:
                    yield bytes(chunk)
        except AssetIOError:
            raise
        except Exception as exc:
            raise AssetIOError(name, f"stream failed: {exc}") from exc
        finally:
            await raw.aclose()

    async def _iter_raw(self, chunk_size: int) -> AsyncIterator[Any]:
        read = getattr(self.stream, "read", None)
        if read is not None and inspect.iscoroutinefunction(read):
            while True:
                chunk = await read(chunk_size)
                if not chunk:
                    return
                yield chunk
        elif callable(read):
            while True:
                chunk = await asyncio.to_thread(read, chunk_size)
                if not chunk:
                    return
                yield chunk
        else:
            async for chunk in self.stream:
                yield chunk


AssetSource = Union[BufferSource, PathSource, StreamSource]


@dataclass(slots=True)
class AssetEntry:
    field: str
    archive_name: str
    source: AssetSource
    stream: PausedAssetStream
