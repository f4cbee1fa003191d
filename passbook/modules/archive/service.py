"""Zip container writer with incremental async output.

``zipfile`` writes to an unseekable sink here, so every entry carries a data
descriptor and bytes can be handed out as soon as they are compressed.
"""

from __future__ import annotations

import asyncio
import io
import logging
import zipfile
from collections.abc import AsyncIterable, AsyncIterator
from typing import Union

from passbook.core.exceptions import AssemblyError

logger = logging.getLogger(__name__)

EntryContent = Union[bytes, bytearray, memoryview, AsyncIterable[bytes]]

_EOF = object()


class _ChunkSink(io.RawIOBase):
    """Write-only, unseekable file object collecting zip output."""

    def __init__(self) -> None:
        super().__init__()
        self._chunks: list[bytes] = []
        self._position = 0

    def writable(self) -> bool:
        return True

    def write(self, data) -> int:  # type: ignore[override]
        if self.closed:
            raise ValueError("write to closed archive sink")
        chunk = bytes(data)
        if chunk:
            self._chunks.append(chunk)
            self._position += len(chunk)
        return len(chunk)

    def tell(self) -> int:
        return self._position

    def take(self) -> list[bytes]:
        chunks, self._chunks = self._chunks, []
        return chunks


class ArchiveAssembler:
    def __init__(self, *, compression_level: int = 1, output_queue_size: int = 32) -> None:
        self._sink = _ChunkSink()
        self._zip = zipfile.ZipFile(
            self._sink,
            mode="w",
            compression=zipfile.ZIP_DEFLATED,
            compresslevel=compression_level,
        )
        self._lock = asyncio.Lock()
        self._output: asyncio.Queue[object] = asyncio.Queue(maxsize=output_queue_size)
        self._names: list[str] = []
        self._finalized = False
        self._aborted = False

    @property
    def names(self) -> list[str]:
        return list(self._names)

    async def add_entry(self, content: EntryContent, *, name: str) -> int:
        """Compress ``content`` into the archive as ``name``; returns its size.

        Safe to call concurrently: entries are written one at a time in the
        order they acquire the writer.
        """
        if self._finalized or self._aborted:
            raise AssemblyError(f"cannot add {name}: archive is closed")
        if name in self._names:
            raise AssemblyError(f"{name} is already in the archive")
        if not isinstance(content, (bytes, bytearray, memoryview, AsyncIterable)):
            raise AssemblyError(f"{name}: unsupported content type {type(content).__name__}")
        self._names.append(name)

        async with self._lock:
            size = 0
            try:
                with self._zip.open(name, mode="w") as handle:
                    if isinstance(content, (bytes, bytearray, memoryview)):
                        handle.write(content)
                        size = len(content)
                    else:
                        async for chunk in content:
                            handle.write(chunk)
                            size += len(chunk)
                            await self._drain()
            except (OSError, ValueError, zipfile.LargeZipFile) as exc:
                raise AssemblyError(f"cannot write {name}: {exc}") from exc
            await self._drain()
        logger.debug("archive.entry_added name=%s size=%d", name, size)
        return size

    async def finalize(self) -> None:
        """Write the central directory and end the output stream."""
        async with self._lock:
            if self._finalized:
                return
            if self._aborted:
                raise AssemblyError("cannot finalize: archive was aborted")
            self._finalized = True
            try:
                self._zip.close()
            except (OSError, ValueError) as exc:
                raise AssemblyError(f"cannot finalize archive: {exc}") from exc
            await self._drain()
            await self._output.put(_EOF)
        logger.debug("archive.finalized entries=%d bytes=%d", len(self._names), self._sink.tell())

    def abort(self, exc: BaseException) -> None:
        """End the output with ``exc``; bytes not yet delivered are dropped."""
        if self._aborted:
            return
        self._aborted = True
        # Detach the writer so no central directory is ever written, not even on collection.
        self._zip.fp = None
        self._sink.close()
        while not self._output.empty():
            self._output.get_nowait()
        self._output.put_nowait(exc)

    async def output(self) -> AsyncIterator[bytes]:
        while True:
            item = await self._output.get()
            if item is _EOF:
                return
            if isinstance(item, BaseException):
                raise item
            yield item  # type: ignore[misc]

    async def _drain(self) -> None:
        for chunk in self._sink.take():
            await self._output.put(chunk)
