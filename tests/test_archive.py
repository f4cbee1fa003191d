import asyncio
import gc

import pytest

from conftest import read_archive
from passbook.core.exceptions import AssemblyError
from passbook.modules.archive import ArchiveAssembler


async def _agen(*parts):
    for part in parts:
        await asyncio.sleep(0)
        yield part


async def _build(build):
    archive = ArchiveAssembler()
    chunks: list[bytes] = []

    async def consume():
        async for chunk in archive.output():
            chunks.append(chunk)

    consumer = asyncio.create_task(consume())
    await build(archive)
    await consumer
    return b"".join(chunks), chunks


def test_entries_round_trip():
    async def build(archive):
        await archive.add_entry(b'{"a":1}', name="pass.json")
        await archive.add_entry(_agen(b"ab", b"cd"), name="icon.png")
        await archive.finalize()

    data, _ = asyncio.run(_build(build))

    assert read_archive(data) == {"pass.json": b'{"a":1}', "icon.png": b"abcd"}


def test_concurrent_entries_all_survive_once():
    async def build(archive):
        await asyncio.gather(
            archive.add_entry(_agen(b"1" * 1000, b"2" * 1000), name="a"),
            archive.add_entry(b"b" * 500, name="b"),
            archive.add_entry(_agen(b"c"), name="c"),
        )
        assert sorted(archive.names) == ["a", "b", "c"]
        await archive.finalize()

    data, _ = asyncio.run(_build(build))
    entries = read_archive(data)

    assert entries == {"a": b"1" * 1000 + b"2" * 1000, "b": b"b" * 500, "c": b"c"}


def test_output_is_emitted_before_finalize():
    async def scenario():
        archive = ArchiveAssembler()
        await archive.add_entry(b"x" * 100, name="first")
        output = archive.output()
        first_chunk = await output.__anext__()
        await archive.finalize()
        rest = [chunk async for chunk in output]
        return first_chunk, rest

    first_chunk, rest = asyncio.run(scenario())
    assert first_chunk.startswith(b"PK\x03\x04")
    assert rest


def test_duplicate_entry_is_rejected():
    async def scenario():
        archive = ArchiveAssembler()
        await archive.add_entry(b"1", name="pass.json")
        await archive.add_entry(b"2", name="pass.json")

    with pytest.raises(AssemblyError, match="already in the archive"):
        asyncio.run(scenario())


def test_entries_after_finalize_are_rejected():
    async def scenario():
        archive = ArchiveAssembler()
        await archive.finalize()
        await archive.add_entry(b"1", name="late")

    with pytest.raises(AssemblyError, match="closed"):
        asyncio.run(scenario())


def test_abort_ends_output_with_error():
    async def scenario():
        archive = ArchiveAssembler()
        await archive.add_entry(b"partial", name="pass.json")
        archive.abort(RuntimeError("boom"))
        return [chunk async for chunk in archive.output()]

    with pytest.raises(RuntimeError, match="boom"):
        asyncio.run(scenario())


@pytest.mark.filterwarnings("error::pytest.PytestUnraisableExceptionWarning")
def test_aborted_archive_is_discarded_cleanly():
    async def scenario():
        archive = ArchiveAssembler()
        await archive.add_entry(b"partial", name="pass.json")
        archive.abort(AssemblyError("disk full"))
        with pytest.raises(AssemblyError, match="closed"):
            await archive.add_entry(b"late", name="late")
        with pytest.raises(AssemblyError, match="aborted"):
            await archive.finalize()

    asyncio.run(scenario())
    gc.collect()
