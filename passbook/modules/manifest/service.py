"""Content digests for every archived entry."""

from __future__ import annotations

import hashlib
import json
import logging
from collections.abc import AsyncIterable
from typing import Union

logger = logging.getLogger(__name__)

# The consuming verifier expects SHA-1 hex digests; do not substitute.
DIGEST_ALGORITHM = "sha1"

DigestContent = Union[bytes, bytearray, memoryview, AsyncIterable[bytes]]


class DuplicateEntryError(ValueError):
    """Raised when the same entry name is digested twice."""


class DigestAccumulator:
    """Collects ``name -> hex digest`` pairs that make up ``manifest.json``."""

    def __init__(self) -> None:
        self._hashes: dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._hashes)

    def __contains__(self, name: object) -> bool:
        return name in self._hashes

    @property
    def hashes(self) -> dict[str, str]:
        return dict(self._hashes)

    async def add(self, name: str, content: DigestContent) -> str:
        """Digest ``content`` and record it under ``name``.

        Buffers are hashed immediately. Async iterables are hashed chunk by chunk
        and the call returns only once the iterable is exhausted; errors raised
        while iterating propagate to the caller and nothing is recorded.
        """
        if name in self._hashes:
            raise DuplicateEntryError(f"{name} has already been added to the manifest")

        hasher = hashlib.new(DIGEST_ALGORITHM)
        if isinstance(content, (bytes, bytearray, memoryview)):
            hasher.update(content)
        elif isinstance(content, AsyncIterable):
            async for chunk in content:
                hasher.update(chunk)
        else:
            raise TypeError(f"contents must be bytes or an async byte stream, not {type(content).__name__}")

        if name in self._hashes:
            raise DuplicateEntryError(f"{name} has already been added to the manifest")
        digest = hasher.hexdigest()
        self._hashes[name] = digest
        logger.debug("manifest.add name=%s digest=%s", name, digest)
        return digest

    def to_json(self) -> bytes:
        return json.dumps(self._hashes, separators=(",", ":")).encode("utf-8")
