"""Turn image fields into paused asset streams."""

from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from passbook.modules.fields import IMAGES, image_archive_name

from .exceptions import InvalidAssetTypeError
from .models import AssetEntry, AssetSource, BufferSource, PathSource, StreamSource
from .streams import PausedAssetStream

logger = logging.getLogger(__name__)


def classify_asset(field: str, value: Any) -> AssetSource:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return BufferSource(bytes(value))
    if isinstance(value, (str, os.PathLike)):
        return PathSource(Path(value).resolve())
    if callable(getattr(value, "read", None)) or isinstance(value, AsyncIterable):
        return StreamSource(value)
    raise InvalidAssetTypeError(field, type(value).__name__)


@dataclass(slots=True)
class AssetResolver:
    chunk_size: int = 64 * 1024
    queue_size: int = 8

    def resolve(self, fields: dict[str, Any]) -> list[AssetEntry]:
        """Pop every image field out of ``fields`` and wrap it as a paused stream.

        Entries come back in vocabulary order. ``None`` and empty strings count
        as absent.
        """
        entries: list[AssetEntry] = []
        for field in IMAGES:
            if field not in fields:
                continue
            value = fields.pop(field)
            if value is None or value == "":
                continue
            source = classify_asset(field, value)
            archive_name = image_archive_name(field)
            stream = PausedAssetStream(
                archive_name,
                source,
                chunk_size=self.chunk_size,
                queue_size=self.queue_size,
            )
            entries.append(AssetEntry(field=field, archive_name=archive_name, source=source, stream=stream))
            logger.debug("asset.resolved field=%s name=%s kind=%s", field, archive_name, source.kind)
        return entries
