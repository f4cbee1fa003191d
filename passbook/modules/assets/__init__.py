"""Asset source exports."""

from .exceptions import InvalidAssetTypeError
from .models import AssetEntry, AssetSource, BufferSource, PathSource, StreamSource
from .service import AssetResolver, classify_asset
from .streams import PausedAssetStream

__all__ = [
    "AssetEntry",
    "AssetResolver",
    "AssetSource",
    "BufferSource",
    "InvalidAssetTypeError",
    "PathSource",
    "PausedAssetStream",
    "StreamSource",
    "classify_asset",
]
