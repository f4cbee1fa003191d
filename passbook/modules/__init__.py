"""Pipeline stages grouped by concern."""

from . import archive, assets, fields, manifest, passes, signing

__all__ = [
    "archive",
    "assets",
    "fields",
    "manifest",
    "passes",
    "signing",
]
