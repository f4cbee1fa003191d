"""Manifest digest exports."""

from .service import DIGEST_ALGORITHM, DigestAccumulator, DuplicateEntryError

__all__ = [
    "DIGEST_ALGORITHM",
    "DigestAccumulator",
    "DuplicateEntryError",
]
