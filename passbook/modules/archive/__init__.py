"""Archive writer exports."""

from .service import ArchiveAssembler

__all__ = ["ArchiveAssembler"]
