"""Error taxonomy shared by every pipeline stage."""

from __future__ import annotations


class PassbookError(Exception):
    """Base class for pass generation errors."""


class ConfigurationError(PassbookError):
    """Raised synchronously when pass input is unusable; never retried."""


class AssetIOError(PassbookError):
    """Raised when an asset cannot be opened or read."""

    def __init__(self, name: str, message: str) -> None:
        super().__init__(f"{name}: {message}")
        self.name = name


class SigningError(PassbookError):
    """Raised when the signing tool fails; carries its diagnostic output."""

    def __init__(self, diagnostic: str) -> None:
        super().__init__(diagnostic)
        self.diagnostic = diagnostic


class AssemblyError(PassbookError):
    """Raised when the archive writer cannot add an entry or finish."""


class PipelineStateError(RuntimeError):
    """Raised when a pipeline run is started more than once."""


__all__ = [
    "AssemblyError",
    "AssetIOError",
    "ConfigurationError",
    "PassbookError",
    "PipelineStateError",
    "SigningError",
]
