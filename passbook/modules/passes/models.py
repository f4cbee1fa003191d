"""Pipeline run states."""

from __future__ import annotations

from enum import Enum


class PipelineState(str, Enum):
    VALIDATING = "validating"
    ASSEMBLING_METADATA = "assembling_metadata"
    ASSEMBLING_ASSETS = "assembling_assets"
    COMPUTING_MANIFEST = "computing_manifest"
    ARCHIVING_MANIFEST_AND_SIGNING = "archiving_manifest_and_signing"
    ARCHIVING_SIGNATURE = "archiving_signature"
    FINALIZING = "finalizing"
    DELIVERED = "delivered"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self in (PipelineState.DELIVERED, PipelineState.FAILED)
