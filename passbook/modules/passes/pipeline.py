"""Pass generation pipeline.

One ``PassPipeline`` is one run: it validates its input on construction, then
produces a single zip bundle either as a live byte stream or as one buffer.

Step order::

    assembling_metadata   pass.json -> archive + manifest (concurrently)
    assembling_assets     per asset, in turn: archive + manifest + release
    computing_manifest    manifest.json bytes, computed exactly once
    archiving_manifest_and_signing
                          the same bytes -> archive and signer (concurrently)
    archiving_signature   signature -> archive
    finalizing            central directory, end of output
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Mapping
from typing import Any, Optional

from passbook.core.config import Settings
from passbook.core.container import ApplicationContainer, get_container
from passbook.core.exceptions import ConfigurationError, PipelineStateError
from passbook.modules.archive import ArchiveAssembler
from passbook.modules.assets import AssetEntry, AssetResolver
from passbook.modules.fields import (
    MANIFEST_FILE,
    PASS_FILE,
    SIGNATURE_FILE,
    InvalidStyleError,
    is_valid_style,
    normalize_fields,
    serialize_fields,
    validate_fields,
)
from passbook.modules.manifest import DigestAccumulator
from passbook.modules.signing import InvalidCredentialsError, SignatureService, SigningCredentials

from .models import PipelineState

logger = logging.getLogger(__name__)


async def _join(*aws: Awaitable[Any]) -> list[Any]:
    """Await all of ``aws`` concurrently; on the first failure cancel the rest and re-raise it."""
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


class PassPipeline:
    def __init__(
        self,
        style: str,
        fields: Mapping[str, Any],
        credentials: Any = None,
        *,
        signer: Optional[SignatureService] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        container = ApplicationContainer(settings=settings) if settings is not None else get_container()
        self._settings = container.settings
        self._state = PipelineState.VALIDATING
        self._started = False

        self.manifest_bytes: Optional[bytes] = None
        self.signature: Optional[bytes] = None
        self.error: Optional[BaseException] = None
        self.failed_in: Optional[PipelineState] = None

        if not is_valid_style(style):
            raise InvalidStyleError(style)
        if not isinstance(fields, Mapping):
            raise ConfigurationError(f"fields must be a mapping, not {type(fields).__name__}")

        self.style = style
        self.fields = normalize_fields(style, fields)

        archive_settings = self._settings.archive
        resolver = AssetResolver(chunk_size=archive_settings.chunk_size, queue_size=archive_settings.stream_queue_size)
        self.assets: list[AssetEntry] = resolver.resolve(self.fields)

        if credentials is None:
            credentials = container.default_credentials()
        if credentials is None:
            raise InvalidCredentialsError("No certs given or not an object")
        self.credentials = SigningCredentials.coerce(credentials)

        validate_fields(style, self.fields)
        self._signer: SignatureService = signer or container.signature_service()

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def serial_number(self) -> Any:
        return self.fields.get("serialNumber")

    async def run_to_completion(self) -> bytes:
        """Generate the bundle and return it as a single buffer."""
        chunks = [chunk async for chunk in self.run_streaming()]
        return b"".join(chunks)

    async def run_streaming(self) -> AsyncIterator[bytes]:
        """Generate the bundle, yielding archive bytes as they are produced.

        A failure is raised from the iterator once; bytes already yielded
        before it do not form a usable bundle.
        """
        self._claim()
        archive = ArchiveAssembler(
            compression_level=self._settings.archive.compression_level,
            output_queue_size=self._settings.archive.output_queue_size,
        )
        task = asyncio.create_task(self._generate(archive))
        delivered = 0
        try:
            async for chunk in archive.output():
                delivered += len(chunk)
                yield chunk
            await task
            self._transition(PipelineState.DELIVERED)
        finally:
            if not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
            if not self._state.terminal:
                abandoned = PipelineStateError("run abandoned before delivery")
                self._fail(abandoned)
                archive.abort(abandoned)
        logger.info("pass.delivered serial=%s bytes=%d", self.serial_number, delivered)

    def _claim(self) -> None:
        if self._started:
            raise PipelineStateError("a pass pipeline can only be run once")
        self._started = True

    def _transition(self, state: PipelineState) -> None:
        if self._state.terminal:
            return
        logger.debug("pass.state serial=%s %s -> %s", self.serial_number, self._state.value, state.value)
        self._state = state

    def _fail(self, exc: BaseException) -> None:
        if self._state.terminal:
            return
        self.error = exc
        self.failed_in = self._state
        self._state = PipelineState.FAILED
        logger.error("pass.failed serial=%s state=%s error=%s", self.serial_number, self.failed_in.value, exc)

    async def _generate(self, archive: ArchiveAssembler) -> None:
        try:
            await self._assemble(archive)
        except Exception as exc:
            self._fail(exc)
            archive.abort(exc)

    async def _assemble(self, archive: ArchiveAssembler) -> None:
        manifest = DigestAccumulator()

        self._transition(PipelineState.ASSEMBLING_METADATA)
        pass_json = serialize_fields(self.fields)
        await _join(
            archive.add_entry(pass_json, name=PASS_FILE),
            manifest.add(PASS_FILE, pass_json),
        )

        self._transition(PipelineState.ASSEMBLING_ASSETS)
        for entry in self.assets:
            # Both consumers attach before the stream is released.
            archive_feed = entry.stream.attach()
            digest_feed = entry.stream.attach()
            await _join(
                archive.add_entry(archive_feed, name=entry.archive_name),
                manifest.add(entry.archive_name, digest_feed),
                entry.stream.release(),
            )

        self._transition(PipelineState.COMPUTING_MANIFEST)
        manifest_bytes = manifest.to_json()
        self.manifest_bytes = manifest_bytes

        # The archived manifest and the signed manifest are the same object.
        self._transition(PipelineState.ARCHIVING_MANIFEST_AND_SIGNING)
        _, signature = await _join(
            archive.add_entry(manifest_bytes, name=MANIFEST_FILE),
            self._signer.sign(manifest_bytes, self.credentials),
        )
        self.signature = signature

        self._transition(PipelineState.ARCHIVING_SIGNATURE)
        await archive.add_entry(signature, name=SIGNATURE_FILE)

        self._transition(PipelineState.FINALIZING)
        await archive.finalize()
