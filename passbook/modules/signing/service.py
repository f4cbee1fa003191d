"""Detached manifest signatures produced by ``openssl smime``."""

from __future__ import annotations

import asyncio
import base64
import binascii
import logging
from dataclasses import dataclass
from typing import Protocol

from .exceptions import SigningError, SigningToolNotFoundError
from .models import SigningCredentials

logger = logging.getLogger(__name__)

# S/MIME output: headers, preamble, signed content, then the base64 signature.
SIGNATURE_SECTION_INDEX = 3
SECTION_SEPARATOR = "\n\n"


class SignatureService(Protocol):
    async def sign(self, payload: bytes, credentials: SigningCredentials) -> bytes:
        ...


def build_smime_args(credentials: SigningCredentials) -> list[str]:
    args = [
        "smime",
        "-sign",
        "-binary",
        "-signer",
        str(credentials.signer_cert.expanduser().resolve()),
        "-certfile",
        str(credentials.ca_cert.expanduser().resolve()),
        "-passin",
        "pass:" + credentials.passphrase.get_secret_value(),
    ]
    if credentials.signer_key is not None:
        args += ["-inkey", str(credentials.signer_key.expanduser().resolve())]
    return args


def extract_signature(output: str) -> bytes:
    """Pull the detached signature out of the textual ``smime -sign`` output."""
    sections = output.split(SECTION_SEPARATOR)
    if len(sections) <= SIGNATURE_SECTION_INDEX:
        raise SigningError(f"unexpected signing output ({len(sections)} sections): {output}")
    encoded = sections[SIGNATURE_SECTION_INDEX]
    try:
        signature = base64.b64decode(encoded)
    except (binascii.Error, ValueError) as exc:
        raise SigningError(f"signature section is not base64: {exc}") from exc
    if not signature:
        raise SigningError(f"empty signature in signing output: {output}")
    return signature


@dataclass(slots=True)
class OpensslSignatureService:
    """Runs one ``openssl`` child process per signature."""

    binary: str = "openssl"

    async def sign(self, payload: bytes, credentials: SigningCredentials) -> bytes:
        args = build_smime_args(credentials)
        logger.debug("signing.start binary=%s bytes=%d signer=%s", self.binary, len(payload), credentials.signer_cert)
        try:
            process = await asyncio.create_subprocess_exec(
                self.binary,
                *args,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as exc:
            raise SigningToolNotFoundError(f"signing tool not found: {self.binary}") from exc
        except OSError as exc:
            raise SigningError(f"cannot start {self.binary}: {exc}") from exc

        try:
            stdout, stderr = await process.communicate(payload)
        except BaseException:
            # Cancelled or failed mid-signature: the child must not outlive the run.
            if process.returncode is None:
                try:
                    process.kill()
                except ProcessLookupError:
                    pass
                await process.wait()
                logger.debug("signing.killed pid=%s", process.pid)
            raise

        # Anything on stderr means failure, whatever the exit status.
        if stderr:
            diagnostic = stderr.decode("utf-8", errors="replace")
            logger.warning("signing.failed returncode=%s diagnostic=%s", process.returncode, diagnostic.strip())
            raise SigningError(diagnostic)
        if process.returncode != 0:
            raise SigningError(f"{self.binary} exited with status {process.returncode}")

        signature = extract_signature(stdout.decode("utf-8", errors="replace"))
        logger.debug("signing.done bytes=%d", len(signature))
        return signature
