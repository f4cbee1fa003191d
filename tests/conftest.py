from __future__ import annotations

import asyncio
import copy
import io
import os
import stat
import sys
import zipfile
from pathlib import Path

import pytest

from passbook.core.config import Settings, SigningSettings
from passbook.core.exceptions import SigningError

PNG_HEADER = b"\x89PNG\r\n\x1a\n"

COUPON_FIELDS = {
    "serialNumber": "E5982H-I2",
    "description": "20% off premium dog food",
    "formatVersion": 1,
    "organizationName": "Paw Planet",
    "passTypeIdentifier": "pass.com.pawplanet.coupon",
    "teamIdentifier": "A1B2C3D4E5",
    "webServiceURL": "https://example.com/passes/",
    "authenticationToken": "vxwxd7J8AlNNFPS8k0a0FfUFtq0ewzFdc",
    "barcode": {
        "message": "123456789",
        "format": "PKBarcodeFormatPDF417",
        "messageEncoding": "iso-8859-1",
    },
    "locations": [
        {"longitude": -122.3748889, "latitude": 37.6189722},
        {"longitude": -122.03118, "latitude": 37.33182},
    ],
    "logoText": "Paw Planet",
    "foregroundColor": "rgb(255, 255, 255)",
    "backgroundColor": "rgb(206, 140, 53)",
    "coupon": {
        "primaryFields": [{"key": "offer", "label": "Any premium dog food", "value": "20% off"}],
        "auxiliaryFields": [{"key": "expires", "label": "EXPIRES", "value": "2 weeks"}],
    },
}

FAKE_SIGNATURE = b"signature"

FAKE_SMIME_OUTPUT = (
    "MIME-Version: 1.0\n"
    "Content-Type: multipart/signed; protocol=application/x-pkcs7-signature; boundary=----B\n"
    "\n"
    "This is an S/MIME signed message\n"
    "\n"
    "------B\n"
    "payload\n"
    "------B\n"
    "Content-Type: application/x-pkcs7-signature; name=smime.p7s\n"
    "\n"
    "c2lnbmF0\n"
    "dXJl\n"
    "\n"
    "------B--\n"
)


class RecordingSigner:
    """In-process stand-in for the openssl signer."""

    def __init__(self, signature: bytes = FAKE_SIGNATURE, error: str | None = None) -> None:
        self.signature = signature
        self.error = error
        self.payloads: list[bytes] = []
        self.credentials = []

    async def sign(self, payload, credentials):
        self.payloads.append(payload)
        self.credentials.append(credentials)
        if self.error is not None:
            raise SigningError(self.error)
        return self.signature


@pytest.fixture
def coupon_fields() -> dict:
    return copy.deepcopy(COUPON_FIELDS)


@pytest.fixture
def credentials(tmp_path: Path) -> dict:
    return {
        "signer_cert": str(tmp_path / "pass.pem"),
        "ca_cert": str(tmp_path / "wwdr.pem"),
        "passphrase": "secret",
    }


@pytest.fixture
def settings() -> Settings:
    return Settings(signing=SigningSettings())


@pytest.fixture
def icon_bytes() -> bytes:
    return PNG_HEADER + b"icon" * 512


@pytest.fixture
def icon_path(tmp_path: Path, icon_bytes: bytes) -> Path:
    path = tmp_path / "icon.png"
    path.write_bytes(icon_bytes)
    return path


def _write_script(path: Path, body: str) -> Path:
    path.write_text("#!/bin/sh\n" + body, encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def fake_openssl(tmp_path: Path):
    """Factory for shell scripts that mimic ``openssl smime -sign``.

    The payload received on stdin is saved to ``<script>.stdin`` and the
    arguments to ``<script>.args``.
    """
    if sys.platform == "win32":
        pytest.skip("fake openssl scripts need a POSIX shell")

    def factory(*, stderr: str | None = None, exit_code: int = 0, name: str = "openssl") -> Path:
        script = tmp_path / name
        lines = [
            f'cat > "{script}.stdin"',
            f'echo "$@" > "{script}.args"',
        ]
        if stderr is not None:
            lines.append(f'printf "%s" "{stderr}" >&2')
        else:
            lines.append("cat <<'SMIME'\n" + FAKE_SMIME_OUTPUT + "SMIME")
        lines.append(f"exit {exit_code}")
        return _write_script(script, "\n".join(lines) + "\n")

    return factory


@pytest.fixture
def hanging_openssl(tmp_path: Path) -> tuple[Path, Path]:
    """An ``openssl`` stand-in that records its pid and never answers."""
    if sys.platform == "win32":
        pytest.skip("fake openssl scripts need a POSIX shell")
    pid_file = tmp_path / "openssl.pid"
    script = _write_script(tmp_path / "openssl-hang", f'echo $$ > "{pid_file}"\nexec sleep 30\n')
    return script, pid_file


async def wait_for_pid(pid_file: Path, timeout: float = 10.0) -> int:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while True:
        if pid_file.exists():
            text = pid_file.read_text().strip()
            if text:
                return int(text)
        if loop.time() > deadline:
            raise AssertionError(f"{pid_file} was never written")
        await asyncio.sleep(0.01)


def process_alive(pid: int) -> bool:
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    return True


def read_archive(data: bytes) -> dict[str, bytes]:
    with zipfile.ZipFile(io.BytesIO(data)) as archive:
        assert archive.testzip() is None
        return {name: archive.read(name) for name in archive.namelist()}
