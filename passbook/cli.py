"""
Generate a signed pass bundle from a JSON field file and a set of images.

Example:
    passbook-generate \
        --style coupon \
        --fields pass-fields.json \
        --image icon=assets/icon.png --image icon2x=assets/icon@2x.png \
        --signer-cert certs/pass.pem --ca-cert certs/wwdr.pem --passphrase secret \
        --output coupon.pkpass
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Optional, Sequence

from passbook import __version__
from passbook.core.config import get_settings
from passbook.core.exceptions import PassbookError
from passbook.core.logging import configure_logging
from passbook.modules.fields import IMAGES
from passbook.modules.passes import PassPipeline
from passbook.modules.signing import OpensslSignatureService

logger = logging.getLogger("passbook.cli")


def read_fields(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise SystemExit(f"fields file not found: {path}")
    try:
        with path.open("r", encoding="utf-8") as fh:
            data = json.load(fh)
    except json.JSONDecodeError as exc:
        raise SystemExit(f"fields file is not valid JSON: {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise SystemExit(f"fields file must contain a JSON object: {path}")
    return data


def parse_image(value: str) -> tuple[str, Path]:
    name, sep, raw_path = value.partition("=")
    if not sep or not name or not raw_path:
        raise argparse.ArgumentTypeError(f"expected NAME=PATH, got {value!r}")
    if name not in IMAGES:
        raise argparse.ArgumentTypeError(f"unknown image {name!r}; expected one of {', '.join(IMAGES)}")
    return name, Path(raw_path)


def build_credentials(args: argparse.Namespace) -> Optional[dict[str, Any]]:
    if args.signer_cert is None and args.ca_cert is None and args.passphrase is None:
        return None
    signing = get_settings().signing
    credentials: dict[str, Any] = {
        "signer_cert": args.signer_cert or signing.signer_cert,
        "ca_cert": args.ca_cert or signing.ca_cert,
        "passphrase": args.passphrase
        if args.passphrase is not None
        else (signing.passphrase.get_secret_value() if signing.passphrase else None),
    }
    if args.signer_key is not None:
        credentials["signer_key"] = args.signer_key
    return credentials


async def write_bundle(pipeline: PassPipeline, output: Path) -> int:
    output.parent.mkdir(parents=True, exist_ok=True)
    written = 0
    try:
        with output.open("wb") as fh:
            async for chunk in pipeline.run_streaming():
                fh.write(chunk)
                written += len(chunk)
    except BaseException:
        # A failed run never leaves a usable bundle behind.
        output.unlink(missing_ok=True)
        raise
    return written


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate a signed pass bundle")
    parser.add_argument("--style", required=True, help="Pass style, e.g. coupon or boardingPass")
    parser.add_argument("--fields", required=True, type=Path, help="JSON file with the pass fields")
    parser.add_argument(
        "--image",
        action="append",
        default=[],
        type=parse_image,
        metavar="NAME=PATH",
        help="Image to include, e.g. icon=icon.png or icon2x=icon@2x.png (repeatable)",
    )
    parser.add_argument("--signer-cert", type=Path, help="PEM file with the pass certificate and key")
    parser.add_argument("--ca-cert", type=Path, help="PEM file with the CA (WWDR) certificate")
    parser.add_argument("--signer-key", type=Path, help="Separate PEM private key for the signer")
    parser.add_argument("--passphrase", help="Private key passphrase")
    parser.add_argument("--openssl", help="openssl executable to use for signing")
    parser.add_argument("--output", required=True, type=Path, help="Where to write the bundle")
    parser.add_argument("--log-level", default=None, help="Logging level (default from settings)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(level=(args.log_level or settings.logging.level).upper(), log_file=settings.logging.file)

    fields = read_fields(args.fields)
    for name, path in args.image:
        fields[name] = path

    signer = OpensslSignatureService(binary=args.openssl) if args.openssl else None
    try:
        pipeline = PassPipeline(args.style, fields, build_credentials(args), signer=signer)
        written = asyncio.run(write_bundle(pipeline, args.output))
    except PassbookError as exc:
        raise SystemExit(f"pass generation failed: {exc}") from exc

    logger.info("wrote %s (%d bytes)", args.output, written)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
