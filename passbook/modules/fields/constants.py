"""Field vocabulary of a pass."""

from __future__ import annotations

STYLES: tuple[str, ...] = (
    "boardingPass",
    "coupon",
    "eventTicket",
    "storeCard",
    "generic",
)

# Earlier releases spelled the event style this way; still accepted.
LEGACY_STYLE_ALIASES: tuple[str, ...] = ("eventTicker",)

REQUIRED_TOP_LEVEL: tuple[str, ...] = (
    "description",
    "formatVersion",
    "organizationName",
    "passTypeIdentifier",
    "serialNumber",
    "teamIdentifier",
)

BASE_IMAGES: tuple[str, ...] = (
    "background",
    "footer",
    "icon",
    "logo",
    "strip",
    "thumbnail",
)

HIGH_RES_MARKER = "2x"
HIGH_RES_SUFFIX = "@2x"
IMAGE_EXTENSION = ".png"

IMAGES: tuple[str, ...] = BASE_IMAGES + tuple(name + HIGH_RES_MARKER for name in BASE_IMAGES)

STRUCTURE_KEY = "structure"
BOARDING_PASS_STYLE = "boardingPass"
BOARDING_ONLY_FIELDS: tuple[str, ...] = ("transitType",)
BARCODE_STRING_FIELDS: tuple[str, ...] = ("format", "message", "messageEncoding")

PASS_FILE = "pass.json"
MANIFEST_FILE = "manifest.json"
SIGNATURE_FILE = "signature"
