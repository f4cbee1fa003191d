"""Normalisation and presence/type checks for pass fields."""

from __future__ import annotations

import json
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any

from .constants import (
    BARCODE_STRING_FIELDS,
    BOARDING_ONLY_FIELDS,
    BOARDING_PASS_STYLE,
    HIGH_RES_MARKER,
    HIGH_RES_SUFFIX,
    IMAGE_EXTENSION,
    LEGACY_STYLE_ALIASES,
    REQUIRED_TOP_LEVEL,
    STRUCTURE_KEY,
    STYLES,
)
from .exceptions import (
    FieldSerializationError,
    InvalidBarcodeError,
    InvalidLocationError,
    InvalidStyleError,
    MissingFieldError,
    StyleFieldError,
)


def is_valid_style(style: object) -> bool:
    return isinstance(style, str) and (style in STYLES or style in LEGACY_STYLE_ALIASES)


def image_archive_name(field: str) -> str:
    """Archive entry name for an image field (``icon2x`` -> ``icon@2x.png``)."""
    if HIGH_RES_MARKER in field:
        field = field.replace(HIGH_RES_MARKER, HIGH_RES_SUFFIX, 1)
    return field + IMAGE_EXTENSION


def normalize_fields(style: str, fields: Mapping[str, Any]) -> dict[str, Any]:
    """Return a shallow copy with exactly one populated style key."""

    normalized = dict(fields)
    if not normalized.get(style):
        normalized[style] = {}
    if STRUCTURE_KEY in normalized:
        structure = normalized.pop(STRUCTURE_KEY)
        if structure:
            normalized[style] = structure

    relevant = normalized.get("relevantDate")
    if isinstance(relevant, (datetime, date)):
        normalized["relevantDate"] = relevant.isoformat()
    return normalized


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_missing(value: object) -> bool:
    return value is None or value == ""


def validate_fields(style: str, fields: Mapping[str, Any]) -> None:
    """Raise a ``FieldValidationError`` for the first problem found."""

    if not is_valid_style(style):
        raise InvalidStyleError(style)

    for attr in REQUIRED_TOP_LEVEL:
        if _is_missing(fields.get(attr)):
            raise MissingFieldError(attr)

    style_fields = fields.get(style) or {}
    if style != BOARDING_PASS_STYLE and isinstance(style_fields, Mapping):
        for name in BOARDING_ONLY_FIELDS:
            if style_fields.get(name):
                raise StyleFieldError(name, BOARDING_PASS_STYLE)

    if "locations" in fields:
        locations = fields["locations"]
        if not isinstance(locations, list):
            raise InvalidLocationError("locations must be an array")
        for location in locations:
            if not isinstance(location, Mapping) or not (
                _is_number(location.get("latitude")) and _is_number(location.get("longitude"))
            ):
                raise InvalidLocationError("location.latitude or longitude is missing or is not a number")

    if "barcode" in fields:
        barcode = fields["barcode"]
        if not isinstance(barcode, Mapping):
            raise InvalidBarcodeError("barcode must be an object")
        for name in BARCODE_STRING_FIELDS:
            if not isinstance(barcode.get(name), str):
                raise InvalidBarcodeError(f"barcode.{name} is required and must be a string")


def serialize_fields(fields: Mapping[str, Any]) -> bytes:
    """Compact UTF-8 JSON, the exact bytes archived as ``pass.json``."""
    try:
        return json.dumps(fields, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise FieldSerializationError(f"pass fields are not JSON serialisable: {exc}") from exc
