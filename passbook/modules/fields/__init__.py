"""Pass field vocabulary and validation exports."""

from .constants import IMAGES, MANIFEST_FILE, PASS_FILE, REQUIRED_TOP_LEVEL, SIGNATURE_FILE, STYLES
from .exceptions import (
    FieldSerializationError,
    FieldValidationError,
    InvalidBarcodeError,
    InvalidLocationError,
    InvalidStyleError,
    MissingFieldError,
    StyleFieldError,
)
from .validation import image_archive_name, is_valid_style, normalize_fields, serialize_fields, validate_fields

__all__ = [
    "IMAGES",
    "MANIFEST_FILE",
    "PASS_FILE",
    "REQUIRED_TOP_LEVEL",
    "SIGNATURE_FILE",
    "STYLES",
    "FieldSerializationError",
    "FieldValidationError",
    "InvalidBarcodeError",
    "InvalidLocationError",
    "InvalidStyleError",
    "MissingFieldError",
    "StyleFieldError",
    "image_archive_name",
    "is_valid_style",
    "normalize_fields",
    "serialize_fields",
    "validate_fields",
]
