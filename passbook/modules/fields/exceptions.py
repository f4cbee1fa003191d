"""Field validation errors."""

from passbook.core.exceptions import ConfigurationError


class FieldValidationError(ConfigurationError):
    """Base class for pass field errors."""


class InvalidStyleError(FieldValidationError):
    def __init__(self, style: object) -> None:
        super().__init__(f"Incorrect pass style {style!r}")
        self.style = style


class MissingFieldError(FieldValidationError):
    def __init__(self, field: str) -> None:
        super().__init__(f"{field} is required")
        self.field = field


class StyleFieldError(FieldValidationError):
    """Raised when a style-specific field appears under another style."""

    def __init__(self, field: str, allowed_style: str) -> None:
        super().__init__(f"{field} is only allowed in a {allowed_style}")
        self.field = field
        self.allowed_style = allowed_style


class InvalidLocationError(FieldValidationError):
    """Raised when ``locations`` is not a list of numeric coordinates."""


class InvalidBarcodeError(FieldValidationError):
    """Raised when ``barcode`` is malformed."""


class FieldSerializationError(FieldValidationError):
    """Raised when the field set cannot be encoded as JSON."""
