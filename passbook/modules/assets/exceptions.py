"""Asset specific exceptions."""

from passbook.core.exceptions import ConfigurationError


class InvalidAssetTypeError(ConfigurationError):
    """Raised when an image field holds something other than bytes, a path or a stream."""

    def __init__(self, field: str, type_name: str) -> None:
        super().__init__(f"{field} cannot be {type_name}")
        self.field = field
        self.type_name = type_name
