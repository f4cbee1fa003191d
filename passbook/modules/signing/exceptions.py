"""Signing specific exceptions."""

from passbook.core.exceptions import ConfigurationError, SigningError


class InvalidCredentialsError(ConfigurationError):
    """Raised when the credential bundle is missing or malformed."""


class SigningToolNotFoundError(SigningError):
    """Raised when the signing executable cannot be started."""


__all__ = ["InvalidCredentialsError", "SigningError", "SigningToolNotFoundError"]
