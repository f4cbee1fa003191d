"""Signing credential bundle."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, SecretStr, ValidationError, field_validator

from passbook.core.config import SigningSettings

from .exceptions import InvalidCredentialsError

# Key names used by older callers: {"pass": ..., "wwdr": ..., "password": ...}
LEGACY_KEYS = {"pass": "signer_cert", "wwdr": "ca_cert", "password": "passphrase", "key": "signer_key"}


class SigningCredentials(BaseModel):
    """Signer certificate (PEM with its key), CA certificate and key passphrase."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    signer_cert: Path
    ca_cert: Path
    passphrase: SecretStr
    signer_key: Optional[Path] = None

    @field_validator("signer_cert", "ca_cert", "signer_key", mode="before")
    @classmethod
    def _non_empty_path(cls, value: Any) -> Any:
        if value is None:
            return value
        if isinstance(value, str) and not value.strip():
            raise ValueError("path must not be empty")
        if not isinstance(value, (str, Path)):
            raise ValueError(f"expected a path, got {type(value).__name__}")
        return value

    @field_validator("passphrase", mode="before")
    @classmethod
    def _string_passphrase(cls, value: Any) -> Any:
        if not isinstance(value, (str, SecretStr)):
            raise ValueError(f"expected a string, got {type(value).__name__}")
        return value

    @classmethod
    def coerce(cls, value: Any) -> "SigningCredentials":
        """Build credentials from a model or mapping, or raise ``InvalidCredentialsError``."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, Mapping):
            raise InvalidCredentialsError("No certs given or not an object")
        payload = {LEGACY_KEYS.get(key, key): item for key, item in value.items()}
        try:
            return cls.model_validate(payload)
        except ValidationError as exc:
            problems = ", ".join(
                f"{'.'.join(str(part) for part in error['loc']) or 'credentials'}: {error['msg']}"
                for error in exc.errors()
            )
            raise InvalidCredentialsError(f"Invalid signing credentials ({problems})") from exc

    @classmethod
    def from_settings(cls, settings: SigningSettings) -> Optional["SigningCredentials"]:
        if settings.signer_cert is None or settings.ca_cert is None or settings.passphrase is None:
            return None
        return cls(
            signer_cert=settings.signer_cert,
            ca_cert=settings.ca_cert,
            passphrase=settings.passphrase,
            signer_key=settings.signer_key,
        )
