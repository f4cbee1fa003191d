"""Application configuration using pydantic settings with structured sections."""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class SigningSettings(BaseModel):
    openssl_binary: str = "openssl"
    signer_cert: Optional[Path] = None
    ca_cert: Optional[Path] = None
    signer_key: Optional[Path] = None
    passphrase: Optional[SecretStr] = None


class ArchiveSettings(BaseModel):
    compression_level: int = Field(default=1, ge=0, le=9)
    chunk_size: int = Field(default=64 * 1024, ge=1)
    stream_queue_size: int = Field(default=8, ge=1)
    output_queue_size: int = Field(default=32, ge=1)


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    file: Optional[Path] = None


class Settings(BaseSettings):
    """Top-level settings with nested sections."""

    model_config = SettingsConfigDict(
        env_prefix="PASSBOOK_",
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    signing: SigningSettings = SigningSettings()
    archive: ArchiveSettings = ArchiveSettings()
    logging: LoggingSettings = LoggingSettings()

    @property
    def openssl_binary(self) -> str:
        return self.signing.openssl_binary

    @property
    def compression_level(self) -> int:
        return self.archive.compression_level

    @property
    def chunk_size(self) -> int:
        return self.archive.chunk_size


@lru_cache()
def get_settings() -> Settings:
    return Settings()
