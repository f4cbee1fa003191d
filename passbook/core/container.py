"""Simple dependency container for wiring core services."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from passbook.core.config import Settings, get_settings
from passbook.modules.signing import OpensslSignatureService, SigningCredentials


@dataclass(slots=True)
class ApplicationContainer:
    settings: Settings

    def signature_service(self) -> OpensslSignatureService:
        return OpensslSignatureService(binary=self.settings.openssl_binary)

    def default_credentials(self) -> Optional[SigningCredentials]:
        """Credentials configured through settings, or None when incomplete."""
        return SigningCredentials.from_settings(self.settings.signing)


@lru_cache()
def get_container() -> ApplicationContainer:
    return ApplicationContainer(settings=get_settings())


__all__ = ["ApplicationContainer", "get_container"]
