"""Reusable pass template.

A template holds the fields shared by a family of passes (organisation, pass
type identifier, colours, credentials) and stamps out one pipeline per pass.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

from passbook.core.config import Settings
from passbook.modules.fields import InvalidStyleError, is_valid_style
from passbook.modules.signing import SignatureService, SigningCredentials

from .pipeline import PassPipeline

FORMAT_VERSION = 1
REQUIRED_CREDENTIALS = ("signer_cert", "ca_cert", "passphrase")


class PassTemplate:
    def __init__(
        self,
        style: str,
        fields: Optional[Mapping[str, Any]] = None,
        credentials: Any = None,
        *,
        settings: Optional[Settings] = None,
    ) -> None:
        # Fail early rather than on every create_pass().
        if not is_valid_style(style):
            raise InvalidStyleError(style)
        self.style = style
        self.fields: dict[str, Any] = dict(fields or {})
        self.fields["formatVersion"] = FORMAT_VERSION
        self.credentials = SigningCredentials.coerce(credentials) if credentials is not None else None
        self._pending_credentials: dict[str, Any] = {}
        self._settings = settings

    def set_credentials(self, *, signer_cert: Any = None, ca_cert: Any = None, passphrase: Optional[str] = None) -> None:
        """Update the signer certificate, CA certificate and passphrase.

        Parts left as None keep their current value. They may arrive over
        several calls, e.g. certificates first and the passphrase later; until
        all three are known ``credentials`` stays unset and ``create_pass``
        reports what is missing.
        """
        if self.credentials is not None:
            parts = self.credentials.model_dump()
        else:
            parts = dict(self._pending_credentials)
        updates = {"signer_cert": signer_cert, "ca_cert": ca_cert, "passphrase": passphrase}
        parts.update({key: value for key, value in updates.items() if value is not None})

        if all(parts.get(key) is not None for key in REQUIRED_CREDENTIALS):
            self.credentials = SigningCredentials.coerce(parts)
            self._pending_credentials = {}
        else:
            self.credentials = None
            self._pending_credentials = parts

    def create_pass(self, fields: Mapping[str, Any], *, signer: Optional[SignatureService] = None) -> PassPipeline:
        """Build a pipeline from ``fields`` plus the template fields.

        Template fields take precedence over the per-pass ones.
        """
        merged = {**dict(fields), **self.fields}
        credentials = self.credentials if self.credentials is not None else self._pending_credentials or None
        return PassPipeline(self.style, merged, credentials, signer=signer, settings=self._settings)
