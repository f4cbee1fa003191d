"""Signing exports."""

from .exceptions import InvalidCredentialsError, SigningError, SigningToolNotFoundError
from .models import SigningCredentials
from .service import OpensslSignatureService, SignatureService, build_smime_args, extract_signature

__all__ = [
    "InvalidCredentialsError",
    "OpensslSignatureService",
    "SignatureService",
    "SigningCredentials",
    "SigningError",
    "SigningToolNotFoundError",
    "build_smime_args",
    "extract_signature",
]
