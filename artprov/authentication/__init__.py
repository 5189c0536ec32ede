# artprov/authentication/__init__.py
"""
Authenticator/Authentication registry.

Structurally the twin of the artist/artwork registry: authenticators
register, the owner verifies them, and verified authenticators record
at most one assessment per artwork ID.
"""

from .authenticators import Authenticator, AuthenticatorRegistry
from .authentications import (
    Authentication,
    AuthenticationRegistry,
    EVIDENCE_HASH_SIZE,
    check_evidence_hash,
    evidence_hash_from_file,
)

__all__ = [
    "Authenticator",
    "AuthenticatorRegistry",
    "Authentication",
    "AuthenticationRegistry",
    "EVIDENCE_HASH_SIZE",
    "check_evidence_hash",
    "evidence_hash_from_file",
]
