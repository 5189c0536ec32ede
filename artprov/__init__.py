# artprov - Authoritative registry for the provenance of artworks
#
# Tracks artists and their verification, artworks attributed to verified
# artists, authenticators and their verification, and at most one
# authenticity assessment per artwork.
#
# Core concepts:
# - Owner: the single identity allowed to verify artists and authenticators
# - Artist / Authenticator: one record per caller identity, verified by the owner
# - Artwork: keyed by an ascending ID, registered by a verified artist
# - Authentication: one assessment per artwork ID, by a verified authenticator

from .access import AccessControl
from .authentication import (
    Authentication,
    AuthenticationRegistry,
    Authenticator,
    AuthenticatorRegistry,
    evidence_hash_from_file,
)
from .certificates import (
    ProvenanceCertificate,
    generate_keypair,
    issue_certificate,
    verify_certificate,
)
from .clock import ManualClock, WallClock
from .config import RegistryConfig
from .errors import (
    AlreadyAuthenticated,
    AlreadyRegistered,
    NotFound,
    RegistryError,
    Unauthorized,
)
from .provenance import ProvenanceRecord, ProvenanceRegistry
from .registry import Artist, ArtistRegistry, Artwork, ArtworkRegistry
from .store import EntityMap, RegistryStore, SequenceAllocator

__all__ = [
    # Registry
    "ProvenanceRegistry",
    "ProvenanceRecord",
    "RegistryConfig",
    # Components
    "AccessControl",
    "SequenceAllocator",
    "EntityMap",
    "RegistryStore",
    "ArtistRegistry",
    "ArtworkRegistry",
    "AuthenticatorRegistry",
    "AuthenticationRegistry",
    # Records
    "Artist",
    "Artwork",
    "Authenticator",
    "Authentication",
    # Errors
    "RegistryError",
    "Unauthorized",
    "AlreadyRegistered",
    "NotFound",
    "AlreadyAuthenticated",
    # Clocks
    "ManualClock",
    "WallClock",
    # Certificates
    "ProvenanceCertificate",
    "generate_keypair",
    "issue_certificate",
    "verify_certificate",
    "evidence_hash_from_file",
]

__version__ = "0.1.0"
