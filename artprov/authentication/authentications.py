# artprov/authentication/authentications.py
"""
One-time authenticity assessments of artworks.

Each artwork ID can carry at most one authentication, recorded by a
verified authenticator. The artwork ID is not checked against the
artwork registry: an assessment may be recorded for an ID that has not
been registered (yet).
"""

import hashlib
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..errors import AlreadyAuthenticated, Unauthorized
from .authenticators import AuthenticatorRegistry

logger = logging.getLogger(__name__)

EVIDENCE_HASH_SIZE = 32


def check_evidence_hash(evidence_hash: bytes) -> bytes:
    """Validate a 32-byte evidence hash, returning it as immutable bytes."""
    if not isinstance(evidence_hash, (bytes, bytearray)):
        raise ValueError(f"Evidence hash must be bytes, got {type(evidence_hash).__name__}")
    if len(evidence_hash) != EVIDENCE_HASH_SIZE:
        raise ValueError(
            f"Evidence hash must be {EVIDENCE_HASH_SIZE} bytes, got {len(evidence_hash)}"
        )
    return bytes(evidence_hash)


def evidence_hash_from_file(path: Path | str) -> bytes:
    """
    Compute the SHA-3-256 digest of an evidence file (report, scan, photo).

    Returns:
        32-byte digest suitable as an evidence hash
    """
    hasher = hashlib.sha3_256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            hasher.update(chunk)
    return hasher.digest()


@dataclass(frozen=True)
class Authentication:
    """
    An authenticity assessment.

    Attributes:
        authenticator: Identity of the verified authenticator who assessed
        is_authentic: The verdict
        assessment_date: Clock value when the assessment was recorded
        assessment_notes: Free-text notes
        evidence_hash: 32-byte digest of the supporting evidence
    """
    authenticator: str
    is_authentic: bool
    assessment_date: int
    assessment_notes: str
    evidence_hash: bytes

    def to_dict(self) -> Dict[str, Any]:
        return {
            "authenticator": self.authenticator,
            "is_authentic": self.is_authentic,
            "assessment_date": self.assessment_date,
            "assessment_notes": self.assessment_notes,
            "evidence_hash": self.evidence_hash.hex(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Authentication":
        return cls(
            authenticator=data["authenticator"],
            is_authentic=bool(data["is_authentic"]),
            assessment_date=int(data["assessment_date"]),
            assessment_notes=data.get("assessment_notes", ""),
            evidence_hash=bytes.fromhex(data["evidence_hash"]),
        )


class AuthenticationRegistry:
    """Records at most one authentication per artwork ID."""

    def __init__(
        self,
        authentications,
        authenticators: AuthenticatorRegistry,
        clock: Callable[[], int],
    ):
        """
        Args:
            authentications: EntityMap of artwork ID -> Authentication
            authenticators: Authenticator registry consulted for verification
            clock: Zero-argument callable returning the current clock value
        """
        self._authentications = authentications
        self._authenticators = authenticators
        self._clock = clock

    def authenticate_artwork(
        self,
        caller: str,
        artwork_id: int,
        is_authentic: bool,
        assessment_notes: str,
        evidence_hash: bytes,
    ) -> bool:
        """
        Record the caller's assessment of an artwork.

        Raises:
            ValueError: evidence_hash is not 32 bytes
            Unauthorized: caller has no authenticator record, or it is unverified
            AlreadyAuthenticated: the artwork already has an assessment
        """
        evidence_hash = check_evidence_hash(evidence_hash)

        if not self._authenticators.is_verified(caller):
            raise Unauthorized(f"{caller} is not a verified authenticator")

        if artwork_id in self._authentications:
            raise AlreadyAuthenticated(f"Artwork {artwork_id} is already authenticated")

        authentication = Authentication(
            authenticator=caller,
            is_authentic=bool(is_authentic),
            assessment_date=self._clock(),
            assessment_notes=assessment_notes,
            evidence_hash=evidence_hash,
        )
        self._authentications.put(artwork_id, authentication)
        logger.info(
            f"Recorded authentication of artwork {artwork_id} by {caller}: "
            f"{'authentic' if authentication.is_authentic else 'not authentic'}"
        )
        return True

    def get_authentication(self, artwork_id: int) -> Optional[Authentication]:
        return self._authentications.get(artwork_id)

    def find_by_authenticator(self, identity: str) -> List[Tuple[int, Authentication]]:
        """Assessments made by an authenticator, ordered by artwork ID."""
        return [
            (artwork_id, authentication)
            for artwork_id, authentication in sorted(self._authentications.items())
            if authentication.authenticator == identity
        ]

    def __contains__(self, artwork_id: int) -> bool:
        return artwork_id in self._authentications

    def __len__(self) -> int:
        return len(self._authentications)
