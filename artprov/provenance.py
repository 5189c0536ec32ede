# artprov/provenance.py
"""
The provenance registry: both subsystems behind one lock.

ProvenanceRegistry owns the registry state (RegistryStore), the owner
gate and the four sub-registries, and is what hosts (CLI, HTTP server)
talk to. Every operation takes the caller identity as its first
argument and runs to completion under a single lock, so cross-registry
checks (artist verified before artwork stored, authenticator verified
before assessment stored) always see one consistent state.
"""

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from .access import AccessControl
from .authentication import (
    Authentication,
    AuthenticationRegistry,
    Authenticator,
    AuthenticatorRegistry,
)
from .clock import WallClock
from .errors import RegistryError, Unauthorized
from .registry import Artist, ArtistRegistry, Artwork, ArtworkRegistry
from .store import RegistryStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProvenanceRecord:
    """
    Everything the registry knows about one artwork.

    authentication and authenticator are None until the artwork has been
    assessed.
    """
    artwork_id: int
    artwork: Artwork
    artist: Optional[Artist]
    authentication: Optional[Authentication] = None
    authenticator: Optional[Authenticator] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "artwork_id": self.artwork_id,
            "artwork": self.artwork.to_dict(),
            "artist": self.artist.to_dict() if self.artist else None,
            "authentication": self.authentication.to_dict() if self.authentication else None,
            "authenticator": self.authenticator.to_dict() if self.authenticator else None,
        }


class ProvenanceRegistry:
    """
    Authoritative registry of artists, artworks, authenticators and
    authentications.

    Usage:
        registry = ProvenanceRegistry(owner="owner", store_dir="/var/lib/artprov")
        registry.register_artist("artist1", "Pablo Picasso", "Spanish painter")
        registry.verify_artist("owner", "artist1")
        artwork_id = registry.register_artwork(
            "artist1", "Guernica", 1937, "Oil on canvas", "349 cm × 776 cm", "...",
        )
    """

    def __init__(
        self,
        owner: str,
        store_dir: Path | str | None = None,
        clock: Callable[[], int] = None,
        store: RegistryStore = None,
    ):
        """
        Args:
            owner: Identity allowed to verify artists and authenticators
            store_dir: Directory for persistent state (None = in memory)
            clock: Zero-argument callable returning the current clock value
            store: Pre-built state; overrides store_dir
        """
        self.access = AccessControl(owner)
        self.store = store if store is not None else RegistryStore(store_dir)
        self.clock = clock if clock is not None else WallClock()
        self._lock = threading.RLock()

        self.artists = ArtistRegistry(self.store.artists, self.access)
        self.artworks = ArtworkRegistry(
            self.store.artworks, self.store.sequence, self.artists, self.clock,
        )
        self.authenticators = AuthenticatorRegistry(self.store.authenticators, self.access)
        self.authentications = AuthenticationRegistry(
            self.store.authentications, self.authenticators, self.clock,
        )

    @classmethod
    def from_config(cls, config) -> "ProvenanceRegistry":
        """Build a registry from a RegistryConfig."""
        return cls(
            owner=config.owner,
            store_dir=config.store_dir,
            clock=config.make_clock(),
        )

    @property
    def owner(self) -> str:
        return self.access.owner

    @contextmanager
    def _operation(self, name: str, caller: str):
        """Serialize a mutating operation and log its rejection."""
        with self._lock:
            try:
                yield
            except RegistryError as e:
                logger.info(f"Rejected {name} by {caller}: {e.kind}: {e.message}")
                raise

    # -- Artists / artworks --------------------------------------------------

    def register_artist(self, caller: str, name: str, biography: str) -> bool:
        with self._operation("register_artist", caller):
            return self.artists.register_artist(caller, name, biography)

    def verify_artist(self, caller: str, target: str) -> bool:
        with self._operation("verify_artist", caller):
            return self.artists.verify_artist(caller, target)

    def get_artist(self, identity: str) -> Optional[Artist]:
        with self._lock:
            return self.artists.get_artist(identity)

    def register_artwork(
        self,
        caller: str,
        title: str,
        creation_date: int,
        medium: str,
        dimensions: str,
        description: str,
    ) -> int:
        """Register an artwork for the calling artist and return its ID."""
        with self._operation("register_artwork", caller):
            return self.artworks.register_artwork(
                caller, title, creation_date, medium, dimensions, description,
            )

    def get_artwork(self, artwork_id: int) -> Optional[Artwork]:
        with self._lock:
            return self.artworks.get_artwork(artwork_id)

    def get_artwork_count(self) -> int:
        with self._lock:
            return self.artworks.get_artwork_count()

    def artworks_by_artist(self, identity: str) -> List[Artwork]:
        with self._lock:
            return self.artworks.find_by_artist(identity)

    # -- Authenticators / authentications ------------------------------------

    def register_authenticator(self, caller: str, name: str, credentials: str) -> bool:
        with self._operation("register_authenticator", caller):
            return self.authenticators.register_authenticator(caller, name, credentials)

    def verify_authenticator(self, caller: str, target: str) -> bool:
        with self._operation("verify_authenticator", caller):
            return self.authenticators.verify_authenticator(caller, target)

    def get_authenticator(self, identity: str) -> Optional[Authenticator]:
        with self._lock:
            return self.authenticators.get_authenticator(identity)

    def authenticate_artwork(
        self,
        caller: str,
        artwork_id: int,
        is_authentic: bool,
        assessment_notes: str,
        evidence_hash: bytes,
    ) -> bool:
        # TODO: decide whether assessments of unregistered artwork IDs should be rejected
        with self._operation("authenticate_artwork", caller):
            return self.authentications.authenticate_artwork(
                caller, artwork_id, is_authentic, assessment_notes, evidence_hash,
            )

    def get_authentication(self, artwork_id: int) -> Optional[Authentication]:
        with self._lock:
            return self.authentications.get_authentication(artwork_id)

    def authentications_by(self, identity: str) -> List[Tuple[int, Authentication]]:
        with self._lock:
            return self.authentications.find_by_authenticator(identity)

    # -- Clock ----------------------------------------------------------------

    def advance_clock(self, caller: str, blocks: int = 1) -> int:
        """
        Move a manual clock forward and return the new height (owner only).

        Raises:
            Unauthorized: caller is not the owner
            ValueError: the registry clock cannot be advanced, or blocks < 0
        """
        with self._operation("advance_clock", caller):
            if not self.access.verify_action(caller):
                raise Unauthorized(f"{caller} may not advance the clock")
            if not hasattr(self.clock, "advance"):
                raise ValueError("Registry clock cannot be advanced")
            height = self.clock.advance(blocks)
            logger.info(f"Clock advanced to {height}")
            return height

    # -- Combined view ------------------------------------------------------

    def provenance(self, artwork_id: int) -> Optional[ProvenanceRecord]:
        """
        Collect the artwork, its artist and any authentication.

        Returns None if the artwork ID was never issued, even when an
        authentication has been recorded against it.
        """
        with self._lock:
            artwork = self.artworks.get_artwork(artwork_id)
            if artwork is None:
                return None

            authentication = self.authentications.get_authentication(artwork_id)
            authenticator = None
            if authentication is not None:
                authenticator = self.authenticators.get_authenticator(
                    authentication.authenticator
                )

            return ProvenanceRecord(
                artwork_id=artwork_id,
                artwork=artwork,
                artist=self.artists.get_artist(artwork.artist_id),
                authentication=authentication,
                authenticator=authenticator,
            )
