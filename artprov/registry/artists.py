# artprov/registry/artists.py
"""
Artist identity and verification.

One artist record per caller identity, ever. Records start unverified;
only the registry owner can verify them, and verification is never
withdrawn.
"""

import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional

from ..access import AccessControl
from ..errors import AlreadyRegistered, NotFound, Unauthorized

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Artist:
    """
    A registered artist.

    Attributes:
        name: Display name
        biography: Free-text biography
        verified: Set by the registry owner, never cleared
    """
    name: str
    biography: str
    verified: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "biography": self.biography,
            "verified": self.verified,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Artist":
        return cls(
            name=data["name"],
            biography=data.get("biography", ""),
            verified=bool(data.get("verified", False)),
        )


class ArtistRegistry:
    """Registers artists and lets the owner verify them."""

    def __init__(self, artists, access: AccessControl):
        """
        Args:
            artists: EntityMap of identity -> Artist
            access: Owner gate for verification
        """
        self._artists = artists
        self._access = access

    def register_artist(self, caller: str, name: str, biography: str) -> bool:
        """
        Register the caller as an artist.

        Raises:
            AlreadyRegistered: caller already has an artist record
        """
        if caller in self._artists:
            raise AlreadyRegistered(f"Artist {caller} is already registered")

        self._artists.put(caller, Artist(name=name, biography=biography))
        logger.info(f"Registered artist {caller} ({name})")
        return True

    def verify_artist(self, caller: str, target: str) -> bool:
        """
        Mark target's artist record as verified.

        Re-verifying an already verified artist succeeds without change.

        Raises:
            Unauthorized: caller is not the owner
            NotFound: target has no artist record
        """
        if not self._access.verify_action(caller):
            raise Unauthorized(f"{caller} may not verify artists")

        artist = self._artists.get(target)
        if artist is None:
            raise NotFound(f"No artist registered for {target}")

        if not artist.verified:
            self._artists.put(target, replace(artist, verified=True))
            logger.info(f"Verified artist {target}")
        return True

    def get_artist(self, identity: str) -> Optional[Artist]:
        """Look up an artist by identity."""
        return self._artists.get(identity)

    def is_verified(self, identity: str) -> bool:
        artist = self._artists.get(identity)
        return artist is not None and artist.verified

    def list(self) -> List[Artist]:
        """List all artists."""
        return self._artists.values()

    def __contains__(self, identity: str) -> bool:
        return identity in self._artists

    def __len__(self) -> int:
        return len(self._artists)
