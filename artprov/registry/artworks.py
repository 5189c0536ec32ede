# artprov/registry/artworks.py
"""
Artwork records attributed to verified artists.

Artworks are keyed by an ascending integer ID issued by the sequence
allocator. They are immutable once stored and never removed.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from ..errors import Unauthorized
from .artists import ArtistRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Artwork:
    """
    A registered artwork.

    Attributes:
        title: Title of the work
        artist_id: Identity of the artist who registered it
        creation_date: Year (or other integer date) the work was made
        medium: e.g. "Oil on canvas"
        dimensions: Free-text dimensions
        description: Free-text description
        registered_at: Clock value when the record was stored
    """
    title: str
    artist_id: str
    creation_date: int
    medium: str
    dimensions: str
    description: str
    registered_at: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "artist_id": self.artist_id,
            "creation_date": self.creation_date,
            "medium": self.medium,
            "dimensions": self.dimensions,
            "description": self.description,
            "registered_at": self.registered_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Artwork":
        return cls(
            title=data["title"],
            artist_id=data["artist_id"],
            creation_date=int(data["creation_date"]),
            medium=data.get("medium", ""),
            dimensions=data.get("dimensions", ""),
            description=data.get("description", ""),
            registered_at=int(data["registered_at"]),
        )


class ArtworkRegistry:
    """
    Stores artworks for verified artists.

    The caller of register_artwork is always the attributed artist.
    """

    def __init__(self, artworks, sequence, artists: ArtistRegistry, clock: Callable[[], int]):
        """
        Args:
            artworks: EntityMap of artwork ID -> Artwork
            sequence: SequenceAllocator issuing artwork IDs
            artists: Artist registry consulted for verification
            clock: Zero-argument callable returning the current clock value
        """
        self._artworks = artworks
        self._sequence = sequence
        self._artists = artists
        self._clock = clock

    def register_artwork(
        self,
        caller: str,
        title: str,
        creation_date: int,
        medium: str,
        dimensions: str,
        description: str,
    ) -> int:
        """
        Register an artwork attributed to the caller.

        An ID is allocated only after the caller passes every check, so a
        rejected call never consumes one. If the record cannot be stored
        the ID is released again.

        Returns:
            The new artwork ID

        Raises:
            Unauthorized: caller has no artist record, or it is unverified
            RuntimeError: the allocated ID already holds an artwork
        """
        if not self._artists.is_verified(caller):
            raise Unauthorized(f"{caller} is not a verified artist")

        artwork = Artwork(
            title=title,
            artist_id=caller,
            creation_date=creation_date,
            medium=medium,
            dimensions=dimensions,
            description=description,
            registered_at=self._clock(),
        )

        artwork_id = self._sequence.next()
        try:
            if artwork_id in self._artworks:
                raise RuntimeError(f"Artwork ID {artwork_id} is already in use")
            self._artworks.put(artwork_id, artwork)
        except Exception:
            self._sequence.release(artwork_id)
            raise
        logger.info(f"Registered artwork {artwork_id} ({title!r}) for {caller}")
        return artwork_id

    def get_artwork(self, artwork_id: int) -> Optional[Artwork]:
        """Look up an artwork; None for IDs never issued."""
        return self._artworks.get(artwork_id)

    def get_artwork_count(self) -> int:
        return self._sequence.count()

    def find_by_artist(self, identity: str) -> List[Artwork]:
        """Artworks attributed to an artist, in registration order."""
        return [
            artwork for _, artwork in sorted(self._artworks.items())
            if artwork.artist_id == identity
        ]

    def __contains__(self, artwork_id: int) -> bool:
        return artwork_id in self._artworks

    def __len__(self) -> int:
        return len(self._artworks)
