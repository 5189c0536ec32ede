# artprov/registry/__init__.py
"""
Artist/Artwork registry.

Artists register themselves, the registry owner verifies them, and only
verified artists can register artworks.

Example:
    artists = ArtistRegistry(store.artists, access)
    artworks = ArtworkRegistry(store.artworks, store.sequence, artists, clock)

    artists.register_artist("artist1", "Pablo Picasso", "Spanish painter")
    artists.verify_artist("owner", "artist1")
    artwork_id = artworks.register_artwork("artist1", "Guernica", 1937, ...)
"""

from .artists import Artist, ArtistRegistry
from .artworks import Artwork, ArtworkRegistry

__all__ = ["Artist", "ArtistRegistry", "Artwork", "ArtworkRegistry"]
