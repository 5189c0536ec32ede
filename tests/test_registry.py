# tests/test_registry.py
"""Tests for the artist/artwork registry."""

import pytest

from artprov.access import AccessControl
from artprov.clock import ManualClock
from artprov.errors import AlreadyRegistered, NotFound, Unauthorized
from artprov.registry import Artist, ArtistRegistry, ArtworkRegistry
from artprov.store import RegistryStore

OWNER = "contract-owner"

GUERNICA = (
    "Guernica",
    1937,
    "Oil on canvas",
    "349 cm × 776 cm",
    "Painting depicting the bombing of Guernica",
)


@pytest.fixture
def store():
    return RegistryStore()


@pytest.fixture
def clock():
    return ManualClock(100)


@pytest.fixture
def artists(store):
    return ArtistRegistry(store.artists, AccessControl(OWNER))


@pytest.fixture
def artworks(store, artists, clock):
    return ArtworkRegistry(store.artworks, store.sequence, artists, clock)


@pytest.fixture
def verified_artist(artists):
    """Register and verify artist1."""
    artists.register_artist("artist1", "Pablo Picasso", "Spanish painter and sculptor")
    artists.verify_artist(OWNER, "artist1")
    return "artist1"


class TestAccessControl:
    """Tests for the owner gate."""

    def test_owner_allowed(self):
        access = AccessControl(OWNER)
        assert access.verify_action(OWNER)

    def test_others_denied(self):
        access = AccessControl(OWNER)
        assert not access.verify_action("not-owner")
        assert not access.verify_action("")

    def test_owner_required(self):
        with pytest.raises(ValueError):
            AccessControl("")


class TestRegisterArtist:
    """Tests for artist registration."""

    def test_register_new_artist(self, artists):
        result = artists.register_artist("artist1", "Pablo Picasso", "Spanish painter and sculptor")

        assert result is True
        artist = artists.get_artist("artist1")
        assert artist is not None
        assert artist.name == "Pablo Picasso"
        assert artist.biography == "Spanish painter and sculptor"
        assert artist.verified is False

    def test_register_twice_rejected(self, artists):
        """Second registration fails and leaves the first record unchanged."""
        artists.register_artist("artist1", "Pablo Picasso", "Spanish painter and sculptor")

        with pytest.raises(AlreadyRegistered):
            artists.register_artist("artist1", "Pablo Picasso", "Updated bio")

        assert artists.get_artist("artist1").biography == "Spanish painter and sculptor"
        assert len(artists) == 1

    def test_register_twice_after_verification_keeps_verified(self, artists, verified_artist):
        with pytest.raises(AlreadyRegistered):
            artists.register_artist(verified_artist, "Someone else", "")

        assert artists.get_artist(verified_artist).verified is True

    def test_get_unknown_artist(self, artists):
        assert artists.get_artist("nobody") is None


class TestVerifyArtist:
    """Tests for owner verification of artists."""

    def test_owner_verifies(self, artists):
        artists.register_artist("artist1", "Pablo Picasso", "Spanish painter and sculptor")

        assert artists.verify_artist(OWNER, "artist1") is True
        assert artists.get_artist("artist1").verified is True

    def test_non_owner_rejected(self, artists):
        artists.register_artist("artist1", "Pablo Picasso", "Spanish painter and sculptor")

        with pytest.raises(Unauthorized):
            artists.verify_artist("not-owner", "artist1")

        assert artists.get_artist("artist1").verified is False

    def test_artist_cannot_verify_self(self, artists):
        artists.register_artist("artist1", "Pablo Picasso", "")

        with pytest.raises(Unauthorized):
            artists.verify_artist("artist1", "artist1")

    def test_unknown_target(self, artists):
        with pytest.raises(NotFound):
            artists.verify_artist(OWNER, "non-existent")

        assert artists.get_artist("non-existent") is None

    def test_unauthorized_checked_before_existence(self, artists):
        """A non-owner learns nothing about whether the target exists."""
        with pytest.raises(Unauthorized):
            artists.verify_artist("not-owner", "non-existent")

    def test_reverify_is_idempotent(self, artists, verified_artist):
        assert artists.verify_artist(OWNER, verified_artist) is True
        assert artists.get_artist(verified_artist) == Artist(
            "Pablo Picasso", "Spanish painter and sculptor", True,
        )


class TestRegisterArtwork:
    """Tests for artwork registration."""

    def test_verified_artist_registers(self, artworks, verified_artist):
        artwork_id = artworks.register_artwork(verified_artist, *GUERNICA)

        assert artwork_id == 1
        artwork = artworks.get_artwork(1)
        assert artwork is not None
        assert artwork.title == "Guernica"
        assert artwork.artist_id == "artist1"
        assert artwork.creation_date == 1937
        assert artwork.medium == "Oil on canvas"
        assert artwork.registered_at == 100

    def test_unverified_artist_rejected(self, artists, artworks):
        artists.register_artist("artist1", "Pablo Picasso", "Spanish painter and sculptor")

        with pytest.raises(Unauthorized):
            artworks.register_artwork("artist1", *GUERNICA)

        assert artworks.get_artwork_count() == 0

    def test_unregistered_artist_rejected(self, artworks):
        with pytest.raises(Unauthorized):
            artworks.register_artwork("non-existent", *GUERNICA)

        assert artworks.get_artwork_count() == 0

    def test_rejection_does_not_consume_id(self, artists, artworks, verified_artist):
        with pytest.raises(Unauthorized):
            artworks.register_artwork("stranger", *GUERNICA)

        assert artworks.register_artwork(verified_artist, *GUERNICA) == 1

    def test_ids_are_sequential(self, artworks, verified_artist):
        ids = [
            artworks.register_artwork(verified_artist, f"Study {n}", 1900 + n, "Ink", "", "")
            for n in range(5)
        ]

        assert ids == [1, 2, 3, 4, 5]
        assert artworks.get_artwork_count() == 5
        assert [artworks.get_artwork(i).title for i in ids] == [f"Study {n}" for n in range(5)]

    def test_occupied_id_is_not_overwritten(self, store, artworks, verified_artist):
        """An ID that already holds an artwork is released, not reused."""
        artworks.register_artwork(verified_artist, *GUERNICA)
        store.sequence.release(1)

        with pytest.raises(RuntimeError):
            artworks.register_artwork(verified_artist, "Forgery", 1937, "", "", "")

        assert artworks.get_artwork(1).title == "Guernica"
        assert artworks.get_artwork_count() == 0

    def test_registered_at_follows_clock(self, artworks, verified_artist, clock):
        artworks.register_artwork(verified_artist, *GUERNICA)
        clock.advance(5)
        artworks.register_artwork(verified_artist, "Les Demoiselles d'Avignon", 1907, "Oil on canvas", "", "")

        assert artworks.get_artwork(1).registered_at == 100
        assert artworks.get_artwork(2).registered_at == 105

    def test_find_by_artist(self, artists, artworks, verified_artist):
        artists.register_artist("artist2", "Frida Kahlo", "Mexican painter")
        artists.verify_artist(OWNER, "artist2")

        artworks.register_artwork(verified_artist, *GUERNICA)
        artworks.register_artwork("artist2", "The Two Fridas", 1939, "Oil on canvas", "", "")
        artworks.register_artwork(verified_artist, "The Old Guitarist", 1903, "Oil on panel", "", "")

        titles = [a.title for a in artworks.find_by_artist(verified_artist)]
        assert titles == ["Guernica", "The Old Guitarist"]
        assert artworks.find_by_artist("nobody") == []


class TestGetArtwork:
    """Tests for artwork lookup."""

    def test_unknown_id_is_none(self, artworks):
        assert artworks.get_artwork(999) is None

    def test_zero_and_negative_ids(self, artworks, verified_artist):
        artworks.register_artwork(verified_artist, *GUERNICA)

        assert artworks.get_artwork(0) is None
        assert artworks.get_artwork(-1) is None
        assert artworks.get_artwork(2) is None

    def test_artwork_is_immutable(self, artworks, verified_artist):
        artworks.register_artwork(verified_artist, *GUERNICA)
        artwork = artworks.get_artwork(1)

        with pytest.raises(AttributeError):
            artwork.artist_id = "forger"
