# tests/test_server.py
"""Tests for the registry HTTP server."""

import json
from urllib.error import HTTPError
from urllib.request import Request, urlopen

import pytest

from artprov import ManualClock, ProvenanceRegistry
from artprov.server import CALLER_HEADER, RegistryServer

OWNER = "owner"


@pytest.fixture
def server():
    """Start a server on a free port."""
    registry = ProvenanceRegistry(owner=OWNER, clock=ManualClock(100))
    server = RegistryServer(registry, host="127.0.0.1", port=0)
    server.start_background()
    yield server
    server.stop()


def call(server, method, path, body=None, caller=None):
    """Make a request, returning (status, parsed JSON)."""
    data = json.dumps(body).encode() if body is not None else None
    request = Request(f"http://127.0.0.1:{server.port}{path}", data=data, method=method)
    if data is not None:
        request.add_header("Content-Type", "application/json")
    if caller:
        request.add_header(CALLER_HEADER, caller)
    try:
        with urlopen(request, timeout=5) as response:
            return response.status, json.loads(response.read())
    except HTTPError as e:
        return e.code, json.loads(e.read())


def setup_artist(server):
    call(server, "POST", "/artists", {"name": "Pablo Picasso", "biography": "Spanish painter"}, "artist1")
    call(server, "POST", "/artists/artist1/verify", caller=OWNER)


class TestServer:
    """Tests for the JSON API."""

    def test_health(self, server):
        assert call(server, "GET", "/health") == (200, {"status": "ok"})

    def test_register_and_get_artist(self, server):
        status, _ = call(server, "POST", "/artists", {"name": "Pablo Picasso", "biography": "bio"}, "artist1")
        assert status == 201

        status, data = call(server, "GET", "/artists/artist1")
        assert status == 200
        assert data["artist"]["verified"] is False

    def test_absent_records_are_null(self, server):
        assert call(server, "GET", "/artists/nobody") == (200, {"artist": None})
        assert call(server, "GET", "/artworks/999") == (200, {"artwork": None})
        assert call(server, "GET", "/authentications/999") == (200, {"authentication": None})
        assert call(server, "GET", "/provenance/999") == (200, {"provenance": None})

    def test_error_statuses(self, server):
        call(server, "POST", "/artists", {"name": "A"}, "artist1")

        status, data = call(server, "POST", "/artists", {"name": "A"}, "artist1")
        assert status == 409
        assert data["error"] == "AlreadyRegistered"
        assert data["code"] == 2

        status, data = call(server, "POST", "/artists/artist1/verify", caller="artist1")
        assert status == 403
        assert data["error"] == "Unauthorized"

        status, data = call(server, "POST", "/artists/ghost/verify", caller=OWNER)
        assert status == 404
        assert data["error"] == "NotFound"

    def test_register_artwork(self, server):
        setup_artist(server)

        status, data = call(server, "POST", "/artworks", {
            "title": "Guernica",
            "creation_date": 1937,
            "medium": "Oil on canvas",
            "dimensions": "349 cm × 776 cm",
        }, "artist1")
        assert status == 201
        assert data["artwork_id"] == 1

        assert call(server, "GET", "/artworks/count") == (200, {"count": 1})
        _, data = call(server, "GET", "/artworks/1")
        assert data["artwork"]["dimensions"] == "349 cm × 776 cm"
        assert data["artwork"]["registered_at"] == 100

    def test_authentication_flow(self, server):
        call(server, "POST", "/authenticators", {"name": "Art Expert Inc.", "credentials": "Certified"}, "auth1")
        call(server, "POST", "/authenticators/auth1/verify", caller=OWNER)
        body = {"artwork_id": 1, "is_authentic": True, "assessment_notes": "ok", "evidence_hash": "01" * 32}

        assert call(server, "POST", "/authentications", body, "auth1")[0] == 201

        status, data = call(server, "POST", "/authentications", body, "auth1")
        assert status == 409
        assert data["error"] == "AlreadyAuthenticated"

        _, data = call(server, "GET", "/authentications/1")
        assert data["authentication"]["authenticator"] == "auth1"

    def test_bad_requests(self, server):
        assert call(server, "POST", "/artists", {"name": "A"})[0] == 400
        assert call(server, "POST", "/artworks", {"title": "T"}, "artist1")[0] == 400
        assert call(server, "POST", "/artworks", {"title": "T", "creation_date": "1937"}, "artist1")[0] == 400
        assert call(server, "GET", "/artworks/abc")[0] == 400
        assert call(server, "POST", "/authentications", {
            "artwork_id": 1, "is_authentic": True, "evidence_hash": "01",
        }, "auth1")[0] == 400
        assert call(server, "GET", "/nowhere")[0] == 404

    def test_optional_fields_must_be_strings(self, server):
        setup_artist(server)
        assert call(server, "POST", "/artists", {"name": "A", "biography": 5}, "artist2")[0] == 400
        assert call(server, "POST", "/artworks", {
            "title": "Guernica", "creation_date": 1937, "medium": ["oil"],
        }, "artist1")[0] == 400
        assert call(server, "POST", "/authenticators", {"name": "E", "credentials": None}, "auth1")[0] == 400

        assert call(server, "GET", "/artists/artist2") == (200, {"artist": None})
        assert call(server, "GET", "/artworks/count") == (200, {"count": 0})

    def test_advance_clock(self, server):
        assert call(server, "POST", "/clock/advance", {"blocks": 5}, OWNER) == (200, {"ok": True, "height": 105})
        assert call(server, "POST", "/clock/advance", {}, OWNER)[1]["height"] == 106
        assert call(server, "POST", "/clock/advance", {}, "artist1")[0] == 403
        assert call(server, "POST", "/clock/advance", {"blocks": "2"}, OWNER)[0] == 400

        setup_artist(server)
        call(server, "POST", "/artworks", {"title": "Guernica", "creation_date": 1937}, "artist1")
        assert call(server, "GET", "/artworks/1")[1]["artwork"]["registered_at"] == 106
