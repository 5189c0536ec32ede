# artprov/server.py
"""
HTTP server for the provenance registry.

Exposes registry operations as a small JSON API. The caller identity is
taken from the X-Caller-Identity header, which an upstream gateway is
expected to have authenticated.

Endpoints:
    POST /artists                       - Register caller as artist {name, biography}
    POST /artists/<id>/verify           - Verify an artist (owner)
    GET  /artists/<id>                  - Get an artist
    POST /artworks                      - Register artwork {title, creation_date, ...}
    GET  /artworks/count                - Number of artworks
    GET  /artworks/<id>                 - Get an artwork
    POST /authenticators                - Register caller as authenticator {name, credentials}
    POST /authenticators/<id>/verify    - Verify an authenticator (owner)
    GET  /authenticators/<id>           - Get an authenticator
    POST /authentications               - Record assessment {artwork_id, is_authentic, ...}
    GET  /authentications/<artwork_id>  - Get an artwork's authentication
    GET  /provenance/<artwork_id>       - Artwork + artist + authentication
    GET  /health                        - Liveness check
    POST /clock/advance                 - Advance the manual clock (owner) {blocks}
"""

import json
import logging
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Dict, Optional
from urllib.parse import unquote, urlparse

from .errors import RegistryError
from .provenance import ProvenanceRegistry

logger = logging.getLogger(__name__)

CALLER_HEADER = "X-Caller-Identity"

ERROR_STATUS = {
    "Unauthorized": 403,
    "AlreadyRegistered": 409,
    "NotFound": 404,
    "AlreadyAuthenticated": 409,
}


class BadRequest(Exception):
    """Malformed request (missing header, field or bad JSON)."""


def _require(data: Dict[str, Any], field: str, kind: type = str):
    if field not in data:
        raise BadRequest(f"Missing field: {field}")
    value = data[field]
    if kind is int and (isinstance(value, bool) or not isinstance(value, int)):
        raise BadRequest(f"Field {field} must be an integer")
    if kind is bool and not isinstance(value, bool):
        raise BadRequest(f"Field {field} must be a boolean")
    if kind is str and not isinstance(value, str):
        raise BadRequest(f"Field {field} must be a string")
    return value


def _optional(data: Dict[str, Any], field: str, default: str = "") -> str:
    if field not in data:
        return default
    value = data[field]
    if not isinstance(value, str):
        raise BadRequest(f"Field {field} must be a string")
    return value


def _parse_int(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise BadRequest(f"Invalid artwork ID: {value}")


def _record(record) -> Optional[Dict[str, Any]]:
    return record.to_dict() if record is not None else None


class RegistryServer:
    """
    HTTP front end for a ProvenanceRegistry.

    Usage:
        server = RegistryServer(registry, port=8080)
        server.start()  # Blocking
    """

    def __init__(self, registry: ProvenanceRegistry, host: str = "127.0.0.1", port: int = 8080):
        self.registry = registry
        self.host = host
        self.port = port
        self._httpd: Optional[ThreadingHTTPServer] = None

    def _create_handler(server_instance):
        """Create request handler with access to server instance."""

        class RequestHandler(BaseHTTPRequestHandler):
            server_ref = server_instance

            def log_message(self, format, *args):
                logger.debug(format % args)

            def _send_json(self, data: Any, status: int = 200):
                body = json.dumps(data, ensure_ascii=False).encode("utf-8")
                self.send_response(status)
                self.send_header("Content-Type", "application/json")
                self.send_header("Content-Length", str(len(body)))
                self.end_headers()
                self.wfile.write(body)

            def _send_error(self, message: str, status: int = 400):
                self._send_json({"error": message}, status)

            def _caller(self) -> str:
                caller = self.headers.get(CALLER_HEADER)
                if not caller:
                    raise BadRequest(f"Missing {CALLER_HEADER} header")
                return caller

            def _body(self) -> Dict[str, Any]:
                content_length = int(self.headers.get("Content-Length", 0))
                raw = self.rfile.read(content_length).decode("utf-8") if content_length else "{}"
                try:
                    data = json.loads(raw)
                except json.JSONDecodeError as e:
                    raise BadRequest(f"Invalid JSON: {e}")
                if not isinstance(data, dict):
                    raise BadRequest("Request body must be a JSON object")
                return data

            def _parts(self):
                path = urlparse(self.path).path
                return [unquote(p) for p in path.strip("/").split("/") if p]

            def _dispatch(self, handler):
                try:
                    handler()
                except BadRequest as e:
                    self._send_error(str(e), 400)
                except RegistryError as e:
                    self._send_json(e.to_dict(), ERROR_STATUS.get(e.kind, 400))
                except ValueError as e:
                    self._send_error(str(e), 400)

            def do_GET(self):
                self._dispatch(self._handle_get)

            def do_POST(self):
                self._dispatch(self._handle_post)

            def _handle_get(self):
                registry = self.server_ref.registry
                parts = self._parts()

                if parts == ["health"]:
                    self._send_json({"status": "ok"})
                elif parts == ["artworks", "count"]:
                    self._send_json({"count": registry.get_artwork_count()})
                elif len(parts) == 2 and parts[0] == "artists":
                    self._send_json({"artist": _record(registry.get_artist(parts[1]))})
                elif len(parts) == 2 and parts[0] == "artworks":
                    artwork = registry.get_artwork(_parse_int(parts[1]))
                    self._send_json({"artwork": _record(artwork)})
                elif len(parts) == 2 and parts[0] == "authenticators":
                    authenticator = registry.get_authenticator(parts[1])
                    self._send_json({"authenticator": _record(authenticator)})
                elif len(parts) == 2 and parts[0] == "authentications":
                    authentication = registry.get_authentication(_parse_int(parts[1]))
                    self._send_json({"authentication": _record(authentication)})
                elif len(parts) == 2 and parts[0] == "provenance":
                    record = registry.provenance(_parse_int(parts[1]))
                    self._send_json({"provenance": _record(record)})
                else:
                    self._send_error("Not found", 404)

            def _handle_post(self):
                registry = self.server_ref.registry
                parts = self._parts()

                if parts == ["artists"]:
                    data = self._body()
                    registry.register_artist(
                        self._caller(),
                        _require(data, "name"),
                        _optional(data, "biography"),
                    )
                    self._send_json({"ok": True}, 201)

                elif len(parts) == 3 and parts[0] == "artists" and parts[2] == "verify":
                    registry.verify_artist(self._caller(), parts[1])
                    self._send_json({"ok": True})

                elif parts == ["artworks"]:
                    data = self._body()
                    artwork_id = registry.register_artwork(
                        self._caller(),
                        _require(data, "title"),
                        _require(data, "creation_date", int),
                        _optional(data, "medium"),
                        _optional(data, "dimensions"),
                        _optional(data, "description"),
                    )
                    self._send_json({"ok": True, "artwork_id": artwork_id}, 201)

                elif parts == ["authenticators"]:
                    data = self._body()
                    registry.register_authenticator(
                        self._caller(),
                        _require(data, "name"),
                        _optional(data, "credentials"),
                    )
                    self._send_json({"ok": True}, 201)

                elif len(parts) == 3 and parts[0] == "authenticators" and parts[2] == "verify":
                    registry.verify_authenticator(self._caller(), parts[1])
                    self._send_json({"ok": True})

                elif parts == ["authentications"]:
                    data = self._body()
                    evidence_hex = _require(data, "evidence_hash")
                    try:
                        evidence = bytes.fromhex(evidence_hex)
                    except ValueError:
                        raise BadRequest("evidence_hash must be hex")
                    registry.authenticate_artwork(
                        self._caller(),
                        _require(data, "artwork_id", int),
                        _require(data, "is_authentic", bool),
                        _optional(data, "assessment_notes"),
                        evidence,
                    )
                    self._send_json({"ok": True}, 201)

                elif parts == ["clock", "advance"]:
                    data = self._body()
                    blocks = _require(data, "blocks", int) if "blocks" in data else 1
                    height = registry.advance_clock(self._caller(), blocks)
                    self._send_json({"ok": True, "height": height})

                else:
                    self._send_error("Not found", 404)

        return RequestHandler

    def bind(self) -> ThreadingHTTPServer:
        """Create the listening socket; port 0 picks a free port."""
        if self._httpd is None:
            self._httpd = ThreadingHTTPServer((self.host, self.port), self._create_handler())
            self.port = self._httpd.server_address[1]
        return self._httpd

    def start(self):
        """Start the HTTP server (blocking)."""
        httpd = self.bind()
        logger.info(f"Provenance registry listening on {self.host}:{self.port}")
        print(f"Provenance registry running on http://{self.host}:{self.port}")
        try:
            httpd.serve_forever()
        except KeyboardInterrupt:
            print("\nShutting down...")
        finally:
            httpd.server_close()

    def start_background(self) -> threading.Thread:
        """Start the server in a background thread."""
        httpd = self.bind()
        thread = threading.Thread(target=httpd.serve_forever)
        thread.daemon = True
        thread.start()
        return thread

    def stop(self):
        if self._httpd is not None:
            self._httpd.shutdown()
            self._httpd.server_close()
            self._httpd = None


def main():
    """CLI entry point."""
    import argparse

    from .config import RegistryConfig

    parser = argparse.ArgumentParser(description="Art provenance registry server")
    parser.add_argument("--config", required=True, help="Registry config YAML file")
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind to")
    parser.add_argument("--port", type=int, default=8080, help="Port to bind to")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    registry = ProvenanceRegistry.from_config(RegistryConfig.from_file(args.config))
    server = RegistryServer(registry, host=args.host, port=args.port)
    server.start()


if __name__ == "__main__":
    main()
