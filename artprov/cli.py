#!/usr/bin/env python3
"""
Art provenance registry CLI

Every mutating command acts as the identity given with --as. The CLI
does not authenticate that identity; it is meant to run behind whatever
establishes who the caller is.

Usage:
  artprov register-artist --as <id> <name> <biography>
  artprov verify-artist --as <owner> <artist-id>
  artprov register-artwork --as <artist-id> <title> --year <n> [--medium ...]
  artprov register-authenticator --as <id> <name> <credentials>
  artprov verify-authenticator --as <owner> <authenticator-id>
  artprov authenticate --as <authenticator-id> <artwork-id> --authentic|--not-authentic
          (--evidence-file <path> | --evidence-hash <hex>) [--notes ...]
  artprov artist|authenticator <id>
  artprov artwork|authentication|provenance <artwork-id>
  artprov count
  artprov advance-clock --as <owner> [--blocks <n>]
  artprov keygen --out <dir>
  artprov certificate <artwork-id> [--key <pem>] [-o <file>]
  artprov verify-certificate <file> --public-key <pem>
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

from .authentication import evidence_hash_from_file
from .certificates import (
    ProvenanceCertificate,
    generate_keypair,
    issue_certificate,
    verify_certificate,
)
from .config import RegistryConfig
from .errors import RegistryError
from .provenance import ProvenanceRegistry

logger = logging.getLogger(__name__)


def _print_json(data: Any):
    print(json.dumps(data, indent=2, ensure_ascii=False))


def _record(record) -> Optional[dict]:
    return record.to_dict() if record is not None else None


def load_config(args) -> RegistryConfig:
    """Build the config from --config, then apply --owner/--store overrides."""
    if args.config:
        config = RegistryConfig.from_file(Path(args.config))
    else:
        if not args.owner:
            raise ValueError("An owner identity is required (--owner or --config)")
        config = RegistryConfig(owner=args.owner)

    if args.owner:
        config.owner = args.owner
    if args.store:
        config.store_dir = Path(args.store)
    return config


def parse_evidence_hash(value: str) -> bytes:
    """Parse a 64-character hex evidence hash."""
    try:
        evidence = bytes.fromhex(value)
    except ValueError:
        raise ValueError(f"Invalid evidence hash: {value!r} is not hex")
    if len(evidence) != 32:
        raise ValueError(f"Evidence hash must be 32 bytes (64 hex chars), got {len(evidence)}")
    return evidence


def cmd_register_artist(registry: ProvenanceRegistry, args):
    registry.register_artist(args.caller, args.name, args.biography)
    print(f"Registered artist {args.caller}")


def cmd_verify_artist(registry: ProvenanceRegistry, args):
    registry.verify_artist(args.caller, args.target)
    print(f"Verified artist {args.target}")


def cmd_artist(registry: ProvenanceRegistry, args):
    _print_json(_record(registry.get_artist(args.identity)))


def cmd_register_artwork(registry: ProvenanceRegistry, args):
    artwork_id = registry.register_artwork(
        args.caller,
        args.title,
        args.year,
        args.medium,
        args.dimensions,
        args.description,
    )
    print(f"Registered artwork {artwork_id}")


def cmd_artwork(registry: ProvenanceRegistry, args):
    _print_json(_record(registry.get_artwork(args.artwork_id)))


def cmd_count(registry: ProvenanceRegistry, args):
    print(registry.get_artwork_count())


def cmd_register_authenticator(registry: ProvenanceRegistry, args):
    registry.register_authenticator(args.caller, args.name, args.credentials)
    print(f"Registered authenticator {args.caller}")


def cmd_verify_authenticator(registry: ProvenanceRegistry, args):
    registry.verify_authenticator(args.caller, args.target)
    print(f"Verified authenticator {args.target}")


def cmd_authenticator(registry: ProvenanceRegistry, args):
    _print_json(_record(registry.get_authenticator(args.identity)))


def cmd_authenticate(registry: ProvenanceRegistry, args):
    if args.evidence_file:
        evidence = evidence_hash_from_file(Path(args.evidence_file))
    else:
        evidence = parse_evidence_hash(args.evidence_hash)

    registry.authenticate_artwork(
        args.caller,
        args.artwork_id,
        args.authentic,
        args.notes,
        evidence,
    )
    verdict = "authentic" if args.authentic else "not authentic"
    print(f"Recorded artwork {args.artwork_id} as {verdict} (evidence {evidence.hex()})")


def cmd_authentication(registry: ProvenanceRegistry, args):
    _print_json(_record(registry.get_authentication(args.artwork_id)))


def cmd_provenance(registry: ProvenanceRegistry, args):
    _print_json(_record(registry.provenance(args.artwork_id)))


def cmd_advance_clock(registry: ProvenanceRegistry, args):
    height = registry.advance_clock(args.caller, args.blocks)
    print(f"Clock at {height}")


def cmd_certificate(registry: ProvenanceRegistry, args, config: RegistryConfig):
    key_path = Path(args.key) if args.key else config.signing_key
    if key_path is None:
        raise ValueError("A signing key is required (--key or signing_key in config)")

    certificate = issue_certificate(registry, args.artwork_id, key_path.read_bytes())
    if certificate is None:
        raise ValueError(f"Artwork {args.artwork_id} is not registered")

    if args.output:
        with open(args.output, "w") as f:
            json.dump(certificate.to_dict(), f, indent=2, ensure_ascii=False)
        print(f"Certificate written to: {args.output}")
    else:
        _print_json(certificate.to_dict())


def cmd_keygen(args):
    out_dir = Path(args.out)
    out_dir.mkdir(parents=True, exist_ok=True)
    private_pem, public_pem = generate_keypair()

    private_path = out_dir / f"{args.name}.private.pem"
    public_path = out_dir / f"{args.name}.public.pem"
    private_path.write_bytes(private_pem)
    private_path.chmod(0o600)
    public_path.write_bytes(public_pem)

    print(f"Private key: {private_path}")
    print(f"Public key: {public_path}")


def cmd_verify_certificate(args) -> bool:
    with open(args.certificate, "r") as f:
        certificate = ProvenanceCertificate.from_dict(json.load(f))
    public_pem = Path(args.public_key).read_bytes()

    if verify_certificate(certificate, public_pem):
        print(f"Valid certificate for artwork {certificate.artwork_id} issued by {certificate.issuer}")
        return True
    print("INVALID certificate")
    return False


REGISTRY_COMMANDS = {
    "register-artist": cmd_register_artist,
    "verify-artist": cmd_verify_artist,
    "artist": cmd_artist,
    "register-artwork": cmd_register_artwork,
    "artwork": cmd_artwork,
    "count": cmd_count,
    "register-authenticator": cmd_register_authenticator,
    "verify-authenticator": cmd_verify_authenticator,
    "authenticator": cmd_authenticator,
    "authenticate": cmd_authenticate,
    "authentication": cmd_authentication,
    "provenance": cmd_provenance,
    "advance-clock": cmd_advance_clock,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="artprov",
        description="Art provenance registry",
    )
    parser.add_argument("--config", help="Registry config YAML file")
    parser.add_argument("--store", help="State directory (overrides config)")
    parser.add_argument("--owner", help="Owner identity (overrides config)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    def caller_parser(name: str, help_text: str) -> argparse.ArgumentParser:
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("--as", dest="caller", required=True, help="Caller identity")
        return sub

    p = caller_parser("register-artist", "Register the caller as an artist")
    p.add_argument("name")
    p.add_argument("biography")

    p = caller_parser("verify-artist", "Verify an artist (owner only)")
    p.add_argument("target", help="Artist identity")

    p = subparsers.add_parser("artist", help="Show an artist")
    p.add_argument("identity")

    p = caller_parser("register-artwork", "Register an artwork (verified artists only)")
    p.add_argument("title")
    p.add_argument("--year", type=int, required=True, help="Creation date")
    p.add_argument("--medium", default="")
    p.add_argument("--dimensions", default="")
    p.add_argument("--description", default="")

    p = subparsers.add_parser("artwork", help="Show an artwork")
    p.add_argument("artwork_id", type=int)

    subparsers.add_parser("count", help="Number of registered artworks")

    p = caller_parser("register-authenticator", "Register the caller as an authenticator")
    p.add_argument("name")
    p.add_argument("credentials")

    p = caller_parser("verify-authenticator", "Verify an authenticator (owner only)")
    p.add_argument("target", help="Authenticator identity")

    p = subparsers.add_parser("authenticator", help="Show an authenticator")
    p.add_argument("identity")

    p = caller_parser("authenticate", "Record an authenticity assessment")
    p.add_argument("artwork_id", type=int)
    verdict = p.add_mutually_exclusive_group(required=True)
    verdict.add_argument("--authentic", dest="authentic", action="store_true")
    verdict.add_argument("--not-authentic", dest="authentic", action="store_false")
    evidence = p.add_mutually_exclusive_group(required=True)
    evidence.add_argument("--evidence-file", help="File to hash (SHA3-256) as evidence")
    evidence.add_argument("--evidence-hash", help="Evidence hash as 64 hex chars")
    p.add_argument("--notes", default="", help="Assessment notes")

    p = subparsers.add_parser("authentication", help="Show an artwork's authentication")
    p.add_argument("artwork_id", type=int)

    p = subparsers.add_parser("provenance", help="Show an artwork's full provenance")
    p.add_argument("artwork_id", type=int)

    p = caller_parser("advance-clock", "Advance the manual clock (owner only)")
    p.add_argument("--blocks", type=int, default=1, help="How far to advance")

    p = subparsers.add_parser("keygen", help="Generate an owner signing key pair")
    p.add_argument("--out", required=True, help="Directory for the key files")
    p.add_argument("--name", default="owner", help="Key file name prefix")

    p = subparsers.add_parser("certificate", help="Issue a signed provenance certificate")
    p.add_argument("artwork_id", type=int)
    p.add_argument("--key", help="Owner private key PEM (overrides config)")
    p.add_argument("-o", "--output", help="Output file (default: stdout)")

    p = subparsers.add_parser("verify-certificate", help="Check a provenance certificate")
    p.add_argument("certificate", help="Certificate JSON file")
    p.add_argument("--public-key", required=True, help="Owner public key PEM")

    return parser


def main(argv: Optional[List[str]] = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    try:
        if args.command == "keygen":
            cmd_keygen(args)
            return
        if args.command == "verify-certificate":
            if not cmd_verify_certificate(args):
                sys.exit(1)
            return

        config = load_config(args)
        registry = ProvenanceRegistry.from_config(config)
        logger.debug(f"Registry owner={config.owner} store={config.store_dir or '(memory)'}")

        if args.command == "certificate":
            cmd_certificate(registry, args, config)
        else:
            REGISTRY_COMMANDS[args.command](registry, args)

    except RegistryError as e:
        print(f"error: {e.kind}: {e.message}", file=sys.stderr)
        sys.exit(1)
    except (ValueError, KeyError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
