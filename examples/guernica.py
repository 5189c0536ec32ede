#!/usr/bin/env python3
"""
Walk through the registry lifecycle in memory.

Registers and verifies an artist and an authenticator, registers an
artwork, records an assessment and prints a signed provenance
certificate.
"""

import json
import logging
import sys
from pathlib import Path

# Add artprov to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from artprov import (
    ManualClock,
    ProvenanceRegistry,
    Unauthorized,
    generate_keypair,
    issue_certificate,
    verify_certificate,
)


def main():
    logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")

    clock = ManualClock(100)
    registry = ProvenanceRegistry(owner="registry-owner", clock=clock)

    registry.register_artist("picasso", "Pablo Picasso", "Spanish painter and sculptor")
    try:
        registry.register_artwork("picasso", "Guernica", 1937, "Oil on canvas", "349 cm × 776 cm", "")
    except Unauthorized:
        print("Unverified artists cannot register artworks")

    registry.verify_artist("registry-owner", "picasso")
    artwork_id = registry.register_artwork(
        "picasso", "Guernica", 1937, "Oil on canvas", "349 cm × 776 cm",
        "Painting depicting the bombing of Guernica",
    )
    print(f"Guernica registered as artwork {artwork_id}")

    clock.advance(12)
    registry.register_authenticator("expert", "Art Expert Inc.", "Certified by International Art Association")
    registry.verify_authenticator("registry-owner", "expert")
    registry.authenticate_artwork(
        "expert", artwork_id, True, "Brushwork and pigments match known works", bytes(32),
    )

    private_pem, public_pem = generate_keypair()
    certificate = issue_certificate(registry, artwork_id, private_pem)
    print(json.dumps(certificate.to_dict(), indent=2, ensure_ascii=False))
    print(f"Signature valid: {verify_certificate(certificate, public_pem)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
