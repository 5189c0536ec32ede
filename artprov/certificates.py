# artprov/certificates.py
"""
Signed provenance certificates.

The registry owner can export an artwork's provenance record as a
certificate signed with the owner's RSA key. Anyone holding the owner's
public key can check it offline.

Signing follows the Linked Data Signatures layout: the signed bytes are
SHA-256(canonical options) + SHA-256(canonical document), signed with
RSA PKCS#1 v1.5 / SHA-256.
"""

import base64
import hashlib
import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

SIGNATURE_TYPE = "RsaSignature2017"
CERTIFICATE_TYPE = "ProvenanceCertificate"


def generate_keypair() -> tuple[bytes, bytes]:
    """Generate an RSA key pair for signing certificates (PEM encoded)."""
    private_key = rsa.generate_private_key(
        public_exponent=65537,
        key_size=2048,
    )
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return private_pem, public_pem


def public_key_from_private(private_pem: bytes) -> bytes:
    private_key = serialization.load_pem_private_key(private_pem, password=None)
    return private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )


def _canonicalize(data: Dict[str, Any]) -> str:
    """Sorted keys, no whitespace."""
    return json.dumps(data, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def _hash_sha256(data: str) -> bytes:
    return hashlib.sha256(data.encode("utf-8")).digest()


def _signing_input(document: Dict[str, Any], signature: Dict[str, Any]) -> bytes:
    options = {
        "type": signature["type"],
        "creator": signature["creator"],
        "created": signature["created"],
    }
    return _hash_sha256(_canonicalize(options)) + _hash_sha256(_canonicalize(document))


@dataclass
class ProvenanceCertificate:
    """
    A provenance record vouched for by the registry owner.

    Attributes:
        issuer: Owner identity that issued the certificate
        issued_at: Clock value at issue time
        record: ProvenanceRecord.to_dict() snapshot
        signature: Signature block (added by sign_certificate)
    """
    issuer: str
    issued_at: int
    record: Dict[str, Any]
    signature: Optional[Dict[str, Any]] = None

    @property
    def artwork_id(self) -> int:
        return self.record["artwork_id"]

    def document(self) -> Dict[str, Any]:
        """The signed content (everything except the signature)."""
        return {
            "type": CERTIFICATE_TYPE,
            "issuer": self.issuer,
            "issued_at": self.issued_at,
            "record": self.record,
        }

    def to_dict(self) -> Dict[str, Any]:
        data = self.document()
        if self.signature:
            data["signature"] = self.signature
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProvenanceCertificate":
        return cls(
            issuer=data["issuer"],
            issued_at=int(data["issued_at"]),
            record=data["record"],
            signature=data.get("signature"),
        )


def sign_certificate(
    certificate: ProvenanceCertificate,
    private_key_pem: bytes,
    created: int,
) -> ProvenanceCertificate:
    """
    Sign a certificate with the issuer's private key.

    Args:
        certificate: The certificate to sign
        private_key_pem: PEM-encoded RSA private key
        created: Clock value recorded in the signature block

    Returns:
        The certificate with its signature attached
    """
    private_key = serialization.load_pem_private_key(private_key_pem, password=None)

    signature = {
        "type": SIGNATURE_TYPE,
        "creator": f"{certificate.issuer}#main-key",
        "created": created,
    }
    signature_bytes = private_key.sign(
        _signing_input(certificate.document(), signature),
        padding.PKCS1v15(),
        hashes.SHA256(),
    )
    signature["signatureValue"] = base64.b64encode(signature_bytes).decode("utf-8")

    certificate.signature = signature
    return certificate


def verify_certificate(certificate: ProvenanceCertificate, public_key_pem: bytes) -> bool:
    """
    Check a certificate's signature against the issuer's public key.

    Returns:
        True if the signature is present, made by the issuer and valid
    """
    if not certificate.signature:
        return False

    try:
        if certificate.signature["creator"] != f"{certificate.issuer}#main-key":
            return False

        public_key = serialization.load_pem_public_key(public_key_pem)
        signature_bytes = base64.b64decode(certificate.signature["signatureValue"])
        public_key.verify(
            signature_bytes,
            _signing_input(certificate.document(), certificate.signature),
            padding.PKCS1v15(),
            hashes.SHA256(),
        )
        return True

    except (InvalidSignature, KeyError, ValueError, TypeError):
        return False


def issue_certificate(
    registry,
    artwork_id: int,
    private_key_pem: bytes,
) -> Optional[ProvenanceCertificate]:
    """
    Issue a signed certificate for an artwork.

    Args:
        registry: ProvenanceRegistry to read from
        artwork_id: Artwork to certify
        private_key_pem: The registry owner's private key

    Returns:
        Signed certificate, or None if the artwork is not registered
    """
    record = registry.provenance(artwork_id)
    if record is None:
        return None

    issued_at = registry.clock()
    certificate = ProvenanceCertificate(
        issuer=registry.owner,
        issued_at=issued_at,
        record=record.to_dict(),
    )
    return sign_certificate(certificate, private_key_pem, created=issued_at)
