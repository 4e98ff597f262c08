# dc_certificates/certificates/utils/hashing.py
# Public key thumbprint (SMPTE 430-2 dnQualifier) and fingerprint helpers

import base64
import hashlib
import logging
from dataclasses import dataclass
from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from ..exceptions import CryptoProviderError

logger = logging.getLogger(__name__)

THUMBPRINT_LENGTH = 20

@dataclass(frozen=True)
class Thumbprint:
    """SHA-1 digest of the DER encoded RSAPublicKey {modulus, publicExponent}"""
    digest: bytes

    @property
    def b64(self) -> str:
        return base64.b64encode(self.digest).decode("ascii")

    @property
    def hex(self) -> str:
        return self.digest.hex()

    def __str__(self) -> str:
        return self.b64

def encode_public_key_sequence(public_key) -> bytes:
    """DER encode the SEQUENCE {INTEGER n, INTEGER e} of an RSA public key"""
    if not isinstance(public_key, rsa.RSAPublicKey):
        raise CryptoProviderError(
            f"Public key thumbprint requires an RSA key, got {type(public_key).__name__}",
            step="thumbprint"
        )

    try:
        # PKCS#1 RSAPublicKey is exactly SEQUENCE { modulus INTEGER, publicExponent INTEGER }
        return public_key.public_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PublicFormat.PKCS1
        )
    except ValueError as e:
        raise CryptoProviderError(f"Failed to DER encode public key: {e}", step="thumbprint") from e

def compute_public_key_thumbprint(public_key) -> Thumbprint:
    """Compute the dnQualifier thumbprint of an RSA public key"""
    logger.debug("=== PUBLIC KEY THUMBPRINT ===")

    der_bytes = encode_public_key_sequence(public_key)
    logger.debug(f"RSAPublicKey DER length: {len(der_bytes)} bytes")
    logger.debug(f"DER header (first 16 bytes): {der_bytes[:16].hex()}")

    thumbprint = Thumbprint(hashlib.sha1(der_bytes).digest())
    logger.debug(f"Thumbprint b64: {thumbprint.b64}")
    logger.debug(f"Thumbprint b16: {thumbprint.hex}")

    return thumbprint

def compute_certificate_thumbprint(certificate: x509.Certificate) -> Thumbprint:
    """Compute the public key thumbprint of the key carried by a certificate"""
    return compute_public_key_thumbprint(certificate.public_key())

def generate_certificate_fingerprint(certificate: x509.Certificate) -> str:
    """SHA256 fingerprint of the DER certificate, colon separated"""
    der_bytes = certificate.public_bytes(serialization.Encoding.DER)
    digest = hashlib.sha256(der_bytes).hexdigest().upper()
    return ":".join(digest[i:i + 2] for i in range(0, len(digest), 2))
