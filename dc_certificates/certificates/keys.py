# dc_certificates/certificates/keys.py
# RSA key pair generation and serialization

import logging
from dataclasses import dataclass
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from ..config import settings
from .exceptions import CryptoProviderError

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class KeyPair:
    """RSA private key and its public half"""
    private_key: rsa.RSAPrivateKey

    @property
    def public_key(self) -> rsa.RSAPublicKey:
        return self.private_key.public_key()

    def private_pem(self) -> bytes:
        """Unencrypted PKCS#8 PEM"""
        return self.private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption()
        )

def generate_key_pair(key_size: int = None, public_exponent: int = None, role=None) -> KeyPair:
    """Generate an RSA key pair of the configured strength"""
    key_size = key_size or settings.KEY_SIZE
    public_exponent = public_exponent or settings.PUBLIC_EXPONENT

    logger.debug(f"Generating RSA-{key_size} key (e={public_exponent})")

    try:
        private_key = rsa.generate_private_key(
            public_exponent=public_exponent,
            key_size=key_size
        )
    except (ValueError, UnsupportedAlgorithm) as e:
        raise CryptoProviderError(f"RSA key generation failed: {e}", role=role, step="key generation") from e

    return KeyPair(private_key)

def load_key_pair(pem_data: bytes, role=None) -> KeyPair:
    """Load a key pair previously written by KeyPair.private_pem()"""
    try:
        private_key = serialization.load_pem_private_key(pem_data, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise CryptoProviderError(f"Failed to load private key: {e}", role=role, step="key load") from e

    if not isinstance(private_key, rsa.RSAPrivateKey):
        raise CryptoProviderError(
            f"Expected an RSA private key, got {type(private_key).__name__}",
            role=role,
            step="key load"
        )

    return KeyPair(private_key)
