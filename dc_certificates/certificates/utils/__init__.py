# dc_certificates/certificates/utils/__init__.py

from .hashing import (
    Thumbprint,
    compute_public_key_thumbprint,
    compute_certificate_thumbprint,
    generate_certificate_fingerprint
)

__all__ = [
    'Thumbprint',
    'compute_public_key_thumbprint',
    'compute_certificate_thumbprint',
    'generate_certificate_fingerprint'
]
