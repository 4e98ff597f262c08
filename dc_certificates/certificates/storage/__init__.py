# dc_certificates/certificates/storage/__init__.py
# Filesystem storage for generated artifacts

from .key_store import KeyStore

__all__ = [
    'KeyStore'
]
