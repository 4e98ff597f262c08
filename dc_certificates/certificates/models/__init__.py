# dc_certificates/certificates/models/__init__.py

from .hierarchy import CertificateHierarchy, IssuedCertificate

__all__ = [
    'CertificateHierarchy',
    'IssuedCertificate'
]
