# dc_certificates/certificates/validation/__init__.py

from .models import ValidationResult
from .private_key_cert import validate_private_key_certificate_match
from .chain_validation import ChainAssembler, ChainBundle

__all__ = [
    'ValidationResult',
    'validate_private_key_certificate_match',
    'ChainAssembler',
    'ChainBundle'
]
