# dc_certificates/services/__init__.py
"""
Services module initialization
Contains the chain build pipeline and its supporting services
"""

from .secure_zip_creator import SecureZipCreator, secure_zip_creator

__all__ = [
    'SecureZipCreator',
    'secure_zip_creator'
]
