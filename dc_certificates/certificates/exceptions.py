# dc_certificates/certificates/exceptions.py
# Error taxonomy for the certificate chain pipeline

from typing import Optional


class CertificateChainError(Exception):
    """Base exception for chain generation and verification"""

    def __init__(self, message: str, role=None, step: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.role = role
        self.step = step

    def __str__(self) -> str:
        prefix = []
        if self.role is not None:
            prefix.append(getattr(self.role, "label", str(self.role)))
        if self.step:
            prefix.append(self.step)
        if prefix:
            return f"[{' / '.join(prefix)}] {self.message}"
        return self.message


class InputError(CertificateChainError):
    """Raised when the domain argument is missing or malformed"""
    pass


class CryptoProviderError(CertificateChainError):
    """Raised when key generation, signing or digesting fails in the provider"""
    pass


class DNEncodingError(CertificateChainError):
    """Raised when a thumbprint cannot be carried through a structured DN intact"""
    pass


class IssuanceError(CertificateChainError):
    """Raised when a certificate cannot be issued under the given issuer"""
    pass


class VerificationError(CertificateChainError):
    """Raised when a link in an assembled chain fails validation"""

    def __init__(self, message: str, role=None, step: Optional[str] = None, certificate_name: Optional[str] = None):
        super().__init__(message, role=role, step=step)
        self.certificate_name = certificate_name
