# dc_certificates/certificates/issuer.py
# Certificate and CSR signing

import datetime
import logging
from dataclasses import dataclass
from typing import Optional
from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import rsa

from .exceptions import CryptoProviderError, IssuanceError
from .extensions import ExtensionSet
from .keys import KeyPair
from .subject import format_name
from .validation.private_key_cert import validate_private_key_certificate_match

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class IssuerCredentials:
    """An authority's certificate and the private key that signs on its behalf"""
    certificate: x509.Certificate
    private_key: rsa.RSAPrivateKey

# Marker for the self-signed root
SELF_SIGNED = None

class CertificateIssuer:
    """
    Issues SHA-256 signed X.509 v3 certificates.

    Validity windows are checked against the issuer so that no certificate
    outlives the authority that signed it.
    """

    def __init__(self, hash_algorithm: Optional[hashes.HashAlgorithm] = None):
        self.hash_algorithm = hash_algorithm or hashes.SHA256()

    def create_csr(self, key_pair: KeyPair, subject: x509.Name, role=None) -> x509.CertificateSigningRequest:
        """Certificate signing request for a subject, signed with its own key"""
        logger.debug(f"Generating CSR for {format_name(subject)}")
        try:
            return x509.CertificateSigningRequestBuilder().subject_name(
                subject
            ).sign(key_pair.private_key, self.hash_algorithm)
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            raise CryptoProviderError(f"CSR signing failed: {e}", role=role, step="csr") from e

    def issue(
        self,
        key_pair: KeyPair,
        subject: x509.Name,
        issuer: Optional[IssuerCredentials],
        serial: int,
        validity_days: int,
        extensions: ExtensionSet,
        not_before: Optional[datetime.datetime] = None,
        role=None
    ) -> x509.Certificate:
        """Issue a certificate for key_pair; issuer=SELF_SIGNED signs with key_pair itself"""
        if issuer is SELF_SIGNED:
            return self._sign(
                subject=subject,
                public_key=key_pair.public_key,
                issuer_name=subject,
                issuer_public_key=key_pair.public_key,
                issuer_serial=serial,
                signing_key=key_pair.private_key,
                issuer_not_after=None,
                serial=serial,
                validity_days=validity_days,
                extensions=extensions,
                not_before=not_before,
                role=role
            )

        self._check_issuer(issuer, role)
        return self._sign(
            subject=subject,
            public_key=key_pair.public_key,
            issuer_name=issuer.certificate.subject,
            issuer_public_key=issuer.certificate.public_key(),
            issuer_serial=issuer.certificate.serial_number,
            signing_key=issuer.private_key,
            issuer_not_after=issuer.certificate.not_valid_after_utc,
            serial=serial,
            validity_days=validity_days,
            extensions=extensions,
            not_before=not_before,
            role=role
        )

    def issue_from_csr(
        self,
        csr: x509.CertificateSigningRequest,
        issuer: IssuerCredentials,
        serial: int,
        validity_days: int,
        extensions: ExtensionSet,
        not_before: Optional[datetime.datetime] = None,
        role=None
    ) -> x509.Certificate:
        """Issue a certificate for the subject and key presented in a CSR"""
        if not csr.is_signature_valid:
            raise IssuanceError("CSR signature does not verify under its own public key", role=role, step="csr")

        self._check_issuer(issuer, role)
        return self._sign(
            subject=csr.subject,
            public_key=csr.public_key(),
            issuer_name=issuer.certificate.subject,
            issuer_public_key=issuer.certificate.public_key(),
            issuer_serial=issuer.certificate.serial_number,
            signing_key=issuer.private_key,
            issuer_not_after=issuer.certificate.not_valid_after_utc,
            serial=serial,
            validity_days=validity_days,
            extensions=extensions,
            not_before=not_before,
            role=role
        )

    def _check_issuer(self, issuer: IssuerCredentials, role) -> None:
        match = validate_private_key_certificate_match(issuer.private_key, issuer.certificate)
        if not match.is_valid:
            raise IssuanceError(
                f"Issuer private key does not match issuer certificate "
                f"{format_name(issuer.certificate.subject)}: {match.error}",
                role=role,
                step="issue"
            )

        try:
            constraints = issuer.certificate.extensions.get_extension_for_class(x509.BasicConstraints).value
        except x509.ExtensionNotFound:
            constraints = None
        if constraints is None or not constraints.ca:
            raise IssuanceError(
                f"Issuer {format_name(issuer.certificate.subject)} is not a certificate authority",
                role=role,
                step="issue"
            )

    def _sign(
        self,
        subject: x509.Name,
        public_key,
        issuer_name: x509.Name,
        issuer_public_key,
        issuer_serial: int,
        signing_key,
        issuer_not_after: Optional[datetime.datetime],
        serial: int,
        validity_days: int,
        extensions: ExtensionSet,
        not_before: Optional[datetime.datetime],
        role
    ) -> x509.Certificate:
        if validity_days <= 0:
            raise IssuanceError(f"Validity must be positive, got {validity_days} days", role=role, step="issue")
        if serial <= 0:
            raise IssuanceError(f"Serial number must be positive, got {serial}", role=role, step="issue")

        # Certificate times are encoded with second precision
        not_before = (not_before or datetime.datetime.now(datetime.timezone.utc)).replace(microsecond=0)
        not_after = not_before + datetime.timedelta(days=validity_days)

        if issuer_not_after is not None and not_after > issuer_not_after:
            raise IssuanceError(
                f"Requested notAfter {not_after.isoformat()} exceeds issuer notAfter {issuer_not_after.isoformat()}",
                role=role,
                step="issue"
            )

        logger.debug(f"Signing {format_name(subject)}")
        logger.debug(f"  issuer: {format_name(issuer_name)}")
        logger.debug(f"  serial: {serial}, validity: {validity_days} days, notAfter: {not_after.isoformat()}")

        builder = x509.CertificateBuilder().subject_name(
            subject
        ).issuer_name(
            issuer_name
        ).public_key(
            public_key
        ).serial_number(
            serial
        ).not_valid_before(
            not_before
        ).not_valid_after(
            not_after
        )

        for extension, critical in extensions.build(public_key, issuer_public_key, issuer_name, issuer_serial):
            builder = builder.add_extension(extension, critical=critical)

        try:
            return builder.sign(signing_key, self.hash_algorithm)
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            raise CryptoProviderError(f"Certificate signing failed: {e}", role=role, step="sign") from e
