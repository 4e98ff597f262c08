# dc_certificates/certificates/extensions.py
# Per-role X.509v3 extension profiles

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple
from cryptography import x509

from .types import CertificateRole

logger = logging.getLogger(__name__)

# Criticality shared by issued certificates and the archived [ v3_ca ] configs
CRITICAL_EXTENSIONS = {
    x509.BasicConstraints: True,
    x509.KeyUsage: True,
    x509.SubjectKeyIdentifier: False,
    x509.AuthorityKeyIdentifier: False,
}

@dataclass(frozen=True)
class ExtensionSet:
    """Fixed extension bundle for one certificate role"""
    ca: bool
    path_length: Optional[int]
    key_cert_sign: bool
    crl_sign: bool
    digital_signature: bool
    key_encipherment: bool

    @property
    def basic_constraints(self) -> x509.BasicConstraints:
        return x509.BasicConstraints(ca=self.ca, path_length=self.path_length)

    @property
    def key_usage(self) -> x509.KeyUsage:
        return x509.KeyUsage(
            digital_signature=self.digital_signature,
            content_commitment=False,
            key_encipherment=self.key_encipherment,
            data_encipherment=False,
            key_agreement=False,
            key_cert_sign=self.key_cert_sign,
            crl_sign=self.crl_sign,
            encipher_only=False,
            decipher_only=False
        )

    def key_usage_names(self) -> List[str]:
        names = []
        if self.digital_signature:
            names.append("digitalSignature")
        if self.key_encipherment:
            names.append("keyEncipherment")
        if self.key_cert_sign:
            names.append("keyCertSign")
        if self.crl_sign:
            names.append("cRLSign")
        return names

    def build(
        self,
        public_key,
        issuer_public_key,
        issuer_name: x509.Name,
        issuer_serial: int
    ) -> List[Tuple[x509.ExtensionType, bool]]:
        """
        Concrete (extension, critical) pairs for a certificate.

        The subject key identifier hashes the certificate's own key; the
        authority key identifier carries the issuer's key id plus the issuer
        name and serial (keyid:always,issuer:always). For the self-signed root
        the issuer values are its own.
        """
        authority_key_id = x509.AuthorityKeyIdentifier.from_issuer_public_key(issuer_public_key)

        return [
            (self.basic_constraints, CRITICAL_EXTENSIONS[x509.BasicConstraints]),
            (self.key_usage, CRITICAL_EXTENSIONS[x509.KeyUsage]),
            (x509.SubjectKeyIdentifier.from_public_key(public_key), CRITICAL_EXTENSIONS[x509.SubjectKeyIdentifier]),
            (
                x509.AuthorityKeyIdentifier(
                    key_identifier=authority_key_id.key_identifier,
                    authority_cert_issuer=[x509.DirectoryName(issuer_name)],
                    authority_cert_serial_number=issuer_serial
                ),
                CRITICAL_EXTENSIONS[x509.AuthorityKeyIdentifier]
            ),
        ]

    def to_openssl_config(self, role: CertificateRole) -> str:
        """OpenSSL style [ v3_ca ] section describing this profile, archived next to the CSRs"""
        if self.ca:
            basic = f"CA:true,pathlen:{self.path_length}"
            authority = "keyid:always,issuer:always"
        else:
            basic = "CA:false"
            authority = "keyid,issuer:always"
        usage = ",".join(self.key_usage_names())

        lines = [
            f"# {role.label} ({role.tag})",
            "[ v3_ca ]",
        ]
        if not self.ca:
            lines.append("# See SMPTE 430-2-2006 section 6.2 Validation Rules - Check 5")
        lines.extend([
            f"basicConstraints = {_openssl_value(basic, x509.BasicConstraints)}",
            f"keyUsage = {_openssl_value(usage, x509.KeyUsage)}",
            "subjectKeyIdentifier = hash",
            f"authorityKeyIdentifier = {authority}",
        ])
        return "\n".join(lines) + "\n"

def _openssl_value(value: str, extension_class) -> str:
    return f"critical,{value}" if CRITICAL_EXTENSIONS[extension_class] else value

AUTHORITY_KEY_USAGE = dict(key_cert_sign=True, crl_sign=True, digital_signature=False, key_encipherment=False)
LEAF_KEY_USAGE = dict(key_cert_sign=False, crl_sign=False, digital_signature=True, key_encipherment=True)

PROFILES = {
    CertificateRole.ROOT: ExtensionSet(ca=True, path_length=3, **AUTHORITY_KEY_USAGE),
    CertificateRole.INTERMEDIATE: ExtensionSet(ca=True, path_length=2, **AUTHORITY_KEY_USAGE),
    CertificateRole.SIGNER: ExtensionSet(ca=False, path_length=None, **LEAF_KEY_USAGE),
    CertificateRole.TARGET: ExtensionSet(ca=False, path_length=None, **LEAF_KEY_USAGE),
}

def extension_profile(role: CertificateRole) -> ExtensionSet:
    """Extension set for a role"""
    return PROFILES[role]
