# dc_certificates/certificates/subject.py
# Structured subject DN construction with the embedded public key thumbprint

import base64
import binascii
import logging
import re
import string
from cryptography import x509
from cryptography.x509.oid import NameOID

from .exceptions import DNEncodingError, InputError
from .types import CertificateRole
from .utils.hashing import THUMBPRINT_LENGTH

logger = logging.getLogger(__name__)

# At least two dot separated DNS-style labels, e.g. "example.org"
DOMAIN_PATTERN = re.compile(
    r"^[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?(?:\.[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?)+$"
)

# X.520 dnQualifier is a PrintableString
PRINTABLE_STRING_CHARS = frozenset(string.ascii_letters + string.digits + " '()+,-./:=?")

def validate_domain(domain) -> str:
    """Return the domain unchanged or raise InputError"""
    if not domain or not isinstance(domain, str):
        raise InputError("Domain name required (e.g. 'example.org')", step="input")

    if not DOMAIN_PATTERN.match(domain):
        raise InputError(
            f"Please specify domain name with 2 name components, separated with a period "
            f"(e.g. 'example.org'), got '{domain}'",
            step="input"
        )

    return domain

def validate_dn_qualifier(value: str, role=None) -> str:
    """Check a base64 thumbprint can be carried as a PrintableString dnQualifier"""
    unsafe = sorted(set(value) - PRINTABLE_STRING_CHARS)
    if unsafe:
        raise DNEncodingError(
            f"dnQualifier '{value}' contains characters outside PrintableString: {unsafe}",
            role=role,
            step="subject"
        )

    try:
        decoded = base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DNEncodingError(f"dnQualifier '{value}' is not valid base64: {e}", role=role, step="subject") from e

    if len(decoded) != THUMBPRINT_LENGTH:
        raise DNEncodingError(
            f"dnQualifier '{value}' decodes to {len(decoded)} bytes, expected {THUMBPRINT_LENGTH}",
            role=role,
            step="subject"
        )

    return value

def build_subject(role: CertificateRole, domain: str, thumbprint_b64: str) -> x509.Name:
    """
    Build the role's subject Name: O=domain, OU=domain, CN=<role prefix><domain>,
    dnQualifier=thumbprint.

    Every value goes through x509.NameAttribute so DN special characters in the
    thumbprint ('+', '/', '=') are encoded by the ASN.1 layer, never escaped by hand.
    """
    validate_domain(domain)
    validate_dn_qualifier(thumbprint_b64, role=role)

    subject = x509.Name([
        x509.NameAttribute(NameOID.ORGANIZATION_NAME, domain),
        x509.NameAttribute(NameOID.ORGANIZATIONAL_UNIT_NAME, domain),
        x509.NameAttribute(NameOID.COMMON_NAME, role.common_name(domain)),
        x509.NameAttribute(NameOID.DN_QUALIFIER, thumbprint_b64),
    ])

    carried = get_dn_qualifier(subject)
    if carried != thumbprint_b64:
        raise DNEncodingError(
            f"dnQualifier did not survive DN construction: '{carried}' != '{thumbprint_b64}'",
            role=role,
            step="subject"
        )

    logger.debug(f"{role.label} subject: {format_name(subject)}")
    return subject

def get_dn_qualifier(name: x509.Name):
    """dnQualifier value of a Name, or None"""
    attributes = name.get_attributes_for_oid(NameOID.DN_QUALIFIER)
    return attributes[0].value if attributes else None

def get_common_name(name: x509.Name):
    """CommonName value of a Name, or None"""
    attributes = name.get_attributes_for_oid(NameOID.COMMON_NAME)
    return attributes[0].value if attributes else None

SHORT_NAMES = {
    NameOID.ORGANIZATION_NAME: "O",
    NameOID.ORGANIZATIONAL_UNIT_NAME: "OU",
    NameOID.COMMON_NAME: "CN",
    NameOID.DN_QUALIFIER: "dnQualifier",
}

def format_name(name: x509.Name) -> str:
    """Display form in DN order, e.g. /O=example.org/OU=example.org/CN=.ca0.example.org/dnQualifier=..."""
    return "".join(
        f"/{SHORT_NAMES.get(attribute.oid, attribute.oid.dotted_string)}={attribute.value}"
        for attribute in name
    )
