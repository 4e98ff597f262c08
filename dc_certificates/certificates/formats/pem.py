# dc_certificates/certificates/formats/pem.py
# Certificate loading (PEM, PEM chains, DER) and thumbprint inspection

import logging
from typing import Any, Dict, List
from cryptography import x509

from ..exceptions import CryptoProviderError
from ..subject import format_name, get_dn_qualifier
from ..utils.hashing import compute_certificate_thumbprint

logger = logging.getLogger(__name__)

def load_certificates(file_content: bytes) -> List[x509.Certificate]:
    """Load every certificate from PEM (single or chain) or DER content"""
    logger.debug(f"File content length: {len(file_content)} bytes")

    cert_blocks = file_content.count(b"-----BEGIN CERTIFICATE-----")
    try:
        if cert_blocks:
            logger.debug(f"Certificate blocks found: {cert_blocks}")
            return x509.load_pem_x509_certificates(file_content)

        logger.debug("No PEM header, trying DER")
        return [x509.load_der_x509_certificate(file_content)]
    except ValueError as e:
        raise CryptoProviderError(f"Unable to load certificate: {e}", step="certificate load") from e

def describe_thumbprint(certificate: x509.Certificate) -> Dict[str, Any]:
    """Subject, public key thumbprint and whether the subject's dnQualifier carries it"""
    thumbprint = compute_certificate_thumbprint(certificate)
    dn_qualifier = get_dn_qualifier(certificate.subject)

    return {
        "subject": format_name(certificate.subject),
        "thumbprint_b64": thumbprint.b64,
        "thumbprint_hex": thumbprint.hex,
        "dn_qualifier": dn_qualifier,
        "dn_qualifier_matches": dn_qualifier == thumbprint.b64 if dn_qualifier is not None else None
    }
