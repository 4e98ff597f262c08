# dc_certificates/certificates/validation/private_key_cert.py
# Private Key <-> Certificate validation

import logging
from cryptography import x509
from cryptography.hazmat.primitives.asymmetric import rsa
from ..subject import format_name
from .models import ValidationResult

logger = logging.getLogger(__name__)

def validate_private_key_certificate_match(private_key, certificate: x509.Certificate) -> ValidationResult:
    """Validate that a private key matches the public key in a certificate"""
    logger.debug("=== PRIVATE KEY <-> CERTIFICATE VALIDATION ===")

    private_public_key = private_key.public_key()
    cert_public_key = certificate.public_key()
    certificate_name = format_name(certificate.subject)

    if not isinstance(private_public_key, rsa.RSAPublicKey) or not isinstance(cert_public_key, rsa.RSAPublicKey):
        error_msg = (
            f"Algorithm mismatch: Private key has {type(private_public_key).__name__}, "
            f"Certificate has {type(cert_public_key).__name__}"
        )
        logger.warning(error_msg)
        return ValidationResult(
            is_valid=False,
            validation_type="Private Key <-> Certificate",
            certificate_1=certificate_name,
            error=error_msg
        )

    return validate_rsa_keys(private_public_key, cert_public_key, certificate_name)

def validate_rsa_keys(
    private_public_key: rsa.RSAPublicKey,
    cert_public_key: rsa.RSAPublicKey,
    certificate_name: str = ""
) -> ValidationResult:
    """Validate RSA key pair using public_numbers() comparison"""
    private_numbers = private_public_key.public_numbers()
    cert_numbers = cert_public_key.public_numbers()

    modulus_match = private_numbers.n == cert_numbers.n
    exponent_match = private_numbers.e == cert_numbers.e

    logger.debug(f"RSA modulus match: {modulus_match}")
    logger.debug(f"RSA exponent match: {exponent_match}")

    is_valid = modulus_match and exponent_match

    if is_valid:
        logger.debug("RSA key validation (Private Key <-> Certificate): MATCH")
    else:
        logger.warning("RSA key validation (Private Key <-> Certificate): NO MATCH")

    return ValidationResult(
        is_valid=is_valid,
        validation_type="Private Key <-> Certificate",
        certificate_1=certificate_name,
        error=None if is_valid else "Private key does not match certificate public key",
        details={
            "algorithm": "RSA",
            "keySize": private_numbers.n.bit_length(),
            "comparison": {
                "modulus": {"match": modulus_match},
                "exponent": {
                    "privateKey": private_numbers.e,
                    "certificate": cert_numbers.e,
                    "match": exponent_match
                }
            }
        }
    )
