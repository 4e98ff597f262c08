# dc_certificates/certificates/validation/chain_validation.py
# Chain assembly and incremental chain-of-trust verification (SMPTE 430-2 profile)

import datetime
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional
from cryptography import x509
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.x509.oid import NameOID, SignatureAlgorithmOID

from ...config import settings
from ..exceptions import VerificationError
from ..extensions import extension_profile
from ..serials import serial_upper_bound
from ..subject import format_name, get_common_name, get_dn_qualifier
from ..types import CertificateRole, IssuerOrder
from ..utils.hashing import compute_certificate_thumbprint
from .models import ValidationResult

logger = logging.getLogger(__name__)

REQUIRED_SUBJECT_ATTRIBUTES = [
    (NameOID.ORGANIZATION_NAME, "O"),
    (NameOID.ORGANIZATIONAL_UNIT_NAME, "OU"),
    (NameOID.COMMON_NAME, "CN"),
    (NameOID.DN_QUALIFIER, "dnQualifier"),
]

@dataclass
class ChainBundle:
    """Certificates ordered root -> intermediate -> leaf"""
    leaf_role: CertificateRole
    roles: List[CertificateRole]
    certificates: List[x509.Certificate]
    results: List[ValidationResult] = field(default_factory=list)

    @property
    def leaf(self) -> x509.Certificate:
        return self.certificates[-1]

    def to_pem(self) -> bytes:
        return b"".join(cert.public_bytes(serialization.Encoding.PEM) for cert in self.certificates)

    @property
    def is_verified(self) -> bool:
        return bool(self.results) and all(result.is_valid for result in self.results)

class ChainAssembler:
    """
    Orders issued certificates into root -> intermediate -> leaf bundles and
    verifies them one link at a time. Each step's trust anchors are exactly
    the prefix validated before it.
    """

    def __init__(self, verification_time: Optional[datetime.datetime] = None, hardware_max: int = None):
        self.verification_time = verification_time
        self.serial_bound = serial_upper_bound(hardware_max or settings.HARDWARE_SERIAL_MAX)

    def assemble(self, certificates: Dict[CertificateRole, x509.Certificate], leaf_role: CertificateRole) -> ChainBundle:
        roles = IssuerOrder.chain_for(leaf_role)
        missing = [role.label for role in roles if role not in certificates]
        if missing:
            raise VerificationError(f"Cannot assemble chain, missing certificates: {missing}", role=leaf_role, step="assemble")

        return ChainBundle(
            leaf_role=leaf_role,
            roles=roles,
            certificates=[certificates[role] for role in roles]
        )

    def assemble_all(self, certificates: Dict[CertificateRole, x509.Certificate]) -> Dict[CertificateRole, ChainBundle]:
        return {leaf: self.assemble(certificates, leaf) for leaf in IssuerOrder.LEAF_ROLES}

    def verify(
        self,
        bundle: ChainBundle,
        issued: Optional[Dict[CertificateRole, x509.Certificate]] = None
    ) -> List[ValidationResult]:
        """
        Verify a bundle incrementally; raises VerificationError at the first broken link.

        Serials are checked for uniqueness against `issued`, every certificate of
        the hierarchy, so a collision between the two leaves is caught even though
        they never share a bundle. Defaults to the bundle itself.
        """
        logger.info(f"=== CHAIN VERIFICATION: {bundle.leaf_role.label} ===")
        bundle.results = []
        now = self.verification_time or datetime.datetime.now(datetime.timezone.utc)
        issued = issued if issued is not None else dict(zip(bundle.roles, bundle.certificates))

        for index, (role, certificate) in enumerate(zip(bundle.roles, bundle.certificates)):
            name = get_common_name(certificate.subject) or format_name(certificate.subject)
            anchors = bundle.certificates[:index]

            try:
                self._verify_unique_serial(certificate, role, name, issued)
                self._verify_profile(certificate, role, name)
                if index == 0:
                    self._verify_self_signed(certificate, role, name)
                else:
                    self._verify_link(bundle, index, role, certificate, name)
                self._verify_time(certificate, role, name, now)
            except VerificationError as e:
                bundle.results.append(ValidationResult(
                    is_valid=False,
                    validation_type="Certificate Chain",
                    description=f"{role.label} against {len(anchors)} anchor(s)",
                    certificate_1=name,
                    error=e.message,
                    details={"role": role.tag, "step": e.step}
                ))
                logger.warning(f"❌ {role.label} ({name}) FAILED: {e.message}")
                raise

            bundle.results.append(ValidationResult(
                is_valid=True,
                validation_type="Certificate Chain",
                description=f"{role.label} against {len(anchors)} anchor(s)",
                certificate_1=name,
                certificate_2=get_common_name(certificate.issuer) or "",
                details={"role": role.tag, "serialNumber": certificate.serial_number}
            ))
            logger.info(f"✅ {role.label} ({name}) verified against {len(anchors)} anchor(s)")

        return bundle.results

    def _verify_unique_serial(
        self,
        certificate: x509.Certificate,
        role: CertificateRole,
        name: str,
        issued: Dict[CertificateRole, x509.Certificate]
    ) -> None:
        """A serial may not repeat any certificate issued before this one"""
        position = IssuerOrder.ISSUANCE_ORDER.index(role)
        for earlier in IssuerOrder.ISSUANCE_ORDER[:position]:
            other = issued.get(earlier)
            if other is not None and other.serial_number == certificate.serial_number:
                raise VerificationError(
                    f"Serial {certificate.serial_number} reused by {earlier.label} and {role.label}",
                    role=role,
                    step="serial uniqueness",
                    certificate_name=name
                )

    def _verify_profile(self, certificate: x509.Certificate, role: CertificateRole, name: str) -> None:
        """Per-certificate SMPTE 430-2 checks"""

        def fail(step: str, message: str):
            raise VerificationError(message, role=role, step=step, certificate_name=name)

        if certificate.version != x509.Version.v3:
            fail("version", f"{name}: expected X.509 v3, got {certificate.version.name}")

        public_key = certificate.public_key()
        if not isinstance(public_key, rsa.RSAPublicKey):
            fail("public key", f"{name}: public key is {type(public_key).__name__}, expected RSA")
        if public_key.key_size != settings.KEY_SIZE:
            fail("public key", f"{name}: RSA key size {public_key.key_size}, expected {settings.KEY_SIZE}")
        if public_key.public_numbers().e != settings.PUBLIC_EXPONENT:
            fail("public key", f"{name}: public exponent {public_key.public_numbers().e}, expected {settings.PUBLIC_EXPONENT}")

        if certificate.signature_algorithm_oid != SignatureAlgorithmOID.RSA_WITH_SHA256:
            fail("signature algorithm", f"{name}: signature algorithm {certificate.signature_algorithm_oid.dotted_string}, expected sha256WithRSAEncryption")

        if not 0 < certificate.serial_number < self.serial_bound:
            fail("serial", f"{name}: serial {certificate.serial_number} outside (0, {self.serial_bound})")

        for oid, label in REQUIRED_SUBJECT_ATTRIBUTES:
            if not certificate.subject.get_attributes_for_oid(oid):
                fail("subject", f"{name}: subject lacks {label}")

        common_name = get_common_name(certificate.subject)
        if not common_name.startswith(role.cn_prefix):
            fail("subject", f"{name}: CommonName does not start with '{role.cn_prefix}' for {role.label}")

        dn_qualifier = get_dn_qualifier(certificate.subject)
        thumbprint = compute_certificate_thumbprint(certificate)
        if dn_qualifier != thumbprint.b64:
            fail("dnQualifier", f"{name}: dnQualifier '{dn_qualifier}' does not match public key thumbprint '{thumbprint.b64}'")

        profile = extension_profile(role)
        extensions = certificate.extensions

        try:
            basic_constraints = extensions.get_extension_for_class(x509.BasicConstraints)
        except x509.ExtensionNotFound:
            fail("basicConstraints", f"{name}: basicConstraints missing")
        if not basic_constraints.critical:
            fail("basicConstraints", f"{name}: basicConstraints not critical")
        if basic_constraints.value.ca != profile.ca or basic_constraints.value.path_length != profile.path_length:
            fail(
                "basicConstraints",
                f"{name}: basicConstraints CA:{basic_constraints.value.ca} pathlen:{basic_constraints.value.path_length}, "
                f"{role.label} requires CA:{profile.ca} pathlen:{profile.path_length}"
            )

        try:
            key_usage = extensions.get_extension_for_class(x509.KeyUsage)
        except x509.ExtensionNotFound:
            fail("keyUsage", f"{name}: keyUsage missing")
        if not key_usage.critical:
            fail("keyUsage", f"{name}: keyUsage not critical")
        if key_usage.value != profile.key_usage:
            fail("keyUsage", f"{name}: keyUsage does not match {role.label} profile ({', '.join(profile.key_usage_names())})")

        try:
            subject_key_id = extensions.get_extension_for_class(x509.SubjectKeyIdentifier).value
        except x509.ExtensionNotFound:
            fail("subjectKeyIdentifier", f"{name}: subjectKeyIdentifier missing")
        if subject_key_id.digest != x509.SubjectKeyIdentifier.from_public_key(public_key).digest:
            fail("subjectKeyIdentifier", f"{name}: subjectKeyIdentifier is not the hash of its public key")

        try:
            extensions.get_extension_for_class(x509.AuthorityKeyIdentifier)
        except x509.ExtensionNotFound:
            fail("authorityKeyIdentifier", f"{name}: authorityKeyIdentifier missing")

    def _verify_self_signed(self, certificate: x509.Certificate, role: CertificateRole, name: str) -> None:
        if certificate.issuer != certificate.subject:
            raise VerificationError(
                f"{name}: root is not self-signed (issuer {format_name(certificate.issuer)})",
                role=role, step="self-signed", certificate_name=name
            )
        self._verify_issued_by(certificate, certificate, role, name)

    def _verify_link(self, bundle: ChainBundle, index: int, role: CertificateRole, certificate: x509.Certificate, name: str) -> None:
        anchors = bundle.certificates[:index]
        issuer_index = next(
            (i for i in range(len(anchors) - 1, -1, -1) if anchors[i].subject == certificate.issuer),
            None
        )
        if issuer_index is None:
            raise VerificationError(
                f"{name}: issuer {format_name(certificate.issuer)} not found among {len(anchors)} trusted anchor(s)",
                role=role, step="issuer lookup", certificate_name=name
            )
        issuer_certificate = anchors[issuer_index]
        issuer_role = bundle.roles[issuer_index]

        issuer_constraints = self._issuer_extension(issuer_certificate, x509.BasicConstraints, role, name)
        issuer_usage = self._issuer_extension(issuer_certificate, x509.KeyUsage, role, name)
        if not issuer_constraints.ca or not issuer_usage.key_cert_sign:
            raise VerificationError(
                f"{name}: issuer {issuer_role.label} is not allowed to sign certificates",
                role=role, step="issuer", certificate_name=name
            )

        # Every CA above this certificate limits how many intermediates may follow it
        for anchor_index in range(index):
            constraints = bundle.certificates[anchor_index].extensions.get_extension_for_class(x509.BasicConstraints).value
            following = index - anchor_index - 1
            if constraints.path_length is not None and following > constraints.path_length:
                raise VerificationError(
                    f"{name}: path length {following} exceeds pathlen {constraints.path_length} of {bundle.roles[anchor_index].label}",
                    role=role, step="pathlen", certificate_name=name
                )

        self._verify_issued_by(certificate, issuer_certificate, role, name)

        authority_key_id = certificate.extensions.get_extension_for_class(x509.AuthorityKeyIdentifier).value
        issuer_key_id = issuer_certificate.extensions.get_extension_for_class(x509.SubjectKeyIdentifier).value
        if authority_key_id.key_identifier != issuer_key_id.digest:
            raise VerificationError(
                f"{name}: authorityKeyIdentifier does not match {issuer_role.label} subjectKeyIdentifier",
                role=role, step="authorityKeyIdentifier", certificate_name=name
            )
        if (authority_key_id.authority_cert_serial_number is not None
                and authority_key_id.authority_cert_serial_number != issuer_certificate.serial_number):
            raise VerificationError(
                f"{name}: authorityKeyIdentifier names issuer serial {authority_key_id.authority_cert_serial_number}, "
                f"{issuer_role.label} has {issuer_certificate.serial_number}",
                role=role, step="authorityKeyIdentifier", certificate_name=name
            )

        if certificate.not_valid_after_utc > issuer_certificate.not_valid_after_utc:
            raise VerificationError(
                f"{name}: notAfter {certificate.not_valid_after_utc.isoformat()} outlives "
                f"{issuer_role.label} notAfter {issuer_certificate.not_valid_after_utc.isoformat()}",
                role=role, step="validity nesting", certificate_name=name
            )

    def _issuer_extension(self, issuer_certificate: x509.Certificate, extension_class, role: CertificateRole, name: str):
        try:
            return issuer_certificate.extensions.get_extension_for_class(extension_class).value
        except x509.ExtensionNotFound:
            raise VerificationError(
                f"{name}: issuer lacks {extension_class.__name__}",
                role=role, step="issuer", certificate_name=name
            )

    def _verify_issued_by(self, certificate: x509.Certificate, issuer_certificate: x509.Certificate, role: CertificateRole, name: str) -> None:
        """Verify the certificate signature under the issuer's RSA key (PKCS#1 v1.5)"""
        issuer_public_key = issuer_certificate.public_key()
        try:
            issuer_public_key.verify(
                certificate.signature,
                certificate.tbs_certificate_bytes,
                padding.PKCS1v15(),
                certificate.signature_hash_algorithm
            )
        except InvalidSignature:
            raise VerificationError(
                f"{name}: invalid signature - cryptographic verification against "
                f"{get_common_name(issuer_certificate.subject)} failed",
                role=role, step="signature", certificate_name=name
            )

    def _verify_time(self, certificate: x509.Certificate, role: CertificateRole, name: str, now: datetime.datetime) -> None:
        if not certificate.not_valid_before_utc <= now <= certificate.not_valid_after_utc:
            raise VerificationError(
                f"{name}: not valid at {now.isoformat()} "
                f"({certificate.not_valid_before_utc.isoformat()} - {certificate.not_valid_after_utc.isoformat()})",
                role=role, step="validity", certificate_name=name
            )
