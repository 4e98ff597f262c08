# dc_certificates/services/chain_builder.py
"""
Chain build pipeline.

Serials are allocated once up front, then for each role in dependency order
(root, intermediate, signer, target): key pair -> thumbprint -> subject ->
extension profile -> issuance, every certificate after the root being signed
by the previously issued authority. The two leaf chains are then assembled
and verified link by link.
"""

import datetime
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from ..config import settings
from ..certificates.exceptions import CertificateChainError, VerificationError
from ..certificates.extensions import extension_profile
from ..certificates.issuer import SELF_SIGNED, CertificateIssuer, IssuerCredentials
from ..certificates.keys import KeyPair, generate_key_pair
from ..certificates.models.hierarchy import CertificateHierarchy, IssuedCertificate
from ..certificates.serials import SerialAllocator
from ..certificates.storage.key_store import KeyStore
from ..certificates.subject import build_subject, get_common_name, validate_domain
from ..certificates.types import CertificateRole, IssuerOrder
from ..certificates.utils.hashing import compute_public_key_thumbprint
from ..certificates.validation.chain_validation import ChainAssembler, ChainBundle
from ..certificates.validation.private_key_cert import validate_private_key_certificate_match
from .file_naming_service import ArtifactType
from .report_generator import render_report

logger = logging.getLogger(__name__)

@dataclass
class ChainBuildResult:
    """Hierarchy, assembled bundles and verification outcome of one build"""
    hierarchy: CertificateHierarchy
    bundles: Dict[CertificateRole, ChainBundle]
    errors: List[VerificationError] = field(default_factory=list)
    report: List[str] = field(default_factory=list)

    @property
    def verified(self) -> bool:
        return not self.errors and all(bundle.is_verified for bundle in self.bundles.values())

class ChainBuilder:
    """Builds one SMPTE 430-2 hierarchy per call; instances hold no state between builds"""

    def __init__(
        self,
        issuer: Optional[CertificateIssuer] = None,
        allocator_factory: Callable[[], SerialAllocator] = SerialAllocator,
        key_generator: Callable[..., KeyPair] = generate_key_pair,
        root_validity_days: Optional[int] = None,
        clock: Optional[Callable[[], datetime.datetime]] = None
    ):
        self.issuer = issuer or CertificateIssuer()
        self.allocator_factory = allocator_factory
        self.key_generator = key_generator
        self.root_validity_days = root_validity_days or settings.ROOT_VALIDITY_DAYS
        self.clock = clock or (lambda: datetime.datetime.now(datetime.timezone.utc))

    def validity_days(self, role: CertificateRole) -> int:
        """Root gets N days, each descendant N - depth, so no child outlives its parent"""
        return self.root_validity_days - role.depth

    def build_hierarchy(self, domain: str) -> CertificateHierarchy:
        """Issue the four certificates; any failure aborts the remaining steps"""
        validate_domain(domain)
        logger.info(f"=== BUILDING SMPTE 430-2 HIERARCHY FOR {domain} ===")

        # One allocator per build keeps independent builds uncorrelated
        serials = self.allocator_factory().allocate()
        issued_at = self.clock().replace(microsecond=0)
        hierarchy = CertificateHierarchy(domain=domain, serials=serials, issued_at=issued_at)

        for role in IssuerOrder.ISSUANCE_ORDER:
            try:
                hierarchy.issued[role] = self._issue_role(hierarchy, role)
            except CertificateChainError as e:
                if e.role is None:
                    e.role = role
                logger.error(f"Issuance aborted at {role.label}: {e}")
                raise

        return hierarchy

    def _issue_role(self, hierarchy: CertificateHierarchy, role: CertificateRole) -> IssuedCertificate:
        logger.info(f"Generating {role.tag} key...")
        key_pair = self.key_generator(role=role)

        thumbprint = compute_public_key_thumbprint(key_pair.public_key)
        logger.info(f"{role.label} dnQualifier: {thumbprint.b64}")

        subject = build_subject(role, hierarchy.domain, thumbprint.b64)
        extensions = extension_profile(role)
        serial = hierarchy.serials[role]
        validity_days = self.validity_days(role)

        issuing_role = role.issuing_role
        if issuing_role is None:
            logger.info(f"Generating {role.tag} certificate (self-signed)...")
            certificate = self.issuer.issue(
                key_pair, subject, SELF_SIGNED, serial, validity_days, extensions,
                not_before=hierarchy.issued_at, role=role
            )
            return IssuedCertificate(role, key_pair, thumbprint, certificate)

        authority = hierarchy.issued[issuing_role]
        credentials = IssuerCredentials(authority.certificate, authority.key_pair.private_key)

        logger.info(f"Generating {role.tag} CSR...")
        csr = self.issuer.create_csr(key_pair, subject, role=role)

        logger.info(f"Generating {role.tag} certificate (signed by {issuing_role.label})...")
        certificate = self.issuer.issue_from_csr(
            csr, credentials, serial, validity_days, extensions,
            not_before=hierarchy.issued_at, role=role
        )
        return IssuedCertificate(role, key_pair, thumbprint, certificate, csr)

    def assemble_and_verify(
        self,
        hierarchy: CertificateHierarchy,
        verification_time: Optional[datetime.datetime] = None
    ) -> ChainBuildResult:
        """Assemble both leaf chains and verify each; a broken chain does not stop the other"""
        assembler = ChainAssembler(verification_time=verification_time)
        certificates = hierarchy.certificates()
        bundles = assembler.assemble_all(certificates)
        result = ChainBuildResult(hierarchy=hierarchy, bundles=bundles)

        for leaf_role, bundle in bundles.items():
            try:
                assembler.verify(bundle, issued=certificates)
            except VerificationError as e:
                logger.error(f"{leaf_role.label} chain verification failed: {e}")
                result.errors.append(e)

        result.report = render_report(result)
        return result

    def load_hierarchy(self, domain: str, key_store: KeyStore) -> CertificateHierarchy:
        """Reload a previously written hierarchy; every private key must match its certificate"""
        validate_domain(domain)
        logger.info(f"=== LOADING HIERARCHY FOR {domain} FROM {key_store.root} ===")

        issued = {}
        for role in IssuerOrder.ISSUANCE_ORDER:
            key_pair = key_store.load_key_pair(role)
            certificate = key_store.load_certificate(role)

            match = validate_private_key_certificate_match(key_pair.private_key, certificate)
            if not match.is_valid:
                raise VerificationError(
                    f"{match.error} ({key_store.path_for(role, ArtifactType.PRIVATE_KEY).name})",
                    role=role,
                    step="key match",
                    certificate_name=get_common_name(certificate.subject)
                )

            thumbprint = compute_public_key_thumbprint(key_pair.public_key)
            issued[role] = IssuedCertificate(role, key_pair, thumbprint, certificate)

        root = issued[CertificateRole.ROOT].certificate
        return CertificateHierarchy(
            domain=domain,
            serials={role: item.serial_number for role, item in issued.items()},
            issued_at=root.not_valid_before_utc,
            issued=issued
        )

    def verify_stored(self, domain: str, key_store: KeyStore) -> ChainBuildResult:
        """Re-verify the hierarchy found in a key store and rewrite its report"""
        result = self.assemble_and_verify(self.load_hierarchy(domain, key_store))
        key_store.write_report(result.report)
        return result

    def build(self, domain: str, key_store: Optional[KeyStore] = None) -> ChainBuildResult:
        """Full pipeline: issue, persist, assemble, verify, report"""
        hierarchy = self.build_hierarchy(domain)

        if key_store is not None:
            configs = {role: extension_profile(role).to_openssl_config(role) for role in hierarchy.issued}
            key_store.write_hierarchy(hierarchy, configs)

        result = self.assemble_and_verify(hierarchy)

        if key_store is not None:
            for leaf_role, bundle in result.bundles.items():
                key_store.write_chain(leaf_role, bundle.to_pem())
            key_store.write_report(result.report)

        if result.verified:
            logger.info(f"Hierarchy for {domain} built and verified")
        else:
            logger.warning(f"Hierarchy for {domain} built but {len(result.errors)} chain(s) failed verification")

        return result
