# tests/test_chain_builder.py
"""
Tests for the end to end chain build pipeline and its report
"""

import datetime

import pytest
from cryptography import x509

from dc_certificates.certificates.exceptions import CryptoProviderError, InputError, VerificationError
from dc_certificates.certificates.keys import generate_key_pair
from dc_certificates.certificates.storage.key_store import KeyStore
from dc_certificates.certificates.subject import get_common_name, get_dn_qualifier
from dc_certificates.certificates.types import CertificateRole
from dc_certificates.certificates.utils.hashing import compute_public_key_thumbprint
from dc_certificates.services.chain_builder import ChainBuilder
from dc_certificates.services.file_naming_service import ArtifactType


def key_with_plus_in_thumbprint(role=None):
    """Key whose base64 thumbprint contains '+', a DN special character"""
    for _ in range(64):
        key_pair = generate_key_pair(role=role)
        if "+" in compute_public_key_thumbprint(key_pair.public_key).b64:
            return key_pair
    pytest.fail("No key with '+' in its thumbprint after 64 attempts")


class TestHierarchy:
    """Shape of a freshly built hierarchy"""

    def test_validity_days_staggered_by_depth(self):
        builder = ChainBuilder(root_validity_days=4700)

        assert builder.validity_days(CertificateRole.ROOT) == 4700
        assert builder.validity_days(CertificateRole.INTERMEDIATE) == 4699
        assert builder.validity_days(CertificateRole.SIGNER) == 4698
        assert builder.validity_days(CertificateRole.TARGET) == 4698

    def test_common_names(self, hierarchy):
        names = {role: get_common_name(issued.certificate.subject) for role, issued in hierarchy.issued.items()}

        assert names == {
            CertificateRole.ROOT: ".ca0.example.org",
            CertificateRole.INTERMEDIATE: ".ca1.example.org",
            CertificateRole.SIGNER: "CS.example.org",
            CertificateRole.TARGET: "SM.example.org",
        }

    def test_issuer_relations(self, hierarchy):
        root = hierarchy[CertificateRole.ROOT].certificate
        intermediate = hierarchy[CertificateRole.INTERMEDIATE].certificate

        assert root.issuer == root.subject
        assert intermediate.issuer == root.subject
        assert hierarchy[CertificateRole.SIGNER].certificate.issuer == intermediate.subject
        assert hierarchy[CertificateRole.TARGET].certificate.issuer == intermediate.subject

    def test_dn_qualifiers_carry_thumbprints(self, hierarchy):
        for issued in hierarchy.ordered():
            assert get_dn_qualifier(issued.certificate.subject) == issued.thumbprint.b64

    def test_serials_match_allocation(self, hierarchy):
        for role, issued in hierarchy.issued.items():
            assert issued.serial_number == hierarchy.serials[role]

    def test_shared_not_before_and_nested_not_after(self, hierarchy):
        not_before = {issued.certificate.not_valid_before_utc for issued in hierarchy.ordered()}
        assert not_before == {hierarchy.issued_at}

        root = hierarchy[CertificateRole.ROOT].certificate
        intermediate = hierarchy[CertificateRole.INTERMEDIATE].certificate
        assert root.not_valid_after_utc - root.not_valid_before_utc == datetime.timedelta(days=4700)
        assert intermediate.not_valid_after_utc < root.not_valid_after_utc
        for leaf_role in (CertificateRole.SIGNER, CertificateRole.TARGET):
            assert hierarchy[leaf_role].certificate.not_valid_after_utc < intermediate.not_valid_after_utc

    def test_csrs_for_everything_but_root(self, hierarchy):
        assert hierarchy[CertificateRole.ROOT].csr is None
        for role in (CertificateRole.INTERMEDIATE, CertificateRole.SIGNER, CertificateRole.TARGET):
            assert hierarchy[role].csr.subject == hierarchy[role].certificate.subject

    def test_keys_are_rsa_2048(self, hierarchy):
        for issued in hierarchy.ordered():
            public_key = issued.certificate.public_key()
            assert public_key.key_size == 2048
            assert public_key.public_numbers().e == 65537


class TestBuildPipeline:
    """build(), assemble_and_verify() and error propagation"""

    def test_build_verifies(self, build_result):
        assert build_result.verified
        assert build_result.errors == []
        assert all(bundle.is_verified for bundle in build_result.bundles.values())

    def test_report(self, build_result):
        report = build_result.report

        assert report[0] == "+++ Certificate info +++"
        assert "subject=/O=example.org/OU=example.org/CN=.ca0.example.org/dnQualifier=" + \
            build_result.hierarchy[CertificateRole.ROOT].thumbprint.b64 in report
        assert "example.org.cs.chain.cert:" in report
        assert "example.org.sm.chain.cert:" in report
        assert report.count("example.org.ca0.pem: OK") == 2
        assert report[-1] == "DONE"

    def test_invalid_domain_aborts_before_keys(self):
        calls = []

        def key_generator(role=None):
            calls.append(role)
            return generate_key_pair(role=role)

        with pytest.raises(InputError):
            ChainBuilder(key_generator=key_generator).build_hierarchy("example")

        assert calls == []

    def test_failure_names_the_role(self):
        def key_generator(role=None):
            if role is CertificateRole.TARGET:
                raise CryptoProviderError("provider unavailable", step="key generation")
            return generate_key_pair(role=role)

        with pytest.raises(CryptoProviderError) as exc_info:
            ChainBuilder(key_generator=key_generator).build_hierarchy("example.org")

        assert exc_info.value.role is CertificateRole.TARGET
        assert str(exc_info.value).startswith("[Target/Lab / key generation]")

    def test_verification_failure_collected_per_chain(self, hierarchy):
        result = ChainBuilder().assemble_and_verify(
            hierarchy, verification_time=hierarchy.issued_at + datetime.timedelta(days=5000)
        )

        assert not result.verified
        assert len(result.errors) == 2
        assert result.report[-1] == "FAILED"
        assert any(line.startswith("example.org.ca0.pem: FAILED") for line in result.report)
        assert "example.org.ca1.pem: NOT VERIFIED" in result.report

    def test_thumbprints_with_plus_verify(self):
        """Keys whose dnQualifier contains '+' still build a verified hierarchy"""
        result = ChainBuilder(key_generator=key_with_plus_in_thumbprint).build("example.org")

        assert result.verified
        for issued in result.hierarchy.ordered():
            assert "+" in issued.thumbprint.b64
            assert get_dn_qualifier(issued.certificate.subject) == issued.thumbprint.b64

    def test_build_writes_artifacts(self, tmp_path):
        key_store = KeyStore(tmp_path, "example.org")

        result = ChainBuilder().build("example.org", key_store=key_store)

        written = sorted(key_store.collect())
        assert written == sorted([
            "example.org.ca0.key", "example.org.ca0.pem",
            "example.org.ca1.key", "example.org.ca1.pem", "csrs/example.org.ca1.csr",
            "example.org.cs.key", "example.org.cs.pem", "csrs/example.org.cs.csr",
            "example.org.sm.key", "example.org.sm.pem", "csrs/example.org.sm.csr",
            "confs/example.org.ca0.cnf", "confs/example.org.ca1.cnf",
            "confs/example.org.cs.cnf", "confs/example.org.sm.cnf",
            "example.org.cs.chain.cert", "example.org.sm.chain.cert",
            "example.org.report.txt",
        ])

        chain = x509.load_pem_x509_certificates((tmp_path / "example.org.cs.chain.cert").read_bytes())
        assert [cert.serial_number for cert in chain] == [
            cert.serial_number for cert in result.bundles[CertificateRole.SIGNER].certificates
        ]
        assert (tmp_path / "example.org.report.txt").read_text().splitlines()[-1] == "DONE"


class TestStoredHierarchy:
    """Re-verifying a hierarchy written to disk"""

    @pytest.fixture
    def key_store(self, tmp_path):
        key_store = KeyStore(tmp_path, "example.org")
        ChainBuilder().build("example.org", key_store=key_store)
        return key_store

    def test_stored_hierarchy_verifies(self, key_store):
        result = ChainBuilder().verify_stored("example.org", key_store)

        assert result.verified
        assert key_store.report_path.read_text().splitlines()[-1] == "DONE"

    def test_reloaded_hierarchy_matches_files(self, key_store):
        hierarchy = ChainBuilder().load_hierarchy("example.org", key_store)

        for role in CertificateRole:
            issued = hierarchy[role]
            assert issued.certificate == key_store.load_certificate(role)
            assert get_dn_qualifier(issued.certificate.subject) == issued.thumbprint.b64
            assert hierarchy.serials[role] == issued.certificate.serial_number

    def test_replaced_private_key_rejected(self, key_store, spare_key_pairs):
        key_store.write_artifact(CertificateRole.SIGNER, ArtifactType.PRIVATE_KEY, spare_key_pairs[0].private_pem())

        with pytest.raises(VerificationError) as exc_info:
            ChainBuilder().verify_stored("example.org", key_store)

        assert exc_info.value.step == "key match"
        assert exc_info.value.role is CertificateRole.SIGNER

    def test_missing_files(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ChainBuilder().verify_stored("example.org", KeyStore(tmp_path, "example.org"))
