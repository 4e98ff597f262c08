# tests/conftest.py
"""
Shared fixtures: one fully built hierarchy per session, reused read-only
by every suite that only needs to inspect certificates.
"""

import pytest

from dc_certificates.certificates.issuer import CertificateIssuer
from dc_certificates.certificates.keys import generate_key_pair
from dc_certificates.services.chain_builder import ChainBuilder

TEST_DOMAIN = "example.org"


@pytest.fixture(scope="session")
def domain():
    return TEST_DOMAIN


@pytest.fixture(scope="session")
def build_result():
    """🏗️ A complete, verified example.org hierarchy"""
    return ChainBuilder().build(TEST_DOMAIN)


@pytest.fixture(scope="session")
def hierarchy(build_result):
    return build_result.hierarchy


@pytest.fixture(scope="session")
def spare_key_pairs():
    """🔑 Keys not used by the shared hierarchy"""
    return [generate_key_pair() for _ in range(2)]


@pytest.fixture
def issuer():
    return CertificateIssuer()
