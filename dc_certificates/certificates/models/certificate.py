# dc_certificates/certificates/models/certificate.py

from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from cryptography import x509

from ...services.file_naming_service import ArtifactType, get_standard_filename
from ..extensions import extension_profile
from ..subject import format_name
from ..utils.hashing import generate_certificate_fingerprint

class ChainRequest(BaseModel):
    """Chain build request"""
    domain: str = Field(..., description="Domain with at least two labels, e.g. example.org")

class CertificateInfoModel(BaseModel):
    """Certificate information model"""
    role: str
    label: str
    filename: str
    subject: str
    issuer: str
    serial_number: int
    not_valid_before: str
    not_valid_after: str
    is_ca: bool
    path_length: Optional[int] = None
    key_usage: List[str] = Field(default_factory=list)
    thumbprint_b64: str
    thumbprint_hex: str
    fingerprint_sha256: str
    certificate_pem: str

class ChainVerificationModel(BaseModel):
    """Verification outcome for one bundle"""
    leaf_role: str
    filename: str
    verified: bool
    chain_pem: str
    steps: List[Dict[str, Any]] = Field(default_factory=list)
    error: Optional[str] = None

class ChainBuildResponse(BaseModel):
    """Chain build response model"""
    success: bool
    domain: str
    generated: str
    certificates: List[CertificateInfoModel] = Field(default_factory=list)
    chains: List[ChainVerificationModel] = Field(default_factory=list)
    report: List[str] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)

# Conversion functions between build results and API models

def issued_to_api_model(domain: str, issued) -> CertificateInfoModel:
    """Convert one IssuedCertificate to its API model"""
    certificate = issued.certificate
    constraints = certificate.extensions.get_extension_for_class(x509.BasicConstraints).value

    return CertificateInfoModel(
        role=issued.role.tag,
        label=issued.role.label,
        filename=get_standard_filename(domain, issued.role, ArtifactType.CERTIFICATE),
        subject=format_name(certificate.subject),
        issuer=format_name(certificate.issuer),
        serial_number=certificate.serial_number,
        not_valid_before=certificate.not_valid_before_utc.isoformat(),
        not_valid_after=certificate.not_valid_after_utc.isoformat(),
        is_ca=constraints.ca,
        path_length=constraints.path_length,
        key_usage=extension_profile(issued.role).key_usage_names(),
        thumbprint_b64=issued.thumbprint.b64,
        thumbprint_hex=issued.thumbprint.hex,
        fingerprint_sha256=generate_certificate_fingerprint(certificate),
        certificate_pem=issued.certificate_pem().decode("ascii")
    )

def result_to_api_model(result, generated: str) -> ChainBuildResponse:
    """Convert a ChainBuildResult to the API response (never includes private keys)"""
    domain = result.hierarchy.domain
    chains = []

    for leaf_role, bundle in result.bundles.items():
        failing = next((r for r in bundle.results if not r.is_valid), None)
        chains.append(ChainVerificationModel(
            leaf_role=leaf_role.tag,
            filename=get_standard_filename(domain, leaf_role, ArtifactType.CHAIN),
            verified=bundle.is_verified,
            chain_pem=bundle.to_pem().decode("ascii"),
            steps=[validation.to_dict() for validation in bundle.results],
            error=failing.error if failing else None
        ))

    return ChainBuildResponse(
        success=result.verified,
        domain=domain,
        generated=generated,
        certificates=[issued_to_api_model(domain, issued) for issued in result.hierarchy.ordered()],
        chains=chains,
        report=result.report,
        errors=[str(error) for error in result.errors]
    )
