# dc_certificates/services/file_naming_service.py
"""
File naming for generated artifacts: <domain>.<role tag>.<extension>
"""

import logging
from enum import Enum

from ..certificates.types import CertificateRole

logger = logging.getLogger(__name__)

class ArtifactType(Enum):
    """Artifact kinds with extension and storage subdirectory"""
    PRIVATE_KEY = ("key", "")
    CERTIFICATE = ("pem", "")
    CSR = ("csr", "csrs")
    CONFIG = ("cnf", "confs")
    CHAIN = ("chain.cert", "")

    def __init__(self, extension: str, subdirectory: str):
        self.extension = extension
        self.subdirectory = subdirectory

def get_standard_filename(domain: str, role: CertificateRole, artifact: ArtifactType) -> str:
    """
    Get standardized filename for an artifact, without its subdirectory.
    """
    if artifact == ArtifactType.CSR and role == CertificateRole.ROOT:
        # The root is self-signed directly from its key
        raise ValueError("The root certificate has no CSR")

    if artifact == ArtifactType.CHAIN and role.is_authority:
        raise ValueError(f"Chains end at a leaf, not at {role.label}")

    filename = f"{domain}.{role.tag}.{artifact.extension}"
    logger.debug(f"Standard filename for {role.name}/{artifact.name}: {filename}")
    return filename

def get_relative_path(domain: str, role: CertificateRole, artifact: ArtifactType) -> str:
    """Filename prefixed with the artifact's storage subdirectory"""
    filename = get_standard_filename(domain, role, artifact)
    if artifact.subdirectory:
        return f"{artifact.subdirectory}/{filename}"
    return filename

def get_report_filename(domain: str) -> str:
    return f"{domain}.report.txt"
