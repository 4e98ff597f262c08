# dc_certificates/certificates/types.py
# Certificate role definitions for the fixed SMPTE 430-2 four-certificate topology

from enum import Enum
from typing import List, Optional

class CertificateRole(Enum):
    """Certificate roles with file tag, CommonName prefix and hierarchy depth"""
    ROOT = ("ca0", ".ca0.", 0)
    INTERMEDIATE = ("ca1", ".ca1.", 1)
    SIGNER = ("cs", "CS.", 2)
    TARGET = ("sm", "SM.", 2)

    def __init__(self, tag: str, cn_prefix: str, depth: int):
        self.tag = tag
        self.cn_prefix = cn_prefix
        self.depth = depth

    @property
    def label(self) -> str:
        return DisplayLabels.get_label(self)

    @property
    def is_authority(self) -> bool:
        return self in (CertificateRole.ROOT, CertificateRole.INTERMEDIATE)

    @property
    def issuing_role(self) -> Optional["CertificateRole"]:
        """Role whose key signs this role's certificate (None for the self-signed root)"""
        return IssuerOrder.ISSUERS.get(self)

    def common_name(self, domain: str) -> str:
        return f"{self.cn_prefix}{domain}"

class DisplayLabels:
    """Human-readable labels used in reports"""
    LABELS = {
        CertificateRole.ROOT: "CA 0",
        CertificateRole.INTERMEDIATE: "CA 1",
        CertificateRole.SIGNER: "Signer",
        CertificateRole.TARGET: "Target/Lab",
    }

    @classmethod
    def get_label(cls, role: CertificateRole) -> str:
        return cls.LABELS.get(role, role.name)

class IssuerOrder:
    """Issuance dependency order: every role is signed by the previously issued authority"""
    ISSUERS = {
        CertificateRole.ROOT: None,
        CertificateRole.INTERMEDIATE: CertificateRole.ROOT,
        CertificateRole.SIGNER: CertificateRole.INTERMEDIATE,
        CertificateRole.TARGET: CertificateRole.INTERMEDIATE,
    }

    ISSUANCE_ORDER = [
        CertificateRole.ROOT,
        CertificateRole.INTERMEDIATE,
        CertificateRole.SIGNER,
        CertificateRole.TARGET,
    ]

    LEAF_ROLES = [CertificateRole.SIGNER, CertificateRole.TARGET]

    @classmethod
    def chain_for(cls, leaf: CertificateRole) -> List[CertificateRole]:
        """Roles from root down to the given role"""
        chain = []
        current = leaf
        while current is not None:
            chain.append(current)
            current = cls.ISSUERS[current]
        chain.reverse()
        return chain
