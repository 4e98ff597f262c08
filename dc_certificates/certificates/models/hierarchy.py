# dc_certificates/certificates/models/hierarchy.py
# In-memory results of a chain build

import datetime
from dataclasses import dataclass, field
from typing import Dict, List, Optional
from cryptography import x509
from cryptography.hazmat.primitives import serialization

from ..keys import KeyPair
from ..types import CertificateRole
from ..utils.hashing import Thumbprint

@dataclass
class IssuedCertificate:
    """Everything produced for one role"""
    role: CertificateRole
    key_pair: KeyPair
    thumbprint: Thumbprint
    certificate: x509.Certificate
    csr: Optional[x509.CertificateSigningRequest] = None

    @property
    def serial_number(self) -> int:
        return self.certificate.serial_number

    def certificate_pem(self) -> bytes:
        return self.certificate.public_bytes(serialization.Encoding.PEM)

    def csr_pem(self) -> Optional[bytes]:
        if self.csr is None:
            return None
        return self.csr.public_bytes(serialization.Encoding.PEM)

@dataclass
class CertificateHierarchy:
    """The four issued certificates of one domain"""
    domain: str
    serials: Dict[CertificateRole, int]
    issued_at: datetime.datetime
    issued: Dict[CertificateRole, IssuedCertificate] = field(default_factory=dict)

    def certificates(self) -> Dict[CertificateRole, x509.Certificate]:
        return {role: item.certificate for role, item in self.issued.items()}

    def ordered(self) -> List[IssuedCertificate]:
        return [self.issued[role] for role in CertificateRole if role in self.issued]

    def __getitem__(self, role: CertificateRole) -> IssuedCertificate:
        return self.issued[role]
