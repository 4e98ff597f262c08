# dc_certificates/certificates/storage/key_store.py
# Filesystem storage for generated keys, certificates, CSRs and chains

import logging
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, List, Union
from cryptography import x509

from ...services.file_naming_service import ArtifactType, get_relative_path, get_report_filename
from ..exceptions import CryptoProviderError
from ..keys import KeyPair, load_key_pair
from ..models.hierarchy import CertificateHierarchy
from ..types import CertificateRole

logger = logging.getLogger(__name__)

class KeyStore:
    """
    Output directory for one domain's hierarchy.

    Keys and certificates live at the top level, CSRs under csrs/ and
    extension configuration texts under confs/.
    """

    def __init__(self, root: Union[str, Path], domain: str):
        self.root = Path(root)
        self.domain = domain
        self.written: List[Path] = []

    @classmethod
    @contextmanager
    def temporary(cls, domain: str) -> Iterator["KeyStore"]:
        """Key store in a temporary directory removed on exit"""
        temp_dir = tempfile.mkdtemp(prefix="dc_chain_")
        try:
            yield cls(temp_dir, domain)
        finally:
            try:
                shutil.rmtree(temp_dir)
            except OSError as e:
                logger.warning(f"Failed to cleanup temp directory {temp_dir}: {e}")

    def path_for(self, role: CertificateRole, artifact: ArtifactType) -> Path:
        return self.root / get_relative_path(self.domain, role, artifact)

    @property
    def report_path(self) -> Path:
        return self.root / get_report_filename(self.domain)

    def _write(self, path: Path, content: Union[bytes, str]) -> Path:
        if isinstance(content, str):
            content = content.encode("utf-8")
        path.parent.mkdir(parents=True, exist_ok=True)
        if path.exists():
            logger.warning(f"Overwriting existing file {path}")
        path.write_bytes(content)
        self.written.append(path)
        logger.debug(f"Wrote {path} ({len(content)} bytes)")
        return path

    def write_artifact(self, role: CertificateRole, artifact: ArtifactType, content: Union[bytes, str]) -> Path:
        return self._write(self.path_for(role, artifact), content)

    def write_hierarchy(self, hierarchy: CertificateHierarchy, configs: Dict[CertificateRole, str]) -> None:
        """Persist keys, certificates, CSRs and extension configs of every role"""
        logger.info(f"=== WRITING ARTIFACTS TO {self.root} ===")
        for issued in hierarchy.ordered():
            self.write_artifact(issued.role, ArtifactType.PRIVATE_KEY, issued.key_pair.private_pem())
            self.write_artifact(issued.role, ArtifactType.CERTIFICATE, issued.certificate_pem())
            if issued.csr is not None:
                self.write_artifact(issued.role, ArtifactType.CSR, issued.csr_pem())
            if issued.role in configs:
                self.write_artifact(issued.role, ArtifactType.CONFIG, configs[issued.role])

    def write_chain(self, leaf_role: CertificateRole, chain_pem: bytes) -> Path:
        return self.write_artifact(leaf_role, ArtifactType.CHAIN, chain_pem)

    def write_report(self, lines: List[str]) -> Path:
        return self._write(self.report_path, "\n".join(lines) + "\n")

    def load_key_pair(self, role: CertificateRole) -> KeyPair:
        path = self.path_for(role, ArtifactType.PRIVATE_KEY)
        return load_key_pair(path.read_bytes(), role=role)

    def load_certificate(self, role: CertificateRole) -> x509.Certificate:
        path = self.path_for(role, ArtifactType.CERTIFICATE)
        try:
            return x509.load_pem_x509_certificate(path.read_bytes())
        except ValueError as e:
            raise CryptoProviderError(f"Failed to load {path}: {e}", role=role, step="certificate load") from e

    def collect(self) -> Dict[str, bytes]:
        """Relative path -> content of everything written, for archiving"""
        return {
            path.relative_to(self.root).as_posix(): path.read_bytes()
            for path in self.written
        }
