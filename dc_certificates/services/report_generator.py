# dc_certificates/services/report_generator.py
"""
Human-readable certificate info and verification report.
"""

import logging
from typing import List

from ..certificates.subject import format_name
from ..certificates.types import IssuerOrder
from .file_naming_service import ArtifactType, get_standard_filename

logger = logging.getLogger(__name__)

def render_certificate_info(result) -> List[str]:
    """Subject / issuer pair of every certificate in issuance order"""
    hierarchy = result.hierarchy
    lines = ["+++ Certificate info +++"]

    for issued in hierarchy.ordered():
        filename = get_standard_filename(hierarchy.domain, issued.role, ArtifactType.CERTIFICATE)
        lines.extend([
            "",
            f"{issued.role.label} ({filename}):",
            f"subject={format_name(issued.certificate.subject)}",
            "   signed by",
            f" issuer={format_name(issued.certificate.issuer)}",
        ])

    return lines

def render_verification(result) -> List[str]:
    """One line per verification step of each chain"""
    hierarchy = result.hierarchy
    lines = ["+++ Verify certificates and write dc-certificate-chain +++"]

    for leaf_role in IssuerOrder.LEAF_ROLES:
        bundle = result.bundles.get(leaf_role)
        if bundle is None:
            continue

        chain_file = get_standard_filename(hierarchy.domain, leaf_role, ArtifactType.CHAIN)
        lines.append("")
        lines.append(f"{chain_file}:")

        for role, validation in zip(bundle.roles, bundle.results):
            filename = get_standard_filename(hierarchy.domain, role, ArtifactType.CERTIFICATE)
            if validation.is_valid:
                lines.append(f"{filename}: OK")
            else:
                lines.append(f"{filename}: FAILED ({validation.error})")

        # Steps that never ran because an earlier link broke
        for role in bundle.roles[len(bundle.results):]:
            filename = get_standard_filename(hierarchy.domain, role, ArtifactType.CERTIFICATE)
            lines.append(f"{filename}: NOT VERIFIED")

    return lines

def render_report(result) -> List[str]:
    lines = render_certificate_info(result)
    lines.append("")
    lines.extend(render_verification(result))
    lines.append("")
    lines.append("DONE" if result.verified else "FAILED")
    logger.debug(f"Report rendered with {len(lines)} lines")
    return lines
