# dc_certificates/cli.py
# Command line entry points: chain generation and public key thumbprints

import argparse
import logging
import sys
from pathlib import Path

from .config import settings
from .certificates.exceptions import CertificateChainError, InputError
from .certificates.formats.pem import describe_thumbprint, load_certificates
from .certificates.storage.key_store import KeyStore
from .certificates.subject import validate_domain
from .services.chain_builder import ChainBuilder

logger = logging.getLogger(__name__)

def configure_logging(level: str = None) -> None:
    logging.basicConfig(
        level=getattr(logging, level or settings.LOG_LEVEL, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dc-certificate-chain",
        description="Create SMPTE 430-2 digital cinema certificates: root CA, intermediate CA, "
                    "a signer leaf (XML signatures) and a target leaf (KDM recipient)."
    )
    parser.add_argument("domain", nargs="?", help="Domain name with 2 name components, e.g. 'example.org'")
    parser.add_argument("--output-dir", default=settings.OUTPUT_DIR, help="Directory for keys, certificates and chains")
    parser.add_argument(
        "--verify-only",
        action="store_true",
        help="Re-verify the hierarchy already in --output-dir instead of generating a new one"
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default from LOG_LEVEL)")
    return parser

def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    try:
        domain = validate_domain(args.domain)
    except InputError as e:
        parser.print_usage(sys.stderr)
        print(e.message, file=sys.stderr)
        return 1

    key_store = KeyStore(Path(args.output_dir), domain)

    builder = ChainBuilder()
    action = "Chain verification" if args.verify_only else "Chain build"

    try:
        if args.verify_only:
            result = builder.verify_stored(domain, key_store)
        else:
            result = builder.build(domain, key_store=key_store)
    except (CertificateChainError, OSError) as e:
        print(f"{action} failed: {e}", file=sys.stderr)
        return 1

    print("\n".join(result.report))

    if not result.verified:
        for error in result.errors:
            print(f"Verification failed: {error}", file=sys.stderr)
        return 1

    return 0

def thumbprint_main(argv=None) -> int:
    """Print the public key thumbprint of X509 certificates"""
    parser = argparse.ArgumentParser(
        prog="dc-thumbprint",
        description="Calculate the public key thumbprint of X509 certificates"
    )
    parser.add_argument("certificates", nargs="*", metavar="cert")
    args = parser.parse_args(argv)
    configure_logging()

    if not args.certificates:
        parser.print_usage(sys.stderr)
        return 1

    for path in args.certificates:
        try:
            certificates = load_certificates(Path(path).read_bytes())
        except (OSError, CertificateChainError) as e:
            print(f"{path}: {e}", file=sys.stderr)
            return 1

        for certificate in certificates:
            info = describe_thumbprint(certificate)
            print(f"Note: If present, dnQualifier in {path}'s Subject shall match calculated public key thumbprint b64")
            print(f"Subject: {info['subject']}")
            print(f"Public key thumbprint b64: {info['thumbprint_b64']}")
            print(f"Public key thumbprint b16: {info['thumbprint_hex']}")
            if info["dn_qualifier_matches"] is not None:
                print(f"dnQualifier match: {'yes' if info['dn_qualifier_matches'] else 'NO'}")

    return 0

if __name__ == "__main__":
    sys.exit(main())
