"""
Command-line entry point for cert-tool.

Generates a self-signed certificate for local development and writes it as
PEM (separate or combined key and certificate) or as a password-protected
PFX file.

Run via: cert-tool -t <pem|pfx> or python -m certtool -t <pem|pfx>

Exit codes: 0 on success, 2 on invalid options, 1 on any other failure.
"""

import argparse
import sys
from collections.abc import Sequence
from pathlib import Path

from certtool import __version__
from certtool.builder import CertificateBuilder, CertificateDefaults
from certtool.config import Settings, settings
from certtool.errors import CertToolError, ValidationError
from certtool.logging_config import configure_logging, get_logger
from certtool.models import BuildConfig, IPOption
from certtool.output import (
    CERTIFICATE_TYPES,
    ensure_output_dir,
    render_artifacts,
    select_format,
    validate_request,
    write_artifacts,
)

logger = get_logger("certtool.cli")

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


def build_parser(config: Settings) -> argparse.ArgumentParser:
    # -h belongs to --hostname, so help is long-form only
    parser = argparse.ArgumentParser(
        prog="cert-tool",
        usage="cert-tool -t <certificate type> [options]",
        description=f"cert-tool v{__version__}: generate self-signed development certificates",
        add_help=False,
    )
    parser.add_argument("--help", action="help", help="Show this help message and exit")
    parser.add_argument("--version", action="version", version=f"cert-tool v{__version__}")
    parser.add_argument(
        "-t",
        "--type",
        required=True,
        type=str.lower,
        choices=CERTIFICATE_TYPES,
        help="The module type to generate the certificate for",
    )
    parser.add_argument(
        "-f",
        "--file",
        default=config.default_file_name,
        help="The name of the certificate file(s)",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=config.output_dir,
        help="The output directory for the certificates",
    )
    parser.add_argument(
        "-c",
        "--combined",
        action="store_true",
        help="Combine certificate and key in the same file (PEM certificate type only)",
    )
    parser.add_argument("-p", "--password", help="The password for the pfx file")
    parser.add_argument(
        "-i",
        "--ip",
        nargs="?",
        const="",
        default=None,
        help="Sets the IP of the subject alternative name; empty resolves your external IP",
    )
    parser.add_argument(
        "-h",
        "--hostname",
        help="Sets the hostname of the subject alternative name",
    )
    return parser


def run(
    args: argparse.Namespace,
    builder: CertificateBuilder | None = None,
) -> int:
    """Generate and write the certificate described by parsed arguments."""
    try:
        fmt = select_format(args.type, args.combined)
        validate_request(fmt, args.password)
    except ValidationError as e:
        logger.error(str(e))
        return EXIT_USAGE

    if builder is None:
        builder = CertificateBuilder(CertificateDefaults.from_config(settings.certificate))

    output_dir: Path = args.output
    if not output_dir.is_absolute():
        output_dir = Path.cwd() / output_dir

    config = BuildConfig(ip=IPOption.from_arg(args.ip), hostname=args.hostname or None)
    try:
        cert, key = builder.build(config)
        artifacts = render_artifacts(fmt, args.file, cert, key, args.password)
        ensure_output_dir(output_dir)
    except ValidationError as e:
        logger.error(str(e))
        return EXIT_USAGE
    except CertToolError as e:
        logger.error(str(e), error_type=type(e).__name__)
        return EXIT_FAILURE

    results = write_artifacts(artifacts, output_dir)
    return EXIT_OK if all(result.ok for result in results) else EXIT_FAILURE


def main(argv: Sequence[str] | None = None) -> int:
    configure_logging(settings.log_level, settings.json_logs)
    args = build_parser(settings).parse_args(argv)
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
