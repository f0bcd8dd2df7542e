"""Output format selection and persistence of encoded payloads."""

import os
import tempfile
from collections.abc import Sequence
from pathlib import Path

from cryptography import x509
from cryptography.hazmat.primitives.asymmetric import rsa

from certtool.encoding import (
    encode_certificate_pem,
    encode_combined_pem,
    encode_pkcs12,
    encode_private_key_pem,
)
from certtool.errors import EmptyPassword, FileWriteError, ValidationError
from certtool.logging_config import get_logger
from certtool.models import OutputArtifact, OutputFormat, WriteResult

logger = get_logger(__name__)

CERTIFICATE_TYPES = ("pem", "pfx")


def select_format(cert_type: str, combined: bool = False) -> OutputFormat:
    """Map the requested certificate type and combined flag to a format.

    Raises:
        ValidationError: unknown type, or combined output requested for PFX.
    """
    kind = cert_type.strip().lower()
    if kind == "pem":
        return OutputFormat.PEM_COMBINED if combined else OutputFormat.PEM_SEPARATE
    if kind == "pfx":
        if combined:
            raise ValidationError("Cannot use combine flag on PFX certificate")
        return OutputFormat.PFX
    raise ValidationError(
        f"Unknown certificate type {cert_type!r}, expected one of {', '.join(CERTIFICATE_TYPES)}"
    )


def validate_request(fmt: OutputFormat, password: str | None) -> None:
    """Check format-specific requirements before any key material is generated.

    Raises:
        EmptyPassword: PFX output without a non-empty password.
    """
    if fmt is OutputFormat.PFX and not password:
        raise EmptyPassword()


def render_artifacts(
    fmt: OutputFormat,
    name: str,
    cert: x509.Certificate,
    key: rsa.RSAPrivateKey,
    password: str | None = None,
) -> list[OutputArtifact]:
    """Encode the key and certificate into the named payload(s) for a format."""
    if fmt is OutputFormat.PEM_SEPARATE:
        return [
            OutputArtifact(f"{name}_key.pem", encode_private_key_pem(key), "pem key"),
            OutputArtifact(f"{name}_cert.pem", encode_certificate_pem(cert), "pem certificate"),
        ]
    if fmt is OutputFormat.PEM_COMBINED:
        return [OutputArtifact(f"{name}.pem", encode_combined_pem(key, cert), "certificate")]

    logger.info("Outputting as PFX format")
    return [OutputArtifact(f"{name}.pfx", encode_pkcs12(key, [cert], password), "certificate")]


def ensure_output_dir(directory: Path) -> bool:
    """Create the output directory if needed. Returns True if it was created."""
    if directory.is_dir():
        logger.info("Found certificates directory", path=str(directory))
        return False
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FileWriteError(str(directory), e.strerror or str(e)) from e
    logger.info("Creating certificates directory", path=str(directory))
    return True


def write_artifact(artifact: OutputArtifact, directory: Path) -> Path:
    """Write one payload atomically: temp file in the same directory, then rename.

    A failed write leaves no file at the target path.

    Raises:
        FileWriteError: the payload could not be written.
    """
    target = directory / artifact.filename
    tmp_name: str | None = None
    try:
        fd, tmp_name = tempfile.mkstemp(
            dir=directory, prefix=f".{artifact.filename}.", suffix=".tmp"
        )
        with os.fdopen(fd, "wb") as f:
            f.write(artifact.payload)
        os.replace(tmp_name, target)
    except OSError as e:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise FileWriteError(str(target), e.strerror or str(e)) from e
    return target


def write_artifacts(artifacts: Sequence[OutputArtifact], directory: Path) -> list[WriteResult]:
    """Write every artifact independently and report each outcome.

    One failure does not stop the remaining writes.
    """
    results: list[WriteResult] = []
    for artifact in artifacts:
        try:
            path = write_artifact(artifact, directory)
        except FileWriteError as e:
            logger.error("Failed to save file", path=e.path, error=e.reason)
            results.append(WriteResult(path=directory / artifact.filename, error=e))
            continue
        logger.info(f"Successfully saved {artifact.description}", path=str(path.resolve()))
        results.append(WriteResult(path=path))
    return results
