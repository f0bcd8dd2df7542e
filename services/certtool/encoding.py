"""PEM and PKCS#12 serialization of generated keys and certificates."""

from collections.abc import Sequence

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.serialization import pkcs12

from certtool.errors import EmptyPassword, InvalidPassword

# Iteration count for the PKCS#12 key derivation and MAC
PKCS12_KDF_ROUNDS = 2048


# ── PEM ──────────────────────────────────────────────────────────────────


def encode_private_key_pem(key: rsa.RSAPrivateKey) -> bytes:
    """Serialize private key to unencrypted PKCS#8 PEM."""
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


def encode_certificate_pem(cert: x509.Certificate) -> bytes:
    """Serialize certificate to PEM format."""
    return cert.public_bytes(serialization.Encoding.PEM)


def encode_combined_pem(key: rsa.RSAPrivateKey, cert: x509.Certificate) -> bytes:
    """Private key block immediately followed by the certificate block."""
    return encode_private_key_pem(key) + encode_certificate_pem(cert)


def load_certificate_pem(pem_data: bytes) -> x509.Certificate:
    """Load the first certificate found in PEM data."""
    return x509.load_pem_x509_certificate(pem_data)


def load_private_key_pem(pem_data: bytes) -> rsa.RSAPrivateKey:
    """Load an unencrypted RSA private key from PEM data."""
    key = serialization.load_pem_private_key(pem_data, password=None)
    if not isinstance(key, rsa.RSAPrivateKey):
        raise TypeError(f"Expected RSA private key, got {type(key).__name__}")
    return key


# ── PKCS#12 ──────────────────────────────────────────────────────────────


def _password_bytes(password: str | bytes | None) -> bytes:
    if password is None or len(password) == 0:
        raise EmptyPassword()
    if isinstance(password, str):
        return password.encode("utf-8")
    return password


def encode_pkcs12(
    key: rsa.RSAPrivateKey,
    certs: Sequence[x509.Certificate],
    password: str | bytes | None,
    name: bytes | None = None,
) -> bytes:
    """Bundle a private key and its certificate chain into a PKCS#12 payload.

    The key and certificate bags are encrypted with PBE SHA1 + 3-key
    TripleDES-CBC and the payload is MAC'd with SHA-1, which older consumers
    (payment gateway test environments among them) require.

    The first certificate must be the one matching ``key``; any further
    certificates are stored as additional certificates.

    Raises:
        EmptyPassword: ``password`` is None or empty.
    """
    password_bytes = _password_bytes(password)
    if not certs:
        raise ValueError("At least one certificate is required")

    encryption = (
        serialization.PrivateFormat.PKCS12.encryption_builder()
        .kdf_rounds(PKCS12_KDF_ROUNDS)
        .key_cert_algorithm(pkcs12.PBES.PBESv1SHA1And3KeyTripleDESCBC)
        .hmac_hash(hashes.SHA1())
        .build(password_bytes)
    )

    return pkcs12.serialize_key_and_certificates(
        name=name,
        key=key,
        cert=certs[0],
        cas=list(certs[1:]) or None,
        encryption_algorithm=encryption,
    )


def load_pkcs12(
    data: bytes,
    password: str | bytes | None,
) -> tuple[rsa.RSAPrivateKey, x509.Certificate, list[x509.Certificate]]:
    """Decrypt a PKCS#12 payload into key, certificate and extra certificates.

    Raises:
        EmptyPassword: ``password`` is None or empty.
        InvalidPassword: the payload does not decrypt with ``password``.
    """
    password_bytes = _password_bytes(password)
    try:
        key, cert, additional = pkcs12.load_key_and_certificates(data, password_bytes)
    except ValueError as e:
        raise InvalidPassword(f"Could not decrypt PKCS#12 data: {e}") from e

    if not isinstance(key, rsa.RSAPrivateKey) or cert is None:
        raise ValueError("PKCS#12 data does not contain an RSA key and certificate")
    return key, cert, additional
