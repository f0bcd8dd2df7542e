"""Key pair generation and self-signed certificate construction.

The builder produces a single RSA-keyed certificate whose issuer equals its
subject, valid for one calendar year, carrying one SubjectAlternativeName
extension. SAN entries always start with DNS:localhost and IP:127.0.0.1.
"""

import datetime
import ipaddress
import re
from collections.abc import Callable
from dataclasses import dataclass

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

from certtool.config import CertificateConfig
from certtool.errors import InvalidHostname, KeyGenerationFailed, ValidationError
from certtool.logging_config import get_logger
from certtool.models import BuildConfig, IPOptionKind
from certtool.network import resolve_external_ipv4

logger = get_logger(__name__)

BASE_DNS_NAME = "localhost"
BASE_IP_ADDRESS = "127.0.0.1"

_HOSTNAME_LABEL = re.compile(r"^(?!-)[A-Za-z0-9-]{1,63}(?<!-)$")


@dataclass(frozen=True)
class CertificateDefaults:
    """Constants stamped onto every generated certificate."""

    common_name: str = "localhost"
    country_name: str = "AU"
    state_or_province_name: str = "Victoria"
    locality_name: str = "Melbourne"
    organization_name: str = "PaperCut Software"
    organizational_unit_name: str = "Development"
    serial_number: int = 1
    key_size: int = 2048
    validity_years: int = 1

    @classmethod
    def from_config(cls, config: CertificateConfig) -> "CertificateDefaults":
        subject = config.subject
        return cls(
            common_name=subject.common_name,
            country_name=subject.country_name,
            state_or_province_name=subject.state_or_province_name,
            locality_name=subject.locality_name,
            organization_name=subject.organization_name,
            organizational_unit_name=subject.organizational_unit_name,
            serial_number=config.serial_number,
            key_size=config.key_size,
            validity_years=config.validity_years,
        )

    def distinguished_name(self) -> x509.Name:
        return x509.Name(
            [
                x509.NameAttribute(NameOID.COMMON_NAME, self.common_name),
                x509.NameAttribute(NameOID.COUNTRY_NAME, self.country_name),
                x509.NameAttribute(NameOID.STATE_OR_PROVINCE_NAME, self.state_or_province_name),
                x509.NameAttribute(NameOID.LOCALITY_NAME, self.locality_name),
                x509.NameAttribute(NameOID.ORGANIZATION_NAME, self.organization_name),
                x509.NameAttribute(
                    NameOID.ORGANIZATIONAL_UNIT_NAME, self.organizational_unit_name
                ),
            ]
        )


def add_years(moment: datetime.datetime, years: int) -> datetime.datetime:
    """Advance by whole calendar years, keeping month, day and time of day.

    Feb 29 in a non-leap target year overflows to Mar 1.
    """
    try:
        return moment.replace(year=moment.year + years)
    except ValueError:
        # Only Feb 29 can fail here
        return moment.replace(year=moment.year + years, month=3, day=1)


def validate_hostname(hostname: str) -> str:
    """Check that a hostname is a valid DNS name, allowing a leading wildcard.

    Raises:
        InvalidHostname: empty name, bad characters or bad label lengths.
    """
    name = hostname[:-1] if hostname.endswith(".") else hostname
    if not name or len(name) > 253:
        raise InvalidHostname(hostname)

    labels = name.split(".")
    if labels[0] == "*" and len(labels) > 1:
        labels = labels[1:]
    if not all(_HOSTNAME_LABEL.match(label) for label in labels):
        raise InvalidHostname(hostname)
    return name


def _parse_ip(value: str) -> ipaddress.IPv4Address | ipaddress.IPv6Address:
    try:
        return ipaddress.ip_address(value.strip())
    except ValueError as e:
        raise ValidationError(f"Invalid IP address: {value!r}") from e


def generate_key_pair(key_size: int = 2048) -> rsa.RSAPrivateKey:
    """Generate an RSA private key (the public half is derived from it)."""
    try:
        return rsa.generate_private_key(public_exponent=65537, key_size=key_size)
    except Exception as e:
        raise KeyGenerationFailed(f"Failed to generate {key_size}-bit RSA key pair: {e}") from e


class CertificateBuilder:
    """Builds self-signed certificates from injected defaults."""

    def __init__(
        self,
        defaults: CertificateDefaults | None = None,
        clock: Callable[[], datetime.datetime] | None = None,
        resolver: Callable[[], ipaddress.IPv4Address] = resolve_external_ipv4,
    ):
        self._defaults = defaults or CertificateDefaults()
        self._clock = clock or (lambda: datetime.datetime.now(datetime.UTC))
        self._resolver = resolver

    @property
    def defaults(self) -> CertificateDefaults:
        return self._defaults

    def subject_alt_names(self, config: BuildConfig) -> list[x509.GeneralName]:
        """Build the SAN entries for a request, in order. No deduplication."""
        entries: list[x509.GeneralName] = [
            x509.DNSName(BASE_DNS_NAME),
            x509.IPAddress(ipaddress.ip_address(BASE_IP_ADDRESS)),
        ]

        if config.ip.kind is IPOptionKind.VALUE:
            entries.append(x509.IPAddress(_parse_ip(config.ip.value or "")))
        elif config.ip.kind is IPOptionKind.EMPTY:
            resolved = self._resolver()
            logger.info("Using external IP address", address=str(resolved))
            entries.append(x509.IPAddress(resolved))

        if config.hostname:
            entries.append(x509.DNSName(validate_hostname(config.hostname)))

        return entries

    def build(self, config: BuildConfig) -> tuple[x509.Certificate, rsa.RSAPrivateKey]:
        """Generate a key pair and a certificate self-signed with it.

        SAN inputs are resolved before the key is generated, so a bad
        hostname or a missing external address fails fast.

        Raises:
            KeyGenerationFailed: the RSA key could not be generated.
            NoAddressFound: external IP resolution was requested and failed.
            InvalidHostname: the hostname is not a valid DNS name.
            ValidationError: the explicit IP is not a valid address.
        """
        san_entries = self.subject_alt_names(config)

        logger.info("Generating key-pair", key_size=self._defaults.key_size)
        private_key = generate_key_pair(self._defaults.key_size)
        logger.info("Key-pair created")

        logger.info("Creating self-signed certificate")
        name = self._defaults.distinguished_name()
        now = self._clock()

        cert = (
            x509.CertificateBuilder()
            .subject_name(name)
            .issuer_name(name)
            .public_key(private_key.public_key())
            .serial_number(self._defaults.serial_number)
            .not_valid_before(now)
            .not_valid_after(add_years(now, self._defaults.validity_years))
            .add_extension(
                x509.SubjectAlternativeName(san_entries),
                critical=False,
            )
            .sign(private_key, hashes.SHA256())
        )

        logger.info(
            "Certificate created",
            common_name=self._defaults.common_name,
            subject_alt_names=[str(entry.value) for entry in san_entries],
            expires=cert.not_valid_after_utc.isoformat(),
        )

        return cert, private_key
