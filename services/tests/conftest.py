"""Pytest configuration and fixtures."""

import datetime
import ipaddress

import pytest
import structlog
from cryptography import x509
from cryptography.hazmat.primitives.asymmetric import rsa

from certtool.builder import CertificateBuilder, CertificateDefaults
from certtool.models import BuildConfig, IPOption

FIXED_NOW = datetime.datetime(2024, 6, 15, 10, 30, 0, tzinfo=datetime.UTC)
RESOLVED_IP = ipaddress.IPv4Address("192.168.1.20")


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop structlog configuration bound to a per-test capture stream."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def fixed_now() -> datetime.datetime:
    return FIXED_NOW


@pytest.fixture
def builder() -> CertificateBuilder:
    """Builder with a fixed clock and a resolver that needs no network."""
    return CertificateBuilder(
        CertificateDefaults(),
        clock=lambda: FIXED_NOW,
        resolver=lambda: RESOLVED_IP,
    )


@pytest.fixture(scope="session")
def issued() -> tuple[x509.Certificate, rsa.RSAPrivateKey]:
    """One certificate with an explicit IP and hostname, shared across tests."""
    shared_builder = CertificateBuilder(CertificateDefaults(), clock=lambda: FIXED_NOW)
    return shared_builder.build(BuildConfig(ip=IPOption.of("10.0.0.5"), hostname="dev.local"))


@pytest.fixture
def cert(issued) -> x509.Certificate:
    return issued[0]


@pytest.fixture
def key(issued) -> rsa.RSAPrivateKey:
    return issued[1]
