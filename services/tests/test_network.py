"""Tests for external IPv4 address resolution."""

import ipaddress
from unittest.mock import patch

import netifaces
import pytest

from certtool.errors import NoAddressFound
from certtool.network import enumerate_interface_addresses, resolve_external_ipv4


def _addresses(*entries):
    return lambda: iter(entries)


class TestResolveExternalIPv4:
    """Test interface filtering and selection policy."""

    def test_returns_last_external_address(self):
        """Test the last qualifying address in enumeration order wins."""
        enumerate_addresses = _addresses(
            ("lo", netifaces.AF_INET, "127.0.0.1"),
            ("eth0", netifaces.AF_INET, "10.1.2.3"),
            ("wlan0", netifaces.AF_INET, "192.168.0.7"),
            ("docker0", netifaces.AF_INET, "172.17.0.1"),
        )

        assert resolve_external_ipv4(enumerate_addresses) == ipaddress.IPv4Address("172.17.0.1")

    def test_not_sorted(self):
        """Test selection follows enumeration order, not address order."""
        enumerate_addresses = _addresses(
            ("eth1", netifaces.AF_INET, "192.168.9.9"),
            ("eth0", netifaces.AF_INET, "10.0.0.1"),
        )

        assert resolve_external_ipv4(enumerate_addresses) == ipaddress.IPv4Address("10.0.0.1")

    def test_skips_loopback_and_ipv6(self):
        """Test loopback and non-IPv4 families are never selected."""
        enumerate_addresses = _addresses(
            ("eth0", netifaces.AF_INET, "10.0.0.8"),
            ("eth0", netifaces.AF_INET6, "fe80::1%eth0"),
            ("eth0", netifaces.AF_INET6, "2001:db8::5"),
            ("lo", netifaces.AF_INET, "127.0.0.1"),
            ("lo", netifaces.AF_INET, "127.0.1.1"),
        )

        assert resolve_external_ipv4(enumerate_addresses) == ipaddress.IPv4Address("10.0.0.8")

    def test_no_interfaces_raises(self):
        """Test an empty enumeration raises NoAddressFound."""
        with pytest.raises(NoAddressFound):
            resolve_external_ipv4(_addresses())

    def test_only_loopback_raises(self):
        """Test a host with only loopback raises NoAddressFound."""
        enumerate_addresses = _addresses(
            ("lo", netifaces.AF_INET, "127.0.0.1"),
            ("lo", netifaces.AF_INET6, "::1"),
        )

        with pytest.raises(NoAddressFound):
            resolve_external_ipv4(enumerate_addresses)


class TestEnumerateInterfaceAddresses:
    """Test flattening of netifaces data."""

    def test_enumerates_in_order(self):
        """Test every address is yielded with its interface and family."""
        table = {
            "lo": {netifaces.AF_INET: [{"addr": "127.0.0.1", "netmask": "255.0.0.0"}]},
            "eth0": {
                netifaces.AF_INET: [{"addr": "10.0.0.2"}],
                netifaces.AF_INET6: [{"addr": "fe80::2%eth0"}],
            },
        }

        with (
            patch("certtool.network.netifaces.interfaces", return_value=["lo", "eth0"]),
            patch("certtool.network.netifaces.ifaddresses", side_effect=table.__getitem__),
        ):
            result = list(enumerate_interface_addresses())

        assert result == [
            ("lo", netifaces.AF_INET, "127.0.0.1"),
            ("eth0", netifaces.AF_INET, "10.0.0.2"),
            ("eth0", netifaces.AF_INET6, "fe80::2%eth0"),
        ]

    def test_skips_entries_without_address(self):
        """Test entries lacking an 'addr' key are ignored."""
        table = {"eth0": {netifaces.AF_INET: [{"netmask": "255.255.255.0"}]}}

        with (
            patch("certtool.network.netifaces.interfaces", return_value=["eth0"]),
            patch("certtool.network.netifaces.ifaddresses", side_effect=table.__getitem__),
        ):
            assert list(enumerate_interface_addresses()) == []
