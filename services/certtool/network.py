"""Host network address discovery."""

import ipaddress
from collections.abc import Callable, Iterable, Iterator

import netifaces

from certtool.errors import NoAddressFound
from certtool.logging_config import get_logger

logger = get_logger(__name__)

# (interface name, address family, address string)
InterfaceAddress = tuple[str, int, str]


def enumerate_interface_addresses() -> Iterator[InterfaceAddress]:
    """Yield every address bound to every interface, in enumeration order."""
    for interface in netifaces.interfaces():
        for family, addresses in netifaces.ifaddresses(interface).items():
            for entry in addresses:
                addr = entry.get("addr")
                if addr:
                    yield interface, family, addr


def _is_external_ipv4(family: int, addr: str) -> bool:
    if family != netifaces.AF_INET:
        return False
    try:
        address = ipaddress.ip_address(addr)
    except ValueError:
        return False
    return address.version == 4 and not address.is_loopback


def resolve_external_ipv4(
    enumerate_addresses: Callable[[], Iterable[InterfaceAddress]] = enumerate_interface_addresses,
) -> ipaddress.IPv4Address:
    """Return a best-guess externally reachable IPv4 address of this host.

    The last non-loopback IPv4 address in interface enumeration order wins.

    Raises:
        NoAddressFound: no interface carries a qualifying address.
    """
    selected: tuple[str, str] | None = None
    for interface, family, addr in enumerate_addresses():
        if _is_external_ipv4(family, addr):
            selected = (interface, addr)

    if selected is None:
        raise NoAddressFound()

    interface, addr = selected
    logger.debug("Resolved external IPv4 address", interface=interface, address=addr)
    return ipaddress.IPv4Address(addr)
