"""Local network interface enumeration."""

from __future__ import annotations

import psutil

from powermon.core.config import canonical_mac
from powermon.core.model import NetworkInterface

_NULL_MAC = "00:00:00:00:00:00"


def list_interfaces() -> list[NetworkInterface]:
    interfaces: list[NetworkInterface] = []
    for name, addresses in psutil.net_if_addrs().items():
        for address in addresses:
            if address.family != psutil.AF_LINK or not address.address:
                continue
            try:
                mac = canonical_mac(address.address)
            except ValueError:
                continue
            if mac == _NULL_MAC:
                continue
            interfaces.append(NetworkInterface(name=name, mac=mac))
    return sorted(interfaces, key=lambda i: (i.name, i.mac))


def enumerate_local_hardware_addresses() -> frozenset[str]:
    return frozenset(interface.mac for interface in list_interfaces())
