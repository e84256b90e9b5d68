"""Host network inspection helpers."""

from __future__ import annotations

import ipaddress
import logging
import socket
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, List, Optional, Union

import psutil

logger = logging.getLogger(__name__)

Interface = Union[ipaddress.IPv4Interface, ipaddress.IPv6Interface]
Address = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]
NetworkAddr = Union[ipaddress.IPv4Network, ipaddress.IPv6Network]

_BROADCAST = ipaddress.IPv4Address("255.255.255.255")


def _prefix_length(address: str, netmask: Optional[str]) -> int:
    max_len = ipaddress.ip_address(address).max_prefixlen
    if not netmask:
        return max_len
    return bin(int(ipaddress.ip_address(netmask))).count("1")


def _host_interfaces() -> Iterator[Interface]:
    """Yield every IP address configured on the host's interfaces."""
    for name, addrs in psutil.net_if_addrs().items():
        for addr in addrs:
            if addr.family not in (socket.AF_INET, socket.AF_INET6):
                continue
            address = addr.address.split("%", 1)[0]
            try:
                prefix = _prefix_length(address, addr.netmask)
                yield ipaddress.ip_interface(f"{address}/{prefix}")
            except ValueError as err:
                logger.warning("error reading address of interface %s: %s", name, err)


def _is_global_unicast(ip: Address) -> bool:
    if ip == _BROADCAST:
        return False
    return not (ip.is_unspecified or ip.is_loopback or ip.is_multicast or ip.is_link_local)


def _parse_cidr(subnet: str) -> NetworkAddr:
    if "/" not in subnet:
        raise ValueError(f"invalid CIDR address: {subnet}")
    return ipaddress.ip_network(subnet, strict=False)


@dataclass
class Network:
    """Queries against the addresses configured on this host."""

    interfaces: Callable[[], Iterable[Interface]] = _host_interfaces

    def _usable(self) -> Iterator[Interface]:
        for iface in self.interfaces():
            if _is_global_unicast(iface.ip):
                yield iface

    def find_ip_on_subnet(self, subnet: str) -> str:
        """Return the first host IP inside ``subnet``."""
        network = _parse_cidr(subnet)
        for iface in self._usable():
            if iface.ip in network:
                return str(iface.ip)
        raise LookupError(f"no IP belongs to provided subnet {subnet}")

    def find_network_address(self, address: str) -> str:
        """Return the host interface address (``ip/prefix``) holding ``address``."""
        try:
            wanted = ipaddress.ip_address(address)
        except ValueError:
            raise ValueError(f"provided address {address} is invalid") from None
        seen: List[str] = []
        for iface in self._usable():
            seen.append(str(iface))
            if iface.ip == wanted:
                return str(iface)
        message = "provided mon-ip ({}) does not belong to any suitable network: {}"
        raise LookupError(message.format(wanted, seen))

    def is_ip_on_subnet(self, address: str, subnet: str) -> bool:
        """Tell whether ``address`` lies inside ``subnet``; invalid input gives False."""
        try:
            ip = ipaddress.ip_address(address)
            network = _parse_cidr(subnet)
        except ValueError:
            return False
        return ip in network


network = Network()