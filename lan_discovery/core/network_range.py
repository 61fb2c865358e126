"""
Network range calculation for subnet-wide discovery.

Derives network and broadcast addresses plus the candidate host list from
the local address and netmask. Private ranges with DHCP-sized masks are
widened to a /16 since large segmented networks often share one broadcast
domain wider than the lease mask suggests. The widening is a heuristic and
is configurable through DiscoveryConfig.
"""

import ipaddress
from typing import Iterable, List, Optional

from .data_models import HostRecord, NetworkRange
from ..utils.network_utils import (
    cidr_to_netmask,
    int_to_ip,
    ip_sort_key,
    ip_to_int,
    netmask_to_cidr,
)

DEFAULT_NETMASK = "255.255.255.0"
WIDENED_NETMASK = "255.255.0.0"
WIDEN_NETWORKS = ("10.0.0.0/8", "172.16.0.0/12")
MAX_HOSTS = 65534


def choose_scan_netmask(
    local_ip: str,
    netmask: Optional[str],
    widen_networks: Iterable[str] = WIDEN_NETWORKS,
    widened_netmask: str = WIDENED_NETMASK,
    default_netmask: str = DEFAULT_NETMASK,
) -> str:
    """
    Pick the netmask used for scanning.

    Args:
        local_ip: Local IPv4 address
        netmask: Interface netmask, may be empty or malformed
        widen_networks: Private ranges eligible for widening
        widened_netmask: Mask to use inside those ranges
        default_netmask: Mask used when netmask is absent or malformed

    Returns:
        str: Dotted decimal netmask
    """
    prefix = netmask_to_cidr(netmask)
    if prefix is None:
        prefix = netmask_to_cidr(default_netmask) or 24
    effective = cidr_to_netmask(prefix)

    widened_prefix = netmask_to_cidr(widened_netmask)
    if widened_prefix is None or prefix <= widened_prefix:
        return effective

    try:
        address = ipaddress.IPv4Address(local_ip)
    except ValueError:
        return effective

    for network in widen_networks:
        try:
            if address in ipaddress.IPv4Network(network, strict=False):
                return cidr_to_netmask(widened_prefix)
        except ValueError:
            continue
    return effective


def calculate_network_range(
    local_ip: str, netmask: Optional[str], max_hosts: int = MAX_HOSTS
) -> NetworkRange:
    """
    Compute network, broadcast and candidate addresses for a local IP.

    The candidate list runs from network+1 to broadcast-1, capped at
    max_hosts addresses. Malformed input never fails the scan: a missing
    or unparsable octet of local_ip counts as 0 and a malformed or absent
    mask degrades to /24.

    Args:
        local_ip: Local IPv4 address
        netmask: Dotted decimal netmask or prefix length
        max_hosts: Upper bound on the number of candidates

    Returns:
        NetworkRange: Computed range
    """
    ip_value = _lenient_ip_to_int(local_ip)

    prefix = netmask_to_cidr(netmask)
    if prefix is None:
        prefix = 24

    mask_value = (0xFFFFFFFF << (32 - prefix)) & 0xFFFFFFFF
    network = ip_value & mask_value
    broadcast = network | (~mask_value & 0xFFFFFFFF)

    first = network + 1
    last = min(broadcast - 1, network + max_hosts)
    candidates = [int_to_ip(value) for value in range(first, last + 1)]

    return NetworkRange(
        network_address=int_to_ip(network),
        broadcast_address=int_to_ip(broadcast),
        prefix_length=prefix,
        netmask=cidr_to_netmask(prefix),
        candidates=candidates,
    )


def _lenient_ip_to_int(ip_address: Optional[str]) -> int:
    octets = (ip_address or "").strip().split(".")[:4]
    octets += ["0"] * (4 - len(octets))
    value = 0
    for octet in octets:
        try:
            number = int(octet)
        except ValueError:
            number = 0
        value = (value << 8) | (number if 0 <= number <= 255 else 0)
    return value


def is_ip_in_range(ip_address: str, network_range: NetworkRange) -> bool:
    """True when ip_address lies strictly between network and broadcast."""
    try:
        value = ip_to_int(ip_address)
    except ValueError:
        return False
    return (
        ip_to_int(network_range.network_address)
        < value
        < ip_to_int(network_range.broadcast_address)
    )


def sort_hosts_by_ip(hosts: Iterable[HostRecord]) -> List[HostRecord]:
    return sorted(hosts, key=lambda host: ip_sort_key(host.ip))
