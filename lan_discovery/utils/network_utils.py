"""
Network utility functions for IP address arithmetic and MAC normalisation.

These helpers are shared by the range calculator, the ARP table reader and
the scan session ordering.
"""

import ipaddress
import re
from typing import Optional

MAC_PATTERN = re.compile(r"^([0-9A-Fa-f]{2}[:-]){5}[0-9A-Fa-f]{2}$")
ZERO_MAC = "00:00:00:00:00:00"


def is_valid_ip(ip_address: str) -> bool:
    """
    Check if a string represents a valid IPv4 address.

    Args:
        ip_address: String to validate as IPv4 address

    Returns:
        bool: True if valid IPv4 address, False otherwise
    """
    try:
        ipaddress.IPv4Address(ip_address)
        return True
    except (ipaddress.AddressValueError, ValueError):
        return False


def ip_to_int(ip_address: str) -> int:
    """
    Convert a dotted-quad address to its 32-bit integer value.

    Raises:
        ValueError: If the address is not a valid IPv4 address
    """
    return int(ipaddress.IPv4Address(ip_address))


def int_to_ip(value: int) -> str:
    """Convert a 32-bit integer to a dotted-quad address."""
    return str(ipaddress.IPv4Address(value))


def ip_sort_key(ip_address: str) -> int:
    """Sort key ordering addresses by numeric value; invalid ones sort last."""
    try:
        return ip_to_int(ip_address)
    except ValueError:
        return 1 << 32


def cidr_to_netmask(cidr: int) -> str:
    """
    Convert CIDR notation to dotted decimal netmask.

    Args:
        cidr: CIDR prefix length (0-32)

    Returns:
        str: Dotted decimal netmask (e.g., "255.255.255.0")

    Raises:
        ValueError: If CIDR is not in valid range (0-32)
    """
    if not 0 <= cidr <= 32:
        raise ValueError(f"CIDR must be between 0 and 32, got {cidr}")

    network = ipaddress.IPv4Network(f"0.0.0.0/{cidr}")
    return str(network.netmask)


def netmask_to_cidr(netmask: Optional[str]) -> Optional[int]:
    """
    Convert a dotted decimal netmask (or a "/24"-style prefix) to a prefix length.

    Args:
        netmask: Netmask such as "255.255.255.0", "24" or "/24"

    Returns:
        Optional[int]: Prefix length, or None when the value is absent or
        not a contiguous mask
    """
    if not netmask:
        return None
    value = str(netmask).strip().lstrip("/")
    try:
        if value.isdigit():
            prefix = int(value)
            return prefix if 0 <= prefix <= 32 else None
        return ipaddress.IPv4Network(f"0.0.0.0/{value}").prefixlen
    except (ipaddress.NetmaskValueError, ValueError):
        return None


def normalize_mac(mac_address: Optional[str]) -> str:
    """
    Normalise a MAC address to upper-case colon separated form.

    Accepts ':' or '-' separators and single-digit octets as printed by
    BSD style `arp -a` ("0:1c:42:a:b:c").

    Returns:
        str: Normalised MAC, or "" for anything that is not a MAC address
    """
    if not mac_address:
        return ""
    parts = re.split(r"[:-]", mac_address.strip())
    if len(parts) != 6:
        return ""
    try:
        octets = [int(part, 16) for part in parts]
    except ValueError:
        return ""
    if any(octet > 0xFF for octet in octets):
        return ""
    return ":".join(f"{octet:02X}" for octet in octets)


def is_valid_mac(mac_address: Optional[str]) -> bool:
    """True for a well-formed, non-zero MAC address."""
    normalized = normalize_mac(mac_address)
    return bool(normalized) and normalized != ZERO_MAC
