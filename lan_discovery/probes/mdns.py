"""
Unicast mDNS service enumeration query (UDP port 5353).

The response is not decoded as DNS; the first printable token that looks
like a name is taken as the device name candidate.
"""

import socket
import time

from ..core.data_models import ProbeResult
from .base_probe import elapsed_ms, validate_target, validate_timeout

MDNS_PORT = 5353
DNS_HEADER_LENGTH = 12
MIN_TOKEN_LENGTH = 4

# PTR query for _services._dns-sd._udp.local
SERVICES_QUERY = (
    bytes([0x00, 0x00, 0x00, 0x00, 0x00, 0x01, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00])
    + b"\x09_services"
    + b"\x07_dns-sd"
    + b"\x04_udp"
    + b"\x05local"
    + bytes([0x00, 0x00, 0x0C, 0x00, 0x01])
)


def parse_mdns_response(data: bytes) -> str:
    """
    Pick a device name candidate out of a raw mDNS response.

    Returns:
        str: First token longer than three characters that contains
        neither "local" nor "_", or ""
    """
    if len(data) <= DNS_HEADER_LENGTH:
        return ""
    text = "".join(chr(byte) if 32 <= byte < 127 else " " for byte in data)
    for token in text.split():
        if len(token) >= MIN_TOKEN_LENGTH and "local" not in token and "_" not in token:
            return token
    return ""


def query_mdns_name(ip_address: str, timeout: float = 0.5) -> ProbeResult:
    """
    Send a service enumeration query straight to a host.

    Returns:
        ProbeResult: POSITIVE with the name candidate as value
    """
    validate_target(ip_address)
    validate_timeout(timeout)
    start = time.monotonic()
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.settimeout(timeout)
            sock.sendto(SERVICES_QUERY, (ip_address, MDNS_PORT))
            data, _ = sock.recvfrom(1024)
    except OSError:
        return ProbeResult.negative(elapsed_ms(start))

    name = parse_mdns_response(data)
    if not name:
        return ProbeResult.negative(elapsed_ms(start))
    return ProbeResult.positive(elapsed_ms(start), name)
