"""
NetBIOS name service query (UDP port 137).
"""

import socket
import time

from ..core.data_models import ProbeResult
from .base_probe import elapsed_ms, validate_target, validate_timeout

NETBIOS_PORT = 137
NAME_OFFSET = 57
NAME_LENGTH = 15

# Node status request for the wildcard name "*", encoded as 32 nibble bytes
NAME_QUERY = (
    bytes([
        0x80, 0x94, 0x00, 0x00,  # transaction id, flags
        0x00, 0x01, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00,  # one question
        0x20, 0x43, 0x4B,  # length 32, "CK" encodes '*'
    ])
    + b"A" * 30
    + bytes([0x00, 0x00, 0x21, 0x00, 0x01])  # NBSTAT, class IN
)


def parse_netbios_response(data: bytes) -> str:
    """
    Extract the first registered name from a node status response.

    Returns:
        str: Name with padding removed, or "" for short responses
    """
    if len(data) <= NAME_OFFSET:
        return ""
    raw = data[NAME_OFFSET:NAME_OFFSET + NAME_LENGTH]
    return raw.decode("ascii", errors="ignore").replace("\x00", "").strip()


def query_netbios_name(ip_address: str, timeout: float = 0.5) -> ProbeResult:
    """
    Ask a host for its NetBIOS name.

    Returns:
        ProbeResult: POSITIVE with the name as value
    """
    validate_target(ip_address)
    validate_timeout(timeout)
    start = time.monotonic()
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.settimeout(timeout)
            sock.sendto(NAME_QUERY, (ip_address, NETBIOS_PORT))
            data, _ = sock.recvfrom(1024)
    except OSError:
        return ProbeResult.negative(elapsed_ms(start))

    name = parse_netbios_response(data)
    if not name:
        return ProbeResult.negative(elapsed_ms(start))
    return ProbeResult.positive(elapsed_ms(start), name)
