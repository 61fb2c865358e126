"""
Input validation and timing helpers shared by the probe primitives.

Probes treat network failures as negative results, but malformed input is
a programming error and raises ValueError from these checks.
"""

import ipaddress
import time


def elapsed_ms(start: float) -> int:
    """Milliseconds since a time.monotonic() reading."""
    return int((time.monotonic() - start) * 1000)


def validate_target(ip_address: str) -> None:
    """
    Raises:
        ValueError: If ip_address is not a dotted-quad IPv4 address
    """
    try:
        ipaddress.IPv4Address(ip_address)
    except ValueError as e:
        raise ValueError(f"Invalid target address: {ip_address!r}") from e


def validate_port(port: int) -> None:
    if isinstance(port, bool) or not isinstance(port, int) or not 0 < port < 65536:
        raise ValueError(f"Invalid port: {port!r}")


def validate_timeout(timeout: float) -> None:
    if timeout < 0:
        raise ValueError(f"Timeout must not be negative, got {timeout}")
