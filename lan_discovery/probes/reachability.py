"""
Reachability probe primitives.

Every probe here is blocking with a timeout and reports through a
ProbeResult. Refused connections, timeouts and unreachable networks are
ordinary NEGATIVE outcomes; only malformed input raises ValueError.
"""

import math
import platform
import socket
import subprocess
import time
from typing import List, Sequence

from ..core.data_models import ProbeResult
from .base_probe import elapsed_ms, validate_port, validate_target, validate_timeout
from .ubiquiti import DISCOVERY_REQUEST, DISCOVERY_PORT

# Extra time granted to the ping process for start-up
PROCESS_SLACK = 0.05


def build_ping_command(ip_address: str, timeout: float) -> List[str]:
    """
    Build a single-packet ping command for the current platform.

    Linux ping only accepts whole seconds on older releases, so the flag is
    rounded up and the caller enforces the real timeout on the process.
    """
    system = platform.system().lower()
    if system == "windows":
        return ["ping", "-n", "1", "-w", str(max(1, int(timeout * 1000))), ip_address]
    if system == "darwin":
        return ["ping", "-c", "1", "-W", str(max(1, int(timeout * 1000))), ip_address]
    return ["ping", "-c", "1", "-W", str(max(1, math.ceil(timeout))), ip_address]


def icmp_echo(ip_address: str, timeout: float) -> ProbeResult:
    """
    Check reachability with one ICMP echo request via the system ping.

    Args:
        ip_address: Target address
        timeout: Seconds to wait for the reply

    Returns:
        ProbeResult: POSITIVE with elapsed time when the host replied
    """
    validate_target(ip_address)
    validate_timeout(timeout)
    start = time.monotonic()
    try:
        result = subprocess.run(
            build_ping_command(ip_address, timeout),
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            timeout=timeout + PROCESS_SLACK,
        )
    except (subprocess.TimeoutExpired, OSError):
        return ProbeResult.negative(elapsed_ms(start))

    if result.returncode == 0:
        return ProbeResult.positive(elapsed_ms(start))
    return ProbeResult.negative(elapsed_ms(start))


def tcp_connect(ip_address: str, ports: Sequence[int], timeout: float) -> ProbeResult:
    """
    Try a TCP connect on each port in order; the first success wins.

    Returns:
        ProbeResult: POSITIVE with the open port as value
    """
    validate_target(ip_address)
    validate_timeout(timeout)
    for port in ports:
        validate_port(port)

    start = time.monotonic()
    for port in ports:
        attempt = time.monotonic()
        try:
            with socket.create_connection((ip_address, port), timeout=timeout):
                return ProbeResult.positive(elapsed_ms(attempt), port)
        except OSError:
            continue
    return ProbeResult.negative(elapsed_ms(start))


def udp_probe(
    ip_address: str, ports: Sequence[int], timeout: float, payload: bytes = b"\x00"
) -> ProbeResult:
    """
    Send a datagram to each port and wait briefly for any reply.

    Most services stay silent; the send still makes the OS resolve the
    target's link-layer address, which is what the ARP harvest relies on.

    Returns:
        ProbeResult: POSITIVE with the replying port as value
    """
    validate_target(ip_address)
    validate_timeout(timeout)
    for port in ports:
        validate_port(port)

    start = time.monotonic()
    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    except OSError:
        return ProbeResult.negative(elapsed_ms(start))

    with sock:
        sock.settimeout(timeout)
        for port in ports:
            attempt = time.monotonic()
            try:
                sock.sendto(payload, (ip_address, port))
                sock.recvfrom(1024)
                return ProbeResult.positive(elapsed_ms(attempt), port)
            except OSError:
                continue
    return ProbeResult.negative(elapsed_ms(start))


def trigger_arp_entry(ip_address: str, config) -> ProbeResult:
    """
    Touch a target cheaply so the OS populates its ARP cache entry.

    Sends one zero byte to each trigger UDP port except the Ubiquiti
    discovery port, which gets the discovery request instead, then makes a
    short TCP connect. Replies are not awaited.

    Args:
        ip_address: Target address
        config: ProbeConfig with trigger ports and timeout

    Returns:
        ProbeResult: POSITIVE only when the TCP connect succeeded
    """
    validate_target(ip_address)
    start = time.monotonic()
    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    except OSError:
        sock = None

    if sock is not None:
        with sock:
            for port in config.trigger_udp_ports:
                if port == DISCOVERY_PORT:
                    continue
                try:
                    sock.sendto(b"\x00", (ip_address, port))
                except OSError:
                    continue
            try:
                sock.sendto(DISCOVERY_REQUEST, (ip_address, DISCOVERY_PORT))
            except OSError:
                pass

    result = tcp_connect(ip_address, [config.trigger_tcp_port], config.trigger_tcp_timeout)
    if result.ok:
        return ProbeResult.positive(elapsed_ms(start), result.value)
    return ProbeResult.negative(elapsed_ms(start))


def fast_probe(ip_address: str, config) -> ProbeResult:
    """Batch-mode reachability: a short ICMP echo, then a few TCP ports."""
    result = icmp_echo(ip_address, config.fast_icmp_timeout)
    if result.ok:
        return result
    return tcp_connect(ip_address, config.fast_tcp_ports, config.fast_tcp_timeout)


def thorough_probe(ip_address: str, config, icmp_timeout: float = None) -> ProbeResult:
    """
    Single-target reachability: ICMP, the extended TCP list, then UDP sends.

    Args:
        ip_address: Target address
        config: ProbeConfig
        icmp_timeout: Override for the ICMP timeout (relaxed gateway check)
    """
    timeout = config.thorough_icmp_timeout if icmp_timeout is None else icmp_timeout
    result = icmp_echo(ip_address, timeout)
    if result.ok:
        return result
    result = tcp_connect(ip_address, config.thorough_tcp_ports, config.thorough_tcp_timeout)
    if result.ok:
        return result
    return udp_probe(ip_address, config.udp_ports, config.udp_timeout)


def scan_open_ports(ip_address: str, ports: Sequence[int], timeout: float) -> List[int]:
    """
    Connect-scan a list of ports and return the open ones in scan order.
    """
    validate_target(ip_address)
    validate_timeout(timeout)
    open_ports = []
    for port in ports:
        validate_port(port)
        try:
            with socket.create_connection((ip_address, port), timeout=timeout):
                open_ports.append(port)
        except OSError:
            continue
    return open_ports


def reverse_dns(ip_address: str) -> ProbeResult:
    """
    Resolve the PTR name of an address.

    Returns:
        ProbeResult: POSITIVE with the hostname; a name equal to the
        address itself means there is no PTR record and is NEGATIVE
    """
    validate_target(ip_address)
    start = time.monotonic()
    try:
        hostname = socket.gethostbyaddr(ip_address)[0]
    except (socket.herror, socket.gaierror, OSError):
        return ProbeResult.negative(elapsed_ms(start))

    if not hostname or hostname == ip_address:
        return ProbeResult.negative(elapsed_ms(start))
    return ProbeResult.positive(elapsed_ms(start), hostname)
