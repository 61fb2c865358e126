"""Fakes and builders shared by the lan_discovery tests."""

import threading
from typing import Dict, List, Optional, Tuple

from lan_discovery.core.data_models import (
    DeviceIdentification,
    DeviceType,
    NetworkInfo,
    PartialHostInfo,
    ProbeResult,
)
from lan_discovery.core.network_range import calculate_network_range
from lan_discovery.scanners.base_scanner import BaseScanner


def build_network_info(local_ip: str = "192.168.1.10", netmask: str = "255.255.255.240",
                       gateway_ip: str = "192.168.1.1") -> NetworkInfo:
    """A small network so orchestrator tests stay fast (/28 = 14 candidates)."""
    return NetworkInfo(
        host_ip=local_ip,
        interface_netmask=netmask,
        scan_netmask=netmask,
        gateway_ip=gateway_ip,
        dns_servers=["192.168.1.1"],
        interface_name="eth0",
        network_range=calculate_network_range(local_ip, netmask),
    )


def ubiquiti_tlv(tag: int, value: bytes) -> bytes:
    return bytes([tag, len(value) >> 8, len(value) & 0xFF]) + value


def ubiquiti_response(*fields: Tuple[int, bytes]) -> bytes:
    """Discovery response: four byte header followed by TLV fields."""
    body = b"".join(ubiquiti_tlv(tag, value) for tag, value in fields)
    return bytes([0x01, 0x00, len(body) >> 8 & 0xFF, len(body) & 0xFF]) + body


class FakeScanner(BaseScanner):
    """External tool stand-in that reports a fixed host list."""

    def __init__(self, name: str, hosts: Optional[List[PartialHostInfo]] = None):
        super().__init__()
        self.name = name
        self.hosts = hosts or []
        self.calls = 0

    def is_available(self) -> bool:
        return True

    def build_command(self, network_range):
        return [self.name]

    def parse_results(self, raw_output):
        return []

    def try_discover(self, network_range):
        self.calls += 1
        return list(self.hosts)


class FakeArpTable:
    """ARP table stand-in; entries can be changed between reads."""

    def __init__(self, entries: Optional[List[Tuple[str, str]]] = None):
        self.entries = list(entries or [])
        self.reads = 0
        self._lock = threading.Lock()

    def read(self) -> List[Tuple[str, str]]:
        with self._lock:
            self.reads += 1
            return list(self.entries)

    def as_dict(self) -> Dict[str, str]:
        return dict(self.read())

    def mac_for(self, ip: str) -> str:
        return self.as_dict().get(ip, "")


class FakeIdentifier:
    """Identification cascade stand-in with canned answers per IP."""

    def __init__(self, answers: Optional[Dict[str, DeviceIdentification]] = None):
        self.answers = answers or {}
        self.calls: List[Tuple[str, bool]] = []
        self._lock = threading.Lock()

    def identify(self, ip_address, mac_address="", mac_vendor="", is_gateway=False, thorough=False):
        with self._lock:
            self.calls.append((ip_address, thorough))
        if ip_address in self.answers:
            return self.answers[ip_address]
        return DeviceIdentification(
            vendor=mac_vendor,
            device_type=DeviceType.ROUTER if is_gateway else DeviceType.DEVICE,
        )


def responding(ips):
    """Probe function answering POSITIVE for the given addresses only."""
    alive = set(ips)

    def probe(ip_address, config, *args):
        if ip_address in alive:
            return ProbeResult.positive(3)
        return ProbeResult.negative(1)

    return probe


def silent(ip_address, config, *args):
    return ProbeResult.negative(0)
