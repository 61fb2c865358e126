"""
Core data models and enums for the LAN discovery engine.

This module defines the data structures used throughout discovery and
identification: host records, network ranges, probe outcomes and the
partial results reported by external tools.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List


class DeviceType(Enum):
    """Device taxonomy; values are the display names shown to users."""
    ROUTER = "Router"
    SWITCH = "Switch"
    ACCESS_POINT = "Access Point"
    PHONE = "Phone"
    TABLET = "Tablet"
    LAPTOP = "Laptop"
    DESKTOP = "Desktop"
    SMART_TV = "Smart TV"
    GAME_CONSOLE = "Game Console"
    PRINTER = "Printer"
    CAMERA = "Camera"
    IOT = "IoT Device"
    NAS = "NAS Storage"
    MEDIA_PLAYER = "Media Player"
    SMART_SPEAKER = "Smart Speaker"
    WEARABLE = "Wearable"
    DEVICE = "Device"
    UNKNOWN = "Unknown"

    @property
    def is_generic(self) -> bool:
        return self in (DeviceType.DEVICE, DeviceType.UNKNOWN)

    @classmethod
    def from_name(cls, value: str) -> "DeviceType":
        """
        Resolve a display name ("NAS Storage") or member name ("NAS").

        Raises:
            ValueError: If the value matches no device type
        """
        for member in cls:
            if value in (member.value, member.name):
                return member
        raise ValueError(f"Unknown device type: {value}")


class ScanState(Enum):
    """Orchestrator lifecycle states."""
    IDLE = "idle"
    DISCOVERING = "discovering"
    ENRICHING = "enriching"
    DONE = "done"


class ProbeOutcome(Enum):
    """Outcome of a probe primitive. NEGATIVE is an ordinary answer, not an error."""
    POSITIVE = "positive"
    NEGATIVE = "negative"


@dataclass
class ProbeResult:
    """
    Result of a single probe primitive.

    Attributes:
        outcome: POSITIVE when the target answered
        elapsed_ms: Time spent in the probe in milliseconds
        value: Probe specific payload (open port, name, raw response...)
    """
    outcome: ProbeOutcome
    elapsed_ms: int = 0
    value: Any = None

    @property
    def ok(self) -> bool:
        return self.outcome is ProbeOutcome.POSITIVE

    @classmethod
    def positive(cls, elapsed_ms: int = 0, value: Any = None) -> "ProbeResult":
        return cls(ProbeOutcome.POSITIVE, elapsed_ms, value)

    @classmethod
    def negative(cls, elapsed_ms: int = 0) -> "ProbeResult":
        return cls(ProbeOutcome.NEGATIVE, elapsed_ms)


@dataclass
class HostRecord:
    """
    Information about one discovered device, keyed by IP within a scan.

    Attributes:
        ip: Dotted-quad address, unique within a scan session
        hostname: Best-effort resolved name
        mac_address: Upper-case colon separated MAC, empty if not known yet
        vendor: Vendor from the OUI table or a discovery protocol
        model: Model string from vendor discovery or inference
        firmware_version: Firmware version from vendor discovery or HTTP banner
        is_online: True once any probe succeeded
        response_time_ms: Latency of the fastest successful probe, 0 if unknown
        device_type: Classified device type
        discovery_source: Tier that first reported the host
    """
    ip: str
    hostname: str = ""
    mac_address: str = ""
    vendor: str = ""
    model: str = ""
    firmware_version: str = ""
    is_online: bool = False
    response_time_ms: int = 0
    device_type: DeviceType = DeviceType.UNKNOWN
    discovery_source: str = ""


@dataclass
class PartialHostInfo:
    """
    A host as reported by an external discovery tool.

    Attributes:
        ip: Dotted-quad address
        mac_address: MAC address if the tool reported one
        hostname: Hostname if the tool resolved one
    """
    ip: str
    mac_address: str = ""
    hostname: str = ""


@dataclass
class DeviceIdentification:
    """
    Output of the identification cascade for one host.

    Attributes:
        hostname: Resolved hostname
        vendor: Vendor name
        model: Model display name
        firmware_version: Firmware or software version
        device_type: Classified device type
        open_ports: Ports found open by the fingerprint scan (thorough mode)
        source: Cascade step that produced the decisive data
    """
    hostname: str = ""
    vendor: str = ""
    model: str = ""
    firmware_version: str = ""
    device_type: DeviceType = DeviceType.UNKNOWN
    open_ports: List[int] = field(default_factory=list)
    source: str = ""


@dataclass
class NetworkRange:
    """
    Address range derived from a local IP and netmask.

    Attributes:
        network_address: Network address (e.g., 192.168.1.0)
        broadcast_address: Broadcast address (e.g., 192.168.1.255)
        prefix_length: CIDR prefix length
        netmask: Dotted decimal netmask
        candidates: Host addresses to probe, excluding network and broadcast
    """
    network_address: str
    broadcast_address: str
    prefix_length: int
    netmask: str
    candidates: List[str] = field(default_factory=list)

    @property
    def cidr(self) -> str:
        return f"{self.network_address}/{self.prefix_length}"


@dataclass
class NetworkInfo:
    """
    Information about the host network configuration.

    Attributes:
        host_ip: IP address of the scanning host
        interface_netmask: Netmask reported by the interface
        scan_netmask: Netmask used for scanning (possibly widened)
        gateway_ip: Default gateway address
        dns_servers: Configured DNS resolvers
        interface_name: Name of the network interface used
        network_range: Range computed from host_ip and scan_netmask
    """
    host_ip: str
    interface_netmask: str
    scan_netmask: str
    gateway_ip: str
    dns_servers: List[str] = field(default_factory=list)
    interface_name: str = ""
    network_range: NetworkRange = None
