"""
Network detection for the scanning host.

Finds the interface carrying the default route, its IPv4 address and
netmask, the default gateway and the configured DNS resolvers, then derives
the scan netmask and candidate range from them.
"""

import ipaddress
import socket
import subprocess
from typing import List, Optional, Tuple

import psutil

from .data_models import NetworkInfo
from .network_range import calculate_network_range, choose_scan_netmask
from ..config.config_loader import DiscoveryConfig
from ..utils.error_handler import NetworkDetectionError
from ..utils.logger import get_logger
from ..utils.network_utils import is_valid_ip

RESOLV_CONF = "/etc/resolv.conf"


class NetworkDetector:
    """
    Detects host network configuration.

    The default route decides which interface is scanned; psutil supplies
    the address and netmask of that interface.
    """

    def __init__(self, discovery_config: Optional[DiscoveryConfig] = None, resolv_conf: str = RESOLV_CONF):
        """Initialize the NetworkDetector."""
        self.config = discovery_config or DiscoveryConfig()
        self.resolv_conf = resolv_conf
        self.logger = get_logger(__name__)

    def get_host_network_info(self) -> NetworkInfo:
        """
        Detect and return the host's network configuration.

        Returns:
            NetworkInfo: Local address, masks, gateway, DNS servers and range

        Raises:
            NetworkDetectionError: If no usable local IPv4 address exists
        """
        route_interface, route_gateway = self._get_default_route()
        interface_name, host_ip, netmask = self._get_interface_address(route_interface)

        if not host_ip:
            host_ip = self._get_ip_via_socket()
            if host_ip:
                interface_name = interface_name or self._interface_for_ip(host_ip)
                netmask = self._netmask_for_ip(host_ip)

        if not host_ip:
            raise NetworkDetectionError("Unable to determine a local IPv4 address")

        self.logger.debug(f"Detected interface {interface_name or 'unknown'} with address {host_ip}")

        interface_netmask = netmask or self.config.default_netmask
        if self.config.widen_private_ranges:
            scan_netmask = choose_scan_netmask(
                host_ip,
                interface_netmask,
                self.config.widen_networks,
                self.config.widened_netmask,
                self.config.default_netmask,
            )
        else:
            scan_netmask = choose_scan_netmask(host_ip, interface_netmask, (), default_netmask=self.config.default_netmask)

        gateway_ip = route_gateway if is_valid_ip(route_gateway) else self._fallback_gateway(host_ip)
        network_range = calculate_network_range(host_ip, scan_netmask, self.config.max_hosts)

        return NetworkInfo(
            host_ip=host_ip,
            interface_netmask=interface_netmask,
            scan_netmask=scan_netmask,
            gateway_ip=gateway_ip,
            dns_servers=self.get_dns_servers(),
            interface_name=interface_name,
            network_range=network_range,
        )

    def get_gateway_ip(self) -> str:
        """Default gateway from the routing table, or an empty string when unknown."""
        _, gateway = self._get_default_route()
        return gateway if is_valid_ip(gateway) else ""

    def _get_default_route(self) -> Tuple[str, str]:
        """
        Read the default route.

        Returns:
            Tuple of (interface name, gateway ip); empty strings when unknown
        """
        try:
            result = subprocess.run(
                ["ip", "route", "show", "default"],
                capture_output=True,
                text=True,
                timeout=5,
                check=True,
            )
        except (subprocess.CalledProcessError, subprocess.TimeoutExpired, OSError) as e:
            self.logger.debug(f"Default route lookup failed: {e}")
            return "", ""
        return parse_default_route(result.stdout)

    def _get_interface_address(self, interface_name: str) -> Tuple[str, str, str]:
        """
        Find the IPv4 address and netmask of an interface.

        Without a named interface the first non-loopback, non link-local
        IPv4 address reported by psutil is used.
        """
        try:
            interfaces = psutil.net_if_addrs()
        except OSError as e:
            self.logger.debug(f"Interface enumeration failed: {e}")
            return interface_name, "", ""

        if interface_name and interface_name in interfaces:
            for address in interfaces[interface_name]:
                if address.family == socket.AF_INET and _is_usable_ip(address.address):
                    return interface_name, address.address, address.netmask or ""

        for name, addresses in interfaces.items():
            for address in addresses:
                if address.family == socket.AF_INET and _is_usable_ip(address.address):
                    return name, address.address, address.netmask or ""
        return interface_name, "", ""

    def _get_ip_via_socket(self) -> str:
        """
        Fallback: let the routing table pick the source address.

        A UDP connect sends nothing; it only binds the local address.
        """
        try:
            with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as s:
                s.connect(("8.8.8.8", 80))
                local_ip = s.getsockname()[0]
        except OSError as e:
            self.logger.debug(f"Socket address detection failed: {e}")
            return ""
        return local_ip if _is_usable_ip(local_ip) else ""

    def _interface_for_ip(self, ip_address: str) -> str:
        try:
            interfaces = psutil.net_if_addrs()
        except OSError:
            return ""
        for name, addresses in interfaces.items():
            if any(address.address == ip_address for address in addresses):
                return name
        return ""

    def _netmask_for_ip(self, ip_address: str) -> str:
        try:
            interfaces = psutil.net_if_addrs()
        except OSError:
            return ""
        for addresses in interfaces.values():
            for address in addresses:
                if address.family == socket.AF_INET and address.address == ip_address:
                    return address.netmask or ""
        return ""

    def _fallback_gateway(self, host_ip: str) -> str:
        """Assume the conventional x.y.z.1 gateway when no route is known."""
        gateway = ".".join(host_ip.split(".")[:3]) + ".1"
        self.logger.debug(f"No default gateway found, assuming {gateway}")
        return gateway

    def get_dns_servers(self) -> List[str]:
        """Nameservers from resolv.conf; empty when the file is unreadable."""
        try:
            with open(self.resolv_conf, 'r', encoding='utf-8') as f:
                return parse_resolv_conf(f.read())
        except OSError:
            return []


def parse_default_route(output: str) -> Tuple[str, str]:
    """
    Parse `ip route show default` output.

    "default via 192.168.1.1 dev eth0 proto dhcp metric 100"
    """
    for line in output.splitlines():
        parts = line.split()
        if not parts or parts[0] != "default":
            continue
        interface_name = parts[parts.index("dev") + 1] if "dev" in parts[:-1] else ""
        gateway = parts[parts.index("via") + 1] if "via" in parts[:-1] else ""
        return interface_name, gateway
    return "", ""


def parse_resolv_conf(content: str) -> List[str]:
    servers = []
    for line in content.splitlines():
        parts = line.split()
        if len(parts) >= 2 and parts[0] == "nameserver" and is_valid_ip(parts[1]):
            servers.append(parts[1])
    return servers


def _is_usable_ip(ip_address: str) -> bool:
    """True for an IPv4 address that is neither loopback nor link-local."""
    try:
        address = ipaddress.IPv4Address(ip_address)
    except ValueError:
        return False
    return not (address.is_loopback or address.is_link_local or address.is_unspecified)
