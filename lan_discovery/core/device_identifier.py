"""
Device identification cascade.

One cascade serves both the batch enrichment of a whole scan (fast) and
the drill-down on a single host (thorough). Each step only fills what the
previous steps left empty.
"""

from typing import List, Optional

from .data_models import DeviceIdentification
from .device_classifier import DeviceClassifier, infer_model
from .mac_vendors import lookup_vendor
from ..config.config_loader import ProbeConfig
from ..probes.http_banner import grab_http_banner, parse_http_banner
from ..probes.mdns import query_mdns_name
from ..probes.netbios import query_netbios_name
from ..probes.reachability import reverse_dns, scan_open_ports
from ..probes.ubiquiti import query_ubiquiti
from ..utils.logger import get_logger


class DeviceIdentifier:
    """
    Runs the identification cascade against one host.

    Attributes:
        probe_config: Timeouts and port lists for the probes
        classifier: Device type classifier
    """

    def __init__(self, probe_config: Optional[ProbeConfig] = None,
                 classifier: Optional[DeviceClassifier] = None, logger=None):
        self.probe_config = probe_config or ProbeConfig()
        self.classifier = classifier or DeviceClassifier()
        self.logger = logger or get_logger(__name__)

    def identify(self, ip_address: str, mac_address: str = "", mac_vendor: str = "",
                 is_gateway: bool = False, thorough: bool = False) -> DeviceIdentification:
        """
        Identify a host.

        Args:
            ip_address: Target address
            mac_address: Known MAC, used for the vendor when mac_vendor is empty
            mac_vendor: Vendor from the OUI table
            is_gateway: True for the default gateway
            thorough: Also run NetBIOS, HTTP banner, mDNS and the port fingerprint

        Returns:
            DeviceIdentification: A Ubiquiti discovery answer verbatim, or
            the merged result of the remaining steps
        """
        config = self.probe_config
        vendor = mac_vendor or lookup_vendor(mac_address)

        ubiquiti = query_ubiquiti(ip_address, config.ubiquiti_timeout)
        if ubiquiti.ok:
            self.logger.debug(f"{ip_address}: answered Ubiquiti discovery ({ubiquiti.value.model})")
            return ubiquiti.value

        identification = DeviceIdentification(vendor=vendor, source="mac" if vendor else "")

        dns = reverse_dns(ip_address)
        if dns.ok:
            identification.hostname = dns.value
            identification.source = "dns"

        open_ports: Optional[List[int]] = None
        if thorough:
            self._thorough_steps(ip_address, mac_vendor or vendor, identification)
            open_ports = scan_open_ports(ip_address, config.fingerprint_ports, config.fingerprint_timeout)
            identification.open_ports = open_ports
            if open_ports:
                self.logger.debug(f"{ip_address}: open ports {open_ports}")

        identification.device_type = self.classifier.classify(
            identification.hostname, identification.vendor, is_gateway, open_ports
        )

        if not identification.model and identification.vendor:
            identification.model = infer_model(identification.vendor, identification.device_type)

        return identification

    def _thorough_steps(self, ip_address: str, mac_vendor: str, identification: DeviceIdentification) -> None:
        config = self.probe_config

        if not identification.hostname:
            netbios = query_netbios_name(ip_address, config.netbios_timeout)
            if netbios.ok:
                identification.hostname = netbios.value
                identification.source = "netbios"

        banner = grab_http_banner(
            ip_address, config.http_ports, config.http_connect_timeout, config.http_read_timeout
        )
        if banner.ok:
            parsed = parse_http_banner(banner.value, mac_vendor)
            filled = False
            for name in ("hostname", "vendor", "model", "firmware_version"):
                if not getattr(identification, name) and getattr(parsed, name):
                    setattr(identification, name, getattr(parsed, name))
                    filled = True
            if filled:
                identification.source = "http"

        if not identification.hostname:
            mdns = query_mdns_name(ip_address, config.mdns_timeout)
            if mdns.ok:
                identification.hostname = mdns.value
                identification.source = "mdns"
