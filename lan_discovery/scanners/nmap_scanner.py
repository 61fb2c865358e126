"""
NMAP host discovery for the LAN discovery engine.

Runs an ARP ping scan (`nmap -sn -PR`) over the network range and parses
the normal text output, which reports each live host with its address,
reverse DNS name and, on a local segment, its MAC address.
"""

import re
from typing import List, Optional

from .base_scanner import BaseScanner
from ..core.data_models import NetworkRange, PartialHostInfo
from ..utils.network_utils import normalize_mac

REPORT_PATTERN = re.compile(
    r"^Nmap scan report for (?:(?P<name>\S+) \((?P<named_ip>\d{1,3}(?:\.\d{1,3}){3})\)|(?P<ip>\d{1,3}(?:\.\d{1,3}){3}))\s*$"
)
MAC_PATTERN = re.compile(r"^MAC Address: (?P<mac>[0-9A-Fa-f:]{17})")


class NMAPScanner(BaseScanner):
    """
    Comprehensive discovery tier: IP, MAC and hostname per live host.
    """

    name = "nmap"
    executable = "nmap"

    def __init__(self, logger=None, timeout: int = 120, host_timeout: str = "2s"):
        """
        Initialize NMAP scanner.

        Args:
            logger: Logger instance for outputting scan progress and errors
            timeout: Seconds before the whole nmap run is abandoned
            host_timeout: Value passed to nmap --host-timeout
        """
        super().__init__(logger, timeout)
        self.host_timeout = host_timeout

    def build_command(self, network_range: NetworkRange) -> List[str]:
        return ["nmap", "-sn", "-PR", "--host-timeout", self.host_timeout, network_range.cidr]

    def parse_results(self, raw_output: str) -> List[PartialHostInfo]:
        """
        Parse `nmap -sn` normal output.

        Each "Nmap scan report for" line starts a host; a following
        "MAC Address:" line belongs to that host.
        """
        hosts: List[PartialHostInfo] = []
        current: Optional[PartialHostInfo] = None

        for line in raw_output.splitlines():
            line = line.strip()
            report = REPORT_PATTERN.match(line)
            if report:
                if current:
                    hosts.append(current)
                if report.group("named_ip"):
                    current = PartialHostInfo(ip=report.group("named_ip"), hostname=report.group("name"))
                else:
                    current = PartialHostInfo(ip=report.group("ip"))
                continue

            mac = MAC_PATTERN.match(line)
            if mac and current:
                current.mac_address = normalize_mac(mac.group("mac"))

        if current:
            hosts.append(current)
        return hosts
