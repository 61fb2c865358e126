"""
arp-scan based discovery.

`arp-scan --localnet -q` broadcasts ARP requests over the local segment
and prints one "IP<TAB>MAC" line per responder.
"""

import re
from typing import List

from .base_scanner import BaseScanner
from ..core.data_models import NetworkRange, PartialHostInfo
from ..utils.network_utils import is_valid_ip, normalize_mac

LINE_PATTERN = re.compile(r"^(?P<ip>\d{1,3}(?:\.\d{1,3}){3})\s+(?P<mac>[0-9A-Fa-f]{2}(?::[0-9A-Fa-f]{2}){5})\b")


class ARPScanner(BaseScanner):
    """Lightweight discovery tier: (IP, MAC) pairs from arp-scan."""

    name = "arp-scan"
    executable = "arp-scan"

    def build_command(self, network_range: NetworkRange) -> List[str]:
        return ["arp-scan", "--localnet", "-q"]

    def parse_results(self, raw_output: str) -> List[PartialHostInfo]:
        """
        Parse arp-scan output, ignoring banner and summary lines.

        arp-scan prints a duplicate line for hosts answering twice; only
        the first is kept.
        """
        hosts: List[PartialHostInfo] = []
        seen = set()
        for line in raw_output.splitlines():
            match = LINE_PATTERN.match(line.strip())
            if not match:
                continue
            ip = match.group("ip")
            if ip in seen or not is_valid_ip(ip):
                continue
            seen.add(ip)
            hosts.append(PartialHostInfo(ip=ip, mac_address=normalize_mac(match.group("mac"))))
        return hosts
