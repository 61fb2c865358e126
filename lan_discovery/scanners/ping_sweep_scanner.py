"""
fping based ping sweep.

`fping -a -q` prints only the addresses that answered. Targets are passed
on stdin so a full /16 candidate list does not hit argument length limits.
"""

from typing import List, Optional

from .base_scanner import BaseScanner
from ..core.data_models import NetworkRange, PartialHostInfo
from ..utils.network_utils import is_valid_ip


class PingSweepScanner(BaseScanner):
    """Ping sweep tier: reachable IPs only, MACs come from the ARP table."""

    name = "fping"
    executable = "fping"

    def build_command(self, network_range: NetworkRange) -> List[str]:
        return ["fping", "-a", "-q", "-i", "1", "-r", "0"]

    def command_input(self, network_range: NetworkRange) -> Optional[str]:
        return "\n".join(network_range.candidates) + "\n"

    def parse_results(self, raw_output: str) -> List[PartialHostInfo]:
        hosts = []
        for line in raw_output.splitlines():
            ip = line.strip()
            if is_valid_ip(ip):
                hosts.append(PartialHostInfo(ip=ip))
        return hosts
