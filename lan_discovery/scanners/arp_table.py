"""
System ARP/neighbor table reader.

The kernel table is the cheapest source of MAC addresses: every host the
scanner has exchanged packets with on the local segment shows up there.
/proc/net/arp is read directly on Linux; `ip neigh` and `arp -a` are
used when it is not available.
"""

import platform
import subprocess
from typing import Dict, List, Optional, Tuple

from ..utils.network_utils import is_valid_ip, is_valid_mac, normalize_mac

PROC_ARP_PATH = "/proc/net/arp"
INCOMPLETE_FLAGS = "0x0"


def parse_proc_arp(content: str) -> List[Tuple[str, str]]:
    """
    Parse /proc/net/arp content into (ip, mac) pairs.

    The header line is skipped, as are incomplete entries (flags 0x0)
    and entries with an all-zero MAC.
    """
    entries = []
    for line in content.splitlines()[1:]:
        parts = line.split()
        if len(parts) < 4:
            continue
        ip, flags, mac = parts[0], parts[2], normalize_mac(parts[3])
        if flags == INCOMPLETE_FLAGS:
            continue
        if is_valid_ip(ip) and is_valid_mac(mac):
            entries.append((ip, mac))
    return entries


def parse_ip_neigh(output: str) -> List[Tuple[str, str]]:
    """Parse `ip neigh` output: "192.168.1.1 dev eth0 lladdr aa:bb:.. REACHABLE"."""
    entries = []
    for line in output.splitlines():
        parts = line.split()
        if "lladdr" not in parts or "FAILED" in parts or "INCOMPLETE" in parts:
            continue
        index = parts.index("lladdr")
        if index + 1 >= len(parts):
            continue
        ip, mac = parts[0], normalize_mac(parts[index + 1])
        if is_valid_ip(ip) and is_valid_mac(mac):
            entries.append((ip, mac))
    return entries


def parse_arp_a(output: str) -> List[Tuple[str, str]]:
    """
    Parse `arp -a` output in both Unix and Windows forms.

    Unix: "host (192.168.1.1) at 00:11:22:33:44:55 [ether] on eth0"
    Windows: "192.168.1.1          00-11-22-33-44-55     dynamic"
    """
    entries = []
    for line in output.splitlines():
        line = line.strip()
        if not line or 'Interface:' in line or 'Internet Address' in line:
            continue

        if '(' in line and ')' in line and ' at ' in line:
            ip = line.split('(')[1].split(')')[0]
            mac = normalize_mac(line.split(' at ')[1].split()[0])
        else:
            parts = line.split()
            if len(parts) < 2:
                continue
            ip, mac = parts[0], normalize_mac(parts[1])

        if is_valid_ip(ip) and is_valid_mac(mac):
            entries.append((ip, mac))
    return entries


class ArpTableReader:
    """
    Reads the system ARP table.

    Attributes:
        logger: Optional logger for debug output
        proc_path: Location of the kernel ARP table
    """

    def __init__(self, logger=None, proc_path: str = PROC_ARP_PATH, command_timeout: int = 10):
        self.logger = logger
        self.proc_path = proc_path
        self.command_timeout = command_timeout

    def read(self) -> List[Tuple[str, str]]:
        """
        Return the current (ip, mac) pairs; empty if no source is readable.
        """
        entries = self._read_proc()
        if entries is not None:
            return entries

        if platform.system().lower() != "windows":
            output = self._run(["ip", "neigh", "show"])
            if output:
                return parse_ip_neigh(output)

        output = self._run(["arp", "-a"])
        return parse_arp_a(output) if output else []

    def as_dict(self) -> Dict[str, str]:
        return dict(self.read())

    def mac_for(self, ip: str) -> str:
        """MAC for one IP, or "" if the table has no entry."""
        for entry_ip, mac in self.read():
            if entry_ip == ip:
                return mac
        return ""

    def _read_proc(self) -> Optional[List[Tuple[str, str]]]:
        try:
            with open(self.proc_path, 'r', encoding='utf-8') as f:
                return parse_proc_arp(f.read())
        except OSError:
            return None

    def _run(self, command: List[str]) -> str:
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=self.command_timeout,
            )
        except (subprocess.TimeoutExpired, OSError) as e:
            if self.logger:
                self.logger.debug(f"ARP table command {command[0]} failed: {e}")
            return ""
        return result.stdout if result.returncode == 0 else ""
