"""
External discovery tools and the system ARP table.
"""

from .base_scanner import BaseScanner, NullScanner
from .nmap_scanner import NMAPScanner
from .arp_scanner import ARPScanner
from .ping_sweep_scanner import PingSweepScanner
from .arp_table import ArpTableReader, parse_proc_arp, parse_ip_neigh, parse_arp_a

__all__ = [
    'BaseScanner',
    'NullScanner',
    'NMAPScanner',
    'ARPScanner',
    'PingSweepScanner',
    'ArpTableReader',
    'parse_proc_arp',
    'parse_ip_neigh',
    'parse_arp_a',
]
