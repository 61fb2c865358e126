"""
Probe primitives for LAN discovery.

Each primitive checks one host with a bounded timeout and returns a
ProbeResult; network failures are negative results, never exceptions.
"""

from .reachability import (
    icmp_echo,
    tcp_connect,
    udp_probe,
    trigger_arp_entry,
    fast_probe,
    thorough_probe,
    scan_open_ports,
    reverse_dns,
)
from .ubiquiti import query_ubiquiti, parse_ubiquiti_response, map_ubiquiti_model
from .netbios import query_netbios_name, parse_netbios_response
from .mdns import query_mdns_name, parse_mdns_response
from .http_banner import grab_http_banner, parse_http_banner

__all__ = [
    'icmp_echo',
    'tcp_connect',
    'udp_probe',
    'trigger_arp_entry',
    'fast_probe',
    'thorough_probe',
    'scan_open_ports',
    'reverse_dns',
    'query_ubiquiti',
    'parse_ubiquiti_response',
    'map_ubiquiti_model',
    'query_netbios_name',
    'parse_netbios_response',
    'query_mdns_name',
    'parse_mdns_response',
    'grab_http_banner',
    'parse_http_banner',
]
