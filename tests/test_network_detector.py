"""
Tests for host network detection with the route lookup and psutil patched.
"""

import socket
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from lan_discovery.config.config_loader import DiscoveryConfig
from lan_discovery.core.network_detector import NetworkDetector, parse_default_route, parse_resolv_conf
from lan_discovery.utils.error_handler import NetworkDetectionError

MODULE = "lan_discovery.core.network_detector"


def inet(address, netmask="255.255.255.0"):
    return SimpleNamespace(family=socket.AF_INET, address=address, netmask=netmask)


INTERFACES = {
    "lo": [inet("127.0.0.1", "255.0.0.0")],
    "docker0": [inet("169.254.3.1", "255.255.0.0")],
    "wlan0": [inet("192.168.50.20")],
    "eth0": [SimpleNamespace(family=socket.AF_INET6, address="fe80::1", netmask=None), inet("10.1.2.3")],
}


@pytest.fixture
def resolv_conf(tmp_path):
    path = tmp_path / "resolv.conf"
    path.write_text("# generated\nnameserver 10.1.0.53\nnameserver ::1\nsearch lan\n", encoding="utf-8")
    return str(path)


def route_output(text):
    return MagicMock(stdout=text, returncode=0)


@pytest.mark.parametrize("output,expected", [
    ("default via 192.168.1.1 dev eth0 proto dhcp metric 100\n", ("eth0", "192.168.1.1")),
    ("default dev wg0 scope link\n", ("wg0", "")),
    ("10.0.0.0/8 via 10.0.0.1 dev eth1\n", ("", "")),
    ("", ("", "")),
])
def test_parse_default_route(output, expected):
    assert parse_default_route(output) == expected


def test_parse_resolv_conf_keeps_ipv4_nameservers():
    content = "nameserver 1.1.1.1\n# nameserver 9.9.9.9\nnameserver fe80::1%eth0\noptions edns0\n"
    assert parse_resolv_conf(content) == ["1.1.1.1"]


class TestGetHostNetworkInfo:

    def test_route_interface_and_widening(self, resolv_conf):
        detector = NetworkDetector(DiscoveryConfig(max_hosts=16), resolv_conf=resolv_conf)
        with patch(f"{MODULE}.subprocess.run", return_value=route_output("default via 10.1.0.1 dev eth0\n")), \
                patch(f"{MODULE}.psutil.net_if_addrs", return_value=INTERFACES):
            info = detector.get_host_network_info()

        assert info.interface_name == "eth0"
        assert info.host_ip == "10.1.2.3"
        assert info.interface_netmask == "255.255.255.0"
        assert info.scan_netmask == "255.255.0.0"
        assert info.gateway_ip == "10.1.0.1"
        assert info.dns_servers == ["10.1.0.53"]
        assert info.network_range.cidr == "10.1.0.0/16"
        assert len(info.network_range.candidates) == 16

    def test_widening_can_be_disabled(self, resolv_conf):
        config = DiscoveryConfig(widen_private_ranges=False, max_hosts=16)
        detector = NetworkDetector(config, resolv_conf=resolv_conf)
        with patch(f"{MODULE}.subprocess.run", return_value=route_output("default via 10.1.2.1 dev eth0\n")), \
                patch(f"{MODULE}.psutil.net_if_addrs", return_value=INTERFACES):
            info = detector.get_host_network_info()

        assert info.scan_netmask == "255.255.255.0"
        assert info.network_range.cidr == "10.1.2.0/24"

    def test_without_route_first_usable_interface_and_dot_one_gateway(self, resolv_conf):
        detector = NetworkDetector(resolv_conf=resolv_conf)
        with patch(f"{MODULE}.subprocess.run", side_effect=FileNotFoundError("ip")), \
                patch(f"{MODULE}.psutil.net_if_addrs", return_value=INTERFACES):
            info = detector.get_host_network_info()

        assert info.interface_name == "wlan0"
        assert info.host_ip == "192.168.50.20"
        assert info.gateway_ip == "192.168.50.1"
        assert info.scan_netmask == "255.255.255.0"

    def test_socket_fallback_uses_default_netmask(self, tmp_path):
        detector = NetworkDetector(resolv_conf=str(tmp_path / "missing"))
        with patch(f"{MODULE}.subprocess.run", side_effect=FileNotFoundError("ip")), \
                patch(f"{MODULE}.psutil.net_if_addrs", return_value={"lo": [inet("127.0.0.1")]}), \
                patch.object(NetworkDetector, "_get_ip_via_socket", return_value="192.168.7.7"):
            info = detector.get_host_network_info()

        assert info.host_ip == "192.168.7.7"
        assert info.interface_netmask == "255.255.255.0"
        assert info.dns_servers == []

    def test_no_address_raises(self):
        detector = NetworkDetector()
        with patch(f"{MODULE}.subprocess.run", side_effect=FileNotFoundError("ip")), \
                patch(f"{MODULE}.psutil.net_if_addrs", return_value={"lo": [inet("127.0.0.1")]}), \
                patch.object(NetworkDetector, "_get_ip_via_socket", return_value=""):
            with pytest.raises(NetworkDetectionError):
                detector.get_host_network_info()


def test_get_gateway_ip_reads_default_route():
    with patch(f"{MODULE}.subprocess.run", return_value=route_output("default via 192.168.1.254 dev eth0\n")):
        assert NetworkDetector().get_gateway_ip() == "192.168.1.254"
    with patch(f"{MODULE}.subprocess.run", side_effect=FileNotFoundError("ip")):
        assert NetworkDetector().get_gateway_ip() == ""
