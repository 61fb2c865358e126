"""
Tests for the identification cascade with every network probe patched.
"""

from unittest.mock import DEFAULT, patch

import pytest

from lan_discovery.config.config_loader import ProbeConfig
from lan_discovery.core.data_models import DeviceIdentification, DeviceType, ProbeResult
from lan_discovery.core.device_identifier import DeviceIdentifier

MODULE = "lan_discovery.core.device_identifier"

ASUS_BANNER = 'HTTP/1.1 401 Unauthorized\nServer: httpd/3.0\nWWW-Authenticate: Basic realm="ASUS RT-AX88U"'


@pytest.fixture
def probes():
    """Patch every network probe; all answer negatively unless a test says otherwise."""
    with patch.multiple(
        MODULE,
        query_ubiquiti=DEFAULT,
        reverse_dns=DEFAULT,
        query_netbios_name=DEFAULT,
        grab_http_banner=DEFAULT,
        query_mdns_name=DEFAULT,
        scan_open_ports=DEFAULT,
    ) as mocks:
        for name in ("query_ubiquiti", "reverse_dns", "query_netbios_name", "grab_http_banner", "query_mdns_name"):
            mocks[name].return_value = ProbeResult.negative()
        mocks["scan_open_ports"].return_value = []
        yield mocks


@pytest.fixture
def identifier():
    return DeviceIdentifier(ProbeConfig())


def test_ubiquiti_answer_short_circuits(identifier, probes):
    answer = DeviceIdentification(
        hostname="Office-AP", vendor="Ubiquiti", model="U6-Pro (WiFi 6 AP)",
        device_type=DeviceType.ACCESS_POINT, source="ubiquiti",
    )
    probes["query_ubiquiti"].return_value = ProbeResult.positive(5, answer)

    result = identifier.identify("192.168.1.20", thorough=True)

    assert result is answer
    probes["reverse_dns"].assert_not_called()
    probes["scan_open_ports"].assert_not_called()
    probes["grab_http_banner"].assert_not_called()


def test_fast_mode_uses_dns_and_oui_vendor(identifier, probes):
    probes["reverse_dns"].return_value = ProbeResult.positive(2, "printer-office.lan")

    result = identifier.identify("192.168.1.30", mac_address="B8:27:EB:12:34:56")

    assert result.hostname == "printer-office.lan"
    assert result.vendor == "Raspberry Pi"
    assert result.device_type is DeviceType.PRINTER
    assert result.source == "dns"
    assert result.open_ports == []
    probes["query_netbios_name"].assert_not_called()
    probes["grab_http_banner"].assert_not_called()
    probes["query_mdns_name"].assert_not_called()
    probes["scan_open_ports"].assert_not_called()


def test_gateway_gets_router_type_and_inferred_model(identifier, probes):
    result = identifier.identify("192.168.1.1", mac_vendor="TP-Link", is_gateway=True)

    assert result.device_type is DeviceType.ROUTER
    assert result.model == "Wireless Router"
    assert result.source == "mac"


def test_unknown_host_is_generic_device(identifier, probes):
    result = identifier.identify("192.168.1.40")

    assert result.device_type is DeviceType.DEVICE
    assert result.vendor == ""
    assert result.model == ""


def test_thorough_uses_netbios_before_mdns(identifier, probes):
    probes["query_netbios_name"].return_value = ProbeResult.positive(3, "NAS-BOX")
    probes["scan_open_ports"].return_value = [445, 5000]

    result = identifier.identify("192.168.1.50", thorough=True)

    assert result.hostname == "NAS-BOX"
    assert result.source == "netbios"
    assert result.device_type is DeviceType.NAS
    assert result.open_ports == [445, 5000]
    probes["query_mdns_name"].assert_not_called()
    config = identifier.probe_config
    probes["scan_open_ports"].assert_called_once_with(
        "192.168.1.50", config.fingerprint_ports, config.fingerprint_timeout
    )


def test_thorough_http_banner_fills_empty_fields(identifier, probes):
    probes["grab_http_banner"].return_value = ProbeResult.positive(10, ASUS_BANNER)
    probes["scan_open_ports"].return_value = [53, 80]

    result = identifier.identify("192.168.1.2", thorough=True)

    assert result.vendor == "ASUS"
    assert result.model == "RT-AX88U"
    assert result.firmware_version == "3.0"
    assert result.source == "http"
    assert result.device_type is DeviceType.ROUTER
    probes["query_mdns_name"].assert_called_once()


def test_http_banner_never_overwrites_known_values(identifier, probes):
    probes["reverse_dns"].return_value = ProbeResult.positive(1, "core-router")
    probes["grab_http_banner"].return_value = ProbeResult.positive(10, ASUS_BANNER)

    result = identifier.identify("192.168.1.2", mac_vendor="Netgear", thorough=True)

    assert result.hostname == "core-router"
    assert result.vendor == "Netgear"
    assert result.model == "RT-AX88U"


def test_mdns_is_last_resort_for_name(identifier, probes):
    probes["query_mdns_name"].return_value = ProbeResult.positive(4, "Living-Room-TV")

    result = identifier.identify("192.168.1.60", thorough=True)

    assert result.hostname == "Living-Room-TV"
    assert result.source == "mdns"
    assert result.device_type is DeviceType.SMART_TV


def test_probe_timeouts_come_from_config(probes):
    config = ProbeConfig(ubiquiti_timeout=0.3, netbios_timeout=0.2, mdns_timeout=0.1)
    DeviceIdentifier(config).identify("192.168.1.70", thorough=True)

    probes["query_ubiquiti"].assert_called_once_with("192.168.1.70", 0.3)
    probes["query_netbios_name"].assert_called_once_with("192.168.1.70", 0.2)
    probes["query_mdns_name"].assert_called_once_with("192.168.1.70", 0.1)
    probes["grab_http_banner"].assert_called_once_with(
        "192.168.1.70", config.http_ports, config.http_connect_timeout, config.http_read_timeout
    )
