"""
Tests for the reachability probe primitives.

Sockets and the ping process are patched, so no traffic leaves the host.
"""

import socket
import subprocess
from unittest.mock import MagicMock, patch

import pytest

from lan_discovery.config.config_loader import ProbeConfig
from lan_discovery.core.data_models import ProbeResult
from lan_discovery.probes import reachability
from lan_discovery.probes.ubiquiti import DISCOVERY_REQUEST
from lan_discovery.probes.reachability import (
    build_ping_command,
    fast_probe,
    icmp_echo,
    reverse_dns,
    scan_open_ports,
    tcp_connect,
    thorough_probe,
    trigger_arp_entry,
    udp_probe,
)

MODULE = "lan_discovery.probes.reachability"


class TestPingCommand:

    def test_linux_rounds_up_to_seconds(self):
        with patch(f"{MODULE}.platform.system", return_value="Linux"):
            assert build_ping_command("10.0.0.1", 0.1) == ["ping", "-c", "1", "-W", "1", "10.0.0.1"]

    def test_windows_uses_milliseconds(self):
        with patch(f"{MODULE}.platform.system", return_value="Windows"):
            assert build_ping_command("10.0.0.1", 0.2) == ["ping", "-n", "1", "-w", "200", "10.0.0.1"]

    def test_macos_uses_milliseconds(self):
        with patch(f"{MODULE}.platform.system", return_value="Darwin"):
            assert build_ping_command("10.0.0.1", 2.0) == ["ping", "-c", "1", "-W", "2000", "10.0.0.1"]


class TestIcmpEcho:

    def test_reply_is_positive(self):
        with patch(f"{MODULE}.subprocess.run", return_value=MagicMock(returncode=0)) as mock_run:
            result = icmp_echo("10.0.0.1", 0.1)
        assert result.ok
        assert mock_run.call_args.kwargs["timeout"] == pytest.approx(0.1 + reachability.PROCESS_SLACK)

    def test_no_reply_is_negative(self):
        with patch(f"{MODULE}.subprocess.run", return_value=MagicMock(returncode=1)):
            assert not icmp_echo("10.0.0.1", 0.1).ok

    @pytest.mark.parametrize("error", [
        subprocess.TimeoutExpired(cmd="ping", timeout=0.15),
        FileNotFoundError("ping"),
        PermissionError("ping"),
    ])
    def test_process_failures_are_negative(self, error):
        with patch(f"{MODULE}.subprocess.run", side_effect=error):
            assert not icmp_echo("10.0.0.1", 0.1).ok

    def test_malformed_input_raises(self):
        with pytest.raises(ValueError):
            icmp_echo("10.0.0", 0.1)
        with pytest.raises(ValueError):
            icmp_echo("10.0.0.1", -0.1)


class TestTcpConnect:

    def test_first_open_port_wins(self):
        with patch(f"{MODULE}.socket.create_connection",
                   side_effect=[ConnectionRefusedError(), MagicMock()]) as mock_connect:
            result = tcp_connect("10.0.0.1", [80, 443, 22], 0.05)
        assert result.ok
        assert result.value == 443
        assert mock_connect.call_count == 2

    def test_refused_everywhere_is_negative(self):
        with patch(f"{MODULE}.socket.create_connection", side_effect=ConnectionRefusedError()):
            assert not tcp_connect("10.0.0.1", [80, 443], 0.05).ok

    def test_timeout_is_negative(self):
        with patch(f"{MODULE}.socket.create_connection", side_effect=socket.timeout()):
            assert not tcp_connect("10.0.0.1", [80], 0.05).ok

    @pytest.mark.parametrize("port", [0, 65536, True, "80"])
    def test_invalid_ports_raise(self, port):
        with pytest.raises(ValueError):
            tcp_connect("10.0.0.1", [port], 0.05)


class TestUdpProbe:

    def test_reply_is_positive(self):
        with patch(f"{MODULE}.socket.socket") as mock_socket:
            sock = mock_socket.return_value
            sock.recvfrom.side_effect = [socket.timeout(), (b"x", ("10.0.0.1", 161))]
            result = udp_probe("10.0.0.1", [53, 161], 0.1)
        assert result.ok
        assert result.value == 161

    def test_silence_is_negative(self):
        with patch(f"{MODULE}.socket.socket") as mock_socket:
            mock_socket.return_value.recvfrom.side_effect = socket.timeout()
            assert not udp_probe("10.0.0.1", [53], 0.1).ok


class TestComposedProbes:

    def test_fast_probe_stops_on_icmp(self):
        config = ProbeConfig()
        with patch(f"{MODULE}.icmp_echo", return_value=ProbeResult.positive(2)) as mock_icmp, \
                patch(f"{MODULE}.tcp_connect") as mock_tcp:
            assert fast_probe("10.0.0.1", config).ok
        mock_icmp.assert_called_once_with("10.0.0.1", config.fast_icmp_timeout)
        mock_tcp.assert_not_called()

    def test_fast_probe_falls_back_to_tcp(self):
        config = ProbeConfig()
        with patch(f"{MODULE}.icmp_echo", return_value=ProbeResult.negative(100)), \
                patch(f"{MODULE}.tcp_connect", return_value=ProbeResult.positive(1, 22)) as mock_tcp:
            result = fast_probe("10.0.0.1", config)
        mock_tcp.assert_called_once_with("10.0.0.1", config.fast_tcp_ports, config.fast_tcp_timeout)
        assert result.value == 22

    def test_thorough_probe_uses_timeout_override_then_udp(self):
        config = ProbeConfig()
        with patch(f"{MODULE}.icmp_echo", return_value=ProbeResult.negative()) as mock_icmp, \
                patch(f"{MODULE}.tcp_connect", return_value=ProbeResult.negative()) as mock_tcp, \
                patch(f"{MODULE}.udp_probe", return_value=ProbeResult.positive(4, 53)) as mock_udp:
            result = thorough_probe("10.0.0.1", config, 2.0)
        mock_icmp.assert_called_once_with("10.0.0.1", 2.0)
        mock_tcp.assert_called_once_with("10.0.0.1", config.thorough_tcp_ports, config.thorough_tcp_timeout)
        mock_udp.assert_called_once_with("10.0.0.1", config.udp_ports, config.udp_timeout)
        assert result.ok

    def test_trigger_sends_to_every_udp_port(self):
        config = ProbeConfig(trigger_udp_ports=[7, 137])
        with patch(f"{MODULE}.socket.socket") as mock_socket, \
                patch(f"{MODULE}.tcp_connect", return_value=ProbeResult.negative()) as mock_tcp:
            sock = mock_socket.return_value
            result = trigger_arp_entry("10.0.0.7", config)

        destinations = [call.args[1] for call in sock.sendto.call_args_list]
        assert destinations == [("10.0.0.7", 7), ("10.0.0.7", 137), ("10.0.0.7", 10001)]
        mock_tcp.assert_called_once_with("10.0.0.7", [80], config.trigger_tcp_timeout)
        assert not result.ok


def test_scan_open_ports_keeps_scan_order():
    def connect(address, timeout):
        if address[1] in (443, 22):
            return MagicMock()
        raise ConnectionRefusedError()

    with patch(f"{MODULE}.socket.create_connection", side_effect=connect):
        assert scan_open_ports("10.0.0.1", [22, 80, 443], 0.05) == [22, 443]


class TestReverseDns:

    def test_ptr_name(self):
        with patch(f"{MODULE}.socket.gethostbyaddr", return_value=("nas.lan", [], ["10.0.0.5"])):
            result = reverse_dns("10.0.0.5")
        assert result.ok
        assert result.value == "nas.lan"

    def test_name_equal_to_address_is_negative(self):
        with patch(f"{MODULE}.socket.gethostbyaddr", return_value=("10.0.0.5", [], ["10.0.0.5"])):
            assert not reverse_dns("10.0.0.5").ok

    def test_lookup_failure_is_negative(self):
        with patch(f"{MODULE}.socket.gethostbyaddr", side_effect=socket.herror("not found")):
            assert not reverse_dns("10.0.0.5").ok


def test_trigger_sends_only_discovery_request_to_ubiquiti_port():
    config = ProbeConfig(trigger_udp_ports=[7, 10001, 137])
    with patch(f"{MODULE}.socket.socket") as mock_socket, \
            patch(f"{MODULE}.tcp_connect", return_value=ProbeResult.negative()):
        sock = mock_socket.return_value
        trigger_arp_entry("10.0.0.7", config)

    sent = [(call.args[1][1], call.args[0]) for call in sock.sendto.call_args_list]
    assert sent == [(7, b"\x00"), (137, b"\x00"), (10001, DISCOVERY_REQUEST)]
