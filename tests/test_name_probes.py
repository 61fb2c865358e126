"""
Tests for the NetBIOS and mDNS name probes.
"""

import socket
from unittest.mock import patch

import pytest

from lan_discovery.probes.mdns import MDNS_PORT, SERVICES_QUERY, parse_mdns_response, query_mdns_name
from lan_discovery.probes.netbios import (
    NAME_OFFSET,
    NAME_QUERY,
    NETBIOS_PORT,
    parse_netbios_response,
    query_netbios_name,
)


def netbios_answer(name: bytes) -> bytes:
    return b"\x00" * NAME_OFFSET + name.ljust(15, b" ") + b"\x00" * 20


class TestNetbios:

    def test_query_packet_layout(self):
        assert len(NAME_QUERY) == 50
        assert NAME_QUERY[12] == 0x20
        assert NAME_QUERY[-4:] == bytes([0x00, 0x21, 0x00, 0x01])

    def test_name_is_trimmed(self):
        assert parse_netbios_response(netbios_answer(b"FILESERVER")) == "FILESERVER"

    def test_nul_padding_removed(self):
        data = b"\x00" * NAME_OFFSET + b"WORKPC\x00\x00\x00\x00\x00\x00\x00\x00\x00" + b"\x00" * 4
        assert parse_netbios_response(data) == "WORKPC"

    def test_short_response_gives_no_name(self):
        assert parse_netbios_response(b"\x00" * NAME_OFFSET) == ""

    def test_query_positive(self):
        with patch("lan_discovery.probes.netbios.socket.socket") as mock_socket:
            sock = mock_socket.return_value.__enter__.return_value
            sock.recvfrom.return_value = (netbios_answer(b"NAS"), ("10.0.0.8", NETBIOS_PORT))

            result = query_netbios_name("10.0.0.8", timeout=0.3)

        sock.sendto.assert_called_once_with(NAME_QUERY, ("10.0.0.8", NETBIOS_PORT))
        assert result.ok
        assert result.value == "NAS"

    def test_query_timeout_negative(self):
        with patch("lan_discovery.probes.netbios.socket.socket") as mock_socket:
            mock_socket.return_value.__enter__.return_value.recvfrom.side_effect = socket.timeout()
            assert not query_netbios_name("10.0.0.8").ok

    def test_negative_timeout_rejected(self):
        with pytest.raises(ValueError):
            query_netbios_name("10.0.0.8", timeout=-1)


class TestMdns:

    def test_query_targets_service_enumeration(self):
        assert b"_services" in SERVICES_QUERY
        assert SERVICES_QUERY.endswith(bytes([0x00, 0x00, 0x0C, 0x00, 0x01]))

    def test_first_plain_token_is_taken(self):
        data = b"\x00" * 12 + b"\x09_services\x05local\x0cLivingRoomTV\x00\x00"
        assert parse_mdns_response(data) == "LivingRoomTV"

    def test_short_and_service_tokens_ignored(self):
        data = b"\x00" * 12 + b"\x03abc\x07_airplay\x0bhost.local.\x00"
        assert parse_mdns_response(data) == ""

    def test_header_only_is_empty(self):
        assert parse_mdns_response(b"\x00" * 12) == ""

    def test_query_positive(self):
        data = b"\x00" * 12 + b"\x07Kitchen\x00"
        with patch("lan_discovery.probes.mdns.socket.socket") as mock_socket:
            sock = mock_socket.return_value.__enter__.return_value
            sock.recvfrom.return_value = (data, ("10.0.0.9", MDNS_PORT))

            result = query_mdns_name("10.0.0.9")

        sock.sendto.assert_called_once_with(SERVICES_QUERY, ("10.0.0.9", MDNS_PORT))
        assert result.value == "Kitchen"

    def test_query_unreachable_negative(self):
        with patch("lan_discovery.probes.mdns.socket.socket") as mock_socket:
            mock_socket.return_value.__enter__.return_value.sendto.side_effect = OSError("unreachable")
            assert not query_mdns_name("10.0.0.9").ok
