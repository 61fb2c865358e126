"""
Tests for ScanSession merge rules, ordering, progress and listeners.
"""

import threading

from lan_discovery.core.data_models import DeviceType, HostRecord, ScanState
from lan_discovery.core.scan_session import ScanSession


def test_session_copies_network_info(network_info):
    session = ScanSession(network_info)
    assert session.local_ip == "192.168.1.10"
    assert session.gateway_ip == "192.168.1.1"
    assert session.network_range.cidr == "192.168.1.0/28"
    assert session.state is ScanState.IDLE
    assert session.progress == 0.0


def test_one_record_per_ip():
    session = ScanSession()
    session.merge_host(HostRecord(ip="10.0.0.5", hostname="a"))
    session.merge_host(HostRecord(ip="10.0.0.5", mac_address="AA:BB:CC:DD:EE:FF"))
    hosts = session.hosts
    assert len(hosts) == 1
    assert hosts[0].hostname == "a"
    assert hosts[0].mac_address == "AA:BB:CC:DD:EE:FF"


def test_hosts_sorted_numerically():
    session = ScanSession()
    for ip in ["192.168.1.100", "192.168.1.2", "192.168.1.30", "192.168.1.9"]:
        session.merge_host(HostRecord(ip=ip))
    assert session.host_ips() == ["192.168.1.2", "192.168.1.9", "192.168.1.30", "192.168.1.100"]
    assert [h.ip for h in session.hosts] == session.host_ips()


def test_empty_value_never_erases_existing():
    session = ScanSession()
    session.merge_host(HostRecord(ip="10.0.0.5", hostname="foo", vendor="Apple"))
    session.merge_host(HostRecord(ip="10.0.0.5", hostname="", vendor=""))
    record = session.get("10.0.0.5")
    assert record.hostname == "foo"
    assert record.vendor == "Apple"


def test_first_writer_wins_for_text_fields():
    session = ScanSession()
    session.merge_host(HostRecord(ip="10.0.0.5", hostname="nmap-name", discovery_source="nmap"))
    session.merge_host(HostRecord(ip="10.0.0.5", hostname="dns-name", discovery_source="arp-table"))
    record = session.get("10.0.0.5")
    assert record.hostname == "nmap-name"
    assert record.discovery_source == "nmap"


def test_online_is_sticky_and_fastest_latency_kept():
    session = ScanSession()
    session.merge_host(HostRecord(ip="10.0.0.5", is_online=True, response_time_ms=20))
    session.merge_host(HostRecord(ip="10.0.0.5", is_online=False, response_time_ms=0))
    session.merge_host(HostRecord(ip="10.0.0.5", response_time_ms=7))
    session.merge_host(HostRecord(ip="10.0.0.5", response_time_ms=12))
    record = session.get("10.0.0.5")
    assert record.is_online
    assert record.response_time_ms == 7


def test_generic_type_upgraded_by_any_specific_type():
    session = ScanSession()
    session.merge_host(HostRecord(ip="10.0.0.5", device_type=DeviceType.DEVICE))
    session.merge_host(HostRecord(ip="10.0.0.5", device_type=DeviceType.PRINTER))
    assert session.get("10.0.0.5").device_type is DeviceType.PRINTER


def test_unknown_never_replaces_a_type():
    session = ScanSession()
    session.merge_host(HostRecord(ip="10.0.0.5", device_type=DeviceType.DEVICE))
    session.merge_host(HostRecord(ip="10.0.0.5", device_type=DeviceType.UNKNOWN))
    assert session.get("10.0.0.5").device_type is DeviceType.DEVICE


def test_specific_type_only_replaced_when_authoritative():
    session = ScanSession()
    session.merge_host(HostRecord(ip="10.0.0.5", device_type=DeviceType.ROUTER))
    session.merge_host(HostRecord(ip="10.0.0.5", device_type=DeviceType.ACCESS_POINT))
    assert session.get("10.0.0.5").device_type is DeviceType.ROUTER

    session.merge_host(HostRecord(ip="10.0.0.5", device_type=DeviceType.ACCESS_POINT), authoritative_type=True)
    assert session.get("10.0.0.5").device_type is DeviceType.ACCESS_POINT

    session.merge_host(HostRecord(ip="10.0.0.5", device_type=DeviceType.DEVICE), authoritative_type=True)
    assert session.get("10.0.0.5").device_type is DeviceType.ACCESS_POINT


def test_returned_records_are_copies():
    session = ScanSession()
    session.merge_host(HostRecord(ip="10.0.0.5", hostname="a"))
    session.hosts[0].hostname = "changed"
    session.get("10.0.0.5").hostname = "changed"
    assert session.get("10.0.0.5").hostname == "a"


def test_progress_never_moves_backwards():
    session = ScanSession()
    session.advance_progress(0.4)
    session.advance_progress(0.2)
    assert session.progress == 0.4
    session.advance_progress(7)
    assert session.progress == 1.0


def test_listener_called_on_changes():
    session = ScanSession()
    seen = []
    session.add_listener(lambda s: seen.append((s.host_count, s.progress)))
    session.merge_host(HostRecord(ip="10.0.0.5"))
    session.advance_progress(0.5)
    session.advance_progress(0.3)
    assert seen == [(1, 0.0), (1, 0.5)]


def test_cancel_and_lifecycle():
    session = ScanSession()
    session.mark_started()
    assert session.running
    assert session.state is ScanState.DISCOVERING
    session.cancel()
    assert session.cancelled
    session.mark_finished()
    assert not session.running
    assert session.state is ScanState.DONE
    assert session.duration_seconds >= 0


def test_concurrent_merges_keep_one_record_per_ip():
    session = ScanSession()
    ips = [f"10.0.{i // 250}.{i % 250 + 1}" for i in range(500)]

    def worker():
        for ip in ips:
            session.merge_host(HostRecord(ip=ip, is_online=True))

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert session.host_count == 500
    assert len(set(session.host_ips())) == 500


def test_complete_finish_reaches_done_and_full_progress_together():
    session = ScanSession()
    seen = []
    session.add_listener(lambda s: seen.append((s.progress, s.state)))
    session.mark_started()
    session.advance_progress(0.95)
    session.mark_finished(complete=True)
    assert seen[-1] == (1.0, ScanState.DONE)
    assert all(state is ScanState.DONE for value, state in seen if value == 1.0)


def test_incomplete_finish_keeps_progress():
    session = ScanSession()
    session.mark_started()
    session.advance_progress(0.4)
    session.mark_finished()
    assert session.state is ScanState.DONE
    assert session.progress == 0.4
