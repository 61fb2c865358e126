"""
Scan session aggregate.

A ScanSession holds everything one discovery run produces: the local
network facts, the IP-keyed host records and the progress/state flags the
orchestrator updates while probe threads merge results concurrently.
"""

import bisect
import threading
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple

from .data_models import DeviceType, HostRecord, NetworkInfo, NetworkRange, ScanState
from ..utils.network_utils import ip_sort_key

MERGED_TEXT_FIELDS = ("hostname", "mac_address", "vendor", "model", "firmware_version", "discovery_source")

SessionListener = Callable[["ScanSession"], None]


class ScanSession:
    """
    Mutable, lock protected state of one discovery run.

    Host records are keyed by IP. Merges never remove a record and never
    overwrite a non-empty text field; the host list is always returned in
    numeric IP order.
    """

    def __init__(self, network_info: Optional[NetworkInfo] = None):
        self._lock = threading.RLock()
        self._hosts: Dict[str, HostRecord] = {}
        self._order: List[Tuple[int, str]] = []
        self._listeners: List[SessionListener] = []
        self._progress = 0.0
        self._state = ScanState.IDLE
        self._running = False
        self._cancel_event = threading.Event()
        self.errors: List[str] = []
        self.start_time: Optional[datetime] = None
        self.end_time: Optional[datetime] = None

        self.local_ip = ""
        self.gateway_ip = ""
        self.interface_netmask = ""
        self.scan_netmask = ""
        self.dns_servers: List[str] = []
        self.interface_name = ""
        self.network_range: Optional[NetworkRange] = None
        if network_info is not None:
            self.apply_network_info(network_info)

    def apply_network_info(self, network_info: NetworkInfo) -> None:
        self.local_ip = network_info.host_ip
        self.gateway_ip = network_info.gateway_ip
        self.interface_netmask = network_info.interface_netmask
        self.scan_netmask = network_info.scan_netmask
        self.dns_servers = list(network_info.dns_servers)
        self.interface_name = network_info.interface_name
        self.network_range = network_info.network_range

    # Host records

    def merge_host(self, record: HostRecord, authoritative_type: bool = False) -> HostRecord:
        """
        Insert a record or merge it into the existing one for the same IP.

        Non-empty text fields already set are kept; is_online is sticky;
        the smallest non-zero response time wins. The device type is
        replaced when the stored one is generic, or when the incoming
        type is authoritative (enrichment) and specific.

        Returns:
            A copy of the stored record after the merge
        """
        with self._lock:
            existing = self._hosts.get(record.ip)
            if existing is None:
                stored = HostRecord(**vars(record))
                self._hosts[record.ip] = stored
                bisect.insort(self._order, (ip_sort_key(record.ip), record.ip))
            else:
                stored = existing
                for name in MERGED_TEXT_FIELDS:
                    if not getattr(stored, name) and getattr(record, name):
                        setattr(stored, name, getattr(record, name))
                stored.is_online = stored.is_online or record.is_online
                if record.response_time_ms > 0 and (
                    stored.response_time_ms == 0 or record.response_time_ms < stored.response_time_ms
                ):
                    stored.response_time_ms = record.response_time_ms
                if self._should_replace_type(stored.device_type, record.device_type, authoritative_type):
                    stored.device_type = record.device_type
            snapshot = HostRecord(**vars(stored))

        self._notify()
        return snapshot

    @staticmethod
    def _should_replace_type(current: DeviceType, incoming: DeviceType, authoritative: bool) -> bool:
        if incoming is DeviceType.UNKNOWN or incoming is current:
            return False
        if current.is_generic:
            return True
        return authoritative and not incoming.is_generic

    def contains(self, ip: str) -> bool:
        with self._lock:
            return ip in self._hosts

    def get(self, ip: str) -> Optional[HostRecord]:
        with self._lock:
            record = self._hosts.get(ip)
            return HostRecord(**vars(record)) if record else None

    @property
    def hosts(self) -> List[HostRecord]:
        """Copies of all records, sorted by numeric IP."""
        with self._lock:
            return [HostRecord(**vars(self._hosts[ip])) for _, ip in self._order]

    @property
    def host_count(self) -> int:
        with self._lock:
            return len(self._hosts)

    def host_ips(self) -> List[str]:
        with self._lock:
            return [ip for _, ip in self._order]

    # Progress and lifecycle

    @property
    def progress(self) -> float:
        with self._lock:
            return self._progress

    def advance_progress(self, value: float) -> None:
        """Raise progress to value; progress never moves backwards."""
        value = min(max(value, 0.0), 1.0)
        with self._lock:
            if value <= self._progress:
                return
            self._progress = value
        self._notify()

    @property
    def state(self) -> ScanState:
        with self._lock:
            return self._state

    def set_state(self, state: ScanState) -> None:
        with self._lock:
            self._state = state
        self._notify()

    @property
    def running(self) -> bool:
        with self._lock:
            return self._running

    def mark_started(self) -> None:
        with self._lock:
            self._running = True
            self.start_time = datetime.now()
        self.set_state(ScanState.DISCOVERING)

    def mark_finished(self, complete: bool = False) -> None:
        """Enter DONE; a complete scan also reaches progress 1.0 in the same step."""
        with self._lock:
            self._running = False
            self.end_time = datetime.now()
            self._state = ScanState.DONE
            if complete:
                self._progress = 1.0
        self._notify()

    def cancel(self) -> None:
        self._cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def record_error(self, message: str) -> None:
        with self._lock:
            self.errors.append(message)

    @property
    def duration_seconds(self) -> float:
        if not self.start_time:
            return 0.0
        end = self.end_time or datetime.now()
        return (end - self.start_time).total_seconds()

    # Observers

    def add_listener(self, listener: SessionListener) -> None:
        """Register a callback invoked after every merge, progress or state change."""
        with self._lock:
            self._listeners.append(listener)

    def _notify(self) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener(self)
