"""
Scanner Orchestrator for the LAN discovery engine.

This module provides the ScannerOrchestrator class that runs the tiered
discovery pipeline against one ScanSession: external tools, ARP table
harvest, in-process reachability sweep, gateway check, identification
enrichment and a final ARP re-check. Each tier only adds to or fills in
the session, so a failing tier never undoes the work of an earlier one.
"""

import threading
import time
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Callable, List, Optional, Sequence, Tuple

from .data_models import DeviceType, HostRecord, NetworkInfo, PartialHostInfo, ScanState
from .device_classifier import DeviceClassifier
from .device_identifier import DeviceIdentifier
from .mac_vendors import lookup_vendor
from .network_detector import NetworkDetector
from .network_range import is_ip_in_range
from .scan_session import ScanSession
from ..config.config_loader import ConfigLoader, DiscoveryConfig, ProbeConfig
from ..probes.reachability import fast_probe, thorough_probe, trigger_arp_entry
from ..scanners.arp_scanner import ARPScanner
from ..scanners.arp_table import ArpTableReader
from ..scanners.base_scanner import BaseScanner, NullScanner
from ..scanners.nmap_scanner import NMAPScanner
from ..scanners.ping_sweep_scanner import PingSweepScanner
from ..utils.error_handler import ErrorContext, ErrorHandler, ErrorSeverity, ErrorType
from ..utils.logger import get_logger

# Progress band boundaries of the pipeline tiers
PROGRESS_START = 0.05
PROGRESS_TOOLS_DONE = 0.20
PROGRESS_ARP_DONE = 0.25
PROGRESS_TRIGGER_DONE = 0.40
PROGRESS_SWEEP_DONE = 0.70
PROGRESS_ENRICH_DONE = 0.95


class ScannerOrchestrator:
    """
    Orchestrates the tiered discovery pipeline.

    Collaborators (external scanners, ARP table reader, identifier and the
    probe functions) can be injected, which is how the tests drive the
    pipeline without touching the network.
    """

    def __init__(
        self,
        config_dir: Optional[str] = None,
        discovery_config: Optional[DiscoveryConfig] = None,
        probe_config: Optional[ProbeConfig] = None,
        use_external_tools: bool = True,
        network_detector: Optional[NetworkDetector] = None,
        scanners: Optional[Sequence[BaseScanner]] = None,
        arp_table: Optional[ArpTableReader] = None,
        identifier: Optional[DeviceIdentifier] = None,
        trigger: Optional[Callable] = None,
        prober: Optional[Callable] = None,
        gateway_prober: Optional[Callable] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the scanner orchestrator.

        Args:
            config_dir: Directory containing configuration files (optional)
            discovery_config: Overrides the discovery configuration file
            probe_config: Overrides the probe configuration file
            use_external_tools: Allow nmap, arp-scan and fping
            network_detector: Source of NetworkInfo for new sessions
            scanners: External tool tiers tried in order
            arp_table: System ARP table reader
            identifier: Identification cascade
            trigger: ARP trigger function (ip, probe_config)
            prober: Batch reachability function (ip, probe_config)
            gateway_prober: Relaxed reachability function (ip, probe_config, icmp_timeout)
            sleep: Delay function used for the ARP settle waits
        """
        self.logger = get_logger(__name__)
        self.error_handler = ErrorHandler(self.logger)
        self.config_loader = ConfigLoader(config_dir)

        self.discovery_config = discovery_config or self.config_loader.load_discovery_config()
        self.probe_config = probe_config or self.config_loader.load_probe_config()

        self.network_detector = network_detector or NetworkDetector(self.discovery_config)
        self.arp_table = arp_table or ArpTableReader(self.logger)
        if identifier is None:
            classifier = DeviceClassifier.from_overrides(self.config_loader.load_classification_rules())
            identifier = DeviceIdentifier(self.probe_config, classifier, self.logger)
        self.identifier = identifier

        self.scanners = list(scanners) if scanners is not None else self._build_scanners(use_external_tools)

        self._trigger = trigger or trigger_arp_entry
        self._prober = prober or fast_probe
        self._gateway_prober = gateway_prober or thorough_probe
        self._sleep = sleep

        self.session: Optional[ScanSession] = None
        self._thread: Optional[threading.Thread] = None

    def _build_scanners(self, use_external_tools: bool) -> List[BaseScanner]:
        config = self.discovery_config
        if not use_external_tools:
            return [NullScanner()]
        return [
            NMAPScanner(self.logger, config.tool_timeout) if config.use_nmap else NullScanner(),
            ARPScanner(self.logger, config.tool_timeout) if config.use_arp_scan else NullScanner(),
            PingSweepScanner(self.logger, config.tool_timeout) if config.use_fping else NullScanner(),
        ]

    # Lifecycle

    def create_session(self, network_info: Optional[NetworkInfo] = None) -> ScanSession:
        """
        Build a session for the local network.

        Raises:
            NetworkDetectionError: If no local IPv4 address can be found
        """
        if network_info is None:
            network_info = self.network_detector.get_host_network_info()
        return ScanSession(network_info)

    def start_scan(self, network_info: Optional[NetworkInfo] = None,
                   listener: Optional[Callable[[ScanSession], None]] = None) -> ScanSession:
        """
        Start a scan on a background thread.

        Args:
            network_info: Network to scan; detected when omitted
            listener: Callback registered on the session before the scan starts

        Returns:
            ScanSession: The live session; poll it or register a listener
        """
        if self._thread is not None and self._thread.is_alive():
            self.logger.warning("A scan is already running")
            return self.session

        self.session = self.create_session(network_info)
        if listener is not None:
            self.session.add_listener(listener)
        self._thread = threading.Thread(
            target=self._run, args=(self.session,), name="lan-discovery-scan", daemon=True
        )
        self._thread.start()
        return self.session

    def stop_scan(self) -> None:
        """Request cancellation; waves in flight finish, no new wave starts."""
        if self.session is not None:
            self.logger.info("Stopping scan")
            self.session.cancel()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for the background scan.

        Returns:
            bool: True when the scan has finished
        """
        if self._thread is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def execute_scan(self, network_info: Optional[NetworkInfo] = None) -> ScanSession:
        """Run a complete scan synchronously and return the finished session."""
        self.session = self.create_session(network_info)
        self._run(self.session)
        return self.session

    def _run(self, session: ScanSession) -> None:
        self.logger.info(
            f"Scanning {session.network_range.cidr} "
            f"({len(session.network_range.candidates)} candidate addresses)"
        )
        session.mark_started()
        session.advance_progress(PROGRESS_START)
        completed = False
        try:
            with ThreadPoolExecutor(max_workers=self.discovery_config.max_workers) as pool:
                self._pipeline(session, pool)
            completed = not session.cancelled
        except Exception as e:
            context = ErrorContext(
                error_type=ErrorType.SCAN_ERROR,
                severity=ErrorSeverity.HIGH,
                operation="execute_scan",
                component="ScannerOrchestrator",
            )
            self.error_handler.handle_error(e, context)
            session.record_error(str(e))
        finally:
            session.mark_finished(complete=completed)

        if session.cancelled:
            self.logger.warning(f"Scan cancelled with {session.host_count} hosts found")
        else:
            self.logger.success(f"Scan complete: {session.host_count} hosts in {session.duration_seconds:.1f}s")

    def _pipeline(self, session: ScanSession, pool: ThreadPoolExecutor) -> None:
        tiers = (
            self._discover_with_tools,
            self._merge_arp_table,
            self._trigger_and_harvest,
            self._sweep,
            self._ensure_gateway,
            self._enrich,
            self._final_arp_check,
        )
        for tier in tiers:
            if session.cancelled:
                return
            tier(session, pool)

    # Tiers

    def _discover_with_tools(self, session: ScanSession, pool: ThreadPoolExecutor) -> None:
        """Tiers 1-3: the first external tool that reports hosts wins."""
        for scanner in self.scanners:
            if session.cancelled:
                return
            partials = scanner.try_discover(session.network_range)
            if partials:
                added = self._merge_partials(session, partials, scanner.name)
                self.logger.info(f"{scanner.name} discovered {added} hosts")
                break
        session.advance_progress(PROGRESS_TOOLS_DONE)

    def _merge_arp_table(self, session: ScanSession, pool: ThreadPoolExecutor) -> None:
        """Tier 4: hosts the kernel already knows about."""
        added = self._harvest_arp(session, "arp-table")
        self.logger.debug(f"ARP table added {added} hosts")
        session.advance_progress(PROGRESS_ARP_DONE)

    def _trigger_and_harvest(self, session: ScanSession, pool: ThreadPoolExecutor) -> None:
        """Tier 5: poke every candidate so the kernel resolves its MAC, then read the table."""
        candidates = session.network_range.candidates
        total = max(len(candidates), 1)
        done = 0
        for wave in _chunks(candidates, self.discovery_config.sweep_batch_size):
            if session.cancelled:
                return
            self._run_wave(session, pool, lambda ip: self._trigger(ip, self.probe_config), wave)
            done += len(wave)
            session.advance_progress(
                PROGRESS_ARP_DONE + (PROGRESS_TRIGGER_DONE - PROGRESS_ARP_DONE) * done / total
            )

        self._sleep(self.discovery_config.arp_settle_delay)
        added = self._harvest_arp(session, "arp-trigger")
        self.logger.debug(f"ARP trigger harvest added {added} hosts")
        session.advance_progress(PROGRESS_TRIGGER_DONE)

    def _sweep(self, session: ScanSession, pool: ThreadPoolExecutor) -> None:
        """Tier 6: fast reachability probe of every candidate still unknown."""
        remaining = [ip for ip in session.network_range.candidates if not session.contains(ip)]
        total = max(len(remaining), 1)
        done = 0
        found = 0
        for wave in _chunks(remaining, self.discovery_config.sweep_batch_size):
            if session.cancelled:
                return
            results = self._run_wave(session, pool, lambda ip: self._prober(ip, self.probe_config), wave)
            arp_entries = dict(self.arp_table.read())
            for ip, result in results:
                mac = arp_entries.get(ip, "")
                if result.ok or mac:
                    session.merge_host(self._new_record(
                        ip, mac, source="ping-sweep",
                        response_time_ms=result.elapsed_ms if result.ok else 0,
                    ))
                    found += 1
            done += len(wave)
            session.advance_progress(
                PROGRESS_TRIGGER_DONE + (PROGRESS_SWEEP_DONE - PROGRESS_TRIGGER_DONE) * done / total
            )
        self.logger.debug(f"Reachability sweep found {found} of {len(remaining)} remaining hosts")
        session.advance_progress(PROGRESS_SWEEP_DONE)

    def _ensure_gateway(self, session: ScanSession, pool: ThreadPoolExecutor) -> None:
        """Tier 7: confirm the gateway with a relaxed thorough probe."""
        gateway_ip = session.gateway_ip
        if not gateway_ip or session.contains(gateway_ip):
            return

        result = self._gateway_prober(gateway_ip, self.probe_config, self.discovery_config.gateway_timeout)
        mac = self.arp_table.mac_for(gateway_ip)
        if not result.ok and not mac:
            self.logger.debug(f"Gateway {gateway_ip} did not answer")
            return

        vendor = lookup_vendor(mac)
        identification = self.identifier.identify(gateway_ip, mac, vendor, is_gateway=True)
        device_type = identification.device_type
        if device_type.is_generic:
            device_type = DeviceType.ROUTER

        session.merge_host(HostRecord(
            ip=gateway_ip,
            hostname=identification.hostname or "Gateway",
            mac_address=mac,
            vendor=identification.vendor or vendor,
            model=identification.model,
            firmware_version=identification.firmware_version,
            is_online=True,
            response_time_ms=result.elapsed_ms if result.ok else 0,
            device_type=device_type,
            discovery_source="gateway",
        ))
        session.advance_progress(PROGRESS_SWEEP_DONE)

    def _enrich(self, session: ScanSession, pool: ThreadPoolExecutor) -> None:
        """Tier 8: fast identification cascade for every host found so far."""
        session.set_state(ScanState.ENRICHING)
        hosts = session.hosts
        total = max(len(hosts), 1)
        done = 0
        for wave in _chunks(hosts, self.discovery_config.enrich_batch_size):
            if session.cancelled:
                return
            results = self._run_wave(
                session, pool,
                lambda record: self.identifier.identify(
                    record.ip, record.mac_address, record.vendor, record.ip == session.gateway_ip
                ),
                wave,
            )
            for record, identification in results:
                session.merge_host(HostRecord(
                    ip=record.ip,
                    hostname=identification.hostname,
                    vendor=identification.vendor,
                    model=identification.model,
                    firmware_version=identification.firmware_version,
                    device_type=identification.device_type,
                ), authoritative_type=True)
            done += len(wave)
            session.advance_progress(
                PROGRESS_SWEEP_DONE + (PROGRESS_ENRICH_DONE - PROGRESS_SWEEP_DONE) * done / total
            )
        session.advance_progress(PROGRESS_ENRICH_DONE)

    def _final_arp_check(self, session: ScanSession, pool: ThreadPoolExecutor) -> None:
        """Tier 9: late ARP entries get identified and added."""
        self._sleep(self.discovery_config.final_arp_delay)
        late = [
            (ip, mac) for ip, mac in self.arp_table.read()
            if is_ip_in_range(ip, session.network_range) and not session.contains(ip)
        ]
        for ip, mac in late:
            if session.cancelled:
                return
            vendor = lookup_vendor(mac)
            identification = self.identifier.identify(ip, mac, vendor, ip == session.gateway_ip)
            session.merge_host(HostRecord(
                ip=ip,
                hostname=identification.hostname,
                mac_address=mac,
                vendor=identification.vendor or vendor,
                model=identification.model,
                firmware_version=identification.firmware_version,
                is_online=True,
                device_type=identification.device_type,
                discovery_source="arp-final",
            ), authoritative_type=True)
        if late:
            self.logger.debug(f"Final ARP check added {len(late)} hosts")

    # Single host drill-down

    def identify_host(self, ip_address: str, is_gateway: Optional[bool] = None) -> HostRecord:
        """
        Run the thorough cascade against one address.

        Without an explicit is_gateway the address is compared with the
        gateway of the last scan, or with the default route when no scan ran.

        Returns:
            HostRecord: Reachability and identification of the target
        """
        result = self._gateway_prober(ip_address, self.probe_config, None)
        mac = self.arp_table.mac_for(ip_address)
        vendor = lookup_vendor(mac)
        if is_gateway is None:
            gateway_ip = self.session.gateway_ip if self.session else self.network_detector.get_gateway_ip()
            is_gateway = ip_address == gateway_ip
        identification = self.identifier.identify(ip_address, mac, vendor, is_gateway, thorough=True)
        return HostRecord(
            ip=ip_address,
            hostname=identification.hostname,
            mac_address=mac,
            vendor=identification.vendor or vendor,
            model=identification.model,
            firmware_version=identification.firmware_version,
            is_online=result.ok or bool(mac),
            response_time_ms=result.elapsed_ms if result.ok else 0,
            device_type=identification.device_type,
            discovery_source="drill-down",
        )

    # Helpers

    def _run_wave(self, session: ScanSession, pool: ThreadPoolExecutor, func: Callable, items: Sequence) -> List[Tuple]:
        """
        Run func over one wave of items and wait for all of them.

        Returns:
            (item, result) pairs for the calls that completed without raising
        """
        futures = {pool.submit(func, item): item for item in items}
        wait(futures)
        results = []
        for future, item in futures.items():
            error = future.exception()
            if error is not None:
                self.logger.debug(f"Probe of {getattr(item, 'ip', item)} failed: {error}")
                session.record_error(f"{getattr(item, 'ip', item)}: {error}")
                continue
            results.append((item, future.result()))
        return results

    def _merge_partials(self, session: ScanSession, partials: List[PartialHostInfo], source: str) -> int:
        arp_entries = {}
        if any(not partial.mac_address for partial in partials):
            arp_entries = dict(self.arp_table.read())

        added = 0
        for partial in partials:
            if not is_ip_in_range(partial.ip, session.network_range):
                continue
            if not session.contains(partial.ip):
                added += 1
            mac = partial.mac_address or arp_entries.get(partial.ip, "")
            session.merge_host(self._new_record(partial.ip, mac, partial.hostname, source))
        return added

    def _harvest_arp(self, session: ScanSession, source: str) -> int:
        added = 0
        for ip, mac in self.arp_table.read():
            if not is_ip_in_range(ip, session.network_range):
                continue
            if not session.contains(ip):
                added += 1
            session.merge_host(self._new_record(ip, mac, source=source))
        return added

    @staticmethod
    def _new_record(ip: str, mac: str, hostname: str = "", source: str = "", response_time_ms: int = 0) -> HostRecord:
        return HostRecord(
            ip=ip,
            hostname=hostname,
            mac_address=mac,
            vendor=lookup_vendor(mac),
            is_online=True,
            response_time_ms=response_time_ms,
            device_type=DeviceType.DEVICE,
            discovery_source=source,
        )


def _chunks(items: Sequence, size: int):
    size = max(size, 1)
    for start in range(0, len(items), size):
        yield items[start:start + size]
