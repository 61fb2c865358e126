"""
JSON Report Generator for the LAN discovery engine.

This module converts a finished ScanSession into a structured JSON report,
including timestamp based file naming and collision handling.
"""

import json
from collections import Counter
from datetime import datetime
from pathlib import Path
from typing import Any, Dict

from ..core.data_models import HostRecord
from ..core.scan_session import ScanSession
from .logger import get_logger

REQUIRED_TOP_LEVEL_KEYS = ("scan_metadata", "network_info", "statistics", "hosts")


def host_to_display_dict(record: HostRecord, local_ip: str = "", gateway_ip: str = "") -> Dict[str, Any]:
    """
    Convert a host record to a JSON-serializable dictionary.

    Args:
        record: Host record
        local_ip: Address of the scanning host
        gateway_ip: Default gateway address

    Returns:
        Dict with the record fields, the display name of the device type
        and is_local / is_gateway flags
    """
    return {
        "ip": record.ip,
        "hostname": record.hostname,
        "mac_address": record.mac_address,
        "vendor": record.vendor,
        "model": record.model,
        "firmware_version": record.firmware_version,
        "device_type": record.device_type.value,
        "is_online": record.is_online,
        "response_time_ms": record.response_time_ms,
        "discovery_source": record.discovery_source,
        "is_local": record.ip == local_ip,
        "is_gateway": record.ip == gateway_ip,
    }


class JSONReporter:
    """
    Handles generation of JSON reports from scan sessions.

    Reports are written as scan_<timestamp>.json in the output directory;
    an existing file gets a numeric suffix instead of being overwritten.
    """

    def __init__(self, output_directory: str = "results"):
        """
        Initialize the JSON reporter.

        Args:
            output_directory: Directory where JSON reports will be saved
        """
        self.output_directory = Path(output_directory)
        self.logger = get_logger(__name__)

    def generate_report(self, session: ScanSession) -> str:
        """
        Write a JSON report for a scan session.

        Args:
            session: Finished (or cancelled) scan session

        Returns:
            str: Path to the generated JSON file

        Raises:
            ValueError: If session is None or the report fails validation
            OSError: If the file cannot be written
        """
        if session is None:
            raise ValueError("Scan session cannot be None")

        timestamp = session.end_time or datetime.now()
        json_data = self.build_report(session, timestamp)
        if not self.validate_json_schema(json_data):
            raise ValueError("Report data failed schema validation")

        self.output_directory.mkdir(parents=True, exist_ok=True)
        filepath = self._handle_file_collision(self.output_directory / self._generate_filename(timestamp))

        try:
            with open(filepath, 'w', encoding='utf-8') as f:
                json.dump(json_data, f, indent=2, ensure_ascii=False, default=str)
        except OSError as e:
            self.logger.error(f"Failed to write JSON report to {filepath}: {e}")
            raise

        self.logger.info(f"JSON report successfully generated: {filepath}")
        return str(filepath)

    def build_report(self, session: ScanSession, timestamp: datetime) -> Dict[str, Any]:
        """Convert a session to the report dictionary."""
        hosts = session.hosts
        network_range = session.network_range

        scan_metadata = {
            "timestamp": timestamp.isoformat(),
            "scan_duration": round(session.duration_seconds, 2),
            "state": session.state.value,
            "cancelled": session.cancelled,
            "progress": round(session.progress, 3),
            "errors": list(session.errors),
        }

        network_info = {
            "local_ip": session.local_ip,
            "gateway_ip": session.gateway_ip,
            "interface_name": session.interface_name,
            "interface_netmask": session.interface_netmask,
            "scan_netmask": session.scan_netmask,
            "dns_servers": list(session.dns_servers),
            "network": network_range.cidr if network_range else "",
            "candidate_count": len(network_range.candidates) if network_range else 0,
        }

        statistics = {
            "hosts_total": len(hosts),
            "by_device_type": dict(Counter(host.device_type.value for host in hosts)),
            "by_discovery_source": dict(Counter(host.discovery_source or "unknown" for host in hosts)),
            "with_mac": sum(1 for host in hosts if host.mac_address),
            "with_vendor": sum(1 for host in hosts if host.vendor),
        }

        return {
            "scan_metadata": scan_metadata,
            "network_info": network_info,
            "statistics": statistics,
            "hosts": [host_to_display_dict(host, session.local_ip, session.gateway_ip) for host in hosts],
        }

    def validate_json_schema(self, json_data: Dict[str, Any]) -> bool:
        """
        Validate that report data has the expected structure.

        Returns:
            bool: True if schema is valid, False otherwise
        """
        for key in REQUIRED_TOP_LEVEL_KEYS:
            if key not in json_data:
                self.logger.error(f"Missing required top-level key: {key}")
                return False

        hosts = json_data["hosts"]
        if not isinstance(hosts, list):
            self.logger.error("Hosts must be a list")
            return False

        for host in hosts:
            if "ip" not in host:
                self.logger.error("Host missing required ip field")
                return False
        return True

    def _generate_filename(self, timestamp: datetime) -> str:
        # Format: scan_YYYYMMDD_HHMMSS.json
        return f"scan_{timestamp.strftime('%Y%m%d_%H%M%S')}.json"

    def _handle_file_collision(self, filepath: Path) -> Path:
        """
        Handle filename collisions by adding incremental suffix.

        Returns:
            Path: Unique file path
        """
        if not filepath.exists():
            return filepath

        base_name = filepath.stem
        extension = filepath.suffix
        for counter in range(1, 1000):
            new_filepath = filepath.parent / f"{base_name}_{counter:03d}{extension}"
            if not new_filepath.exists():
                self.logger.debug(f"File collision detected, using filename: {new_filepath.name}")
                return new_filepath
        raise OSError(f"Too many file collisions for {filepath}")
