"""
Main entry point for the LAN discovery engine.

This module provides the command-line interface: argument parsing,
pre-flight tool checks, live progress output, graceful shutdown on
SIGINT/SIGTERM and the final host table and JSON report.
"""

import argparse
import signal
import sys
from pathlib import Path
from typing import Optional

from . import __version__
from .core.data_models import HostRecord
from .core.scan_session import ScanSession
from .core.scanner_orchestrator import ScannerOrchestrator
from .utils.error_handler import (
    ErrorContext,
    ErrorHandler,
    ErrorSeverity,
    ErrorType,
    NetworkDetectionError,
    ToolValidator,
)
from .utils.json_reporter import JSONReporter
from .utils.logger import LogLevel, get_logger, set_log_level
from .utils.network_utils import is_valid_ip

TABLE_HEADERS = ["IP Address", "Hostname", "MAC Address", "Vendor", "Model", "Type", "Latency"]
TABLE_WIDTHS = [15, 24, 17, 12, 18, 14, 8]

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INTERRUPTED = 130


class LanDiscoveryApp:
    """
    Main application class for the LAN discovery engine.

    Handles CLI interface, pre-flight checks, and application lifecycle.
    """

    def __init__(self):
        """Initialize the application."""
        self.logger = get_logger(__name__)
        self.error_handler = ErrorHandler(self.logger)
        self.orchestrator: Optional[ScannerOrchestrator] = None
        self.shutdown_requested = False

        # Register signal handlers for graceful shutdown
        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

    def _signal_handler(self, signum: int, frame) -> None:
        """
        Handle shutdown signals gracefully.

        The first signal cancels the running scan; the second one exits.
        """
        signal_names = {signal.SIGINT: "SIGINT", signal.SIGTERM: "SIGTERM"}
        signal_name = signal_names.get(signum, f"Signal {signum}")

        if not self.shutdown_requested:
            self.logger.warning(f"Received {signal_name} - stopping scan after the current wave...")
            self.shutdown_requested = True
            if self.orchestrator is not None:
                self.orchestrator.stop_scan()
        else:
            self.logger.error("Force shutdown requested - terminating immediately")
            sys.exit(EXIT_ERROR)

    def _perform_preflight_checks(self) -> None:
        """
        Report which optional discovery tools are available.

        Missing tools never stop a scan; they only remove a discovery tier.
        """
        self.logger.section("PRE-FLIGHT CHECKS")
        validator = ToolValidator(self.error_handler)
        availability, missing = validator.validate_all_tools()
        for tool, available in availability.items():
            if available:
                self.logger.info(f"{tool}: available")
        if missing:
            self.logger.warning(f"Optional tools not found: {', '.join(missing)}")
            validator.report_missing(missing)
        else:
            self.logger.success("All optional discovery tools are available")

    def _validate_paths(self, config_dir: Optional[str], output_dir: Optional[str]) -> tuple:
        """
        Validate configuration and output directories.

        Returns:
            tuple: (config_dir or None, output_dir or None)

        Raises:
            NotADirectoryError: If a given path is not usable as a directory
        """
        validated_config_dir = None
        if config_dir:
            config_path = Path(config_dir)
            if not config_path.is_dir():
                raise NotADirectoryError(f"Configuration directory does not exist: {config_dir}")
            validated_config_dir = str(config_path.resolve())
            self.logger.info(f"Using configuration directory: {validated_config_dir}")

        validated_output_dir = None
        if output_dir:
            output_path = Path(output_dir)
            output_path.mkdir(parents=True, exist_ok=True)
            validated_output_dir = str(output_path.resolve())
            self.logger.info(f"Using output directory: {validated_output_dir}")

        return validated_config_dir, validated_output_dir

    def _on_session_update(self, session: ScanSession) -> None:
        self.logger.scan_progress(session.progress, session.state.value, session.host_count)

    def _print_hosts(self, hosts, local_ip: str = "", gateway_ip: str = "") -> None:
        self.logger.table_header(TABLE_HEADERS, TABLE_WIDTHS)
        for host in hosts:
            self.logger.table_row(
                _host_row(host, local_ip, gateway_ip),
                TABLE_WIDTHS,
                highlight=host.ip in (local_ip, gateway_ip),
            )

    def run(self, args: argparse.Namespace) -> int:
        """
        Run the LAN discovery application.

        Args:
            args: Parsed command line arguments

        Returns:
            int: Exit code (0 for success, 1 for failure, 130 if interrupted before start)
        """
        try:
            if args.skip_checks:
                self.logger.warning("Skipping pre-flight checks as requested")
            else:
                self._perform_preflight_checks()

            config_dir, output_dir = self._validate_paths(args.config_dir, args.output_dir)

            self.orchestrator = ScannerOrchestrator(
                config_dir=config_dir,
                use_external_tools=not args.no_external_tools,
            )

            if self.shutdown_requested:
                self.logger.info("Shutdown requested before scan start")
                return EXIT_INTERRUPTED

            if args.target:
                return self._identify_target(args.target)

            network_info = self.orchestrator.network_detector.get_host_network_info()
            self.logger.key_values("NETWORK CONFIGURATION", [
                ("Network Range", network_info.network_range.cidr),
                ("Scan Netmask", network_info.scan_netmask),
                ("Host IP", network_info.host_ip),
                ("Gateway", network_info.gateway_ip or "-"),
                ("DNS Servers", ", ".join(network_info.dns_servers) or "-"),
                ("Candidates", len(network_info.network_range.candidates)),
            ])

            self.logger.section("LAN DISCOVERY SCAN")
            self.logger.reset_progress()
            session = self.orchestrator.start_scan(network_info, listener=self._on_session_update)
            # Join in short slices so signal handlers run on the main thread
            while not self.orchestrator.wait(0.5):
                pass

            self.logger.section("DISCOVERED HOSTS")
            self._print_hosts(session.hosts, session.local_ip, session.gateway_ip)

            if output_dir:
                JSONReporter(output_dir).generate_report(session)

            if session.errors:
                self.logger.warning(f"{len(session.errors)} errors recorded during the scan")
            return EXIT_OK

        except NetworkDetectionError as e:
            context = ErrorContext(
                error_type=ErrorType.NETWORK_DETECTION_ERROR,
                severity=ErrorSeverity.CRITICAL,
                operation="get_host_network_info",
                component="NetworkDetector",
            )
            self.error_handler.handle_error(e, context)
            return EXIT_ERROR
        except KeyboardInterrupt:
            self.logger.warning("Scan interrupted by user")
            return EXIT_INTERRUPTED
        except Exception as e:
            self.logger.error(f"LAN discovery failed: {str(e)}", exception=e)
            return EXIT_ERROR

    def _identify_target(self, target: str) -> int:
        """Thorough identification of a single host."""
        if not is_valid_ip(target):
            self.logger.error(f"Invalid target address: {target}")
            return EXIT_ERROR

        self.logger.section(f"IDENTIFYING {target}")
        record = self.orchestrator.identify_host(target)
        self._print_hosts([record])
        if not record.is_online:
            self.logger.warning(f"{target} did not answer any probe")
        return EXIT_OK


def _host_row(host: HostRecord, local_ip: str, gateway_ip: str) -> list:
    hostname = host.hostname
    if host.ip == local_ip:
        hostname = f"{hostname} (this device)".strip()
    return [
        host.ip,
        hostname or "-",
        host.mac_address or "-",
        host.vendor or "-",
        host.model or "-",
        host.device_type.value,
        f"{host.response_time_ms} ms" if host.response_time_ms else "-",
    ]


def create_argument_parser() -> argparse.ArgumentParser:
    """
    Create and configure the command line argument parser.

    Returns:
        argparse.ArgumentParser: Configured argument parser
    """
    parser = argparse.ArgumentParser(
        prog="lan-discovery",
        description="LAN discovery - find and fingerprint the devices on the local network",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  lan-discovery                            # Scan the local network
  lan-discovery --output-dir ./reports     # Also write a JSON report
  lan-discovery --target 192.168.1.1       # Thorough identification of one host
  lan-discovery --no-external-tools        # Only in-process probes and the ARP table
  lan-discovery --verbose                  # Enable debug output
        """
    )

    parser.add_argument(
        "--config-dir",
        type=str,
        help="Directory containing discovery_config.yml, probe_config.yml and classification.yml"
    )

    parser.add_argument(
        "--output-dir",
        type=str,
        help="Directory for JSON reports; no report is written when omitted"
    )

    parser.add_argument(
        "--target",
        type=str,
        help="Identify a single IP address with the thorough cascade instead of scanning"
    )

    parser.add_argument(
        "--no-external-tools",
        action="store_true",
        help="Do not run nmap, arp-scan or fping even when installed"
    )

    parser.add_argument(
        "--skip-checks",
        action="store_true",
        help="Skip the pre-flight check for external tools"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging output"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"LAN Discovery {__version__}"
    )

    return parser


def main() -> int:
    """
    Main entry point for the LAN discovery engine.

    Returns:
        int: Exit code
    """
    parser = create_argument_parser()
    args = parser.parse_args()

    if args.verbose:
        set_log_level(LogLevel.DEBUG)

    app = LanDiscoveryApp()
    return app.run(args)


if __name__ == "__main__":
    sys.exit(main())
