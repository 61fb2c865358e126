"""
Base scanner interface for external discovery tools.

Every optional subprocess collaborator (nmap, arp-scan, fping) implements
BaseScanner: build a fixed command for the network range, run it, and
parse line-oriented stdout into PartialHostInfo records. A missing tool,
a permission problem or a timeout is not an error for the caller; it just
produces no hosts so the orchestrator can fall back to the next tier.
"""

import shutil
import subprocess
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from ..core.data_models import NetworkRange, PartialHostInfo


class BaseScanner(ABC):
    """
    Abstract base class for external discovery tools.

    Subclasses set `name` and `executable` and implement build_command()
    and parse_results(). try_discover() is the only method the
    orchestrator calls.
    """

    name = "base"
    executable = ""

    def __init__(self, logger=None, timeout: int = 120):
        """
        Initialize the base scanner.

        Args:
            logger: Logger instance for outputting scan progress and errors
            timeout: Seconds before the tool process is abandoned
        """
        self.logger = logger
        self.timeout = timeout
        self.scan_start_time: Optional[datetime] = None
        self.scan_end_time: Optional[datetime] = None

    def is_available(self) -> bool:
        """True when the tool executable is on PATH."""
        return bool(self.executable) and shutil.which(self.executable) is not None

    @abstractmethod
    def build_command(self, network_range: NetworkRange) -> List[str]:
        """
        Build the command line for a network range.

        Args:
            network_range: Range being scanned

        Returns:
            Command as a list of arguments
        """

    @abstractmethod
    def parse_results(self, raw_output: str) -> List[PartialHostInfo]:
        """
        Parse raw tool output into partial host records.

        Args:
            raw_output: Raw text output from the tool

        Returns:
            List of PartialHostInfo objects parsed from the raw output
        """

    def command_input(self, network_range: NetworkRange) -> Optional[str]:
        """Text fed to the tool's stdin; None for tools taking no input."""
        return None

    def try_discover(self, network_range: NetworkRange) -> List[PartialHostInfo]:
        """
        Run the tool against a network range.

        Returns:
            Hosts reported by the tool; empty when the tool is missing,
            not permitted to run, timed out or printed nothing usable
        """
        if not self.is_available():
            self._log_debug(f"{self.executable} not found in PATH, skipping {self.name}")
            return []

        self._start_scan_timer()
        raw_output = self._execute(self.build_command(network_range), self.command_input(network_range))
        hosts = self.parse_results(raw_output) if raw_output else []
        duration = self._end_scan_timer()
        self._log_debug(f"{self.name} reported {len(hosts)} hosts in {duration:.1f}s")
        return hosts

    def _execute(self, command: List[str], stdin_text: Optional[str] = None) -> str:
        """
        Execute a tool command and return its stdout.

        A non-zero exit code is tolerated as long as the tool printed
        something; nmap and fping both exit non-zero when some targets are
        unreachable.
        """
        self._log_debug(f"Executing: {' '.join(command[:6])}{' ...' if len(command) > 6 else ''}")
        try:
            process = subprocess.run(
                command,
                input=stdin_text,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired:
            self._log_warning(f"{self.name} timed out after {self.timeout} seconds")
            return ""
        except FileNotFoundError:
            self._log_debug(f"{self.executable} command not found")
            return ""
        except PermissionError:
            self._log_debug(f"Permission denied running {self.executable}")
            return ""
        except OSError as e:
            self._log_debug(f"Error executing {self.executable}: {e}")
            return ""

        if process.returncode != 0 and process.stderr:
            self._log_debug(f"{self.name} exited with code {process.returncode}: {process.stderr.strip()[:200]}")
        return process.stdout

    def _start_scan_timer(self) -> None:
        """Start the scan timing measurement."""
        self.scan_start_time = datetime.now()

    def _end_scan_timer(self) -> float:
        """
        End the scan timing measurement and return duration.

        Returns:
            Scan duration in seconds as a float
        """
        self.scan_end_time = datetime.now()
        if self.scan_start_time:
            return (self.scan_end_time - self.scan_start_time).total_seconds()
        return 0.0

    def _log_warning(self, message: str) -> None:
        """Log a warning message if logger is available."""
        if self.logger:
            self.logger.warning(message)

    def _log_debug(self, message: str) -> None:
        """Log a debug message if logger is available."""
        if self.logger:
            self.logger.debug(message)


class NullScanner(BaseScanner):
    """Scanner used when a tool is disabled; never reports anything."""

    name = "null"

    def is_available(self) -> bool:
        return False

    def build_command(self, network_range: NetworkRange) -> List[str]:
        return []

    def parse_results(self, raw_output: str) -> List[PartialHostInfo]:
        return []
