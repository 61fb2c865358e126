"""
Error handling and tool validation for the LAN discovery engine.

Ordinary probe failures are never exceptions here: primitives return
negative ProbeResults. This module covers environmental absence (missing
tools, unreadable system files) that makes the orchestrator fall back to
the next tier, configuration and input validation errors, and the single
fatal precondition, failing to find a local IPv4 address.
"""

import shutil
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .logger import Logger, get_logger


class ErrorType(Enum):
    NETWORK_DETECTION_ERROR = "network_detection_error"
    PERMISSION_ERROR = "permission_error"
    TOOL_MISSING_ERROR = "tool_missing_error"
    CONFIGURATION_ERROR = "configuration_error"
    VALIDATION_ERROR = "validation_error"
    TIMEOUT_ERROR = "timeout_error"
    SUBPROCESS_ERROR = "subprocess_error"
    FILE_ERROR = "file_error"
    SCAN_ERROR = "scan_error"


class ErrorSeverity(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass
class ErrorContext:
    """
    Where an error happened and how much it matters.

    ``additional_info`` carries keys the hints use, such as ``tool_name``
    for a missing tool or ``config_file`` for a configuration problem.
    """
    error_type: ErrorType
    severity: ErrorSeverity
    operation: str
    component: str
    additional_info: Optional[Dict[str, Any]] = field(default=None)

    def __post_init__(self):
        if self.additional_info is None:
            self.additional_info = {}


class LanDiscoveryError(Exception):
    """Base class for errors raised by lan_discovery."""

    def __init__(self, message: str, error_context: Optional[ErrorContext] = None):
        super().__init__(message)
        self.error_context = error_context


class NetworkDetectionError(LanDiscoveryError):
    """No usable local IPv4 address; a scan cannot start."""


class ToolMissingError(LanDiscoveryError):
    """An optional external tool is not on PATH."""


class ConfigurationError(LanDiscoveryError):
    pass


class ValidationError(LanDiscoveryError):
    """Malformed input such as an unparsable IP address."""


FATAL_ERROR_TYPES = (ErrorType.NETWORK_DETECTION_ERROR,)

TROUBLESHOOTING_HINTS = {
    ErrorType.NETWORK_DETECTION_ERROR: [
        "Check that a network interface is up: ip addr",
        "Verify an IPv4 address was assigned (DHCP or static)",
        "Connect to a Wi-Fi or Ethernet network and retry",
    ],
    ErrorType.PERMISSION_ERROR: [
        "arp-scan and some nmap modes need root: sudo lan-discovery",
        "Without privileges the in-process probes and the ARP table are still used",
    ],
    ErrorType.CONFIGURATION_ERROR: [
        "Check YAML syntax and indentation in {config_file}",
        "Remove the offending key to fall back to its default",
        "Regenerate defaults with ConfigLoader.create_default_configs()",
    ],
}

# package manager binary -> install command template
PACKAGE_MANAGERS = (
    ("apt-get", "sudo apt-get install {package}"),
    ("dnf", "sudo dnf install {package}"),
    ("yum", "sudo yum install {package}"),
    ("pacman", "sudo pacman -S {package}"),
    ("brew", "brew install {package}"),
)


def install_command(tool_name: str) -> Optional[str]:
    """Install command for ``tool_name`` using the first package manager found."""
    for manager, template in PACKAGE_MANAGERS:
        if shutil.which(manager):
            return template.format(package=tool_name)
    return None


def suggest_tool_installation(tool_name: str, logger: Logger) -> None:
    command = install_command(tool_name)
    if command:
        logger.info(f"Install {tool_name} to enable its discovery tier: {command}")
    elif tool_name == "nmap":
        logger.info("Install nmap from https://nmap.org/download.html to enable its discovery tier")
    else:
        logger.info(f"Install {tool_name} with your system's package manager to enable its discovery tier")


class ErrorHandler:
    """
    Centralized error reporting.

    Logs each error at a level chosen by its severity, counts errors per
    type and prints troubleshooting hints for the types that have them.
    """

    def __init__(self, logger: Optional[Logger] = None):
        self.logger = logger or get_logger(__name__)
        self.error_statistics: Dict[ErrorType, int] = {error_type: 0 for error_type in ErrorType}

    def handle_error(self, error: Exception, context: ErrorContext) -> bool:
        """
        Log and count an error.

        Returns:
            True if the scan can continue with the next tier, False if the
            error is fatal
        """
        self.error_statistics[context.error_type] += 1
        self._log_error(error, context)

        if context.error_type == ErrorType.TOOL_MISSING_ERROR:
            suggest_tool_installation(context.additional_info.get("tool_name", "unknown"), self.logger)
        else:
            self._print_hints(context)

        return context.error_type not in FATAL_ERROR_TYPES

    def get_error_summary(self) -> Dict[str, int]:
        """Return the non-zero error counts keyed by error type value."""
        return {error_type.value: count for error_type, count in self.error_statistics.items() if count}

    def _log_error(self, error: Exception, context: ErrorContext) -> None:
        message = f"Error in {context.component}.{context.operation}: {error}"
        if context.severity == ErrorSeverity.CRITICAL:
            self.logger.error(message, exception=error)
        elif context.severity == ErrorSeverity.HIGH:
            self.logger.error(message)
        elif context.severity == ErrorSeverity.MEDIUM:
            self.logger.warning(message)
        else:
            self.logger.debug(message)

    def _print_hints(self, context: ErrorContext) -> None:
        hints = TROUBLESHOOTING_HINTS.get(context.error_type)
        if not hints:
            return
        values = {"config_file": "the configuration file", **context.additional_info}
        self.logger.info("Troubleshooting:")
        for hint in hints:
            self.logger.info(f"  • {hint.format(**values)}")


class ToolValidator:
    """
    Availability checks for the optional external tools.

    None of the tools is required; a missing one only means the
    orchestrator falls back to the next discovery tier.
    """

    OPTIONAL_TOOLS = ("nmap", "arp-scan", "fping")
    SYSTEM_TOOLS = ("ping", "ip", "arp")

    def __init__(self, error_handler: Optional[ErrorHandler] = None):
        self.error_handler = error_handler or ErrorHandler()
        self.logger = self.error_handler.logger

    def check_tool(self, tool_name: str) -> bool:
        tool_path = shutil.which(tool_name)
        if tool_path:
            self.logger.debug(f"{tool_name} found", path=tool_path)
            return True
        self.logger.debug(f"{tool_name} not found in PATH")
        return False

    def validate_all_tools(self) -> Tuple[Dict[str, bool], List[str]]:
        """
        Check every optional and system tool.

        Returns:
            Tuple of (availability by tool name, missing optional tools)
        """
        availability = {tool: self.check_tool(tool) for tool in self.OPTIONAL_TOOLS + self.SYSTEM_TOOLS}
        missing = [tool for tool in self.OPTIONAL_TOOLS if not availability[tool]]
        return availability, missing

    def report_missing(self, missing: List[str]) -> None:
        """Record missing optional tools as low severity, non-fatal errors."""
        for tool_name in missing:
            context = ErrorContext(
                error_type=ErrorType.TOOL_MISSING_ERROR,
                severity=ErrorSeverity.LOW,
                operation="tool_availability_check",
                component="ToolValidator",
                additional_info={"tool_name": tool_name},
            )
            self.error_handler.handle_error(ToolMissingError(f"{tool_name} not found in PATH"), context)
