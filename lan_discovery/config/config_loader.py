"""
Configuration loader for the LAN discovery engine.
Handles loading and validation of YAML configuration files with fallback to defaults.
"""

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from ..utils.logger import get_logger


@dataclass
class DiscoveryConfig:
    """Configuration for the discovery orchestrator."""
    sweep_batch_size: int = 192
    enrich_batch_size: int = 32
    arp_settle_delay: float = 0.3
    final_arp_delay: float = 0.2
    max_hosts: int = 65534
    widen_private_ranges: bool = True
    widen_networks: List[str] = field(
        default_factory=lambda: ["10.0.0.0/8", "172.16.0.0/12"]
    )
    widened_netmask: str = "255.255.0.0"
    default_netmask: str = "255.255.255.0"
    use_nmap: bool = True
    use_arp_scan: bool = True
    use_fping: bool = True
    tool_timeout: int = 120
    gateway_timeout: float = 2.0
    max_workers: int = 192


@dataclass
class ProbeConfig:
    """Timeouts (seconds) and port lists for the probe primitives."""
    fast_icmp_timeout: float = 0.1
    fast_tcp_timeout: float = 0.05
    fast_tcp_ports: List[int] = field(default_factory=lambda: [80, 443, 22])
    thorough_icmp_timeout: float = 0.2
    thorough_tcp_timeout: float = 0.08
    thorough_tcp_ports: List[int] = field(
        default_factory=lambda: [80, 443, 22, 23, 21, 8080, 8443, 445, 139, 53, 8291, 8728, 161, 179]
    )
    udp_timeout: float = 0.1
    udp_ports: List[int] = field(
        default_factory=lambda: [53, 67, 68, 123, 137, 138, 161, 5353, 1900, 10001]
    )
    trigger_udp_ports: List[int] = field(
        default_factory=lambda: [7, 53, 67, 137, 5353, 1900]
    )
    trigger_tcp_port: int = 80
    trigger_tcp_timeout: float = 0.03
    ubiquiti_timeout: float = 0.8
    netbios_timeout: float = 0.5
    mdns_timeout: float = 0.5
    http_ports: List[int] = field(default_factory=lambda: [80, 8080, 443, 8443, 8000, 8888])
    http_connect_timeout: float = 0.5
    http_read_timeout: float = 1.0
    fingerprint_timeout: float = 0.05
    fingerprint_ports: List[int] = field(
        default_factory=lambda: [
            22, 23, 53, 80, 443, 161, 515, 631, 5000, 5001, 8080, 8443, 8291, 8728,
            9100, 32400, 8096, 62078, 5353, 548, 445, 3689, 7000, 554, 1883, 8883,
        ]
    )


class ConfigLoader:
    """
    Loads and validates YAML configuration files for the discovery engine.
    Provides fallback to default configurations when files are missing.
    """

    def __init__(self, config_dir: Optional[str] = None):
        """
        Initialize ConfigLoader.

        Args:
            config_dir: Directory containing configuration files.
                       Defaults to the config directory relative to this file.
        """
        if config_dir is None:
            self.config_dir = Path(__file__).parent
        else:
            self.config_dir = Path(config_dir)

        self.logger = get_logger(__name__)

    def _read_section(self, config_file: str, section: str) -> Optional[Dict[str, Any]]:
        """
        Read one top-level section of a YAML file.

        Returns:
            The section mapping, or None when the file is missing or invalid
        """
        config_path = self.config_dir / config_file

        if not config_path.exists():
            self.logger.warning(f"Config file not found at {config_path}. Using default configuration.")
            return None

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            self.logger.error(f"Error parsing config file {config_path}: {e}")
            self.logger.warning(f"Using default {section} configuration.")
            return None
        except OSError as e:
            self.logger.error(f"Unable to read config file {config_path}: {e}")
            self.logger.warning(f"Using default {section} configuration.")
            return None

        if not isinstance(config_data, dict) or not isinstance(config_data.get(section), dict):
            self.logger.warning(f"Invalid {section} config structure in {config_path}. Using default configuration.")
            return None

        return config_data[section]

    def load_discovery_config(self, config_file: str = "discovery_config.yml") -> DiscoveryConfig:
        """
        Load orchestrator configuration from YAML file.

        Args:
            config_file: Name of the discovery configuration file

        Returns:
            DiscoveryConfig object with loaded or default configuration
        """
        data = self._read_section(config_file, 'discovery')
        defaults = DiscoveryConfig()
        if data is None:
            return defaults

        return DiscoveryConfig(
            sweep_batch_size=self._validate_positive_int(data.get('sweep_batch_size', 192), 'sweep_batch_size', 192),
            enrich_batch_size=self._validate_positive_int(data.get('enrich_batch_size', 32), 'enrich_batch_size', 32),
            arp_settle_delay=self._validate_non_negative_float(data.get('arp_settle_delay', 0.3), 'arp_settle_delay', 0.3),
            final_arp_delay=self._validate_non_negative_float(data.get('final_arp_delay', 0.2), 'final_arp_delay', 0.2),
            max_hosts=self._validate_positive_int(data.get('max_hosts', 65534), 'max_hosts', 65534),
            widen_private_ranges=bool(data.get('widen_private_ranges', True)),
            widen_networks=self._validate_list(data.get('widen_networks'), 'widen_networks', defaults.widen_networks),
            widened_netmask=str(data.get('widened_netmask', defaults.widened_netmask)),
            default_netmask=str(data.get('default_netmask', defaults.default_netmask)),
            use_nmap=bool(data.get('use_nmap', True)),
            use_arp_scan=bool(data.get('use_arp_scan', True)),
            use_fping=bool(data.get('use_fping', True)),
            tool_timeout=self._validate_positive_int(data.get('tool_timeout', 120), 'tool_timeout', 120),
            gateway_timeout=self._validate_non_negative_float(data.get('gateway_timeout', 2.0), 'gateway_timeout', 2.0),
            max_workers=self._validate_positive_int(data.get('max_workers', 192), 'max_workers', 192),
        )

    def load_probe_config(self, config_file: str = "probe_config.yml") -> ProbeConfig:
        """
        Load probe timeouts and port lists from YAML file.

        Unknown keys are ignored; each float key must be non-negative and
        each port list must hold valid port numbers.
        """
        data = self._read_section(config_file, 'probes')
        defaults = ProbeConfig()
        if data is None:
            return defaults

        values = {}
        for name, default in asdict(defaults).items():
            if name not in data:
                continue
            if isinstance(default, list):
                values[name] = self._validate_ports(data[name], name, default)
            elif isinstance(default, int):
                values[name] = self._validate_positive_int(data[name], name, default)
            else:
                values[name] = self._validate_non_negative_float(data[name], name, default)
        return ProbeConfig(**values)

    def load_classification_rules(self, config_file: str = "classification.yml") -> Optional[Dict[str, Any]]:
        """
        Load optional keyword table overrides for the device classifier.

        Returns:
            Mapping with 'hostname_rules' and/or 'vendor_rules' lists, or
            None to keep the built-in tables
        """
        config_path = self.config_dir / config_file
        if not config_path.exists():
            self.logger.debug(f"No classification overrides at {config_path}")
            return None

        data = self._read_section(config_file, 'classification')
        if data is None:
            return None
        return {
            key: data[key]
            for key in ('hostname_rules', 'vendor_rules')
            if isinstance(data.get(key), list)
        } or None

    def _validate_positive_int(self, value: Any, field_name: str, default: int) -> int:
        """
        Validate that a value is a positive integer.

        Args:
            value: Value to validate
            field_name: Name of the field for error messages
            default: Default value to use if validation fails

        Returns:
            Validated integer value or default
        """
        try:
            int_value = int(value)
            if int_value <= 0:
                self.logger.warning(f"Invalid {field_name}: {value}. Must be positive. Using default: {default}")
                return default
            return int_value
        except (ValueError, TypeError):
            self.logger.warning(f"Invalid {field_name}: {value}. Must be an integer. Using default: {default}")
            return default

    def _validate_non_negative_float(self, value: Any, field_name: str, default: float) -> float:
        try:
            float_value = float(value)
            if float_value < 0:
                self.logger.warning(f"Invalid {field_name}: {value}. Must not be negative. Using default: {default}")
                return default
            return float_value
        except (ValueError, TypeError):
            self.logger.warning(f"Invalid {field_name}: {value}. Must be a number. Using default: {default}")
            return default

    def _validate_list(self, value: Any, field_name: str, default: list) -> list:
        if value is None:
            return list(default)
        if not isinstance(value, list):
            self.logger.warning(f"Invalid {field_name}: {value}. Must be a list. Using default: {default}")
            return list(default)
        return [str(item) for item in value]

    def _validate_ports(self, value: Any, field_name: str, default: List[int]) -> List[int]:
        """
        Validate a list of port numbers; invalid entries are skipped.

        Returns:
            Validated port list, or default when nothing valid remains
        """
        if not isinstance(value, list):
            self.logger.warning(f"Invalid {field_name}: {value}. Must be a list. Using default.")
            return list(default)

        ports = []
        for port in value:
            if isinstance(port, int) and 0 < port < 65536:
                ports.append(port)
            else:
                self.logger.warning(f"Invalid port in {field_name}: {port}. Skipping.")

        if not ports:
            self.logger.warning(f"No valid ports in {field_name}. Using default.")
            return list(default)
        return ports

    def create_default_configs(self) -> None:
        """
        Create default configuration files if they don't exist.
        """
        self._write_default("discovery_config.yml", {'discovery': asdict(DiscoveryConfig())})
        self._write_default("probe_config.yml", {'probes': asdict(ProbeConfig())})

    def _write_default(self, config_file: str, default_config: Dict[str, Any]) -> None:
        config_path = self.config_dir / config_file
        if config_path.exists():
            return

        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            with open(config_path, 'w', encoding='utf-8') as f:
                yaml.dump(default_config, f, default_flow_style=False, indent=2, sort_keys=False)
            self.logger.info(f"Created default config at {config_path}")
        except OSError as e:
            self.logger.error(f"Failed to create default config {config_path}: {e}")
