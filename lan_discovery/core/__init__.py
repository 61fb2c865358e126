"""
Core components for LAN discovery functionality.
"""

from .data_models import (
    DeviceType,
    ScanState,
    ProbeOutcome,
    ProbeResult,
    HostRecord,
    PartialHostInfo,
    DeviceIdentification,
    NetworkRange,
    NetworkInfo
)
from .network_range import choose_scan_netmask, calculate_network_range, is_ip_in_range
from .mac_vendors import lookup_vendor
from .scan_session import ScanSession
from .device_classifier import DeviceClassifier, ClassificationRule, classify_by_ports, infer_model

__all__ = [
    'DeviceType',
    'ScanState',
    'ProbeOutcome',
    'ProbeResult',
    'HostRecord',
    'PartialHostInfo',
    'DeviceIdentification',
    'NetworkRange',
    'NetworkInfo',
    'choose_scan_netmask',
    'calculate_network_range',
    'is_ip_in_range',
    'lookup_vendor',
    'ScanSession',
    'DeviceClassifier',
    'ClassificationRule',
    'classify_by_ports',
    'infer_model'
]
