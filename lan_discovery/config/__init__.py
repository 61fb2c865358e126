"""
Configuration module for the LAN discovery engine.
Provides configuration loading and validation for the orchestrator and probes.
"""

from .config_loader import ConfigLoader, DiscoveryConfig, ProbeConfig

__all__ = ['ConfigLoader', 'DiscoveryConfig', 'ProbeConfig']
