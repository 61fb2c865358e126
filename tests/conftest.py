"""
Shared pytest fixtures for the lan_discovery test suite.
Provides configurations without delays, small networks and orchestrator fakes.
"""

import pytest

from lan_discovery.config.config_loader import DiscoveryConfig, ProbeConfig
from lan_discovery.utils.logger import LogLevel, set_log_level
from ._helpers import FakeArpTable, FakeIdentifier, build_network_info


@pytest.fixture(autouse=True)
def quiet_logging():
    """Keep test output readable; only errors are printed."""
    set_log_level(LogLevel.ERROR)
    yield
    set_log_level(LogLevel.INFO)


@pytest.fixture
def discovery_config():
    """
    Discovery configuration with no settle delays and small waves.

    Returns:
        DiscoveryConfig: Fast configuration for orchestrator tests
    """
    return DiscoveryConfig(
        sweep_batch_size=4,
        enrich_batch_size=3,
        arp_settle_delay=0.0,
        final_arp_delay=0.0,
        max_workers=8,
    )


@pytest.fixture
def probe_config():
    return ProbeConfig()


@pytest.fixture
def network_info():
    """192.168.1.0/28 with the scanner at .10 and the gateway at .1."""
    return build_network_info()


@pytest.fixture
def arp_table():
    return FakeArpTable()


@pytest.fixture
def identifier():
    return FakeIdentifier()
