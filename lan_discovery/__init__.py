"""
LAN Discovery

Finds the devices on the local network with external tools when present
and in-process probes otherwise, then fingerprints them by hostname,
vendor, discovery protocol answers and open ports.
"""

__version__ = "1.0.0"
__author__ = "Network Discovery Team"
