"""
Gatekeeper Sync - static MAC allow-list reconciliation.

Reads the static host MAC addresses from the router configuration store
and swaps them into the kernel filter set that admits known devices,
without ever exposing an empty or partial set to live traffic.
"""

__version__ = "0.1.0"
__author__ = "Gatekeeper Contributors"

from gatekeeper.config import SyncConfig, load_config

__all__ = ["SyncConfig", "load_config", "__version__"]
