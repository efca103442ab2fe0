"""
Configuration management for Gatekeeper Sync.

Handles loading, validation, and access to the sync tool configuration.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


# Default configuration paths
DEFAULT_CONFIG_PATH = Path("/etc/gatekeeper/sync.yaml")
CONFIG_ENV_VAR = "GATEKEEPER_SYNC_CONFIG"

NAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


@dataclass
class LoggingConfig:
    """Logging settings."""

    level: str = "warning"
    file: str | None = None
    syslog: bool = False


@dataclass
class StoreConfig:
    """Configuration store settings."""

    backend: str = "uci"
    uci_binary: str = "uci"
    package: str = "dhcp"
    kind: str = "host"
    field: str = "mac"
    path: str | None = None
    timeout: int = 10


@dataclass
class FilterConfig:
    """Kernel filter set settings."""

    backend: str = "nftables"
    binary: str | None = None
    family: str = "inet"
    table: str = "fw4"
    set_name: str = "static_macs"
    timeout: int = 30


@dataclass
class ReconcileConfig:
    """Reconciliation behaviour."""

    skip_unchanged: bool = True


@dataclass
class SyncConfig:
    """Main configuration container."""

    logging: LoggingConfig = field(default_factory=LoggingConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    filter: FilterConfig = field(default_factory=FilterConfig)
    sync: ReconcileConfig = field(default_factory=ReconcileConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SyncConfig:
        """Create configuration from dictionary."""
        return cls(
            logging=LoggingConfig(**(data.get("logging") or {})),
            store=StoreConfig(**(data.get("store") or {})),
            filter=FilterConfig(**(data.get("filter") or {})),
            sync=ReconcileConfig(**(data.get("sync") or {})),
        )


def load_config(path: str | Path | None = None) -> SyncConfig:
    """
    Load configuration from YAML file.

    Args:
        path: Path to configuration file. If None, the environment
            variable and default locations are tried in turn.

    Returns:
        SyncConfig instance with loaded settings.

    Raises:
        FileNotFoundError: If an explicitly named config file is missing.
        yaml.YAMLError: If config file is invalid YAML.
        TypeError: If a section contains unknown keys.
    """
    if path is None:
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            path = env_path

    if path is None:
        candidates = [
            DEFAULT_CONFIG_PATH,
            Path("config/sync.yaml"),
            Path("sync.yaml"),
        ]
        for candidate in candidates:
            if candidate.exists():
                path = candidate
                break

    if path is None:
        return SyncConfig()

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise TypeError(f"Configuration file must contain a mapping: {path}")

    return SyncConfig.from_dict(data)


def validate_config(config: SyncConfig) -> list[str]:
    """
    Validate configuration and return list of errors.

    Args:
        config: Configuration to validate.

    Returns:
        List of error messages. Empty list if valid.
    """
    errors: list[str] = []

    valid_log_levels = ("debug", "info", "warning", "error")
    if config.logging.level not in valid_log_levels:
        errors.append(f"Invalid logging level: {config.logging.level}")

    valid_stores = ("uci", "file")
    if config.store.backend not in valid_stores:
        errors.append(f"Invalid store backend: {config.store.backend}")

    if config.store.backend == "file" and not config.store.path:
        errors.append("File store backend requires store.path")

    if config.store.path is not None and not isinstance(config.store.path, str):
        errors.append(f"Invalid store path: {config.store.path!r}")

    for label, value in [
        ("store package", config.store.package),
        ("store kind", config.store.kind),
        ("store field", config.store.field),
    ]:
        if not _valid_name(value):
            errors.append(f"Invalid {label}: {value!r}")

    valid_filters = ("nftables", "ipset")
    if config.filter.backend not in valid_filters:
        errors.append(f"Invalid filter backend: {config.filter.backend}")

    valid_families = ("inet", "bridge", "netdev", "ip", "ip6", "arp")
    if config.filter.backend == "nftables" and config.filter.family not in valid_families:
        errors.append(f"Invalid nftables family: {config.filter.family}")

    if not _valid_name(config.filter.table):
        errors.append(f"Invalid filter table: {config.filter.table!r}")
    if not _valid_name(config.filter.set_name):
        errors.append(f"Invalid filter set name: {config.filter.set_name!r}")

    for label, value in [
        ("store uci_binary", config.store.uci_binary),
        ("filter binary", config.filter.binary),
        ("logging file", config.logging.file),
    ]:
        if value is not None and not isinstance(value, str):
            errors.append(f"Invalid {label}: {value!r}")

    if not _valid_timeout(config.store.timeout):
        errors.append(f"Invalid store timeout: {config.store.timeout!r}")
    if not _valid_timeout(config.filter.timeout):
        errors.append(f"Invalid filter timeout: {config.filter.timeout!r}")

    if not isinstance(config.logging.syslog, bool):
        errors.append(f"Invalid logging syslog flag: {config.logging.syslog!r}")
    if not isinstance(config.sync.skip_unchanged, bool):
        errors.append(f"Invalid sync skip_unchanged flag: {config.sync.skip_unchanged!r}")

    return errors


def _valid_name(value: Any) -> bool:
    return isinstance(value, str) and NAME_PATTERN.match(value) is not None


def _valid_timeout(value: Any) -> bool:
    # bool is an int subclass; `timeout: yes` is not a duration
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return value > 0
