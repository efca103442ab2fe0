"""
Pytest configuration and shared fixtures for Gatekeeper Sync tests.
"""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Generator

import pytest
import yaml


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def hosts_file(temp_dir: Path) -> Path:
    """Create a sample YAML host store."""
    hosts_path = temp_dir / "hosts.yaml"
    hosts_data = {
        "hosts": [
            {"name": "printer", "mac": "AA:BB:CC:DD:EE:01"},
            {"name": "nas", "mac": "aa:bb:cc:dd:ee:02"},
            {"name": "laptop", "mac": ["aa:bb:cc:dd:ee:03", "aa:bb:cc:dd:ee:04"]},
        ]
    }
    with open(hosts_path, "w") as f:
        yaml.dump(hosts_data, f)
    return hosts_path


@pytest.fixture
def sample_config(temp_dir: Path, hosts_file: Path) -> Path:
    """Create a sample configuration file."""
    config_path = temp_dir / "sync.yaml"
    config_data = {
        "logging": {
            "level": "debug",
        },
        "store": {
            "backend": "file",
            "path": str(hosts_file),
        },
        "filter": {
            "backend": "nftables",
            "set_name": "static_macs",
            "timeout": 5,
        },
    }
    with open(config_path, "w") as f:
        yaml.dump(config_data, f)
    return config_path
