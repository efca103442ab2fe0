"""
YAML file configuration store.

For hosts without UCI. The file lists entities under a key named after
the entity kind plus "s":

    hosts:
      - mac: "aa:bb:cc:dd:ee:01"
        name: printer
      - mac: ["aa:bb:cc:dd:ee:02", "aa:bb:cc:dd:ee:03"]

A null list item is a gap, exactly like a missing UCI section.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from gatekeeper.errors import ConfigReadError
from gatekeeper.store.base import ConfigStore


logger = logging.getLogger(__name__)


class FileConfigStore(ConfigStore):
    """
    Configuration store backed by a YAML file.

    The file is re-read whenever index 0 is requested, so each
    enumeration pass sees the current file contents.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._data: dict[str, Any] | None = None

    def describe(self) -> str:
        return f"file:{self.path}"

    def _load(self) -> dict[str, Any]:
        """Read and parse the store file."""
        try:
            with open(self.path) as f:
                data = yaml.safe_load(f)
        except FileNotFoundError as e:
            raise ConfigReadError(f"Store file not found: {self.path}") from e
        except (OSError, yaml.YAMLError) as e:
            raise ConfigReadError(f"Failed to read store file {self.path}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigReadError(f"Store file must contain a mapping: {self.path}")
        logger.debug("Loaded store file %s", self.path)
        return data

    def get(self, kind: str, index: int, field: str) -> str | None:
        if self._data is None or index == 0:
            self._data = self._load()

        entities = self._data.get(f"{kind}s", [])
        if entities is None:
            return None
        if not isinstance(entities, list):
            raise ConfigReadError(f"'{kind}s' must be a list in {self.path}", index)

        if index >= len(entities):
            return None

        entity = entities[index]
        if entity is None:
            return None
        if not isinstance(entity, dict):
            raise ConfigReadError(
                f"{kind} entry {index} must be a mapping in {self.path}", index
            )

        value = entity.get(field)
        if value is None:
            return None
        if isinstance(value, list):
            # UCI list options are printed space-separated
            return " ".join(str(v) for v in value)
        return str(value)
