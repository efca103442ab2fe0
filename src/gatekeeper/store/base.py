"""
Configuration store interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class ConfigStore(ABC):
    """
    Read-only ordinal access to configuration entities.

    Implementations return None when no value exists at the index and
    raise ConfigReadError when the store itself cannot be read.
    """

    @abstractmethod
    def get(self, kind: str, index: int, field: str) -> str | None:
        """
        Look up one field of the entity at an ordinal index.

        Args:
            kind: Entity type (e.g. "host")
            index: Zero-based ordinal position
            field: Field name (e.g. "mac")

        Returns:
            The stored value, or None if absent.
        """

    def describe(self) -> str:
        """Short human-readable name for logs."""
        return type(self).__name__
