"""
Configuration store access.

Ordinal, read-only lookup of host entries and the restartable entry
source that enumerates them.
"""

from gatekeeper.store.base import ConfigStore
from gatekeeper.store.file import FileConfigStore
from gatekeeper.store.memory import MemoryConfigStore
from gatekeeper.store.source import EntrySource, RawEntry, SourceState
from gatekeeper.store.uci import UciConfigStore

__all__ = [
    "ConfigStore",
    "EntrySource",
    "FileConfigStore",
    "MemoryConfigStore",
    "RawEntry",
    "SourceState",
    "UciConfigStore",
]
