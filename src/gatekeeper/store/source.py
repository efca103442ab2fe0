"""
Entry source.

Enumerates raw host entries from a configuration store, starting at
index 0 and stopping at the first index with no value.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from gatekeeper.store.base import ConfigStore


logger = logging.getLogger(__name__)


class SourceState(Enum):
    """Enumeration state."""

    ENUMERATING = "enumerating"
    DONE = "done"


@dataclass(frozen=True)
class RawEntry:
    """A value read from the store at an ordinal index."""

    index: int
    value: str


class EntrySource:
    """
    Lazy, finite, restartable sequence of raw entries.

    The first absent index moves the source to DONE; no lookups happen
    after that until the source is restarted. Entries past a gap in
    the store are therefore never read.
    """

    def __init__(
        self,
        store: ConfigStore,
        kind: str = "host",
        field: str = "mac",
    ) -> None:
        self.store = store
        self.kind = kind
        self.field = field
        self.state = SourceState.ENUMERATING
        self._index = 0

    def restart(self) -> None:
        """Begin a fresh enumeration pass."""
        self.state = SourceState.ENUMERATING
        self._index = 0

    def next(self) -> RawEntry | None:
        """
        Return the next entry, or None once enumeration has finished.

        Raises:
            ConfigReadError: If the store cannot be read.
        """
        if self.state is SourceState.DONE:
            return None

        index = self._index
        value = self.store.get(self.kind, index, self.field)
        if value is None:
            self.state = SourceState.DONE
            logger.info(
                "Enumeration of %s stopped at %s[%d]; later entries are not read",
                self.store.describe(), self.kind, index,
            )
            return None

        self._index += 1
        return RawEntry(index=index, value=value)

    @property
    def position(self) -> int:
        """Index of the next lookup."""
        return self._index

    def __iter__(self) -> Iterator[RawEntry]:
        self.restart()
        while True:
            entry = self.next()
            if entry is None:
                return
            yield entry
