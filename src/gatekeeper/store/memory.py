"""
In-memory configuration store.
"""

from __future__ import annotations

from typing import Sequence

from gatekeeper.store.base import ConfigStore


class MemoryConfigStore(ConfigStore):
    """
    Configuration store holding values in a list.

    None items are gaps. Every lookup is recorded in `reads` so callers
    can check which indices were consulted.
    """

    def __init__(
        self,
        values: Sequence[str | None] = (),
        kind: str = "host",
        field: str = "mac",
    ) -> None:
        self.values = list(values)
        self.kind = kind
        self.field = field
        self.reads: list[int] = []

    def get(self, kind: str, index: int, field: str) -> str | None:
        self.reads.append(index)
        if kind != self.kind or field != self.field:
            return None
        if index >= len(self.values):
            return None
        return self.values[index]
