"""
In-memory filter set.
"""

from __future__ import annotations

import threading
from typing import Callable, Iterable

from gatekeeper.errors import ApplyFailure
from gatekeeper.filterset.base import FilterSet


class MemoryFilterSet(FilterSet):
    """
    Filter set held in process memory.

    Membership is an immutable frozenset; `replace` builds the staged
    set out of band and swaps the reference under a lock, so readers
    on other threads only ever see a complete membership.

    Args:
        name: Set name
        initial: Starting membership
        reject: If set, `replace` raises ApplyFailure with this reason
        on_staged: Called with the staged membership just before the
            swap, while the prior membership is still active
    """

    def __init__(
        self,
        name: str = "static_macs",
        initial: Iterable[str] = (),
        reject: str | None = None,
        on_staged: Callable[[frozenset[str]], None] | None = None,
    ) -> None:
        self.name = name
        self.reject = reject
        self.on_staged = on_staged
        self.write_count = 0
        self._members = frozenset(initial)
        self._lock = threading.Lock()

    def members(self) -> frozenset[str]:
        with self._lock:
            return self._members

    def replace(self, elements: Iterable[str]) -> None:
        staged = frozenset(elements)
        if self.on_staged is not None:
            self.on_staged(staged)
        if self.reject is not None:
            raise ApplyFailure(self.name, self.reject)
        with self._lock:
            self._members = staged
            self.write_count += 1
