"""
Filter set interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable


class FilterSet(ABC):
    """
    Named kernel-resident set of address strings.

    The set is shared with the packet path and possibly with
    administrators. `replace` must be a single atomic transition: a
    concurrent reader sees either the full prior membership or the
    full new one.
    """

    name: str

    @abstractmethod
    def members(self) -> frozenset[str]:
        """
        Read current membership.

        Raises:
            ApplyFailure: If the set cannot be listed.
        """

    @abstractmethod
    def replace(self, elements: Iterable[str]) -> None:
        """
        Atomically replace all elements.

        Raises:
            ApplyFailure: If the subsystem rejects the update. The prior
                membership is left active.
        """

    def check(self, elements: Iterable[str]) -> None:
        """
        Verify the subsystem would accept `elements` without applying.

        Backends without a check mode accept everything here.
        """
