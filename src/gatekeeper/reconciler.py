"""
Set reconciler.

Computes the target membership from every configured entry and applies
it to the live filter set in one atomic transition. A pass with any
malformed entry aborts before the filter set is touched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from gatekeeper.errors import ApplyFailure, MalformedAddressError, ValidationAbort
from gatekeeper.filterset.base import FilterSet
from gatekeeper.store.source import RawEntry
from gatekeeper.validator import CanonicalAddress, ValidationOutcome, split_entry, validate


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Duplicate:
    """A repeated address and where it was first seen."""

    address: CanonicalAddress
    index: int
    first_index: int


@dataclass
class ScanResult:
    """Per-token outcomes of one validation scan."""

    entries_scanned: int = 0
    outcomes: list[ValidationOutcome] = field(default_factory=list)
    first_seen: dict[CanonicalAddress, int] = field(default_factory=dict)
    duplicates: list[Duplicate] = field(default_factory=list)

    @property
    def errors(self) -> list[MalformedAddressError]:
        return [o.error for o in self.outcomes if o.error is not None]

    @property
    def target(self) -> frozenset[CanonicalAddress]:
        return frozenset(self.first_seen)


@dataclass
class ReconcileResult:
    """Outcome of a successful reconciliation pass."""

    set_name: str
    entries_scanned: int
    addresses_seen: int
    target: frozenset[CanonicalAddress]
    duplicates: list[Duplicate] = field(default_factory=list)
    changed: bool = True
    added: int | None = None
    removed: int | None = None
    dry_run: bool = False

    @property
    def applied(self) -> int:
        """Number of unique addresses in the filter set after the pass."""
        return len(self.target)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "set_name": self.set_name,
            "entries_scanned": self.entries_scanned,
            "addresses_seen": self.addresses_seen,
            "applied": self.applied,
            "duplicates": len(self.duplicates),
            "changed": self.changed,
            "added": self.added,
            "removed": self.removed,
            "dry_run": self.dry_run,
        }


def scan(entries: Iterable[RawEntry]) -> ScanResult:
    """
    Validate every entry without short-circuiting.

    Args:
        entries: Raw entries in store order

    Returns:
        ScanResult with outcomes for each address token
    """
    result = ScanResult()
    for entry in entries:
        result.entries_scanned += 1
        for token in split_entry(entry.value):
            outcome = validate(token, entry.index)
            result.outcomes.append(outcome)
            if outcome.address is None:
                continue
            first = result.first_seen.get(outcome.address)
            if first is None:
                result.first_seen[outcome.address] = entry.index
            else:
                result.duplicates.append(Duplicate(outcome.address, entry.index, first))
    return result


class SetReconciler:
    """
    Applies configured addresses to a filter set.

    The filter set handle is injected so tests and callers choose the
    backend.
    """

    def __init__(self, filter_set: FilterSet, skip_unchanged: bool = True) -> None:
        """
        Initialize the reconciler.

        Args:
            filter_set: Set to reconcile into
            skip_unchanged: Skip the write when the live set already
                matches the target
        """
        self.filter_set = filter_set
        self.skip_unchanged = skip_unchanged

    def _current_members(self) -> frozenset[str] | None:
        """Read live membership, or None if it cannot be listed."""
        try:
            return self.filter_set.members()
        except ApplyFailure as e:
            logger.warning(
                "Could not read current members of %s (%s); applying unconditionally",
                self.filter_set.name, e.reason,
            )
            return None

    def reconcile(self, entries: Iterable[RawEntry], dry_run: bool = False) -> ReconcileResult:
        """
        Run one reconciliation pass.

        Args:
            entries: Raw entries, typically an EntrySource
            dry_run: Validate and compute the target without applying

        Returns:
            ReconcileResult describing the pass

        Raises:
            ConfigReadError: If the store cannot be read (nothing applied)
            ValidationAbort: If any entry is malformed (nothing applied)
            ApplyFailure: If the subsystem rejects the update (prior
                membership kept)
        """
        scanned = scan(entries)

        errors = scanned.errors
        if errors:
            for error in errors:
                logger.error("Malformed entry at index %d: %r (%s)", error.index, error.raw, error.reason)
            raise ValidationAbort(errors, scanned.entries_scanned)

        for dup in scanned.duplicates:
            logger.debug(
                "Duplicate %s at index %d (first seen at index %d)",
                dup.address, dup.index, dup.first_index,
            )

        target = scanned.target
        elements = frozenset(str(a) for a in target)
        result = ReconcileResult(
            set_name=self.filter_set.name,
            entries_scanned=scanned.entries_scanned,
            addresses_seen=len(scanned.outcomes),
            target=target,
            duplicates=scanned.duplicates,
            dry_run=dry_run,
        )

        current = self._current_members()
        if current is not None:
            result.added = len(elements - current)
            result.removed = len(current - elements)
            if self.skip_unchanged and current == elements:
                result.changed = False
                logger.info("%s already up to date (%d addresses)", self.filter_set.name, len(elements))
                return result

        if dry_run:
            self.filter_set.check(elements)
            logger.info("Dry run: %s would hold %d addresses", self.filter_set.name, len(elements))
            return result

        self.filter_set.replace(elements)
        logger.info(
            "Synchronized %s: %d addresses (+%s/-%s)",
            self.filter_set.name, len(elements),
            "?" if result.added is None else result.added,
            "?" if result.removed is None else result.removed,
        )
        return result
