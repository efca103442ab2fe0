"""
Error taxonomy for a reconciliation pass.

Every error carries enough context to locate the offending entry
(index and raw value) or the filter subsystem failure reason.
"""

from __future__ import annotations

from typing import Sequence


class GatekeeperError(Exception):
    """Base class for all sync errors."""


class ConfigReadError(GatekeeperError):
    """Configuration store unreachable or misconfigured."""

    def __init__(self, message: str, index: int | None = None) -> None:
        super().__init__(message)
        self.index = index


class MalformedAddressError(GatekeeperError):
    """A single raw entry is not a valid hardware address."""

    def __init__(self, raw: str, index: int, reason: str = "not a MAC address") -> None:
        super().__init__(f"Entry {index}: {raw!r} is malformed ({reason})")
        self.raw = raw
        self.index = index
        self.reason = reason


class ValidationAbort(GatekeeperError):
    """One or more entries are malformed; the pass stopped before any mutation."""

    def __init__(
        self,
        errors: Sequence[MalformedAddressError],
        entries_scanned: int,
    ) -> None:
        self.errors = list(errors)
        self.entries_scanned = entries_scanned
        super().__init__(
            f"{len(self.errors)} malformed address(es) in {entries_scanned} entries"
        )


class ApplyFailure(GatekeeperError):
    """The filter subsystem rejected the atomic replace; prior state kept."""

    def __init__(
        self,
        set_name: str,
        reason: str,
        command: Sequence[str] | None = None,
        returncode: int | None = None,
    ) -> None:
        super().__init__(f"Filter set {set_name} rejected update: {reason}")
        self.set_name = set_name
        self.reason = reason
        self.command = list(command) if command else None
        self.returncode = returncode
