"""
Run summary and exit status.

Exactly one summary line goes to stdout per run; details go to the log.
"""

from __future__ import annotations

import logging
import sys
from enum import IntEnum
from typing import TextIO

from gatekeeper.errors import ApplyFailure, ConfigReadError, GatekeeperError, ValidationAbort
from gatekeeper.reconciler import ReconcileResult


logger = logging.getLogger(__name__)


class ExitCode(IntEnum):
    """Process exit codes."""

    OK = 0
    VALIDATION_ABORT = 1
    APPLY_FAILURE = 2
    CONFIG_ERROR = 3


class Reporter:
    """
    Summarizes a reconciliation outcome without altering any state.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream

    def _emit(self, line: str) -> None:
        print(line, file=self.stream if self.stream is not None else sys.stdout)

    def success(self, result: ReconcileResult) -> ExitCode:
        """Report a successful (or dry) pass."""
        if result.dry_run:
            line = f"Dry run: would synchronize {result.applied} static MAC addresses."
        else:
            line = f"Successfully synchronized {result.applied} static MAC addresses."
        logger.info(
            "%d scanned, %d applied, %d duplicate(s), changed=%s",
            result.entries_scanned, result.applied,
            len(result.duplicates), result.changed,
        )
        self._emit(line)
        return ExitCode.OK

    def failure(self, error: GatekeeperError) -> ExitCode:
        """Report an aborted pass and return its exit code."""
        if isinstance(error, ValidationAbort):
            self._emit(
                f"Synchronization aborted: {len(error.errors)} malformed address(es) "
                f"in {error.entries_scanned} entries; filter set unchanged."
            )
            return ExitCode.VALIDATION_ABORT

        if isinstance(error, ApplyFailure):
            logger.error("%s", error)
            if error.command:
                logger.error("Command: %s", " ".join(error.command))
            self._emit(
                f"Synchronization failed: {error.set_name} rejected the update; "
                "filter set unchanged."
            )
            return ExitCode.APPLY_FAILURE

        if isinstance(error, ConfigReadError):
            logger.error("%s", error)
            self._emit(
                "Synchronization failed: configuration store unreadable; "
                "filter set unchanged."
            )
            return ExitCode.CONFIG_ERROR

        logger.error("%s", error)
        self._emit(f"Synchronization failed: {error}")
        return ExitCode.CONFIG_ERROR
