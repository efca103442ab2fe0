"""
ipset filter set.

Stages the new membership into a temporary `hash:mac` set, then swaps
it into place with `ipset swap` in one `ipset restore` script. The
temporary set is destroyed afterwards as a separate step.
"""

from __future__ import annotations

import logging
import re
import subprocess
from typing import Iterable

from gatekeeper.errors import ApplyFailure
from gatekeeper.filterset.base import FilterSet


logger = logging.getLogger(__name__)

SET_TYPE = "hash:mac"
ADD_LINE = re.compile(r"^\s*add\s+(\S+)\s+(\S+)")  # add <set> <elem>


class IpsetFilterSet(FilterSet):
    """
    Filter set backed by an ipset `hash:mac` set.
    """

    def __init__(
        self,
        set_name: str = "static_macs",
        binary: str = "ipset",
        timeout: float = 30.0,
        tmp_name: str | None = None,
    ) -> None:
        self.name = set_name
        self.binary = binary
        self.timeout = timeout
        self.tmp_name = tmp_name or f"{set_name}-tmp"

    def build_script(self, elements: Iterable[str]) -> str:
        """Emit ipset-restore commands for a staged swap."""
        lines = [
            f"create {self.tmp_name} {SET_TYPE} -exist",
            f"flush {self.tmp_name}",
        ]
        for elem in sorted(elements):
            lines.append(f"add {self.tmp_name} {elem}")
        lines += [
            f"create {self.name} {SET_TYPE} -exist",
            f"swap {self.tmp_name} {self.name}",
        ]
        return "\n".join(lines) + "\n"

    def _run(self, args: list[str], script: str | None = None) -> subprocess.CompletedProcess:
        cmd = [self.binary, *args]
        try:
            proc = subprocess.run(
                cmd,
                input=script.encode("utf-8") if script is not None else None,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                timeout=self.timeout,
                check=False,
            )
        except FileNotFoundError as e:
            raise ApplyFailure(self.name, f"ipset binary not found: {self.binary}", cmd) from e
        except subprocess.TimeoutExpired as e:
            raise ApplyFailure(self.name, f"ipset timed out after {self.timeout}s", cmd) from e
        except OSError as e:
            raise ApplyFailure(self.name, f"failed to run ipset: {e}", cmd) from e

        if proc.returncode != 0:
            stderr = proc.stderr.decode("utf-8", "replace").strip()
            raise ApplyFailure(
                self.name,
                stderr or f"ipset exited with status {proc.returncode}",
                cmd,
                proc.returncode,
            )
        return proc

    def members(self) -> frozenset[str]:
        proc = self._run(["save", self.name])
        elements = set()
        for line in proc.stdout.decode("utf-8", "replace").splitlines():
            m = ADD_LINE.match(line)
            if m and m.group(1) == self.name:
                elements.add(m.group(2).lower())
        return frozenset(elements)

    def replace(self, elements: Iterable[str]) -> None:
        items = sorted(elements)
        script = self.build_script(items)
        try:
            self._run(["restore"], script)
        except ApplyFailure:
            self._discard_staged()
            raise
        logger.info("Swapped %d element(s) into ipset %s", len(items), self.name)
        # swap committed; cleanup failure only warns
        self._discard_staged()

    def _discard_staged(self) -> None:
        """Destroy the temporary set, logging instead of raising on failure."""
        try:
            self._run(["destroy", self.tmp_name])
        except ApplyFailure as e:
            logger.warning("Could not destroy staged set %s: %s", self.tmp_name, e.reason)
        else:
            logger.debug("Destroyed staged set %s", self.tmp_name)
