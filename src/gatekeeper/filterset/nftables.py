"""
nftables filter set.

Replaces a named set in one `nft -f -` transaction. The kernel commits
the whole batch (flush plus add) at once, so packet classification
never observes the flushed intermediate state.
"""

from __future__ import annotations

import json
import logging
import subprocess
from typing import Any, Iterable

from gatekeeper.errors import ApplyFailure
from gatekeeper.filterset.base import FilterSet


logger = logging.getLogger(__name__)


class NftablesFilterSet(FilterSet):
    """
    Filter set backed by an nftables named set (e.g. `inet fw4 static_macs`).
    """

    def __init__(
        self,
        set_name: str = "static_macs",
        table: str = "fw4",
        family: str = "inet",
        binary: str = "nft",
        timeout: float = 30.0,
    ) -> None:
        self.name = set_name
        self.table = table
        self.family = family
        self.binary = binary
        self.timeout = timeout

    @property
    def qualified_name(self) -> str:
        return f"{self.family} {self.table} {self.name}"

    def build_script(self, elements: Iterable[str]) -> str:
        """
        Build the transaction script for a full replace.

        An empty element list produces a flush-only transaction.
        """
        lines = [f"flush set {self.qualified_name}"]
        items = sorted(elements)
        if items:
            lines.append(f"add element {self.qualified_name} {{ {', '.join(items)} }}")
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
            raise ApplyFailure(self.name, f"nft binary not found: {self.binary}", cmd) from e
        except subprocess.TimeoutExpired as e:
            raise ApplyFailure(self.name, f"nft timed out after {self.timeout}s", cmd) from e
        except OSError as e:
            raise ApplyFailure(self.name, f"failed to run nft: {e}", cmd) from e

        if proc.returncode != 0:
            stderr = proc.stderr.decode("utf-8", "replace").strip()
            raise ApplyFailure(
                self.name,
                stderr or f"nft exited with status {proc.returncode}",
                cmd,
                proc.returncode,
            )
        return proc

    def members(self) -> frozenset[str]:
        proc = self._run(["-j", "list", "set", self.family, self.table, self.name])
        try:
            data = json.loads(proc.stdout.decode("utf-8", "replace"))
        except ValueError as e:
            raise ApplyFailure(self.name, f"unparseable nft JSON output: {e}") from e
        return frozenset(parse_set_elements(data, self.name))

    def check(self, elements: Iterable[str]) -> None:
        script = self.build_script(elements)
        self._run(["-c", "-f", "-"], script)
        logger.debug("nft accepted check of %s", self.qualified_name)

    def replace(self, elements: Iterable[str]) -> None:
        items = sorted(elements)
        script = self.build_script(items)
        logger.debug("Applying nft transaction:\n%s", script)
        self._run(["-f", "-"], script)
        logger.info("Replaced %s with %d element(s)", self.qualified_name, len(items))


def parse_set_elements(data: dict[str, Any], set_name: str) -> list[str]:
    """
    Extract element values from `nft -j list set` output.

    Elements appear either as plain strings or, when they carry
    timeouts or counters, as {"elem": {"val": ...}} objects.
    """
    elements: list[str] = []
    for item in data.get("nftables", []):
        nft_set = item.get("set")
        if not nft_set or nft_set.get("name") != set_name:
            continue
        for elem in nft_set.get("elem", []):
            if isinstance(elem, dict):
                inner = elem.get("elem", elem)
                value = inner.get("val") if isinstance(inner, dict) else inner
            else:
                value = elem
            if isinstance(value, str):
                elements.append(value.lower())
    return elements
