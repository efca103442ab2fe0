"""
OpenWrt UCI configuration store.

Reads values with `uci get <package>.@<kind>[<index>].<field>`.
"""

from __future__ import annotations

import logging
import subprocess

from gatekeeper.errors import ConfigReadError
from gatekeeper.store.base import ConfigStore


logger = logging.getLogger(__name__)

NOT_FOUND_MARKER = "entry not found"


class UciConfigStore(ConfigStore):
    """
    Configuration store backed by the `uci` command line tool.
    """

    def __init__(
        self,
        package: str = "dhcp",
        binary: str = "uci",
        timeout: float = 10.0,
    ) -> None:
        self.package = package
        self.binary = binary
        self.timeout = timeout

    def describe(self) -> str:
        return f"uci:{self.package}"

    def _key(self, kind: str, index: int, field: str) -> str:
        return f"{self.package}.@{kind}[{index}].{field}"

    def get(self, kind: str, index: int, field: str) -> str | None:
        """
        Read one value through uci.

        Returns:
            The value with its trailing newline removed, or None when
            uci reports the entry does not exist.

        Raises:
            ConfigReadError: If uci is missing, times out, or fails
                for any reason other than a missing entry.
        """
        key = self._key(kind, index, field)
        cmd = [self.binary, "get", key]
        try:
            proc = subprocess.run(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                timeout=self.timeout,
                check=False,
            )
        except FileNotFoundError as e:
            raise ConfigReadError(f"uci binary not found: {self.binary}", index) from e
        except subprocess.TimeoutExpired as e:
            raise ConfigReadError(
                f"uci timed out after {self.timeout}s reading {key}", index
            ) from e
        except OSError as e:
            raise ConfigReadError(f"Failed to run uci for {key}: {e}", index) from e

        stdout = proc.stdout.decode("utf-8", "replace")
        stderr = proc.stderr.decode("utf-8", "replace").strip()

        if proc.returncode == 0:
            return stdout.rstrip("\n")

        if NOT_FOUND_MARKER in stderr.lower():
            logger.debug("uci: %s not found", key)
            return None

        raise ConfigReadError(
            f"uci get {key} failed (exit {proc.returncode}): {stderr or 'no output'}",
            index,
        )
