"""
Hardware address validator.

Normalizes raw configuration values into canonical MAC addresses:
six colon-separated two-digit hex octets, lowercase.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from gatekeeper.errors import MalformedAddressError


MAC_PATTERN = re.compile(r"[0-9a-f]{2}(?::[0-9a-f]{2}){5}", re.IGNORECASE)


@dataclass(frozen=True, order=True)
class CanonicalAddress:
    """
    Validated, normalized MAC address.

    Equality, ordering and hashing are by the normalized string.
    """

    value: str

    def __str__(self) -> str:
        return self.value


@dataclass
class ValidationOutcome:
    """Result of validating one raw token."""

    raw: str
    index: int
    address: CanonicalAddress | None = None
    error: MalformedAddressError | None = None

    @property
    def is_valid(self) -> bool:
        return self.error is None


def _reason(raw: str) -> str:
    """Explain why a value failed, for diagnostics."""
    if raw == "":
        return "empty value"
    if "-" in raw and ":" not in raw:
        return "wrong separator, expected ':'"
    groups = raw.split(":")
    if len(groups) != 6:
        return f"expected 6 octets, got {len(groups)}"
    for group in groups:
        if len(group) != 2:
            return f"octet {group!r} is not two digits"
        if not all(c in "0123456789abcdefABCDEF" for c in group):
            return f"octet {group!r} is not hexadecimal"
    return "not a MAC address"


def normalize(raw: str, index: int) -> CanonicalAddress:
    """
    Normalize a raw entry into a canonical address.

    Args:
        raw: Value read from the configuration store
        index: Ordinal index the value came from

    Returns:
        CanonicalAddress in lowercase colon form

    Raises:
        MalformedAddressError: If the value is not a MAC address
    """
    if not MAC_PATTERN.fullmatch(raw):
        raise MalformedAddressError(raw, index, _reason(raw))
    return CanonicalAddress(raw.lower())


def validate(raw: str, index: int) -> ValidationOutcome:
    """Validate without raising, so a whole pass can be scanned."""
    try:
        return ValidationOutcome(raw=raw, index=index, address=normalize(raw, index))
    except MalformedAddressError as e:
        return ValidationOutcome(raw=raw, index=index, error=e)


def split_entry(value: str) -> list[str]:
    """
    Split a store value into address tokens.

    A host may list several whitespace-separated addresses. An empty
    or blank value yields a single empty token so it is reported as
    malformed rather than silently ignored.
    """
    tokens = value.split()
    return tokens if tokens else [""]
