"""
Kernel filter set backends.
"""

from gatekeeper.filterset.base import FilterSet
from gatekeeper.filterset.ipset import IpsetFilterSet
from gatekeeper.filterset.memory import MemoryFilterSet
from gatekeeper.filterset.nftables import NftablesFilterSet

__all__ = [
    "FilterSet",
    "IpsetFilterSet",
    "MemoryFilterSet",
    "NftablesFilterSet",
]
