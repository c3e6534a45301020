"""
Discovery depth of every admitted address, relative to the seed.
"""
from __future__ import annotations

from typing import Dict, Optional

from linkcrawler.url import Address


class DepthIndex:
    """Flat mapping of canonical address string to depth. Never shrinks."""

    def __init__(self) -> None:
        self._depths: Dict[str, int] = {}

    def record_seed(self, address: Address) -> int:
        self._depths[address.render()] = 0
        return 0

    def record(self, address: Address, discovered_on_depth: int) -> int:
        """Store and return the depth of an address found on a page at discovered_on_depth."""
        depth = discovered_on_depth + 1
        self._depths[address.render()] = depth
        return depth

    def depth_of(self, address: Address) -> Optional[int]:
        return self._depths.get(address.render())

    def __contains__(self, address: object) -> bool:
        return isinstance(address, Address) and address.render() in self._depths

    def __len__(self) -> int:
        return len(self._depths)
