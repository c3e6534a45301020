"""
Queue entries: an address plus where it was found.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from linkcrawler.url import Address


@dataclass(frozen=True)
class QueueEntry:
    """
    An address waiting in (or admitted to) a crawl queue.

    ``id`` stays None until the queue admits the entry; it then correlates
    the dispatched fetch with its result and is never reused.
    """
    address: Address
    discovered_on: Optional[Address] = None
    id: Optional[int] = None

    @classmethod
    def create(cls, address: Address | str, discovered_on: Optional[Address] = None) -> QueueEntry:
        if isinstance(address, str):
            address = Address.parse(address)
        return cls(address=address, discovered_on=discovered_on)
