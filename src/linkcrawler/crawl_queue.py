"""
Crawl queue contract and the default in-memory implementation.
"""
from __future__ import annotations

import itertools
import logging
from abc import ABC, abstractmethod
from dataclasses import replace
from threading import Lock
from typing import Dict, Iterator, Optional, Set

from linkcrawler.crawl_url import QueueEntry
from linkcrawler.url import Address

logger = logging.getLogger(__name__)


class CrawlQueue(ABC):
    """
    Ordered store of queue entries with processed-tracking.

    An address is admitted at most once over the lifetime of the queue,
    whether it is still pending, in flight or already processed.
    Implementations must make ``add`` and ``next_pending`` safe to call
    from different threads.
    """

    @abstractmethod
    def add(self, entry: QueueEntry) -> Optional[QueueEntry]:
        """Admit entry with a fresh id; return it, or None if its address was already admitted."""

    @abstractmethod
    def has(self, address: Address) -> bool:
        """True if the address was ever admitted."""

    @abstractmethod
    def next_pending(self) -> Optional[QueueEntry]:
        """Earliest entry not yet processed, without removing it."""

    @abstractmethod
    def mark_processed(self, entry: QueueEntry) -> None:
        """Mark entry processed. Idempotent."""

    @abstractmethod
    def is_processed(self, entry: QueueEntry) -> bool:
        ...

    @abstractmethod
    def has_pending(self) -> bool:
        ...

    @abstractmethod
    def get_by_id(self, entry_id: int) -> Optional[QueueEntry]:
        ...

    @abstractmethod
    def __len__(self) -> int:
        """Number of entries ever admitted."""


class InMemoryCrawlQueue(CrawlQueue):
    """Thread-safe crawl queue backed by dicts, guarded by one lock."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._ids: Iterator[int] = itertools.count()
        self._by_address: Dict[str, QueueEntry] = {}
        self._by_id: Dict[int, QueueEntry] = {}
        # Insertion-ordered, so the first key is always the earliest pending entry
        self._pending: Dict[int, QueueEntry] = {}
        self._processed: Set[int] = set()

    def add(self, entry: QueueEntry) -> Optional[QueueEntry]:
        key = entry.address.render()
        with self._lock:
            if key in self._by_address:
                return None
            entry = replace(entry, id=next(self._ids))
            self._by_address[key] = entry
            self._by_id[entry.id] = entry
            self._pending[entry.id] = entry
        logger.debug("queued #%d %s", entry.id, key)
        return entry

    def has(self, address: Address) -> bool:
        with self._lock:
            return address.render() in self._by_address

    def next_pending(self) -> Optional[QueueEntry]:
        with self._lock:
            return next(iter(self._pending.values()), None)

    def mark_processed(self, entry: QueueEntry) -> None:
        with self._lock:
            self._processed.add(entry.id)
            self._pending.pop(entry.id, None)

    def is_processed(self, entry: QueueEntry) -> bool:
        with self._lock:
            return entry.id in self._processed

    def has_pending(self) -> bool:
        with self._lock:
            return bool(self._pending)

    def get_by_id(self, entry_id: int) -> Optional[QueueEntry]:
        with self._lock:
            return self._by_id.get(entry_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_address)
