"""
Crawl observers: lifecycle callbacks and the default result collector.
"""
from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Generic, List, Optional, Tuple, TypeVar

from linkcrawler.fetcher import CrawlResponse
from linkcrawler.links import parse_metadata
from linkcrawler.url import Address

T = TypeVar("T")


class CrawlObserver(ABC, Generic[T]):
    """
    Receives crawl events on the crawler's dispatch thread.

    ``finished`` is called exactly once, after the queue is exhausted;
    its return value is the result of the crawl.
    """

    def will_crawl(self, address: Address) -> None:
        """Called right before address is dispatched."""

    @abstractmethod
    def has_been_crawled(
        self,
        address: Address,
        response: Optional[CrawlResponse],
        discovered_on: Optional[Address],
        error: Optional[str] = None,
        *,
        status_code: Optional[int] = None,
    ) -> None:
        """
        Called after a fetch completes; exactly one of response/error is set.

        For a failure that still got an HTTP response (4xx/5xx),
        ``status_code`` carries its status.
        """

    @abstractmethod
    def finished(self) -> T:
        ...


@dataclass(slots=True)
class PageResult:
    """Result data for a single crawled page."""
    url: str
    scanned_at: Optional[str] = None
    status_code: Optional[int] = None
    title: Optional[str] = None
    h1_present: Optional[bool] = None
    h1_contents: Optional[List[str]] = None
    found_on: Optional[str] = None
    error: Optional[str] = None


@dataclass(slots=True)
class CrawlStats:
    """Statistics collected during crawl for summary output."""
    pages_crawled: int = 0
    pages_without_title: int = 0
    pages_without_h1: int = 0
    redirects: int = 0
    error_counts: Dict[str, int] = field(default_factory=lambda: defaultdict(int))

    def record_error(self, status_code: Optional[int]) -> None:
        """Record an error by status code category."""
        if status_code is not None and status_code >= 400:
            self.error_counts[str(status_code)] += 1
        else:
            self.error_counts["fetch_error"] += 1

    def record_page(self, title: Optional[str], h1_present: Optional[bool]) -> None:
        """Record page metadata statistics."""
        if not title:
            self.pages_without_title += 1
        if not h1_present:
            self.pages_without_h1 += 1


def utc_now_iso() -> str:
    """Return current UTC time in ISO format."""
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def print_scan_line(url: str, status: Optional[int], error: Optional[str] = None) -> None:
    """Print single scan result line."""
    status_str = str(status) if status else "ERR"
    suffix = f" ({error})" if error else ""
    sys.stderr.write(f"  → {status_str} {url}{suffix}\n")
    sys.stderr.flush()


class CollectingObserver(CrawlObserver[Tuple[List[PageResult], CrawlStats]]):
    """Records a PageResult per crawled address; finished() returns (results, stats)."""

    def __init__(self, verbose: bool = False) -> None:
        self.verbose = verbose
        self.results: Dict[str, PageResult] = {}
        self.stats = CrawlStats()
        self.finished_calls = 0

    def will_crawl(self, address: Address) -> None:
        self.results.setdefault(str(address), PageResult(url=str(address)))

    def has_been_crawled(
        self,
        address: Address,
        response: Optional[CrawlResponse],
        discovered_on: Optional[Address],
        error: Optional[str] = None,
        *,
        status_code: Optional[int] = None,
    ) -> None:
        result = self.results.setdefault(str(address), PageResult(url=str(address)))
        result.scanned_at = utc_now_iso()
        result.found_on = str(discovered_on) if discovered_on is not None else None
        self.stats.pages_crawled += 1

        if response is None:
            result.error = error
            result.status_code = status_code
            self.stats.record_error(status_code)
            if self.verbose:
                print_scan_line(result.url, status_code, error)
            return

        result.status_code = response.status_code
        if response.is_redirect:
            self.stats.redirects += 1

        if "text/html" in response.content_type:
            title, h1_present, h1_texts = parse_metadata(response.body)
        else:
            title, h1_present, h1_texts = None, False, []
        result.title = title
        result.h1_present = h1_present
        result.h1_contents = h1_texts
        self.stats.record_page(title, h1_present)

        if self.verbose:
            print_scan_line(result.url, response.status_code)

    def finished(self) -> Tuple[List[PageResult], CrawlStats]:
        self.finished_calls += 1
        return [self.results[u] for u in sorted(self.results)], self.stats
