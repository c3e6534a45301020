"""
Crawl policies: which addresses may ever be queued.
"""
from __future__ import annotations

from abc import ABC, abstractmethod

from linkcrawler.url import Address


def _as_address(url: Address | str) -> Address:
    return url if isinstance(url, Address) else Address.parse(url)


class CrawlPolicy(ABC):
    """
    Admission predicate for discovered addresses.

    ``includes_subdomains`` tells the crawler to extract links from pages
    whose host differs from the seed host.
    """
    includes_subdomains: bool = False

    @abstractmethod
    def should_crawl(self, address: Address) -> bool:
        ...


class CrawlAllUrls(CrawlPolicy):
    def should_crawl(self, address: Address) -> bool:
        return True


class CrawlInternalUrls(CrawlPolicy):
    """Only addresses on the seed's host."""

    def __init__(self, seed: Address | str) -> None:
        self.host = _as_address(seed).host

    def should_crawl(self, address: Address) -> bool:
        return address.host is not None and address.host == self.host


class CrawlSubdomains(CrawlPolicy):
    """The seed's host and any of its subdomains."""
    includes_subdomains = True

    def __init__(self, seed: Address | str) -> None:
        self.host = _as_address(seed).host

    def should_crawl(self, address: Address) -> bool:
        if address.host is None or self.host is None:
            return False
        return address.host == self.host or address.host.endswith("." + self.host)
