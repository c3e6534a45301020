"""
Crawler error types.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from linkcrawler.fetcher import CrawlResponse


class CrawlerError(Exception):
    """Base class for crawler errors."""


class FetchError(CrawlerError):
    """
    A fetch that did not succeed.

    Covers both "no response received" (``response`` is None) and
    "non-success response received" (``response`` carries it).
    """

    def __init__(self, message: str, url: Optional[str] = None, response: Optional[CrawlResponse] = None) -> None:
        super().__init__(message)
        self.url = url
        self.response = response

    @property
    def status_code(self) -> Optional[int]:
        return self.response.status_code if self.response is not None else None


class RenderError(CrawlerError):
    """The script-rendering browser could not start or render a page."""


class InvalidSeedError(CrawlerError, ValueError):
    """The seed address cannot be crawled."""
