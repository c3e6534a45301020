"""
Crawl configuration.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from linkcrawler.crawl_queue import CrawlQueue, InMemoryCrawlQueue
from linkcrawler.fetcher import DEFAULT_CONNECT_TIMEOUT, DEFAULT_TIMEOUT, DEFAULT_USER_AGENT
from linkcrawler.observer import CrawlObserver
from linkcrawler.policies import CrawlAllUrls, CrawlPolicy

DEFAULT_CONCURRENCY = 10

# Pause after a failed fetch before dispatching more work (seconds)
DEFAULT_FAILURE_DELAY = 0.1


@dataclass
class CrawlConfig:
    """Everything one crawl needs besides the seed."""
    observer: CrawlObserver
    policy: CrawlPolicy = field(default_factory=CrawlAllUrls)
    queue: CrawlQueue = field(default_factory=InMemoryCrawlQueue)
    concurrency: int = DEFAULT_CONCURRENCY
    maximum_crawl_count: Optional[int] = None
    maximum_depth: Optional[int] = None
    execute_scripts: bool = False
    timeout: float = DEFAULT_TIMEOUT
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT
    failure_delay: float = DEFAULT_FAILURE_DELAY
    follow_redirect_locations: bool = True

    def __post_init__(self) -> None:
        if self.concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {self.concurrency}")
        # The seed itself counts, so a limit below 1 could never hold
        if self.maximum_crawl_count is not None and self.maximum_crawl_count < 1:
            raise ValueError(f"maximum_crawl_count must be at least 1, got {self.maximum_crawl_count}")
        if self.maximum_depth is not None and self.maximum_depth < 0:
            raise ValueError(f"maximum_depth must not be negative, got {self.maximum_depth}")
        if self.failure_delay < 0:
            raise ValueError(f"failure_delay must not be negative, got {self.failure_delay}")
        if self.timeout <= 0 or self.connect_timeout <= 0:
            raise ValueError("timeouts must be positive")
