"""
Concurrent web crawler that follows links from a seed URL, reporting each
fetched page to an observer while bounding depth and total page count.
"""
from linkcrawler.config import CrawlConfig
from linkcrawler.core import Crawler, start_crawling
from linkcrawler.crawl_queue import CrawlQueue, InMemoryCrawlQueue
from linkcrawler.crawl_url import QueueEntry
from linkcrawler.depth import DepthIndex
from linkcrawler.exceptions import CrawlerError, FetchError, InvalidSeedError, RenderError
from linkcrawler.fetcher import CrawlResponse, Fetcher
from linkcrawler.observer import CollectingObserver, CrawlObserver, CrawlStats, PageResult
from linkcrawler.policies import CrawlAllUrls, CrawlInternalUrls, CrawlPolicy, CrawlSubdomains
from linkcrawler.url import Address

__version__ = "1.0.0"
__all__ = [
    "Address",
    "CollectingObserver",
    "CrawlAllUrls",
    "CrawlConfig",
    "CrawlInternalUrls",
    "CrawlObserver",
    "CrawlPolicy",
    "CrawlQueue",
    "CrawlResponse",
    "CrawlStats",
    "CrawlSubdomains",
    "Crawler",
    "CrawlerError",
    "DepthIndex",
    "FetchError",
    "Fetcher",
    "InMemoryCrawlQueue",
    "InvalidSeedError",
    "PageResult",
    "QueueEntry",
    "RenderError",
    "start_crawling",
]
