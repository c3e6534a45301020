"""
Core crawling logic: the wave-based concurrent crawl loop.
"""
from __future__ import annotations

import logging
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from linkcrawler.config import CrawlConfig
from linkcrawler.crawl_url import QueueEntry
from linkcrawler.depth import DepthIndex
from linkcrawler.exceptions import FetchError, InvalidSeedError, RenderError
from linkcrawler.fetcher import CrawlResponse, Fetcher
from linkcrawler.links import extract_links
from linkcrawler.renderer import ScriptRenderer
from linkcrawler.url import Address

logger = logging.getLogger(__name__)


@dataclass
class CrawlOutcome:
    """What a worker hands back for one successfully fetched address."""
    response: CrawlResponse
    links: List[str] = field(default_factory=list)


class Crawler:
    """
    Crawl every address reachable from a seed, up to the configured limits.

    Fetches run on a thread pool of ``config.concurrency`` workers. The
    queue, the depth index and the observer are only touched from the
    thread that calls ``start_crawling``.
    """

    def __init__(
        self,
        config: CrawlConfig,
        *,
        fetcher: Optional[Fetcher] = None,
        renderer: Optional[ScriptRenderer] = None,
    ) -> None:
        self.config = config
        self.observer = config.observer
        self.policy = config.policy
        self.queue = config.queue
        self.concurrency = config.concurrency
        self.maximum_crawl_count = config.maximum_crawl_count
        self.maximum_depth = config.maximum_depth

        self._owns_fetcher = fetcher is None
        self.fetcher = fetcher if fetcher is not None else Fetcher(
            timeout=config.timeout,
            connect_timeout=config.connect_timeout,
            user_agent=config.user_agent,
            pool_size=config.concurrency,
        )

        self.renderer: Optional[ScriptRenderer] = None
        self._owns_renderer = renderer is None
        if config.execute_scripts:
            self.renderer = renderer if renderer is not None else ScriptRenderer(user_agent=config.user_agent)

        self.seed: Optional[Address] = None
        self.depth_index = DepthIndex()
        self.crawled_url_count = 0

    @classmethod
    def logged_in(
        cls,
        login_url: str,
        form_data: Dict[str, str],
        config: CrawlConfig,
        **kwargs: Any,
    ) -> Crawler:
        """Crawler whose session first logs in at login_url and keeps the cookies."""
        crawler = cls(config, **kwargs)
        try:
            crawler.fetcher.login(login_url, form_data)
        except FetchError:
            crawler.close()
            raise
        return crawler

    def start_crawling(self, seed: Address | str) -> Any:
        """
        Crawl from seed until the queue is exhausted.

        Returns whatever the observer's ``finished()`` returns.
        """
        seed_address = seed if isinstance(seed, Address) else Address.parse(seed)
        seed_address = seed_address.without_fragment()
        if seed_address.is_relative() or seed_address.is_schemeless() or not seed_address.has_crawlable_scheme():
            raise InvalidSeedError(f"Invalid start URL: {seed}")

        self.seed = seed_address
        self.depth_index = DepthIndex()
        self.crawled_url_count = 0

        if self.renderer is not None:
            self.renderer.start()
        try:
            logger.info(
                "crawling %s (concurrency=%d, max count=%s, max depth=%s)",
                seed_address, self.concurrency, self.maximum_crawl_count, self.maximum_depth,
            )
            self._add_to_crawl_queue(QueueEntry.create(seed_address))
            self.depth_index.record_seed(seed_address)
            self._crawl_queue_until_exhausted()
        finally:
            if self.renderer is not None and self._owns_renderer:
                self.renderer.close()

        return self.observer.finished()

    def close(self) -> None:
        if self._owns_fetcher:
            self.fetcher.close()
        if self.renderer is not None and self._owns_renderer:
            self.renderer.close()

    def __enter__(self) -> Crawler:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def _crawl_queue_until_exhausted(self) -> None:
        waves = 0
        # A link admitted after the dispatcher's last pull still leaves work pending
        while self.queue.has_pending():
            waves += 1
            logger.debug("wave %d starting, %d admitted so far", waves, self.crawled_url_count)
            self._run_wave()
        logger.info("crawl of %s finished: %d admitted in %d wave(s)", self.seed, self.crawled_url_count, waves)

    def _run_wave(self) -> None:
        in_flight: Dict[Future, int] = {}
        with ThreadPoolExecutor(max_workers=self.concurrency, thread_name_prefix="crawl") as executor:
            while True:
                while len(in_flight) < self.concurrency:
                    entry = self._next_crawl_entry()
                    if entry is None:
                        break
                    in_flight[executor.submit(self._crawl, entry)] = entry.id

                if not in_flight:
                    return

                done, _ = wait(in_flight, return_when=FIRST_COMPLETED)
                for future in done:
                    self._handle_completion(in_flight.pop(future), future)

    def _next_crawl_entry(self) -> Optional[QueueEntry]:
        """Pull the next entry to dispatch, marking it processed; None when nothing is pending."""
        while True:
            entry = self.queue.next_pending()
            if entry is None:
                return None

            if not self.policy.should_crawl(entry.address) or self.queue.is_processed(entry):
                # Never dispatched, but must not be pulled again
                self.queue.mark_processed(entry)
                continue

            self.observer.will_crawl(entry.address)
            self.queue.mark_processed(entry)
            logger.debug("dispatching #%d %s", entry.id, entry.address)
            return entry

    def _crawl(self, entry: QueueEntry) -> CrawlOutcome:
        """Runs on a worker thread: fetch, then collect candidate links."""
        response = self.fetcher.fetch(str(entry.address))
        outcome = CrawlOutcome(response=response)
        if self._should_extract_links(entry.address):
            outcome.links = self._extract_links(response, entry.address)
        return outcome

    def _should_extract_links(self, address: Address) -> bool:
        return self.policy.includes_subdomains or address.host == self.seed.host

    def _extract_links(self, response: CrawlResponse, address: Address) -> List[str]:
        links: List[str] = []
        if self.config.follow_redirect_locations and response.location:
            links.append(response.location)

        content_type = response.content_type
        if content_type and "html" not in content_type and "xml" not in content_type:
            return links

        body = response.body
        if self.renderer is not None:
            try:
                body = self.renderer.render(str(address))
            except RenderError as e:
                logger.warning("using unrendered body for %s: %s", address, e)

        links.extend(extract_links(body, str(address)))
        return links

    def _handle_completion(self, entry_id: int, future: Future) -> None:
        entry = self.queue.get_by_id(entry_id)
        try:
            outcome = future.result()
        except FetchError as e:
            logger.info("fetch failed for %s: %s", entry.address, e)
            self._report_failure(entry, str(e), e.status_code)
            return
        except Exception as e:
            logger.exception("crawling %s failed", entry.address)
            self._report_failure(entry, str(e) or type(e).__name__, None)
            return

        self.observer.has_been_crawled(entry.address, outcome.response, entry.discovered_on, None)
        self._add_links_to_crawl_queue(outcome.links, entry.address)

    def _report_failure(self, entry: QueueEntry, message: str, status_code: Optional[int]) -> None:
        self.observer.has_been_crawled(entry.address, None, entry.discovered_on, message, status_code=status_code)
        if self.config.failure_delay:
            time.sleep(self.config.failure_delay)

    def _add_links_to_crawl_queue(self, links: Iterable[str], found_on: Address) -> None:
        parent_depth = self.depth_index.depth_of(found_on) or 0
        admitted = 0

        for link in links:
            address = Address.parse(link)
            if not address.has_crawlable_scheme():
                continue

            address = address.without_fragment()
            if address.is_relative():
                logger.debug("dropping link without host %r found on %s", link, found_on)
                continue
            if address.is_schemeless():
                address = address.with_scheme(found_on.scheme)

            if not self.policy.should_crawl(address):
                continue
            if self.queue.has(address):
                continue

            depth = self.depth_index.record(address, parent_depth)
            if self.maximum_depth is not None and depth > self.maximum_depth:
                continue
            if self._maximum_crawl_count_reached():
                continue

            if self._add_to_crawl_queue(QueueEntry.create(address, found_on)) is not None:
                admitted += 1

        if admitted:
            logger.debug("%s: %d new link(s) queued", found_on, admitted)

    def _add_to_crawl_queue(self, entry: QueueEntry) -> Optional[QueueEntry]:
        admitted = self.queue.add(entry)
        if admitted is not None:
            self.crawled_url_count += 1
        return admitted

    def _maximum_crawl_count_reached(self) -> bool:
        if self.maximum_crawl_count is None:
            return False
        return self.crawled_url_count >= self.maximum_crawl_count


def start_crawling(
    seed: Address | str,
    config: CrawlConfig,
    *,
    fetcher: Optional[Fetcher] = None,
    renderer: Optional[ScriptRenderer] = None,
) -> Any:
    """Run one crawl with a fresh Crawler and return the observer's result."""
    with Crawler(config, fetcher=fetcher, renderer=renderer) as crawler:
        return crawler.start_crawling(seed)
