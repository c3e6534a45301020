"""
HTTP fetching for the crawler (requests session, no redirect following).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional
from urllib.parse import urljoin, urlparse

import requests
from requests.adapters import HTTPAdapter

from linkcrawler.exceptions import FetchError

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "LinkCrawler/1.0"
DEFAULT_TIMEOUT = 10.0
DEFAULT_CONNECT_TIMEOUT = 10.0


@dataclass(frozen=True)
class CrawlResponse:
    """Status, headers and decoded body of one GET."""
    url: str
    status_code: int
    reason: str = ""
    headers: Mapping[str, str] = field(default_factory=dict)
    body: str = ""

    @classmethod
    def from_requests(cls, resp: requests.Response) -> CrawlResponse:
        return cls(
            url=resp.url,
            status_code=resp.status_code,
            reason=resp.reason or "",
            # requests' CaseInsensitiveDict keeps lookups like headers["content-type"] working
            headers=resp.headers,
            body=resp.text,
        )

    @property
    def content_type(self) -> str:
        return (self.headers.get("content-type") or "").lower()

    @property
    def is_redirect(self) -> bool:
        return 300 <= self.status_code < 400

    @property
    def location(self) -> Optional[str]:
        """Absolute redirect target of a 3xx response, if any."""
        if not self.is_redirect:
            return None
        target = self.headers.get("location")
        if not target:
            return None
        try:
            return urljoin(self.url, target)
        except ValueError:
            return None

    @property
    def host(self) -> Optional[str]:
        return urlparse(self.url).hostname


class Fetcher:
    """
    Shared requests session sized for concurrent use.

    Cookies persist across requests. Redirects are never followed: a 3xx
    response is returned as-is.
    """

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        pool_size: int = 10,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._timeout = (connect_timeout, timeout)
        self._session = session or requests.Session()
        self._session.headers["User-Agent"] = user_agent
        adapter = HTTPAdapter(pool_connections=pool_size, pool_maxsize=pool_size)
        self._session.mount("http://", adapter)
        self._session.mount("https://", adapter)

    @property
    def session(self) -> requests.Session:
        return self._session

    def fetch(self, url: str) -> CrawlResponse:
        """
        GET url.

        Raises FetchError without a response when nothing came back, and
        with the response attached for status codes of 400 and above.
        """
        try:
            resp = self._session.get(url, timeout=self._timeout, allow_redirects=False)
        except requests.RequestException as e:
            raise FetchError(str(e) or e.__class__.__name__, url=url) from e

        response = CrawlResponse.from_requests(resp)
        if resp.status_code >= 400:
            status = f"{resp.status_code} {response.reason}" if response.reason else str(resp.status_code)
            raise FetchError(f"{status} for url {url}", url=url, response=response)
        return response

    def login(self, login_url: str, form_data: Dict[str, str]) -> None:
        """POST credentials; the session keeps the resulting cookies."""
        try:
            resp = self._session.post(login_url, data=form_data, timeout=self._timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise FetchError(f"Login failed: {e}", url=login_url) from e
        logger.info("logged in at %s (%d cookies)", login_url, len(self._session.cookies))

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> Fetcher:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
