"""
Address value type: a parsed, comparable URL.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from functools import cached_property
from typing import List, Optional
from urllib.parse import urlsplit

DEFAULT_PORT = 80

# Schemes the crawler will follow; None covers scheme-relative links
CRAWLABLE_SCHEMES: frozenset = frozenset((None, "http", "https"))


@dataclass(frozen=True, eq=False)
class Address:
    """
    Immutable URL value.

    Identity is the rendered canonical string (scheme, host, port, path,
    query). The fragment is kept only so it can be stripped explicitly.
    """
    scheme: Optional[str] = None
    host: Optional[str] = None
    port: int = DEFAULT_PORT
    path: str = ""
    query: Optional[str] = None
    fragment: Optional[str] = field(default=None, repr=False)

    @classmethod
    def parse(cls, url: str) -> Address:
        """
        Best-effort decomposition of a URL string.

        Never raises: components that cannot be parsed are left absent
        and an unreadable port falls back to 80.
        """
        try:
            parts = urlsplit((url or "").strip())
        except ValueError:
            return cls()

        try:
            host = parts.hostname
        except ValueError:
            host = None
        if host and ":" in host:
            host = f"[{host}]"

        try:
            port = parts.port or DEFAULT_PORT
        except ValueError:
            port = DEFAULT_PORT

        return cls(
            scheme=parts.scheme or None,
            host=host or None,
            port=port,
            path=parts.path,
            query=parts.query or None,
            fragment=parts.fragment or None,
        )

    def is_relative(self) -> bool:
        return self.host is None

    def is_schemeless(self) -> bool:
        return self.scheme is None

    def has_crawlable_scheme(self) -> bool:
        """True for http, https and scheme-relative addresses."""
        return self.scheme in CRAWLABLE_SCHEMES

    def without_fragment(self) -> Address:
        """Return a copy with the fragment dropped, including any '#' left in the path."""
        return replace(self, path=self.path.split("#", 1)[0], fragment=None)

    def with_scheme(self, scheme: str) -> Address:
        return replace(self, scheme=scheme)

    def with_host(self, host: str) -> Address:
        return replace(self, host=host)

    def with_port(self, port: int) -> Address:
        return replace(self, port=port)

    def with_path(self, path: str) -> Address:
        return replace(self, path=path)

    def segments(self) -> List[str]:
        """Non-empty path segments."""
        return [segment for segment in self.path.split("/") if segment]

    def segment(self, index: int) -> Optional[str]:
        """Path segment by 1-based index, or None when there is no such segment."""
        segments = self.segments()
        if index < 1 or index > len(segments):
            return None
        return segments[index - 1]

    @cached_property
    def _rendered(self) -> str:
        path = self.path[1:] if self.path.startswith("/") else self.path
        port = "" if self.port == DEFAULT_PORT else f":{self.port}"
        query = "" if self.query is None else f"?{self.query}"
        return f"{self.scheme or ''}://{self.host or ''}{port}/{path}{query}"

    def render(self) -> str:
        """Canonical string form: scheme://host[:port]/path[?query]."""
        return self._rendered

    def __str__(self) -> str:
        return self._rendered

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Address):
            return NotImplemented
        return self._rendered == other._rendered

    def __hash__(self) -> int:
        return hash(self._rendered)
