"""
Link and metadata extraction from HTML documents.
"""
from __future__ import annotations

from typing import List, Optional, Tuple
from urllib.parse import urljoin

from bs4 import BeautifulSoup, SoupStrainer

# Parse only <a> and <base> tags (faster link extraction)
LINK_STRAINER = SoupStrainer(["a", "base"], href=True)


def extract_links(html: str, base_url: str) -> List[str]:
    """
    Absolute targets of every <a href> in the document, in document order.

    Relative targets resolve against <base href> when the document has one.
    Duplicates are dropped; scheme filtering is left to the caller.
    Targets that cannot be joined (e.g. an unclosed IPv6 bracket) are skipped.
    """
    if not html:
        return []
    soup = BeautifulSoup(html, "lxml", parse_only=LINK_STRAINER)

    base_tag = soup.find("base")
    if base_tag is not None and base_tag.get("href"):
        try:
            base_url = urljoin(base_url, base_tag["href"].strip())
        except ValueError:
            pass

    seen = set()
    links: List[str] = []
    for a in soup.find_all("a"):
        href = (a.get("href") or "").strip()
        if not href:
            continue
        try:
            target = urljoin(base_url, href)
        except ValueError:
            continue
        if target not in seen:
            seen.add(target)
            links.append(target)
    return links


def parse_metadata(html: str) -> Tuple[Optional[str], bool, List[str]]:
    """Extract title and H1 tags from HTML."""
    soup = BeautifulSoup(html, "lxml")

    title = None
    if soup.title and soup.title.string:
        title = soup.title.string.strip() or None

    h1_tags = soup.find_all("h1")
    h1_texts = [
        text for h in h1_tags
        if (text := h.get_text(separator=" ", strip=True))
    ]

    return title, bool(h1_tags), h1_texts
