"""
Command-line interface for the crawler.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import List, Optional
from urllib.parse import urlparse

from linkcrawler.config import DEFAULT_CONCURRENCY, CrawlConfig
from linkcrawler.core import start_crawling
from linkcrawler.exceptions import CrawlerError
from linkcrawler.fetcher import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT
from linkcrawler.log import setup_logger
from linkcrawler.observer import CollectingObserver, CrawlStats
from linkcrawler.policies import CrawlAllUrls, CrawlInternalUrls, CrawlPolicy, CrawlSubdomains

SCOPES = ("all", "host", "subdomains")


def build_policy(scope: str, start_url: str) -> CrawlPolicy:
    if scope == "host":
        return CrawlInternalUrls(start_url)
    if scope == "subdomains":
        return CrawlSubdomains(start_url)
    return CrawlAllUrls()


def print_summary(stats: CrawlStats) -> None:
    """Print crawl summary to stderr."""
    sys.stderr.write("=" * 50 + "\n")
    sys.stderr.write("CRAWL SUMMARY\n")
    sys.stderr.write("=" * 50 + "\n\n")

    sys.stderr.write(f"Total pages crawled:    {stats.pages_crawled}\n")
    sys.stderr.write(f"Redirects:              {stats.redirects}\n")
    sys.stderr.write(f"Pages without title:    {stats.pages_without_title}\n")
    sys.stderr.write(f"Pages without H1:       {stats.pages_without_h1}\n\n")

    if stats.error_counts:
        sys.stderr.write("Errors by type:\n")
        for error_type, count in sorted(stats.error_counts.items()):
            label = "Fetch errors" if error_type == "fetch_error" else f"HTTP {error_type}"
            sys.stderr.write(f"  {label}: {count}\n")
    else:
        sys.stderr.write("No errors encountered.\n")

    sys.stderr.write("\n")


def generate_output_path(start_url: str) -> Path:
    """Generate output path: crawls/{hostname}_{datetime}.json"""
    parsed = urlparse(start_url)
    hostname = parsed.hostname or "unknown"
    # Sanitize hostname for filename (replace dots with underscores)
    hostname_safe = hostname.replace(".", "_")
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    crawls_dir = Path("crawls")
    crawls_dir.mkdir(exist_ok=True)

    return crawls_dir / f"{hostname_safe}_{timestamp}.json"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="linkcrawler",
        description="Crawl links concurrently starting from a URL and output JSON results.",
    )
    parser.add_argument("start_url", help="Start URL (e.g. https://example.com)")
    parser.add_argument(
        "--concurrency", type=int, default=DEFAULT_CONCURRENCY,
        help=f"Maximum simultaneous fetches (default: {DEFAULT_CONCURRENCY})",
    )
    parser.add_argument("--max-pages", type=int, default=None, help="Maximum pages to admit (default: unlimited)")
    parser.add_argument("--max-depth", type=int, default=None, help="Maximum link depth from the start URL")
    parser.add_argument(
        "--scope", choices=SCOPES, default="host",
        help="Which hosts to follow: all, host (start host only), subdomains (default: host)",
    )
    parser.add_argument("--execute-scripts", action="store_true", help="Render pages with a headless browser before extracting links")
    parser.add_argument(
        "--timeout", type=float, default=DEFAULT_TIMEOUT,
        help=f"Request timeout in seconds (default: {DEFAULT_TIMEOUT:g})",
    )
    parser.add_argument("--user-agent", default=DEFAULT_USER_AGENT, help="User-Agent header")
    parser.add_argument("--out", help="Output file path, or '-' for stdout (default: auto-generated in crawls/)")
    parser.add_argument("--pretty", action="store_true", help="Pretty-print JSON")
    parser.add_argument("--verbose", action="store_true", help="Show progress and summary")
    parser.add_argument(
        "--log-level", default="WARNING", choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="Log level for crawler diagnostics (default: WARNING)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the crawler CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logger(level=getattr(logging, args.log_level))

    observer = CollectingObserver(verbose=args.verbose)
    try:
        config = CrawlConfig(
            observer=observer,
            policy=build_policy(args.scope, args.start_url),
            concurrency=args.concurrency,
            maximum_crawl_count=args.max_pages,
            maximum_depth=args.max_depth,
            execute_scripts=args.execute_scripts,
            timeout=args.timeout,
            user_agent=args.user_agent,
        )
        if args.verbose:
            sys.stderr.write(f"Starting crawl from: {args.start_url}\n\n")
        results, stats = start_crawling(args.start_url, config)
    except (CrawlerError, ValueError) as e:
        sys.stderr.write(f"error: {e}\n")
        return 2

    if args.verbose:
        sys.stderr.write("\n")
        print_summary(stats)

    payload = [asdict(r) for r in results]
    json_text = json.dumps(payload, ensure_ascii=False, indent=2 if args.pretty else None)

    if args.out == "-":
        print(json_text)
    else:
        output_path = Path(args.out) if args.out else generate_output_path(args.start_url)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(json_text, encoding="utf-8")
        if args.verbose:
            sys.stderr.write(f"Results written to: {output_path}\n")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
