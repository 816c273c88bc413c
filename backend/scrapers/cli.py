#!/usr/bin/env python3
"""
Command-line runner for the book scrapers.

Usage:
    cd backend
    python -m scrapers.cli [options]

Examples:
    python -m scrapers.cli --search "Dune Frank Herbert"             # Find an Amazon link
    python -m scrapers.cli --search "Dune" --store barnesnoble        # Prefer Barnes & Noble
    python -m scrapers.cli --product https://www.amazon.com/dp/0441172717
    python -m scrapers.cli --lookup "Dune" --author "Frank Herbert"   # Search, then scrape
    python -m scrapers.cli --list                                     # List configured sites
"""

import asyncio
import argparse
import logging
import json

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

from scrapers.base import ScraperError
from scrapers.config import get_site_config, list_sites
from scrapers.manager import BookLookupManager


def print_header(title: str):
    print(f"\n{'='*60}")
    print(title)
    print(f"{'='*60}\n")


def print_events(manager: BookLookupManager):
    """Dump the structured events of the last request."""
    if not manager.last_context:
        return
    print("\nEvents:")
    for event in manager.last_context.events:
        details = ', '.join(f"{k}={v}" for k, v in event.fields.items())
        print(f"  [{logging.getLevelName(event.level)}] {event.event} {details}")


async def run_search(query: str, store: str, verbose: bool = False) -> int:
    print_header(f"SEARCH: {query!r} (store: {store})")
    manager = BookLookupManager()
    try:
        link = await manager.find_book(query, store)
    except ScraperError as e:
        print(f"ERROR: {e}")
        return 1
    finally:
        if verbose:
            print_events(manager)

    print(json.dumps(link.to_dict(), indent=2))
    return 0


async def run_product(url: str, verbose: bool = False) -> int:
    print_header(f"PRODUCT: {url}")
    manager = BookLookupManager()
    try:
        metadata = await manager.scrape_product(url)
    except (ValueError, ScraperError) as e:
        print(f"ERROR: {e}")
        return 1
    finally:
        if verbose:
            print_events(manager)

    print(json.dumps(metadata.to_dict(), indent=2, ensure_ascii=False))
    return 0


async def run_lookup(title: str, author: str, book_format: str, store: str) -> int:
    print_header(f"LOOKUP: {title!r} by {author or 'unknown author'}")
    manager = BookLookupManager()
    try:
        link, metadata = await manager.lookup(title, author, book_format, store)
    except (ValueError, ScraperError) as e:
        print(f"ERROR: {e}")
        return 1

    print(json.dumps({'bookLink': link.to_dict(), 'metadata': metadata.to_dict()}, indent=2, ensure_ascii=False))
    return 0


def print_sites():
    """List all configured sites."""
    print_header("Configured Sites")
    for key in list_sites():
        config = get_site_config(key)
        print(f"{key:12} - {config.name}")
        print(f"              URL: {config.base_url}")
        print(f"              Wait: {config.wait_selector or '-'} ({config.page_timeout_ms} ms page timeout)")
        print()


async def main() -> int:
    parser = argparse.ArgumentParser(description='Run the book scrapers')
    parser.add_argument('--search', type=str, help='Find a retailer link for a query')
    parser.add_argument('--store', type=str, default='amazon', help='Preferred store (default: amazon)')
    parser.add_argument('--product', type=str, help='Scrape an Amazon product URL')
    parser.add_argument('--lookup', type=str, help='Search for a title, then scrape the result')
    parser.add_argument('--author', type=str, default='', help='Author for --lookup')
    parser.add_argument('--format', dest='book_format', type=str, default='', help='Format for --lookup')
    parser.add_argument('--list', action='store_true', help='List configured sites')
    parser.add_argument('-v', '--verbose', action='store_true', help='Print request events')

    args = parser.parse_args()

    if args.list:
        print_sites()
        return 0
    if args.search:
        return await run_search(args.search, args.store, args.verbose)
    if args.product:
        return await run_product(args.product, args.verbose)
    if args.lookup:
        return await run_lookup(args.lookup, args.author, args.book_format, args.store)

    parser.print_help()
    print("\nExample: python -m scrapers.cli --search \"Dune Frank Herbert\"")
    return 0


if __name__ == '__main__':
    raise SystemExit(asyncio.run(main()))
