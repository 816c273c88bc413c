"""
Book Lookup Manager - orchestrates the search and product scrapers.

Provides a unified interface for finding a retailer link for a book,
scraping a product page, or doing both in one call. Successful searches
and search failures are written to the database log when a session is
available.
"""

from dataclasses import replace
from functools import partial
from typing import Callable, List, Optional, Tuple
import logging

from .assembler import BookMetadata, assemble
from .base import BookLink, Colors, ScrapeContext, SiteConfig
from .config import get_site_config
from .crawlers.browser import BrowserCrawler
from .sites.amazon import AmazonScraper
from .sites.google import GoogleSearchScraper
from .utils.normalizers import normalize_store_preference, normalize_whitespace

logger = logging.getLogger(__name__)


def build_lookup_query(title: str, author: str = '', book_format: str = '') -> str:
    """
    Join the non-empty parts of a lookup into one search query.

    Examples:
        ("Dune", "Frank Herbert", "") -> "Dune Frank Herbert"
        ("Dune", "", "paperback") -> "Dune paperback"
    """
    parts = [normalize_whitespace(p) for p in (title, author, book_format) if p]
    return ' '.join(p for p in parts if p)


class BookLookupManager:
    """
    Manages book searches and product scrapes.

    Usage:
        manager = BookLookupManager(db_session)

        # Find a retailer link
        link = await manager.find_book('Dune Frank Herbert', 'amazon')

        # Scrape an Amazon product page
        metadata = await manager.scrape_product(link.url)

        # Both in one call
        link, metadata = await manager.lookup('Dune', 'Frank Herbert')
    """

    def __init__(self, db_session=None, crawler_factory: Optional[Callable] = None):
        """
        Initialize the lookup manager.

        Args:
            db_session: SQLAlchemy database session (search logging is skipped without one)
            crawler_factory: Zero-argument callable returning a crawler
        """
        from api.config import settings

        self.db = db_session
        self.settings = settings
        if crawler_factory is None:
            crawler_factory = partial(
                BrowserCrawler,
                headless=settings.scraper_headless,
                user_agent=settings.scraper_user_agent,
            )
        self.crawler_factory = crawler_factory
        self.last_context: Optional[ScrapeContext] = None

    def get_site_config(self, site_key: str) -> SiteConfig:
        """Site config with timeouts taken from settings."""
        config = get_site_config(site_key)
        if site_key == 'google':
            return replace(
                config,
                page_timeout_ms=self.settings.search_page_timeout_ms,
                selector_timeout_ms=self.settings.search_selector_timeout_ms,
                settle_ms=self.settings.search_settle_ms,
            )
        return replace(
            config,
            page_timeout_ms=self.settings.product_page_timeout_ms,
            selector_timeout_ms=self.settings.product_selector_timeout_ms,
        )

    def _new_context(self, site_key: str) -> ScrapeContext:
        # One context per call so events never leak between requests
        self.last_context = ScrapeContext(site_key)
        return self.last_context

    async def scrape_product(self, url: str) -> BookMetadata:
        """
        Scrape an Amazon product page.

        Raises:
            ValueError: If the URL is not an amazon.com URL
            ScraperError: If the page cannot be loaded
        """
        scraper = AmazonScraper(
            context=self._new_context('amazon'),
            crawler_factory=self.crawler_factory,
            config=self.get_site_config('amazon'),
        )
        try:
            result = await scraper.scrape_product(url)
        except Exception as e:
            logger.error(Colors.red(f"Product scrape failed for {url}: {e}"))
            raise
        return assemble(result, url)

    async def find_book(self, query: str, store: str = 'amazon') -> BookLink:
        """
        Search for a book and return the best retailer link.

        Args:
            query: Book query text
            store: Store preference (amazon, barnesnoble, ... or any)

        Raises:
            ScraperError: If the search page fails or has no usable links
        """
        store = normalize_store_preference(store)
        scraper = GoogleSearchScraper(
            context=self._new_context('google'),
            crawler_factory=self.crawler_factory,
            config=self.get_site_config('google'),
        )
        logger.info(f"Searching for {query!r} (store: {store})")

        try:
            link = await scraper.search_for_book_link(query, store)
        except Exception as e:
            logger.error(Colors.red(f"Search failed for {query!r}: {e}"))
            self._log_error(query, str(e))
            raise

        if link.store_type.value != store and store != 'any':
            logger.info(Colors.yellow(f"No {store} link for {query!r}, using {link.store_type.value}"))
        self._log_search(query, link)
        return link

    async def lookup(
        self,
        title: str,
        author: str = '',
        book_format: str = '',
        store: str = 'amazon',
    ) -> Tuple[BookLink, BookMetadata]:
        """
        Find a book link and scrape its metadata.

        Only Amazon product pages can be scraped, so a link from another
        store fails with ValueError after the search has been logged.
        """
        query = build_lookup_query(title, author, book_format)
        link = await self.find_book(query, store)
        metadata = await self.scrape_product(link.url)
        return link, metadata

    def recent_searches(self, limit: Optional[int] = None) -> List[dict]:
        """Newest search log entries as dicts (empty without a session)."""
        if self.db is None:
            return []
        from api.database import get_recent_searches
        limit = limit or self.settings.recent_search_limit
        return [entry.to_dict() for entry in get_recent_searches(self.db, limit)]

    def recent_errors(self, limit: Optional[int] = None) -> List[dict]:
        """Newest search error entries as dicts (empty without a session)."""
        if self.db is None:
            return []
        from api.database import get_recent_errors
        limit = limit or self.settings.error_log_limit
        return [entry.to_dict() for entry in get_recent_errors(self.db, limit)]

    def _log_search(self, query: str, link: BookLink):
        if self.db is None:
            return
        from api.database import record_search
        try:
            record_search(self.db, query, link.url, link.store_type.value,
                          keep=self.settings.recent_search_limit)
        except Exception as e:
            # Logging a search must never fail the search itself
            self.db.rollback()
            logger.warning(f"Could not record search for {query!r}: {e}")

    def _log_error(self, query: str, error: str):
        if self.db is None:
            return
        from api.database import record_error
        try:
            record_error(self.db, query, error, keep=self.settings.error_log_limit)
        except Exception as e:
            self.db.rollback()
            logger.warning(f"Could not record search error for {query!r}: {e}")


# Convenience functions for standalone usage

async def find_book(query: str, store: str = 'amazon', db_session=None) -> BookLink:
    manager = BookLookupManager(db_session)
    return await manager.find_book(query, store)


async def scrape_product(url: str, db_session=None) -> BookMetadata:
    manager = BookLookupManager(db_session)
    return await manager.scrape_product(url)
