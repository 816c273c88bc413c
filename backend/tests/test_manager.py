"""
Tests for the book lookup manager.
"""

import asyncio

import pytest

from scrapers.base import AcquisitionError, NoUsableResultError, StoreType
from scrapers.manager import BookLookupManager, build_lookup_query

PRODUCT_URL = "https://www.amazon.com/Dune-Frank-Herbert/dp/0441172717"


class TestBuildLookupQuery:

    @pytest.mark.parametrize("title,author,book_format,expected", [
        ("Dune", "Frank Herbert", "", "Dune Frank Herbert"),
        ("Dune", "", "paperback", "Dune paperback"),
        ("  Dune ", "  ", "", "Dune"),
    ])
    def test_build_lookup_query(self, title, author, book_format, expected):
        assert build_lookup_query(title, author, book_format) == expected


class TestSiteConfigOverrides:
    """Test that timeouts come from settings without touching the shared table."""

    def test_search_config_uses_settings(self, crawlers):
        manager = BookLookupManager(crawler_factory=crawlers)
        manager.settings = manager.settings.model_copy(update={'search_settle_ms': 0})

        config = manager.get_site_config('google')

        assert config.settle_ms == 0
        assert config.selector_timeout_ms == manager.settings.search_selector_timeout_ms

    def test_shared_config_is_not_mutated(self, crawlers):
        from scrapers.config import SITES

        manager = BookLookupManager(crawler_factory=crawlers)
        manager.settings = manager.settings.model_copy(update={'product_page_timeout_ms': 1})

        assert manager.get_site_config('amazon').page_timeout_ms == 1
        assert SITES['amazon'].page_timeout_ms == 30000


class TestFindBook:
    """Test searching and search logging."""

    def test_find_book_records_search(self, db_session, crawlers):
        manager = BookLookupManager(db_session, crawler_factory=crawlers)

        link = asyncio.run(manager.find_book("Dune", "amazon"))

        assert link.store_type == StoreType.AMAZON
        searches = manager.recent_searches()
        assert len(searches) == 1
        assert searches[0]['query'] == "Dune"
        assert searches[0]['bookUrl'] == link.url
        assert searches[0]['storeType'] == "amazon"
        assert manager.recent_errors() == []

    def test_failed_search_records_error_and_reraises(self, db_session, make_crawlers):
        crawlers = make_crawlers({'google.com': '<div id="search"></div>'})
        manager = BookLookupManager(db_session, crawler_factory=crawlers)

        with pytest.raises(NoUsableResultError):
            asyncio.run(manager.find_book("Unfindable Book"))

        errors = manager.recent_errors()
        assert len(errors) == 1
        assert errors[0]['query'] == "Unfindable Book"
        assert "No book links found" in errors[0]['error']
        assert manager.recent_searches() == []

    def test_search_log_keeps_newest_entries(self, db_session, crawlers):
        manager = BookLookupManager(db_session, crawler_factory=crawlers)

        for i in range(12):
            asyncio.run(manager.find_book(f"Book {i}"))

        searches = manager.recent_searches()
        assert len(searches) == 10
        assert searches[0]['query'] == "Book 11"
        assert searches[-1]['query'] == "Book 2"

    def test_works_without_database(self, crawlers):
        manager = BookLookupManager(crawler_factory=crawlers)

        link = asyncio.run(manager.find_book("Dune"))

        assert link.store_type == StoreType.AMAZON
        assert manager.recent_searches() == []

    def test_each_call_gets_fresh_context(self, crawlers):
        manager = BookLookupManager(crawler_factory=crawlers)

        asyncio.run(manager.find_book("Dune"))
        first = manager.last_context
        asyncio.run(manager.find_book("Dune", "bookshop"))

        assert manager.last_context is not first
        assert first.find('store_fallback') == []
        assert len(manager.last_context.find('store_fallback')) == 1


class TestScrapeProduct:
    """Test product scraping through the manager."""

    def test_scrape_product_returns_metadata(self, crawlers):
        manager = BookLookupManager(crawler_factory=crawlers)

        metadata = asyncio.run(manager.scrape_product(PRODUCT_URL))

        assert metadata.title == "Dune"
        assert metadata.asin == "0441172717"
        assert metadata.url == PRODUCT_URL

    def test_scrape_errors_propagate(self, make_crawlers):
        crawlers = make_crawlers(error=AcquisitionError(PRODUCT_URL, "HTTP 503"))
        manager = BookLookupManager(crawler_factory=crawlers)

        with pytest.raises(AcquisitionError, match="HTTP 503"):
            asyncio.run(manager.scrape_product(PRODUCT_URL))


class TestLookup:
    """Test search followed by scrape."""

    def test_lookup_returns_link_and_metadata(self, db_session, crawlers):
        manager = BookLookupManager(db_session, crawler_factory=crawlers)

        link, metadata = asyncio.run(manager.lookup("Dune", "Frank Herbert"))

        assert link.url == PRODUCT_URL
        assert metadata.author == "Frank Herbert"
        assert "Dune+Frank+Herbert+book+amazon" in crawlers.requested_urls[0]
        assert crawlers.requested_urls[1] == PRODUCT_URL

    def test_lookup_non_amazon_link_fails(self, db_session, crawlers):
        manager = BookLookupManager(db_session, crawler_factory=crawlers)

        with pytest.raises(ValueError):
            asyncio.run(manager.lookup("Dune", store="goodreads"))
        # The search itself succeeded and was logged
        assert manager.recent_searches()[0]['storeType'] == "goodreads"
