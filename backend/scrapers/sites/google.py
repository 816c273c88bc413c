"""
Google search scraper.

Searches for a book and returns the best retailer link among the organic
results, honouring a store preference where possible.
"""

from typing import Dict, List, Optional
from urllib.parse import quote_plus

from bs4 import BeautifulSoup

from ..base import BaseScraper, BookLink, ScrapeContext
from ..classifier import classify_links, select_link
from ..config import STORE_QUERY_HINTS, get_site_config
from ..utils.normalizers import normalize_store_preference


def build_search_query(query: str, store_preference: str = 'amazon') -> str:
    """
    Build the search text for a book query.

    Examples:
        ("Dune", "amazon") -> "Dune book amazon"
        ("Dune", "barnesnoble") -> "Dune book barnes noble"
        ("Dune", "any") -> "Dune book"
    """
    parts = [query.strip(), 'book']
    hint = STORE_QUERY_HINTS.get(store_preference)
    if hint:
        parts.append(hint)
    return ' '.join(parts)


class GoogleSearchScraper(BaseScraper):
    """
    Scraper for Google search result pages.

    Site structure:
    - Organic results rendered under #search, each with one or more <a> tags
    - Ads and redirect wrappers use /aclk? and /url? hrefs
    """

    def __init__(self, context: Optional[ScrapeContext] = None, crawler_factory=None, config=None):
        super().__init__(config or get_site_config('google'), context, crawler_factory)

    def search_url(self, query: str, store_preference: str = 'amazon') -> str:
        return f"{self.config.base_url}?q={quote_plus(build_search_query(query, store_preference))}"

    def _collect_raw_links(self, document: BeautifulSoup) -> List[Dict[str, str]]:
        """All (href, text) pairs of result anchors in page order."""
        raw_links = []
        for anchor in document.select(self.config.selectors['result_links']):
            href = anchor.get('href')
            if not href:
                continue
            raw_links.append({'url': href, 'title': anchor.get_text(separator=' ', strip=True)})
        return raw_links

    async def search_for_book_link(self, query: str, store_preference: str = 'amazon') -> BookLink:
        """
        Find a retailer link for a book.

        Args:
            query: Free-text book query (title, optionally author/format)
            store_preference: amazon, barnesnoble, google, goodreads, bookshop or any

        Returns:
            The first link from the preferred store, or the first recognised link

        Raises:
            AcquisitionError: If the results page cannot be loaded
            NoUsableResultError: If no recognised retailer link is on the page
        """
        store_preference = normalize_store_preference(store_preference)
        url = self.search_url(query, store_preference)
        self.context.info('search_started', query=query, store=store_preference)

        async with self.acquire(url) as document:
            raw_links = self._collect_raw_links(document)

        links = classify_links(raw_links)
        self.context.info('links_classified', raw=len(raw_links), recognised=len(links))

        best = select_link(links, store_preference)
        if store_preference != 'any' and best.store_type.value != store_preference:
            self.context.warning('store_fallback', requested=store_preference, used=best.store_type.value)
        self.context.info('link_selected', url=best.url, store=best.store_type.value)
        return best
