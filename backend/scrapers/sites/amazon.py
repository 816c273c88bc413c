"""
Amazon product page scraper.

Loads a product page and resolves the book fields from the rule table in
``scrapers.config``. The product identifier is taken straight from the URL
when it carries one, so the page is only consulted for it as a fallback.
"""

from types import MappingProxyType
from typing import Optional
from urllib.parse import urlparse

from ..assembler import BookMetadata, assemble
from ..base import BaseScraper, ExtractionResult, ScrapeContext
from ..config import AMAZON_ASIN_FIELD, get_site_config
from ..extractor import extract_all, extract_field, merge_results
from ..utils.extractors import asin_from_url


def is_amazon_url(url: str) -> bool:
    """True for http(s) URLs on amazon.com (any subdomain)."""
    parsed = urlparse(url or '')
    host = parsed.netloc.lower().split(':')[0]
    return parsed.scheme in ('http', 'https') and (host == 'amazon.com' or host.endswith('.amazon.com'))


class AmazonScraper(BaseScraper):
    """
    Scraper for Amazon book product pages.

    Site structure:
    - Title, byline and description in dedicated feature blocks
    - Publication year and page count inside the "Product details" bullets
    """

    def __init__(self, context: Optional[ScrapeContext] = None, crawler_factory=None, config=None):
        super().__init__(config or get_site_config('amazon'), context, crawler_factory)

    async def scrape_product(self, url: str) -> ExtractionResult:
        """
        Scrape a product page.

        Args:
            url: Amazon product URL

        Returns:
            Mapping with asin, title, author, yearPublished, pageLength and description

        Raises:
            ValueError: If the URL is not an amazon.com URL
            AcquisitionError: If the page cannot be loaded
        """
        if not is_amazon_url(url):
            raise ValueError("URL must be from amazon.com domain")

        self.context.info('scrape_started', url=url)
        asin = asin_from_url(url)
        if asin:
            self.context.debug('asin_from_url', asin=asin)

        async with self.acquire(url) as document:
            self.context.debug('page_loaded', url=url)
            fields = extract_all(document, self.config.fields, self.context)
            if not asin:
                asin = extract_field(document, AMAZON_ASIN_FIELD, self.context)

        result = merge_results(MappingProxyType({'asin': asin}), fields)
        self.context.log_field_summary(url, result)
        return result

    async def scrape_product_record(self, url: str) -> BookMetadata:
        """Scrape a product page and package it as BookMetadata."""
        result = await self.scrape_product(url)
        return assemble(result, url)
