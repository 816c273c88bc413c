"""Per-site scraper implementations."""

from .amazon import AmazonScraper
from .google import GoogleSearchScraper

__all__ = ['AmazonScraper', 'GoogleSearchScraper']
