"""
Selector-chain scraper system for book lookups.

This module provides:
- A declarative field extractor driven by per-site selector rule tables
- Amazon product page scraping
- Google search link classification with a store preference
"""

from .base import (
    NOT_FOUND,
    AcquisitionError,
    BaseScraper,
    BookLink,
    ExtractionField,
    NoUsableResultError,
    ScrapeContext,
    ScraperError,
    SelectorRule,
    SiteConfig,
    StoreType,
)
from .assembler import BookMetadata, assemble
from .classifier import classify_links, classify_url, select_link
from .config import SITES, get_site_config, list_sites
from .extractor import extract_all, extract_field
from .manager import BookLookupManager

__all__ = [
    'NOT_FOUND',
    'AcquisitionError',
    'BaseScraper',
    'BookLink',
    'BookMetadata',
    'BookLookupManager',
    'ExtractionField',
    'NoUsableResultError',
    'ScrapeContext',
    'ScraperError',
    'SelectorRule',
    'SiteConfig',
    'StoreType',
    'SITES',
    'assemble',
    'classify_links',
    'classify_url',
    'extract_all',
    'extract_field',
    'get_site_config',
    'list_sites',
    'select_link',
]
