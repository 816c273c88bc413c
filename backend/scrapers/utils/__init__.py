"""Shared utilities for scrapers."""

from .normalizers import (
    normalize_whitespace,
    normalize_store_preference,
)
from .extractors import (
    node_text,
    node_attr,
    extract_year,
    extract_page_length,
    asin_from_url,
)

__all__ = [
    'normalize_whitespace',
    'normalize_store_preference',
    'node_text',
    'node_attr',
    'extract_year',
    'extract_page_length',
    'asin_from_url',
]
