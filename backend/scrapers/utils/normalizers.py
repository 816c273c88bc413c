"""
Data normalization utilities for scrapers.

These functions standardize scraped and user-supplied text.
"""

import re
from typing import Optional


def normalize_whitespace(text: Optional[str]) -> str:
    """
    Collapse runs of whitespace (including non-breaking spaces) to single spaces.

    Examples:
        "  Example\\n   Book " -> "Example Book"
        "Print length\\xa0:\\u200f 320 pages" -> "Print length : 320 pages"
    """
    if not text:
        return ''
    text = text.replace('\xa0', ' ')
    text = re.sub(r'[\u200e\u200f]', '', text)  # LTR/RTL marks Amazon puts in detail bullets
    return re.sub(r'\s+', ' ', text).strip()


def normalize_store_preference(store: Optional[str], default: str = 'amazon') -> str:
    """
    Normalize a store preference from a query string.

    Examples:
        None -> "amazon"
        " BarnesNoble " -> "barnesnoble"
        "Any" -> "any"
    """
    if not store or not store.strip():
        return default
    return store.strip().lower()
