"""
Data extraction utilities for scrapers.

Two kinds of helpers live here:

- node extractors, which turn the nodes matched by a selector into raw text
- postprocessors, which refine trimmed text with a regex pattern and return
  None when the pattern does not match
"""

import re
from typing import Optional, Sequence, Any, Callable
from urllib.parse import urlparse

from .normalizers import normalize_whitespace


def node_text(nodes: Sequence[Any]) -> str:
    """
    Text of the first matched node.

    Text is read as written, so inline markup such as ``<i>Dune</i>,`` keeps
    its punctuation attached; whitespace runs collapse to single spaces.
    """
    if not nodes:
        return ''
    return normalize_whitespace(nodes[0].get_text())


def node_attr(attribute: str) -> Callable[[Sequence[Any]], str]:
    """Build an extractor returning ``attribute`` of the first matched node."""
    def extract(nodes: Sequence[Any]) -> str:
        if not nodes:
            return ''
        value = nodes[0].get(attribute)
        if isinstance(value, list):  # bs4 returns multi-valued attributes as lists
            value = ' '.join(value)
        return (value or '').strip()
    return extract


def extract_year(text: str) -> Optional[str]:
    """
    Extract the first 4-digit year from text.

    Examples:
        "Publication date : May 5, 2020" -> "2020"
        "Publisher : Tor (2019)" -> "2019"
    """
    match = re.search(r'(?<!\d)\d{4}(?!\d)', text)
    if match:
        return match.group(0)
    return None


def extract_page_length(text: str) -> Optional[str]:
    """
    Extract a page count like "320 pages" from text.

    Examples:
        "Print length : 320 pages" -> "320 pages"
        "Hardcover, 1,024 pages" -> "1024 pages"
    """
    match = re.search(r'\d+\s*pages', text.replace(',', ''), re.IGNORECASE)
    if match:
        return match.group(0)
    return None


# Path markers after which Amazon puts the product identifier
ASIN_URL_MARKERS = ('/dp/', '/gp/product/')


def asin_from_url(url: str) -> Optional[str]:
    """
    Extract the product identifier from an Amazon URL.

    The identifier is the path segment directly after ``/dp/`` or
    ``/gp/product/``, up to the next ``/``.

    Examples:
        https://www.amazon.com/Some-Title/dp/B08ABC1234/ref=foo -> B08ABC1234
        https://www.amazon.com/gp/product/0765326353?tag=x -> 0765326353
        https://www.amazon.com/s?k=dune -> None
    """
    path = urlparse(url).path if '://' in url else url.split('?')[0].split('#')[0]
    for marker in ASIN_URL_MARKERS:
        if marker in path:
            identifier = path.split(marker, 1)[1].split('/')[0]
            if identifier:
                return identifier
    return None
