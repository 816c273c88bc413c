"""
Search-result link classification.

Raw links scraped from a results page are filtered down to links that
belong to a known retailer, then one of them is selected according to the
caller's store preference.
"""

from typing import Iterable, List, Mapping, Optional, Sequence, Tuple
from urllib.parse import urlparse
import logging

from .base import BookLink, NoUsableResultError, StoreType
from .config import AD_MARKERS, STORE_DOMAINS
from .utils.normalizers import normalize_whitespace

logger = logging.getLogger(__name__)


def _host_and_path(url: str) -> str:
    parsed = urlparse(url)
    return f"{parsed.netloc.lower()}{parsed.path}"


def classify_url(
    url: str,
    domain_table: Sequence[Tuple[str, StoreType]] = STORE_DOMAINS,
) -> Optional[StoreType]:
    """
    Determine which retailer a URL belongs to.

    Returns None for non-HTTP(S) URLs, ad/redirect wrappers and unknown hosts.
    """
    if not url or not url.startswith(('http://', 'https://')):
        return None
    if any(marker in url for marker in AD_MARKERS):
        return None

    location = _host_and_path(url)
    for substring, store_type in domain_table:
        if substring in location:
            return store_type
    return None


def classify_links(
    raw_links: Iterable[Mapping[str, str]],
    domain_table: Sequence[Tuple[str, StoreType]] = STORE_DOMAINS,
) -> List[BookLink]:
    """
    Keep only links that belong to a recognised retailer.

    Args:
        raw_links: Dicts with 'url' and 'title' keys, in page order
        domain_table: Ordered (substring, store type) pairs

    Returns:
        Classified links in input order
    """
    links = []
    for raw in raw_links:
        url = (raw.get('url') or '').strip()
        store_type = classify_url(url, domain_table)
        if store_type is None:
            continue
        links.append(BookLink(
            url=url,
            title=normalize_whitespace(raw.get('title')),
            store_type=store_type,
        ))
    return links


def select_link(links: Sequence[BookLink], store_preference: str = 'amazon') -> BookLink:
    """
    Pick the first link from the preferred store, or the first link overall.

    The returned link's ``store_type`` tells the caller whether the
    preference was honoured.

    Raises:
        NoUsableResultError: If there are no links to choose from
    """
    if not links:
        raise NoUsableResultError("No book links found in search results")

    for link in links:
        if link.store_type.value == store_preference:
            return link

    if store_preference != 'any':
        logger.debug(f"No {store_preference} link among {len(links)} results, using {links[0].store_type.value}")
    return links[0]
