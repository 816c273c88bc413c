"""
Site configurations and field rule tables.

Each site has a SiteConfig that defines:
- Where pages are loaded from and how long to wait for them
- The ordered selector rules for every field extracted from its pages

Rules within a field are a priority list: the first one that yields a
value wins, later ones only cover markup variants the earlier ones miss.
"""

from typing import Dict, List, Tuple

from .base import ExtractionField, SiteConfig, StoreType
from .extractor import attr_rule, scan_rule, text_rule
from .utils.extractors import extract_page_length, extract_year


# ============================================================
# AMAZON PRODUCT PAGE
# ============================================================

# Every list item of the "Product details" block, across page layouts
DETAIL_BULLETS = ', '.join([
    '#detailBullets_feature_div li',
    '#productDetailsTable .content li',
    '#detailBulletsWrapper_feature_div li',
    '#bookDetails_feature_div .a-list-item',
])

AMAZON_ASIN_FIELD = ExtractionField('asin', [
    attr_rule('#ASIN', 'value'),
    attr_rule('input[name="ASIN"]', 'value'),
])

AMAZON_PRODUCT_FIELDS: Tuple[ExtractionField, ...] = (
    ExtractionField('title', [
        text_rule('#productTitle'),
        text_rule('#ebooksProductTitle'),
        text_rule('span#title'),
    ]),
    ExtractionField('author', [
        text_rule('.contributorNameID'),
        text_rule('.author a'),
        text_rule('#bylineInfo .a-link-normal'),
    ]),
    ExtractionField('yearPublished', [
        scan_rule(DETAIL_BULLETS, ['Publication date'], extract_year),
        scan_rule(DETAIL_BULLETS, ['Publisher'], extract_year),
        text_rule('#rpi-attribute-book_details-publication_date .rpi-attribute-value', extract_year),
    ]),
    ExtractionField('pageLength', [
        scan_rule(DETAIL_BULLETS, ['Print length', 'Page length', 'pages'], extract_page_length),
        text_rule('#rpi-attribute-book_details-ebook_pages .rpi-attribute-value', extract_page_length),
        text_rule('#rpi-attribute-book_details-fiona_pages .rpi-attribute-value', extract_page_length),
    ]),
    ExtractionField('description', [
        text_rule('#bookDescription_feature_div .a-expander-content'),
        text_rule('#productDescription p'),
        text_rule('#bookDescription_feature_div p'),
        text_rule('[data-feature-name="bookDescription"] .a-expander-content'),
    ]),
)


# ============================================================
# SEARCH RESULTS / LINK CLASSIFICATION
# ============================================================

# First matching substring decides the store; order matters
STORE_DOMAINS: Tuple[Tuple[str, StoreType], ...] = (
    ('amazon.com', StoreType.AMAZON),
    ('barnesandnoble.com', StoreType.BARNESNOBLE),
    ('books.google.com', StoreType.GOOGLE),
    ('goodreads.com', StoreType.GOODREADS),
    ('bookshop.org', StoreType.BOOKSHOP),
)

# Ad and redirect wrappers on the results page
AD_MARKERS: Tuple[str, ...] = ('/aclk?', '/url?')

# Extra search terms that steer results towards a retailer
STORE_QUERY_HINTS: Dict[str, str] = {
    'amazon': 'amazon',
    'barnesnoble': 'barnes noble',
}


# ============================================================
# SITE CONFIGURATIONS
# ============================================================

SITES: Dict[str, SiteConfig] = {
    'amazon': SiteConfig(
        name='Amazon',
        short_name='amazon',
        base_url='https://www.amazon.com/',
        wait_until='domcontentloaded',
        wait_selector='body',
        require_wait_selector=True,
        page_timeout_ms=30000,
        selector_timeout_ms=10000,
        fields=AMAZON_PRODUCT_FIELDS,
    ),

    'google': SiteConfig(
        name='Google Search',
        short_name='google',
        base_url='https://www.google.com/search',
        wait_until='domcontentloaded',
        wait_selector='#search',
        require_wait_selector=False,  # Result container id varies; scrape whatever rendered
        page_timeout_ms=20000,
        selector_timeout_ms=15000,
        settle_ms=3000,
        selectors={'result_links': '#search a'},
    ),
}


# ============================================================
# HELPER FUNCTIONS
# ============================================================

def get_site_config(site_key: str) -> SiteConfig:
    """
    Get configuration for a site.

    Args:
        site_key: Site identifier (e.g., 'amazon')

    Returns:
        SiteConfig for the site

    Raises:
        KeyError: If site not found
    """
    if site_key not in SITES:
        raise KeyError(f"Unknown site: {site_key}. Available: {list(SITES.keys())}")
    return SITES[site_key]


def list_sites() -> List[str]:
    """List all configured site keys."""
    return list(SITES.keys())
