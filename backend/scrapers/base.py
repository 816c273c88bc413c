"""
Base classes for the selector-chain scraper system.

This module defines the data structures shared by every site scraper:
field rule tables, extraction results, classified links, and the
per-request context that collects log events.
"""

from typing import List, Dict, Optional, Any, Callable, Sequence, Mapping
from dataclasses import dataclass, field
from enum import Enum
import logging

logger = logging.getLogger(__name__)

NOT_FOUND = "Not found"


# ANSI color codes for terminal output
class Colors:
    """ANSI color codes for colorized logging."""
    RESET = '\033[0m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    GRAY = '\033[90m'

    @staticmethod
    def green(text):
        return f"{Colors.GREEN}{text}{Colors.RESET}"

    @staticmethod
    def yellow(text):
        return f"{Colors.YELLOW}{text}{Colors.RESET}"

    @staticmethod
    def red(text):
        return f"{Colors.RED}{text}{Colors.RESET}"

    @staticmethod
    def gray(text):
        return f"{Colors.GRAY}{text}{Colors.RESET}"


# ============================================================
# ERRORS
# ============================================================

class ScraperError(Exception):
    """Base class for scraper failures surfaced to callers."""


class AcquisitionError(ScraperError):
    """The page could not be loaded within the configured bounds."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to load {url}: {reason}")


class NoUsableResultError(ScraperError):
    """Extraction or classification produced no admissible record."""


# ============================================================
# RULE TABLES
# ============================================================

# Takes the matched nodes of a selector, returns raw text ('' when unusable)
ExtractFn = Callable[[Sequence[Any]], str]
# Takes trimmed raw text, returns the refined value ('' or None on no match)
PostprocessFn = Callable[[str], Optional[str]]


class StoreType(str, Enum):
    """Retailers a search-result link can be classified as."""
    AMAZON = "amazon"
    BARNESNOBLE = "barnesnoble"
    GOOGLE = "google"
    GOODREADS = "goodreads"
    BOOKSHOP = "bookshop"


@dataclass(frozen=True)
class SelectorRule:
    """One strategy for resolving a field: query, pull text, optionally refine."""
    selector: str
    extract: ExtractFn
    postprocess: Optional[PostprocessFn] = None
    description: str = ""


@dataclass(frozen=True)
class ExtractionField:
    """A named attribute recovered from a page by an ordered rule chain."""
    name: str
    rules: tuple
    sentinel: str = NOT_FOUND

    def __post_init__(self):
        # Accept any sequence of rules but store an immutable tuple
        object.__setattr__(self, 'rules', tuple(self.rules))


@dataclass
class SiteConfig:
    """Configuration for a scraping target."""
    name: str                           # Display name
    short_name: str                     # Logger / registry identifier
    base_url: str                       # Site root
    wait_until: str = "domcontentloaded"
    wait_selector: Optional[str] = None
    require_wait_selector: bool = True  # False: a missing wait selector is tolerated
    page_timeout_ms: int = 30000
    selector_timeout_ms: int = 10000
    settle_ms: int = 0                  # Extra render time after navigation
    fields: tuple = ()                  # ExtractionField table
    selectors: Dict[str, str] = field(default_factory=dict)  # Non-field CSS selectors


@dataclass(frozen=True)
class BookLink:
    """A search result recognised as belonging to a known retailer."""
    url: str
    title: str
    store_type: StoreType

    def to_dict(self) -> Dict[str, str]:
        return {
            'url': self.url,
            'title': self.title,
            'storeType': self.store_type.value,
        }


ExtractionResult = Mapping[str, str]


# ============================================================
# REQUEST CONTEXT
# ============================================================

@dataclass(frozen=True)
class ScrapeEvent:
    """A structured log event emitted while handling one request."""
    level: int
    event: str
    fields: Dict[str, Any]


class ScrapeContext:
    """
    Per-request event sink.

    Every event is written to the ``scraper.<name>`` logger and kept in
    ``events`` so callers (and tests) can inspect what happened without
    capturing process output.
    """

    def __init__(self, name: str, logger: Optional[logging.Logger] = None):
        self.name = name
        self.logger = logger or logging.getLogger(f"scraper.{name}")
        self.events: List[ScrapeEvent] = []

    def emit(self, level: int, event: str, **fields):
        self.events.append(ScrapeEvent(level, event, dict(fields)))
        if self.logger.isEnabledFor(level):
            details = ' '.join(f"{k}={v!r}" for k, v in fields.items())
            self.logger.log(level, f"{event} {details}".rstrip())

    def debug(self, event: str, **fields):
        self.emit(logging.DEBUG, event, **fields)

    def info(self, event: str, **fields):
        self.emit(logging.INFO, event, **fields)

    def warning(self, event: str, **fields):
        self.emit(logging.WARNING, event, **fields)

    def error(self, event: str, **fields):
        self.emit(logging.ERROR, event, **fields)

    def find(self, event: str) -> List[ScrapeEvent]:
        """Return all events with the given name, oldest first."""
        return [e for e in self.events if e.event == event]

    def log_field_summary(self, label: str, result: ExtractionResult, sentinel: str = NOT_FOUND):
        """Log which fields resolved (green) and which fell back to the sentinel (gray)."""
        found = [name for name, value in result.items() if value != sentinel]
        missing = [name for name, value in result.items() if value == sentinel]

        captured = ', '.join(Colors.green(name) for name in found) or 'no data captured'
        self.logger.info(f"   ➤ {label}: {captured}")
        if missing:
            self.logger.info(f"     missing: {', '.join(Colors.gray(name) for name in missing)}")


# ============================================================
# SCRAPER BASE
# ============================================================

class BaseScraper:
    """
    Shared plumbing for site scrapers.

    A scraper owns its SiteConfig and a ScrapeContext. Each page it loads
    gets a fresh crawler from ``crawler_factory`` so that no browser session
    outlives the request that opened it.
    """

    def __init__(self, config: SiteConfig, context: Optional[ScrapeContext] = None,
                 crawler_factory: Optional[Callable[[], Any]] = None):
        """
        Initialize the scraper.

        Args:
            config: Site configuration
            context: Request context collecting events (one is created if omitted)
            crawler_factory: Zero-argument callable returning a crawler
        """
        self.config = config
        self.context = context or ScrapeContext(config.short_name)
        self.logger = self.context.logger
        if crawler_factory is None:
            from .crawlers.browser import BrowserCrawler
            crawler_factory = BrowserCrawler
        self.crawler_factory = crawler_factory

    def acquire(self, url: str):
        """Open ``url`` with a new crawler using this site's wait settings."""
        crawler = self.crawler_factory()
        return crawler.acquire_document(
            url,
            wait_until=self.config.wait_until,
            timeout_ms=self.config.page_timeout_ms,
            wait_selector=self.config.wait_selector,
            wait_selector_timeout_ms=self.config.selector_timeout_ms,
            require_selector=self.config.require_wait_selector,
            settle_ms=self.config.settle_ms,
        )
