"""
Pytest configuration and fixtures for Book Notes tests.
"""

from contextlib import asynccontextmanager

import pytest
from bs4 import BeautifulSoup
from fastapi import Depends
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from api.database import Base, get_db
from api.main import app, get_manager
from scrapers.base import AcquisitionError
from scrapers.manager import BookLookupManager


# Create an in-memory SQLite database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    """Override the get_db dependency for testing."""
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()


AMAZON_PRODUCT_HTML = """
<html><body>
  <input type="hidden" id="ASIN" value="0441172717">
  <span id="productTitle"> Dune </span>
  <div id="bylineInfo">
    <span class="author"><a class="a-link-normal" href="/Frank-Herbert/e/B000AQ0UKG">Frank Herbert</a></span>
  </div>
  <div id="bookDescription_feature_div">
    <div class="a-expander-content"><span>Set on the desert planet Arrakis,</span>
      <span>Dune is the story of Paul Atreides.</span></div>
  </div>
  <div id="detailBullets_feature_div">
    <ul>
      <li><span class="a-list-item"><span class="a-text-bold">Publisher &rlm; : &lrm;</span> <span>Ace; Reprint edition (August 2, 2005)</span></span></li>
      <li><span class="a-list-item"><span class="a-text-bold">Publication date &rlm; : &lrm;</span> <span>August 2, 2005</span></span></li>
      <li><span class="a-list-item"><span class="a-text-bold">Mass Market Paperback &rlm; : &lrm;</span> <span>896 pages</span></span></li>
      <li><span class="a-list-item"><span class="a-text-bold">ISBN-13 &rlm; : &lrm;</span> <span>978-0441172719</span></span></li>
    </ul>
  </div>
</body></html>
"""

GOOGLE_RESULTS_HTML = """
<html><body>
  <div id="search">
    <a href="/aclk?sa=l&amp;ai=ad">Sponsored: Dune box set</a>
    <a href="https://www.googleadservices.com/pagead/aclk?sa=L">Ad</a>
    <a href="https://www.goodreads.com/book/show/44767458-dune">Dune by Frank Herbert | Goodreads</a>
    <a href="https://www.amazon.com/Dune-Frank-Herbert/dp/0441172717">Dune: Herbert, Frank: 9780441172719: Amazon.com: Books</a>
    <a href="https://www.barnesandnoble.com/w/dune-frank-herbert/1100051622">Dune by Frank Herbert, Paperback | Barnes &amp; Noble</a>
    <a href="#">More results</a>
  </div>
</body></html>
"""


class FakeCrawler:
    """
    Crawler stand-in that serves inline HTML instead of driving a browser.

    ``pages`` maps a URL substring to HTML; a URL matching nothing fails
    like an HTTP 404. ``error`` is raised on every acquisition when set.
    """

    def __init__(self, pages, error=None):
        self.pages = pages
        self.error = error
        self.requests = []
        self.released = False

    def _html_for(self, url):
        for key, html in self.pages.items():
            if key in url:
                return html
        raise AcquisitionError(url, "HTTP 404")

    @asynccontextmanager
    async def acquire_document(self, url, **options):
        self.requests.append((url, options))
        try:
            if self.error is not None:
                raise self.error
            yield BeautifulSoup(self._html_for(url), 'html.parser')
        finally:
            self.released = True


class FakeCrawlerFactory:
    """Zero-argument crawler factory recording every crawler it hands out."""

    def __init__(self, pages=None, error=None):
        self.pages = pages if pages is not None else {}
        self.error = error
        self.crawlers = []

    def __call__(self):
        crawler = FakeCrawler(self.pages, self.error)
        self.crawlers.append(crawler)
        return crawler

    @property
    def requested_urls(self):
        return [url for crawler in self.crawlers for url, _ in crawler.requests]


@pytest.fixture
def amazon_html():
    return AMAZON_PRODUCT_HTML


@pytest.fixture
def google_html():
    return GOOGLE_RESULTS_HTML


@pytest.fixture
def make_crawlers():
    """Factory for fake crawler factories with custom pages or a forced error."""
    return FakeCrawlerFactory


@pytest.fixture
def crawlers():
    """Fake crawler factory serving the sample Amazon and Google pages."""
    return FakeCrawlerFactory({
        'google.com/search': GOOGLE_RESULTS_HTML,
        'amazon.com': AMAZON_PRODUCT_HTML,
    })


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database session for each test."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session, crawlers):
    """Create a test client with database and crawler overrides."""
    def override_get_manager(db=Depends(override_get_db)):
        return BookLookupManager(db, crawler_factory=crawlers)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_manager] = override_get_manager
    Base.metadata.create_all(bind=engine)

    # Use TestClient directly without context manager so the lifespan does not touch the real database
    test_client = TestClient(app)
    yield test_client

    app.dependency_overrides.clear()
    Base.metadata.drop_all(bind=engine)
