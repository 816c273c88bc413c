"""
Browser crawler for JavaScript-rendered retailer and search pages.

Uses Playwright with a realistic user agent. One crawler serves one request:
the browser is launched when a document is acquired and torn down when the
caller leaves the ``acquire_document`` block, whatever the outcome.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional
from bs4 import BeautifulSoup
from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    Page,
    Error as PlaywrightError,
    TimeoutError as PlaywrightTimeoutError,
)
import logging

from ..base import AcquisitionError

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/123.0.0.0 Safari/537.36'


class BrowserCrawler:
    """
    Single-session Playwright crawler.

    Usage:
        crawler = BrowserCrawler()
        async with crawler.acquire_document(url, wait_selector='body') as soup:
            title = soup.select_one('#productTitle')
    """

    def __init__(
        self,
        headless: bool = True,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        """
        Initialize the browser crawler.

        Args:
            headless: Run browser in headless mode
            user_agent: User agent presented to the target site
        """
        self.headless = headless
        self.user_agent = user_agent
        self._playwright = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None

    async def _init_browser(self):
        """Launch Playwright, the browser, a context and a page."""
        self._playwright = await async_playwright().start()

        logger.debug("Launching Chromium browser...")
        self._browser = await self._playwright.chromium.launch(
            headless=self.headless,
            args=[
                '--disable-blink-features=AutomationControlled',
                '--disable-dev-shm-usage',
                '--no-sandbox',
                '--disable-gpu',
            ],
            handle_sigint=False,
            handle_sigterm=False,
            handle_sighup=False,
        )

        self._context = await self._browser.new_context(
            viewport={'width': 1920, 'height': 1080},
            user_agent=self.user_agent,
            locale='en-US',
            extra_http_headers={
                'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8',
                'Accept-Language': 'en-US,en;q=0.9',
            }
        )
        self._page = await self._context.new_page()

    async def release(self):
        """Close page, context, browser and Playwright with timeouts to prevent hanging."""
        cleanup_timeout = 2.0  # seconds per cleanup operation

        if self._page:
            try:
                await asyncio.wait_for(self._page.close(), timeout=cleanup_timeout)
            except asyncio.TimeoutError:
                logger.warning("Page close timed out, forcing cleanup")
            except Exception as e:
                logger.debug(f"Error closing page: {e}")
            self._page = None

        if self._context:
            try:
                await asyncio.wait_for(self._context.close(), timeout=cleanup_timeout)
            except asyncio.TimeoutError:
                logger.warning("Context close timed out, forcing cleanup")
            except Exception as e:
                logger.warning(f"Error closing context: {e}")
            self._context = None

        if self._browser:
            try:
                await asyncio.wait_for(self._browser.close(), timeout=cleanup_timeout)
                logger.debug("Browser closed")
            except asyncio.TimeoutError:
                logger.warning("Browser close timed out, forcing cleanup")
            except Exception as e:
                logger.warning(f"Error closing browser: {e}")
            self._browser = None

        if self._playwright:
            try:
                await asyncio.wait_for(self._playwright.stop(), timeout=cleanup_timeout)
            except asyncio.TimeoutError:
                logger.warning("Playwright stop timed out, forcing cleanup")
            except Exception as e:
                logger.warning(f"Error stopping playwright: {e}")
            self._playwright = None

    @property
    def is_active(self) -> bool:
        """True while a browser session is open."""
        return self._browser is not None or self._playwright is not None

    async def _load(
        self,
        url: str,
        wait_until: str,
        timeout_ms: int,
        wait_selector: Optional[str],
        wait_selector_timeout_ms: int,
        require_selector: bool,
        settle_ms: int,
    ) -> BeautifulSoup:
        try:
            await self._init_browser()

            logger.debug(f"Navigating to: {url}")
            response = await self._page.goto(url, wait_until=wait_until, timeout=timeout_ms)
            if response and response.status >= 400:
                raise AcquisitionError(url, f"HTTP {response.status}")

            if settle_ms:
                await asyncio.sleep(settle_ms / 1000)

            if wait_selector:
                try:
                    await self._page.wait_for_selector(wait_selector, timeout=wait_selector_timeout_ms)
                except PlaywrightTimeoutError:
                    if require_selector:
                        raise AcquisitionError(
                            url, f"selector {wait_selector!r} not found within {wait_selector_timeout_ms}ms"
                        )
                    logger.debug(f"Selector {wait_selector} not found, continuing with rendered page")

            html = await self._page.content()
            return BeautifulSoup(html, 'html.parser')

        except PlaywrightTimeoutError as e:
            raise AcquisitionError(url, f"timed out after {timeout_ms}ms") from e
        except PlaywrightError as e:
            raise AcquisitionError(url, str(e).splitlines()[0] if str(e) else type(e).__name__) from e

    @asynccontextmanager
    async def acquire_document(
        self,
        url: str,
        wait_until: str = 'domcontentloaded',
        timeout_ms: int = 30000,
        wait_selector: Optional[str] = 'body',
        wait_selector_timeout_ms: int = 10000,
        require_selector: bool = True,
        settle_ms: int = 0,
    ) -> AsyncIterator[BeautifulSoup]:
        """
        Load a page and yield it as parsed HTML.

        The browser session is released when the block exits, including when
        loading fails or the caller raises.

        Args:
            url: URL to load
            wait_until: Playwright navigation event to wait for
            timeout_ms: Navigation timeout
            wait_selector: Optional CSS selector to wait for after navigation
            wait_selector_timeout_ms: Timeout for ``wait_selector``
            require_selector: Fail if ``wait_selector`` never appears
            settle_ms: Extra time for scripts to render before reading the page

        Raises:
            AcquisitionError: If the page cannot be loaded within bounds
        """
        try:
            document = await self._load(
                url, wait_until, timeout_ms, wait_selector,
                wait_selector_timeout_ms, require_selector, settle_ms,
            )
        except BaseException:
            await self.release()
            raise

        try:
            yield document
        finally:
            await self.release()
