from contextlib import asynccontextmanager
from fastapi import FastAPI, Depends, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from sqlalchemy.orm import Session
from typing import Optional
import asyncio
import logging
import re

from api.database import get_db, init_db, engine
from api.config import settings
from api.emoji import generate_book_emojis
from scrapers.base import ScraperError
from scrapers.manager import BookLookupManager
from scrapers.sites.amazon import is_amazon_url

# Setup logging directory
settings.log_dir.mkdir(exist_ok=True)


# Custom formatter to strip ANSI color codes from file logs
class ColorStripFormatter(logging.Formatter):
    """Formatter that strips ANSI color codes from log messages."""
    ansi_escape = re.compile(r'\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])')

    def format(self, record):
        message = super().format(record)
        return self.ansi_escape.sub('', message)

# Setup logging with color support for console, stripped for file
file_handler = logging.FileHandler(settings.log_file, encoding='utf-8')
file_handler.setFormatter(ColorStripFormatter(settings.log_format))

console_handler = logging.StreamHandler()
console_handler.setFormatter(logging.Formatter(settings.log_format))

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    handlers=[file_handler, console_handler],
    force=True  # Override any existing configuration
)

# Scraper loggers get their own handlers so each request's events appear once
scraper_logger = logging.getLogger('scraper')
scraper_logger.propagate = False
# Only add handlers if not already present (prevents duplicates on module reload)
if not scraper_logger.handlers:
    scraper_file_handler = logging.FileHandler(settings.log_file, encoding='utf-8')
    scraper_file_handler.setFormatter(ColorStripFormatter(settings.log_format))
    scraper_logger.addHandler(scraper_file_handler)

    scraper_console_handler = logging.StreamHandler()
    scraper_console_handler.setFormatter(logging.Formatter(settings.log_format))
    scraper_logger.addHandler(scraper_console_handler)
scraper_logger.setLevel(getattr(logging, settings.log_level.upper()))

logger = logging.getLogger(__name__)


# Filter to suppress noisy polling endpoint access logs
class PollingEndpointFilter(logging.Filter):
    # Endpoints that poll frequently and clutter logs
    SUPPRESSED_ENDPOINTS = ['/health', '/api/searches']

    def filter(self, record):
        try:
            msg = record.getMessage()
        except Exception:
            msg = str(record.msg)
        for endpoint in self.SUPPRESSED_ENDPOINTS:
            if endpoint in msg:
                return False
        return True

# Apply filter to uvicorn access logger at module load time
uvicorn_access_logger = logging.getLogger("uvicorn.access")
uvicorn_access_logger.addFilter(PollingEndpointFilter())


async def cleanup_resources():
    """Close database connections on shutdown."""
    logger.info("Closing database connections...")
    try:
        await asyncio.wait_for(
            asyncio.get_running_loop().run_in_executor(None, lambda: engine.dispose(close=True)),
            timeout=2.0
        )
        logger.info("Database connections closed")
    except asyncio.TimeoutError:
        logger.warning("Database cleanup timed out")
    except Exception as e:
        logger.warning(f"Error closing database connections: {e}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    # Startup
    logger.info("=" * 60)
    logger.info("Book Notes Backend Starting Up")
    logger.info("=" * 60)
    logger.info(f"Log file: {settings.log_file}")
    logger.info(f"Database: {settings.database_url}")
    logger.info(f"CORS origins: {settings.cors_origins}")
    settings.data_dir.mkdir(exist_ok=True)
    init_db()
    logger.info("Database initialized successfully")
    logger.info("Backend ready to accept requests")

    yield  # Application runs here

    # Shutdown
    logger.info("Book Notes Backend Shutting Down")
    try:
        await asyncio.wait_for(cleanup_resources(), timeout=5.0)
    except asyncio.TimeoutError:
        logger.warning("Shutdown cleanup timed out, forcing exit")
    logger.info("Shutdown complete")


app = FastAPI(
    title="Book Notes API",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)


def get_manager(db: Session = Depends(get_db)) -> BookLookupManager:
    """Lookup manager bound to the request's database session."""
    return BookLookupManager(db)


def error_response(status_code: int, error: str, message: Optional[str] = None) -> JSONResponse:
    content = {"error": error}
    if message is not None:
        content["message"] = message
    return JSONResponse(status_code=status_code, content=content)


@app.get("/favicon.ico", include_in_schema=False)
async def favicon():
    """Return empty response for favicon requests"""
    return Response(status_code=204)


@app.get("/")
async def root():
    return {
        "message": "Book Notes API",
        "endpoints": ["/scrape?url=", "/search?query=&store=", "/api/lookup?title=&author=&format=&store=",
                      "/generate-emojis", "/api/searches", "/api/errors"],
    }


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/scrape")
async def scrape_product(
    url: Optional[str] = Query(None, description="Amazon product URL"),
    manager: BookLookupManager = Depends(get_manager),
):
    """Scrape book metadata from an Amazon product page"""
    if not url:
        return error_response(400, "Missing 'url' parameter. Please provide an Amazon product URL.")
    if not is_amazon_url(url):
        return error_response(400, "URL must be from amazon.com domain")

    try:
        metadata = await manager.scrape_product(url)
    except ScraperError as e:
        return error_response(500, "Failed to scrape Amazon product data", str(e))
    return metadata.to_dict()


@app.get("/search")
async def search_book(
    query: Optional[str] = Query(None, description="Book title, optionally with author"),
    store: str = Query("amazon", description="Preferred store"),
    manager: BookLookupManager = Depends(get_manager),
):
    """Find a retailer link for a book"""
    if not query or not query.strip():
        return error_response(400, "Query parameter is required")

    try:
        link = await manager.find_book(query, store)
    except ScraperError as e:
        return error_response(500, "Failed to find the book", str(e))
    return {"query": query, "bookLink": link.to_dict()}


@app.get("/api/lookup")
async def lookup_book(
    title: Optional[str] = Query(None),
    author: str = Query(""),
    format: str = Query("", description="Book format, e.g. paperback"),
    store: str = Query("amazon"),
    manager: BookLookupManager = Depends(get_manager),
):
    """Find a book link and scrape its metadata in one call"""
    if not title or not title.strip():
        return error_response(400, "Title parameter is required")

    try:
        link, metadata = await manager.lookup(title, author, format, store)
    # ValueError: the selected link is not an Amazon product page
    except (ValueError, ScraperError) as e:
        return error_response(500, "Failed to look up the book", str(e))
    return {"bookLink": link.to_dict(), "metadata": metadata.to_dict()}


@app.api_route("/generate-emojis", methods=["GET", "POST"])
async def generate_emojis(request: Request):
    """Generate two emoji for a book from its description"""
    if request.method == "POST":
        try:
            data = await request.json()
        except ValueError:
            return error_response(400, "Request body must be JSON")
        if not isinstance(data, dict):
            return error_response(400, "Request body must be a JSON object")
    else:
        data = request.query_params

    description = data.get("description")
    if not description:
        return error_response(400, "Missing description")

    # The client call is blocking
    emojis = await asyncio.to_thread(
        generate_book_emojis, description, data.get("title"), data.get("author")
    )
    return {"emojis": emojis}


@app.get("/api/searches")
async def recent_searches(manager: BookLookupManager = Depends(get_manager)):
    """Most recent successful searches, newest first"""
    return {"recentSearches": manager.recent_searches()}


@app.get("/api/errors")
async def recent_errors(manager: BookLookupManager = Depends(get_manager)):
    """Most recent search failures, newest first"""
    return {"errors": manager.recent_errors()}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        access_log=True,
        log_config=None,  # Keep our handlers; the polling filter is already attached
        timeout_keep_alive=5,
        timeout_graceful_shutdown=5.0,
    )
