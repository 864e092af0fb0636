import asyncio
import random
from dataclasses import dataclass, field

import pycountry
import requests
from bs4 import BeautifulSoup
from langdetect import DetectorFactory, LangDetectException, detect
from requests.structures import CaseInsensitiveDict

from common.config import Config
from common.logging import get_logger
from services.web_scraper.html_extractor import HtmlExtractor
from services.web_scraper.schemas import ScrapeResult, ScrapeStrategy

logger = get_logger(__name__)

DetectorFactory.seed = 0

CONNECT_TIMEOUT = 5.0
READ_TIMEOUT = 8.0
BROWSER_TIMEOUT_MS = 10_000
MAX_CHARS = 20_000
MIN_HTML_LENGTH = 100

USER_AGENTS = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.0 Safari/605.1.15",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/122.0.6114.123 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:124.0) Gecko/20100101 Firefox/124.0",
]


@dataclass
class FetchedPage:
    """Raw HTTP outcome of one fetch, before any HTML parsing."""

    method: str
    final_url: str | None = None
    status: int | None = None
    headers: CaseInsensitiveDict = field(default_factory=CaseInsensitiveDict)
    html: str = ""
    error: str | None = None

    @property
    def content_type(self) -> str:
        return self.headers.get("Content-Type", "")


def page_language(headers: CaseInsensitiveDict, soup: BeautifulSoup) -> str:
    """English name of the page language: <html lang>, then Content-Language, then a text sample."""
    code = None
    if soup.html and soup.html.get("lang"):
        code = str(soup.html["lang"])
    elif headers.get("Content-Language"):
        code = str(headers["Content-Language"])
    elif soup.body:
        sample = soup.body.get_text(" ", strip=True)[:1000]
        if len(sample.split()) >= 20:
            try:
                code = detect(sample)
            except LangDetectException as e:
                logger.debug(f"Body language detection failed: {e}")

    code = (code or "en").split(";")[0].strip().split("-")[0].lower()
    language = pycountry.languages.get(alpha_2=code)
    return language.name if language else "English"


class WebScraperClient:
    """Fetches a company website and extracts readable text from it.

    Headless Chromium first (JavaScript-heavy sites), plain HTTP GET over
    https then http as a fallback. Failures are reported on the ScrapeResult.

    Example:
        scraper = WebScraperClient(config)
        result = await scraper.scrape_domain("acme.com")
    """

    def __init__(self, settings: Config | None = None, max_chars: int = MAX_CHARS):
        self.session = requests.Session()
        self.session.headers.update(
            {
                "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
                "Accept-Language": "en-US,en;q=0.9,*;q=0.5",
            }
        )
        self.extractor = HtmlExtractor()
        self.max_chars = max_chars
        self.read_timeout = settings.provider_request_timeout if settings else READ_TIMEOUT

    async def scrape_domain(self, domain: str, strategy: ScrapeStrategy = ScrapeStrategy.AUTO) -> ScrapeResult:
        """Scrape the home page of a bare domain, stopping at the first attempt with usable HTML."""
        attempts = []
        if strategy in (ScrapeStrategy.AUTO, ScrapeStrategy.PLAYWRIGHT):
            attempts.append((self._fetch_with_browser, f"https://{domain}"))
        if strategy in (ScrapeStrategy.AUTO, ScrapeStrategy.REQUESTS):
            attempts += [(self._fetch_with_requests, f"https://{domain}"), (self._fetch_with_requests, f"http://{domain}")]

        result = ScrapeResult(ok=False, error="No attempt made")
        for fetch, url in attempts:
            result = self._to_result(await fetch(url))
            if result.ok and len(result.raw_html or "") >= MIN_HTML_LENGTH:
                return result
            logger.info(f"[Scrape] No usable HTML from {url}: {result.error or 'page too short'}")
        return result

    def _to_result(self, page: FetchedPage) -> ScrapeResult:
        failed = dict(final_url=page.final_url, status_code=page.status, content_type=page.content_type, method=page.method)
        if page.error:
            return ScrapeResult(ok=False, error=page.error, **failed)
        if page.status and page.status >= 400:
            return ScrapeResult(ok=False, error=f"HTTP error {page.status}", **failed)
        if "html" not in page.content_type.lower() and "<html" not in page.html[:2000].lower():
            return ScrapeResult(ok=False, error="Non-HTML content", **failed)
        return self._parse(page)

    def _parse(self, page: FetchedPage) -> ScrapeResult:
        soup = BeautifulSoup(page.html, "html.parser")
        title_tag = soup.find("title")

        extraction, text = self.extractor.extract(page.html, page_language(page.headers, soup))
        text = text[: self.max_chars]

        return ScrapeResult(
            ok=True,
            final_url=page.final_url,
            status_code=page.status,
            content_type=page.content_type,
            method=f"{extraction} ({page.method})",
            title=title_tag.get_text(strip=True) if title_tag else None,
            meta_description=self.extractor.get_meta_description(soup),
            text=text,
            contact_text=self.extractor.extract_contact_sections(soup),
            word_count=len(text.split()),
            raw_html=page.html,
        )

    async def _fetch_with_browser(self, url: str) -> FetchedPage:
        """Render the page in headless Chromium for JavaScript-heavy sites."""
        from playwright.async_api import Error as PlaywrightError
        from playwright.async_api import async_playwright

        logger.info(f"[Scrape] Playwright: {url}")
        try:
            async with async_playwright() as p:
                browser = await p.chromium.launch(headless=True, args=["--no-sandbox", "--disable-dev-shm-usage"])
                try:
                    page = await browser.new_page(user_agent=random.choice(USER_AGENTS), locale="en-US")  # noqa: S311
                    response = await page.goto(url, wait_until="domcontentloaded", timeout=BROWSER_TIMEOUT_MS)
                    if response is None:
                        return FetchedPage("playwright", final_url=url, error="No response from page")
                    return FetchedPage(
                        "playwright",
                        final_url=page.url,
                        status=response.status,
                        headers=CaseInsensitiveDict(response.headers),
                        html=await page.content() if response.status < 400 else "",
                    )
                finally:
                    await browser.close()
        except PlaywrightError as e:
            logger.warning(f"[Scrape] Playwright error for {url}: {e}")
            return FetchedPage("playwright", final_url=url, error=str(e))

    async def _fetch_with_requests(self, url: str) -> FetchedPage:
        logger.info(f"[Scrape] HTTP GET: {url}")
        try:
            # blocking call, kept off the event loop
            response = await asyncio.to_thread(
                self.session.get,
                url,
                headers={"User-Agent": random.choice(USER_AGENTS)},  # noqa: S311
                timeout=(CONNECT_TIMEOUT, self.read_timeout),
                allow_redirects=True,
            )
        except requests.RequestException as e:
            return FetchedPage("requests", final_url=url, error=str(e))

        return FetchedPage(
            "requests",
            final_url=response.url,
            status=response.status_code,
            headers=response.headers,
            html=response.text if response.status_code < 400 else "",
        )
