# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Screenshot providers: one full-page raster plus raw HTML per URL.

Two interchangeable providers:
  - BrowserProvider   – local headless Chromium via Playwright
  - FirecrawlProvider – Firecrawl scrape API (screenshot + html formats)

No retry policy: a failed capture raises CaptureError and the caller decides.
"""

from __future__ import annotations

import asyncio
import json
import logging
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Protocol
from urllib.parse import urlparse

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright
from pydantic import BaseModel, Field, ValidationError

from .config import DEFAULT_FIRECRAWL_URL, Settings
from .errors import CaptureError, InvalidURLError, ProviderConfigError
from .raster import RasterSource

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)

_MAX_ERROR_BODY = 500


@dataclass(frozen=True, slots=True)
class PageCapture:
    """Raw material for one split request."""

    url: str
    html: str
    screenshot: RasterSource  # data URI, URL, path or PNG bytes
    title: str = ""


class CaptureProvider(Protocol):
    async def capture(self, url: str) -> PageCapture: ...


def normalize_url(url: str) -> str:
    """Trim *url* and default to https:// when no scheme is given.

    Raises:
        InvalidURLError: empty input, non-http(s) scheme or missing host.
    """
    formatted = (url or "").strip()
    if not formatted:
        raise InvalidURLError("URL is required")
    lowered = formatted.lower()
    if not lowered.startswith(("http://", "https://")):
        if "://" in formatted:
            raise InvalidURLError(f"Unsupported URL scheme: {formatted.split('://', 1)[0]}")
        formatted = f"https://{formatted}"
    parsed = urlparse(formatted)
    if not parsed.hostname:
        raise InvalidURLError(f"URL has no host: {url!r}")
    return formatted


# ---------------------------------------------------------------------------
# Firecrawl
# ---------------------------------------------------------------------------


class ScrapeMetadata(BaseModel):
    title: str | None = None
    description: str | None = None
    source_url: str | None = Field(None, alias="sourceURL")


class ScrapeData(BaseModel):
    screenshot: str | None = None
    markdown: str | None = None
    html: str | None = None
    metadata: ScrapeMetadata | None = None


class ScrapeResponse(BaseModel):
    """Firecrawl /v1/scrape response body."""

    success: bool = False
    data: ScrapeData | None = None
    error: str | None = None


class FirecrawlProvider:
    """Capture through the Firecrawl scrape API."""

    def __init__(
        self,
        api_key: str,
        *,
        endpoint: str = DEFAULT_FIRECRAWL_URL,
        wait_for_ms: int = 3000,
        timeout: float = 60.0,
    ) -> None:
        if not api_key:
            raise ProviderConfigError("FIRECRAWL_API_KEY is not configured")
        self._api_key = api_key
        self.endpoint = endpoint
        self.wait_for_ms = wait_for_ms
        self.timeout = timeout

    def _payload(self, url: str) -> dict:
        return {
            "url": url,
            "formats": ["screenshot", "markdown", "html"],
            "onlyMainContent": False,
            "waitFor": self.wait_for_ms,
            "screenshot": True,
            "fullPageScreenshot": True,
        }

    def _post(self, url: str) -> tuple[int, bytes]:
        req = urllib.request.Request(
            self.endpoint,
            data=json.dumps(self._payload(url)).encode("utf-8"),
            headers={
                "Authorization": f"Bearer {self._api_key}",
                "Content-Type": "application/json",
            },
            method="POST",
        )
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:  # noqa: S310  # nosec B310
                return resp.status, resp.read()
        except urllib.error.HTTPError as e:
            return e.code, e.read()
        except (urllib.error.URLError, TimeoutError, OSError) as e:
            raise CaptureError(f"Screenshot provider unreachable: {e}") from e

    async def capture(self, url: str) -> PageCapture:
        target = normalize_url(url)
        logger.info("Capturing %s via Firecrawl", target)
        status, body = await asyncio.to_thread(self._post, target)

        try:
            reply = ScrapeResponse.model_validate_json(body)
        except ValidationError as e:
            snippet = body[:_MAX_ERROR_BODY].decode("utf-8", errors="replace")
            raise CaptureError(
                f"Screenshot provider returned an invalid response (status {status}): {snippet}",
                status_code=status,
            ) from e

        if not (200 <= status < 300) or not reply.success:
            raise CaptureError(
                reply.error or f"Failed to capture site (status {status})",
                status_code=status,
            )

        data = reply.data or ScrapeData()
        if not data.screenshot:
            raise CaptureError("Screenshot provider returned no screenshot", status_code=status)

        title = (data.metadata.title if data.metadata else None) or ""
        logger.info("Captured %s (%d chars of HTML)", target, len(data.html or ""))
        return PageCapture(url=target, html=data.html or "", screenshot=data.screenshot, title=title)


# ---------------------------------------------------------------------------
# Local browser
# ---------------------------------------------------------------------------


class BrowserProvider:
    """Capture with a short-lived headless Chromium (Playwright)."""

    def __init__(
        self,
        *,
        viewport_width: int = 1440,
        viewport_height: int = 900,
        wait_for_ms: int = 3000,
        timeout_ms: int = 60_000,
        headless: bool = True,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self.viewport_width = viewport_width
        self.viewport_height = viewport_height
        self.wait_for_ms = wait_for_ms
        self.timeout_ms = timeout_ms
        self.headless = headless
        self.user_agent = user_agent

    async def capture(self, url: str) -> PageCapture:
        target = normalize_url(url)
        logger.info("Capturing %s with headless Chromium", target)
        try:
            async with async_playwright() as pw:
                browser = await pw.chromium.launch(headless=self.headless)
                try:
                    context = await browser.new_context(
                        viewport={"width": self.viewport_width, "height": self.viewport_height},
                        user_agent=self.user_agent,
                        accept_downloads=False,
                        service_workers="block",
                    )
                    page = await context.new_page()
                    response = await page.goto(target, wait_until="load", timeout=self.timeout_ms)
                    if response is not None and response.status >= 400:
                        raise CaptureError(
                            f"Failed to capture site (status {response.status})",
                            status_code=response.status,
                        )
                    if self.wait_for_ms:
                        await page.wait_for_timeout(self.wait_for_ms)
                    html = await page.content()
                    title = await page.title()
                    screenshot = await page.screenshot(full_page=True, type="png", timeout=self.timeout_ms)
                finally:
                    await browser.close()
        except PlaywrightError as e:
            if "executable doesn't exist" in str(e).lower():
                raise ProviderConfigError(
                    "Chromium is not installed. Please run: playwright install chromium"
                ) from e
            raise CaptureError(f"Browser capture failed: {e}") from e

        logger.info("Captured %s (%d bytes PNG, %d chars of HTML)", target, len(screenshot), len(html))
        return PageCapture(url=target, html=html, screenshot=screenshot, title=title)


def get_provider(settings: Settings) -> CaptureProvider:
    """Provider selected by ``settings.provider``.

    Raises:
        ProviderConfigError: unknown provider or missing credentials.
    """
    if settings.provider == "firecrawl":
        return FirecrawlProvider(
            settings.firecrawl_api_key,
            endpoint=settings.firecrawl_url,
            wait_for_ms=settings.wait_for_ms,
            timeout=settings.capture_timeout,
        )
    if settings.provider == "browser":
        return BrowserProvider(
            viewport_width=settings.viewport_width,
            viewport_height=settings.viewport_height,
            wait_for_ms=settings.wait_for_ms,
            timeout_ms=int(settings.capture_timeout * 1000),
        )
    raise ProviderConfigError(f"Unknown screenshot provider: {settings.provider!r}")
