"""
Screenshot Capture
==================

Playwright-based element screenshots of rendered preview pages.

The browser is a capability injected into the capturer: ``BrowserSession``
exposes navigate / wait / locate / rasterize, ``PlaywrightBrowserSession``
implements it on one Chromium page, and ``open_browser_session`` owns the
browser for the length of a capture batch.
"""

from typing import Any, AsyncGenerator, Optional
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from pathlib import Path
import asyncio
import io

from playwright.async_api import (
    Browser,
    BrowserContext,
    ElementHandle,
    Error as PlaywrightError,
    Page,
    Playwright,
    async_playwright,
)
from PIL import Image, UnidentifiedImageError

from ogcards.config.logging import get_logger
from ogcards.config.settings import Settings, get_settings
from ogcards.core.errors import OgcardsError
from ogcards.models.schemas import CaptureRequest

logger = get_logger(__name__)

FONTS_READY_SCRIPT = "() => document.fonts.ready.then(() => true)"


class CaptureError(OgcardsError):
    """Exception raised when a preview page cannot be captured."""

    pass


class BrowserSession(ABC):
    """Browser capability used by the capturer."""

    @abstractmethod
    async def navigate(self, url: str) -> None:
        """Load a URL, raising CaptureError on failure."""
        pass

    @abstractmethod
    async def wait_for_resources(self, settle_delay: float) -> None:
        """Wait for fonts and other asynchronous resources."""
        pass

    @abstractmethod
    async def locate(self, selector: str) -> Optional[Any]:
        """Return the first element matching a CSS selector, or None."""
        pass

    @abstractmethod
    async def rasterize(self, element: Any) -> bytes:
        """Return PNG bytes of an element's bounding box."""
        pass


class PlaywrightBrowserSession(BrowserSession):
    """BrowserSession backed by a single Playwright page."""

    def __init__(self, page: Page) -> None:
        self.page = page
        self.logger: Any = logger.bind(component="browser_session")  # structlog.BoundLoggerBase

    async def navigate(self, url: str) -> None:
        try:
            response = await self.page.goto(url, wait_until="networkidle")
        except PlaywrightError as e:
            raise CaptureError(f"Navigation to {url} failed: {e}") from e

        # file:// navigations have no HTTP response
        if response is not None and not response.ok:
            raise CaptureError(f"Navigation to {url} returned HTTP {response.status}")

    async def wait_for_resources(self, settle_delay: float) -> None:
        try:
            await self.page.evaluate(FONTS_READY_SCRIPT)
        except PlaywrightError as e:
            self.logger.warning("document.fonts unavailable", error=str(e))

        # Best-effort settle for late font swaps; not a guarantee
        if settle_delay > 0:
            await asyncio.sleep(settle_delay)

    async def locate(self, selector: str) -> Optional[ElementHandle]:
        return await self.page.query_selector(selector)

    async def rasterize(self, element: ElementHandle) -> bytes:
        try:
            return await element.screenshot(type="png")
        except PlaywrightError as e:
            raise CaptureError(f"Element screenshot failed: {e}") from e


@asynccontextmanager
async def open_browser_session(
    settings: Optional[Settings] = None,
) -> AsyncGenerator[PlaywrightBrowserSession, None]:
    """
    Launch Chromium for a capture batch.

    The browser and Playwright driver are closed on exit, including when a
    capture raised.
    """
    settings = settings or get_settings()
    session_logger: Any = logger.bind(component="browser")  # structlog.BoundLoggerBase

    playwright: Optional[Playwright] = None
    browser: Optional[Browser] = None
    context: Optional[BrowserContext] = None
    try:
        try:
            playwright = await async_playwright().start()
            browser = await playwright.chromium.launch(
                headless=settings.playwright_headless,
                args=["--no-sandbox", "--disable-dev-shm-usage"],
            )
            context = await browser.new_context(
                viewport={"width": settings.viewport_width, "height": settings.viewport_height},
                device_scale_factor=settings.device_scale_factor,
            )
            page = await context.new_page()
        except PlaywrightError as e:
            session_logger.error("Failed to launch browser", error=str(e))
            raise CaptureError(f"Browser launch failed: {e}") from e

        page.set_default_timeout(settings.playwright_timeout)
        session_logger.info("Browser session opened", headless=settings.playwright_headless)
        yield PlaywrightBrowserSession(page)
    finally:
        if context is not None:
            await context.close()
        if browser is not None:
            await browser.close()
        if playwright is not None:
            await playwright.stop()
        session_logger.info("Browser session closed")


class ScreenshotCapturer:
    """Capture one DOM region of a rendered page to a PNG file."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or get_settings()
        self.logger: Any = logger.bind(component="screenshot")  # structlog.BoundLoggerBase

    async def capture(
        self, session: BrowserSession, page_url: str, selector: str, destination: Path
    ) -> None:
        """
        Capture ``selector`` on ``page_url`` into ``destination``.

        The caller skips pages whose destination exists and creates the
        destination's parent directory. No retry is attempted.

        Args:
            session: Open browser session
            page_url: URL of an already rendered page
            selector: CSS selector of the region to capture
            destination: PNG file to write

        Raises:
            CaptureError: If navigation fails, the selector is missing or
                the screenshot is not a valid PNG
        """
        self.logger.info("Capturing preview", url=page_url, selector=selector)

        await session.navigate(page_url)
        await session.wait_for_resources(self.settings.capture_settle_delay)

        element = await session.locate(selector)
        if element is None:
            raise CaptureError(f"Selector {selector!r} not found on {page_url}")

        png_bytes = await session.rasterize(element)
        self._verify_png(png_bytes, page_url)
        if self.settings.optimize_png:
            png_bytes = self._optimize_png(png_bytes)

        destination.write_bytes(png_bytes)
        self.logger.info("Preview captured", destination=str(destination), file_size=len(png_bytes))

    async def capture_request(self, session: BrowserSession, request: CaptureRequest) -> None:
        await self.capture(session, request.page_url, request.selector, request.destination)

    def _verify_png(self, png_bytes: bytes, page_url: str) -> None:
        if not png_bytes:
            raise CaptureError(f"Empty screenshot for {page_url}")
        try:
            with Image.open(io.BytesIO(png_bytes)) as image:
                if image.format != "PNG":
                    raise CaptureError(f"Screenshot for {page_url} is {image.format}, not PNG")
                image.verify()
        except (UnidentifiedImageError, OSError, SyntaxError) as e:
            raise CaptureError(f"Invalid screenshot for {page_url}: {e}") from e

    def _optimize_png(self, png_bytes: bytes) -> bytes:
        """
        Re-encode a PNG with maximum compression.

        Returns the original bytes when Pillow cannot improve on them.
        """
        try:
            with Image.open(io.BytesIO(png_bytes)) as image:
                output = io.BytesIO()
                image.save(output, format="PNG", optimize=True, compress_level=9)
        except OSError as e:
            self.logger.warning("PNG optimization failed, using original", error=str(e))
            return png_bytes

        optimized = output.getvalue()
        if len(optimized) >= len(png_bytes):
            return png_bytes

        self.logger.debug(
            "PNG optimization completed",
            original_size=len(png_bytes),
            optimized_size=len(optimized),
        )
        return optimized
