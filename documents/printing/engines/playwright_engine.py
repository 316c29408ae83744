"""
Playwright Engine

Renders HTML to PDF with an embedded headless Chromium.

Playwright's sync API is bound to the thread that started it, so the
browser lives on one dedicated worker thread and every render is submitted
to that thread. Each render gets its own browser context and page, which are
always closed afterwards; the browser itself is reused.

Setup (one-time):
    python -m playwright install chromium
"""

import concurrent.futures
import logging
import threading
from contextlib import contextmanager
from typing import Callable, Optional

try:
    from playwright.sync_api import sync_playwright
    PLAYWRIGHT_AVAILABLE = True
except ImportError:
    PLAYWRIGHT_AVAILABLE = False

from ..config import PlaywrightSettings
from ..dto import PageOrientation, RenderRequest
from ..enhancer import PAGE_MARGIN
from ..exceptions import EngineError, EngineRenderError, EngineTimeout, EngineUnavailable
from ..interfaces import IPdfEngine


logger = logging.getLogger('pagesmith.engine.playwright')


# A4 in pixels at 96 DPI
PORTRAIT_VIEWPORT = {'width': 794, 'height': 1123}
LANDSCAPE_VIEWPORT = {'width': 1123, 'height': 794}


def viewport_for(orientation: PageOrientation) -> dict:
    """Browser viewport matching an A4 page in the orientation."""
    if PageOrientation.parse(orientation).is_landscape:
        return dict(LANDSCAPE_VIEWPORT)
    return dict(PORTRAIT_VIEWPORT)


def launch_args(settings: PlaywrightSettings) -> list:
    """Chromium command line switches for the settings."""
    args = []
    if settings.no_sandbox:
        args.extend(['--no-sandbox', '--disable-setuid-sandbox'])
    if settings.disable_gpu:
        args.extend(['--disable-gpu', '--disable-gpu-sandbox'])
    args.append('--disable-dev-shm-usage')
    return args


def log_troubleshooting_hints(error: BaseException) -> None:
    """Log likely causes of a browser launch failure."""
    message = str(error).lower()
    if 'chrome' in message or 'chromium' in message or 'executable' in message:
        logger.error("Chromium issue detected:")
        logger.error("   - Install the browser: python -m playwright install chromium")
        logger.error("   - Or set PLAYWRIGHT_BROWSER_PATH=/usr/bin/chromium")
    elif 'sandbox' in message:
        logger.error("Sandbox issue detected:")
        logger.error("   - Disable the sandbox: PLAYWRIGHT_NO_SANDBOX=true")
    elif 'gpu' in message:
        logger.error("GPU issue detected:")
        logger.error("   - Disable the GPU: PLAYWRIGHT_DISABLE_GPU=true")
    elif 'shm' in message or 'memory' in message:
        logger.error("Memory/SHM issue detected:")
        logger.error("   - Increase container memory or mount a larger /dev/shm")
    else:
        logger.error("General troubleshooting:")
        logger.error("   - Check system dependencies: python -m playwright install-deps chromium")
        logger.error("   - Verify the container has sufficient resources")


class PlaywrightEngine(IPdfEngine):
    """
    PDF engine using headless Chromium through Playwright.

    Usage:
        engine = PlaywrightEngine(get_playwright_settings())
        engine.probe()
        pdf_bytes = engine.render(RenderRequest(html=html))
        engine.close()
    """

    name = 'playwright'
    description = 'Headless Chromium with full CSS support'

    def __init__(
        self,
        settings: Optional[PlaywrightSettings] = None,
        browser_factory: Optional[Callable] = None,
    ):
        """
        Initialize the engine. No browser is started here.

        Args:
            settings: Browser settings
            browser_factory: Callable returning a connected browser, replaces
                the Playwright launch (mainly for tests)
        """
        self.settings = settings or PlaywrightSettings()
        self._browser_factory = browser_factory
        self._browser = None
        self._playwright = None
        self._launch_failed = False
        self._executor = None
        self._lock = threading.Lock()

    def _get_executor(self) -> concurrent.futures.ThreadPoolExecutor:
        with self._lock:
            if self._executor is None:
                self._executor = concurrent.futures.ThreadPoolExecutor(
                    max_workers=1, thread_name_prefix='pagesmith-playwright'
                )
            return self._executor

    def is_available(self) -> bool:
        installed = PLAYWRIGHT_AVAILABLE or self._browser_factory is not None
        return bool(installed and self.settings.enabled and not self._launch_failed)

    def probe(self) -> bool:
        """
        Start the browser if needed and report whether it is usable.

        A failed launch marks the engine unavailable until the next probe.
        """
        self._launch_failed = False
        if not self.is_available():
            return False
        future = self._get_executor().submit(self._ensure_browser)
        try:
            future.result(timeout=self.settings.timeout)
        except concurrent.futures.TimeoutError:
            logger.error(f"Chromium did not start within {self.settings.timeout}s")
            self._launch_failed = True
        except EngineError as e:
            logger.warning(f"Playwright engine unavailable: {e}")
        return self.is_available()

    def render(self, request: RenderRequest) -> bytes:
        """
        Render HTML to PDF with Chromium.

        Raises:
            EngineUnavailable: If Playwright is missing, disabled or cannot launch
            EngineTimeout: If the render exceeds its time budget
            EngineRenderError: If Chromium fails to produce a PDF
        """
        if not self.is_available():
            raise EngineUnavailable("Playwright engine is not available", engine=self.name)

        timeout = request.deadline.clamp(self.settings.timeout)
        if timeout is not None and timeout <= 0:
            raise EngineTimeout("Render deadline expired before starting Chromium", engine=self.name)

        future = self._get_executor().submit(self._render_in_worker, request, timeout)
        try:
            pdf_bytes = future.result(timeout=timeout)
        except concurrent.futures.TimeoutError as e:
            future.cancel()
            raise EngineTimeout(f"Chromium render timed out after {timeout}s", engine=self.name) from e
        except EngineError:
            raise
        except Exception as e:
            raise EngineRenderError(f"Playwright PDF generation failed: {e}", engine=self.name) from e

        logger.info(f"Playwright generated PDF ({request.page_label}): {len(pdf_bytes)} bytes")
        return pdf_bytes

    def close(self) -> None:
        """Close the browser and stop the worker thread."""
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is None:
            return
        try:
            executor.submit(self._shutdown_browser).result(timeout=self.settings.timeout)
        except Exception as e:
            logger.warning(f"Failed to shut down Chromium cleanly: {e}")
        executor.shutdown(wait=False)

    # Everything below runs on the worker thread

    def _launch(self):
        self._playwright = sync_playwright().start()
        options = {
            'headless': self.settings.headless,
            'args': launch_args(self.settings),
        }
        if self.settings.browser_path:
            options['executable_path'] = self.settings.browser_path
        return self._playwright.chromium.launch(**options)

    def _ensure_browser(self):
        if self._browser is not None and self._browser.is_connected():
            return self._browser
        try:
            factory = self._browser_factory or self._launch
            self._browser = factory()
        except Exception as e:
            self._launch_failed = True
            logger.error(f"Failed to launch Chromium: {e}")
            log_troubleshooting_hints(e)
            self._stop_playwright()
            raise EngineUnavailable(f"Chromium could not be launched: {e}", engine=self.name) from e
        logger.info("Chromium browser started for PDF rendering")
        return self._browser

    @contextmanager
    def _isolated_page(self, browser, orientation: PageOrientation):
        """Yield a page in a fresh context; both are closed on exit."""
        context = browser.new_context(viewport=viewport_for(orientation), ignore_https_errors=True)
        page = None
        try:
            page = context.new_page()
            yield page
        finally:
            if page is not None:
                try:
                    page.close()
                except Exception as e:
                    logger.warning(f"Failed to close page: {e}")
            try:
                context.close()
            except Exception as e:
                logger.warning(f"Failed to close context: {e}")

    def _render_in_worker(self, request: RenderRequest, timeout: Optional[float]) -> bytes:
        orientation = PageOrientation.parse(request.orientation)
        browser = self._ensure_browser()
        with self._isolated_page(browser, orientation) as page:
            if timeout is not None:
                page.set_default_timeout(timeout * 1000)
            page.set_content(request.html or '', wait_until='networkidle')
            page.emulate_media(media='print')
            pdf_bytes = page.pdf(
                format='A4',
                landscape=orientation.is_landscape,
                print_background=True,
                prefer_css_page_size=True,
                display_header_footer=False,
                scale=1.0,
                margin={side: PAGE_MARGIN for side in ('top', 'right', 'bottom', 'left')},
            )
        if not pdf_bytes:
            raise EngineRenderError("PDF generation failed - empty result", engine=self.name)
        return pdf_bytes

    def _shutdown_browser(self):
        if self._browser is not None:
            try:
                self._browser.close()
            finally:
                self._browser = None
                self._stop_playwright()

    def _stop_playwright(self):
        if self._playwright is not None:
            try:
                self._playwright.stop()
            except Exception as e:
                logger.warning(f"Failed to stop Playwright: {e}")
            self._playwright = None
