"""
Gotenberg Engine

Converts HTML to PDF through an external Gotenberg service
(https://gotenberg.dev) using its Chromium HTML route.

Logging Guidelines:
- Logs host + path of the service, never the document
- On errors: status code + truncated response (max 500 chars)
"""

import logging
from typing import Optional
from urllib.parse import urljoin, urlparse

import httpx

from ..config import GotenbergSettings
from ..dto import PageOrientation, RenderRequest
from ..exceptions import EngineRenderError, EngineTimeout, EngineUnavailable
from ..interfaces import IPdfEngine


logger = logging.getLogger('pagesmith.engine.gotenberg')

CONVERT_PATH = '/forms/chromium/convert/html'
HEALTH_PATH = '/health'
HEALTH_TIMEOUT = 5.0

# Maximum response text length to include in error messages
MAX_ERROR_RESPONSE_LENGTH = 500


def _flag(value: bool) -> str:
    return 'true' if value else 'false'


class GotenbergEngine(IPdfEngine):
    """
    PDF engine backed by a Gotenberg service.

    Features:
    - A4 paper with width and height swapped for landscape
    - Request timeout bounded by the render deadline
    - Error mapping to engine exceptions
    """

    name = 'gotenberg'
    description = 'External Gotenberg conversion service'

    def __init__(self, settings: Optional[GotenbergSettings] = None, transport: Optional[httpx.BaseTransport] = None):
        """
        Initialize the engine.

        Args:
            settings: Service settings (defaults: disabled)
            transport: Optional httpx transport, mainly for tests
        """
        self.settings = settings or GotenbergSettings()
        self.transport = transport

    def _build_url(self, path: str) -> str:
        """Build full URL from the service URL and path."""
        return urljoin(self.settings.url.rstrip('/') + '/', path.lstrip('/'))

    def _truncate_response(self, text: str) -> str:
        if len(text) > MAX_ERROR_RESPONSE_LENGTH:
            return text[:MAX_ERROR_RESPONSE_LENGTH] + "..."
        return text

    def _client(self, timeout: float) -> httpx.Client:
        return httpx.Client(timeout=timeout, transport=self.transport)

    def is_available(self) -> bool:
        return bool(self.settings.enabled and self.settings.url)

    def probe(self) -> bool:
        """
        Check the service health endpoint.

        The check is advisory: a failing health check is logged but does not
        mark the engine unavailable, the service may still be starting.
        """
        if not self.is_available():
            logger.info("Gotenberg service disabled by configuration")
            return False

        url = self._build_url(HEALTH_PATH)
        try:
            with self._client(HEALTH_TIMEOUT) as client:
                response = client.get(url)
            if response.is_success:
                logger.info("Gotenberg service health check passed")
            else:
                logger.warning(f"Gotenberg service health check returned HTTP {response.status_code}")
        except httpx.HTTPError as e:
            logger.warning(f"Gotenberg service health check failed (service may not be ready yet): {e}")
        return True

    def form_fields(self, orientation: PageOrientation) -> dict:
        """Conversion options sent with the document."""
        settings = self.settings
        landscape = PageOrientation.parse(orientation).is_landscape
        width, height = settings.paper_width, settings.paper_height
        if landscape:
            width, height = height, width
        return {
            'paperWidth': str(width),
            'paperHeight': str(height),
            'marginTop': str(settings.margin),
            'marginBottom': str(settings.margin),
            'marginLeft': str(settings.margin),
            'marginRight': str(settings.margin),
            'printBackground': _flag(settings.print_background),
            'waitDelay': settings.wait_delay,
            'preferCssPageSize': 'true',
            'landscape': _flag(landscape),
        }

    def render(self, request: RenderRequest) -> bytes:
        """
        Render HTML to PDF through Gotenberg.

        Gotenberg cannot extract a single page; the markup is expected to be
        the requested page already.

        Raises:
            EngineUnavailable: If the engine is disabled or not configured
            EngineTimeout: If the request times out or the deadline has passed
            EngineRenderError: On connection errors, HTTP errors or an empty body
        """
        if not self.is_available():
            raise EngineUnavailable("Gotenberg service is not available", engine=self.name)

        timeout = request.deadline.clamp(self.settings.timeout)
        if timeout is not None and timeout <= 0:
            raise EngineTimeout("Render deadline expired before calling Gotenberg", engine=self.name)

        url = self._build_url(CONVERT_PATH)
        parsed = urlparse(url)
        logger.info(
            f"Generating PDF with Gotenberg ({request.page_label}, {PageOrientation.parse(request.orientation).value}): "
            f"POST {parsed.scheme}://{parsed.netloc}{parsed.path}"
        )

        files = {'files': ('index.html', (request.html or '').encode('utf-8'), 'text/html')}
        try:
            with self._client(timeout) as client:
                response = client.post(url, files=files, data=self.form_fields(request.orientation))
        except httpx.TimeoutException as e:
            raise EngineTimeout(f"Gotenberg request timed out after {timeout}s: {e}", engine=self.name) from e
        except httpx.HTTPError as e:
            raise EngineRenderError(f"Gotenberg request failed: {e}", engine=self.name) from e

        if not response.is_success:
            raise EngineRenderError(
                f"Gotenberg returned HTTP {response.status_code}: {self._truncate_response(response.text)}",
                engine=self.name,
            )

        pdf_bytes = response.content
        if not pdf_bytes:
            raise EngineRenderError("Gotenberg returned an empty PDF", engine=self.name)

        logger.info(f"Gotenberg generated PDF successfully: {len(pdf_bytes)} bytes")
        return pdf_bytes
