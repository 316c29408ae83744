"""
WeasyPrint Engine

Adapter for rendering HTML to PDF using WeasyPrint.
"""

import logging
from typing import Optional

try:
    from weasyprint import CSS, HTML
    WEASYPRINT_AVAILABLE = True
except (ImportError, OSError):
    # OSError: WeasyPrint is installed but its native libraries (Pango) are not
    WEASYPRINT_AVAILABLE = False

from ..dto import PageOrientation, RenderRequest
from ..enhancer import PAGE_MARGIN, page_size
from ..exceptions import EngineRenderError, EngineUnavailable
from ..interfaces import IPdfEngine


logger = logging.getLogger('pagesmith.engine.weasyprint')


class WeasyPrintEngine(IPdfEngine):
    """
    PDF engine using WeasyPrint.

    Supports:
    - Static assets via base_url
    - Print CSS with paged media
    - Extra stylesheets from settings
    """

    name = 'weasyprint'
    description = 'WeasyPrint native rendering library'

    def __init__(
        self,
        stylesheets: Optional[list] = None,
        base_url: Optional[str] = None,
        enabled: bool = True,
    ):
        """
        Initialize the engine.

        Args:
            stylesheets: Optional list of CSS file paths to include
            base_url: Base URL for resolving relative URLs (images, CSS)
            enabled: Set to False to switch the engine off
        """
        self.stylesheets = list(stylesheets or [])
        self.base_url = base_url
        self.enabled = enabled

    def is_available(self) -> bool:
        return bool(WEASYPRINT_AVAILABLE and self.enabled)

    def render(self, request: RenderRequest) -> bytes:
        """
        Render HTML to PDF using WeasyPrint.

        The deadline is not enforced; WeasyPrint cannot be interrupted.

        Raises:
            EngineUnavailable: If WeasyPrint is missing or disabled
            EngineRenderError: If rendering fails
        """
        if not self.is_available():
            raise EngineUnavailable("WeasyPrint is not available", engine=self.name)

        orientation = PageOrientation.parse(request.orientation)
        try:
            html_doc = HTML(string=request.html, base_url=self.base_url)

            css_list = [CSS(string=self.page_css(orientation))]
            css_list.extend(CSS(filename=css) for css in self.stylesheets)

            pdf_bytes = html_doc.write_pdf(stylesheets=css_list)

        except Exception as e:
            logger.error(f"Failed to render PDF ({request.page_label}): {e}", exc_info=True)
            raise EngineRenderError(f"WeasyPrint rendering failed: {e}", engine=self.name) from e

        logger.info(f"Successfully rendered PDF ({request.page_label}): {len(pdf_bytes)} bytes")
        return pdf_bytes

    @staticmethod
    def page_css(orientation: PageOrientation) -> str:
        """@page rule for the orientation."""
        return f"@page {{ size: {page_size(orientation)}; margin: {PAGE_MARGIN}; }}"
