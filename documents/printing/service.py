"""
Template Render Service

Central service for rendering multi-page document templates to HTML and PDF.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from django.core.exceptions import SuspiciousFileOperation
from django.utils.text import get_valid_filename

from .compositor import PageCompositor
from .dto import PageOrientation, PdfResult, TemplatePage
from .enhancer import PdfMarkupEnhancer
from .exceptions import TemplateError
from .interfaces import ITemplateSource
from .markup import extract_parameters
from .orchestrator import FallbackOrchestrator
from .selector import EngineRegistry


logger = logging.getLogger(__name__)


class TemplateRenderService:
    """
    Core service for the template rendering pipeline.

    Responsibilities:
    1. Load template pages from the template source
    2. Compose pages with parameters into one HTML document
    3. Make the document print ready
    4. Delegate PDF rendering to the fallback orchestrator

    Usage:
        service = TemplateRenderService(source)
        pdf_bytes = service.render_pdf(42, {'customer': {'name': 'Ann'}})
        page_2 = service.render_pdf(42, {'customer': {'name': 'Ann'}}, page_number=2)
    """

    def __init__(
        self,
        source: ITemplateSource,
        registry: Optional[EngineRegistry] = None,
        *,
        preference: Optional[str] = None,
        timeout: Optional[float] = None,
        compositor: Optional[PageCompositor] = None,
        enhancer: Optional[PdfMarkupEnhancer] = None,
    ):
        """
        Initialize the service.

        Args:
            source: Application layer that owns the templates
            registry: Engine registry. If None, uses the process-wide default registry.
            preference: Engine preference code, defaults to the PDF_ENGINE setting
            timeout: Overall render deadline in seconds, defaults to PDF_RENDER_TIMEOUT
            compositor: Page compositor (default: autoescape from settings)
            enhancer: Markup enhancer
        """
        if registry is None:
            from .engines import get_default_registry
            registry = get_default_registry()
        self.source = source
        self.registry = registry
        self.orchestrator = FallbackOrchestrator(registry, preference=preference, timeout=timeout)
        self.compositor = compositor or PageCompositor()
        self.enhancer = enhancer or PdfMarkupEnhancer()

    def _pages(self, template_id: Any) -> List[TemplatePage]:
        """Template pages; a template without pages renders its own body as one page."""
        pages = list(self.source.get_pages(template_id))
        if pages:
            return pages
        fallback = self.source.get_fallback_content(template_id)
        if fallback:
            logger.debug(f"Template {template_id} has no pages, using its own content")
            return [TemplatePage(name=self.source.get_name(template_id), content=fallback, order=0)]
        return []

    def render_html(self, template_id: Any, params: Optional[Mapping[str, Any]] = None) -> str:
        """
        Render all pages of a template into one HTML document.

        Raises:
            TemplateNotFound: If the template does not exist
            TemplateRenderError: If any page fails to render
        """
        try:
            return self.compositor.compose(self._pages(template_id), params)
        except TemplateError as e:
            logger.warning(f"Failed to render template {template_id}: {e}")
            raise

    def render_page(
        self,
        template_id: Any,
        page_number: int,
        params: Optional[Mapping[str, Any]] = None,
    ) -> str:
        """
        Render one page of a template.

        Raises:
            TemplateNotFound: If the template does not exist
            InvalidPageNumber: If page_number is outside [1, page_count]
            TemplateRenderError: If the page fails to render
        """
        try:
            return self.compositor.compose_single_page(self._pages(template_id), page_number, params)
        except TemplateError as e:
            logger.warning(f"Failed to render page {page_number} of template {template_id}: {e}")
            raise

    def get_page_count(self, template_id: Any) -> int:
        """Number of non-empty pages, at least 1."""
        return self.compositor.page_count(self._pages(template_id))

    def get_template_parameters(self, template_id: Any) -> List[str]:
        """Parameter names referenced anywhere in the template, in first-appearance order."""
        names: List[str] = []
        for page in self._pages(template_id):
            for name in extract_parameters(page.content):
                if name not in names:
                    names.append(name)
        return names

    def _prepare(self, template_id, params, page_number, orientation):
        """Compose and enhance the document; return (html, orientation)."""
        if orientation is None:
            orientation = self.source.get_orientation(template_id)
        orientation = PageOrientation.parse(orientation)

        if page_number is None:
            html = self.render_html(template_id, params)
        else:
            html = self.render_page(template_id, page_number, params)

        html = self.enhancer.enhance(html, self.source.get_style_sheet(template_id), orientation)
        return html, orientation

    def render_print_html(
        self,
        template_id: Any,
        params: Optional[Mapping[str, Any]] = None,
        page_number: Optional[int] = None,
        orientation: Optional[PageOrientation] = None,
    ) -> str:
        """Print-ready HTML exactly as it is handed to the PDF engines."""
        return self._prepare(template_id, params, page_number, orientation)[0]

    def render_pdf(
        self,
        template_id: Any,
        params: Optional[Mapping[str, Any]] = None,
        page_number: Optional[int] = None,
        orientation: Optional[PageOrientation] = None,
    ) -> bytes:
        """
        Render a template, or one page of it, to PDF.

        Args:
            template_id: Template identifier
            params: Template parameters
            page_number: Optional 1-based page to render alone
            orientation: Page orientation, defaults to the template's

        Returns:
            PDF content as bytes

        Raises:
            TemplateError: If the template cannot be composed
            AllEnginesFailedError: If no engine produced a PDF
        """
        return self.render_pdf_result(template_id, params, page_number, orientation).pdf_bytes

    def render_pdf_result(
        self,
        template_id: Any,
        params: Optional[Mapping[str, Any]] = None,
        page_number: Optional[int] = None,
        orientation: Optional[PageOrientation] = None,
    ) -> PdfResult:
        """
        Render a template to PDF and return it with download metadata.

        Returns:
            PdfResult with PDF bytes, file name and the engine that produced it
        """
        html, orientation = self._prepare(template_id, params, page_number, orientation)
        try:
            outcome = self.orchestrator.render_outcome(html, page_number, orientation, template_id)
        except Exception as e:
            logger.error(f"Failed to render PDF for template {template_id}: {e}", exc_info=True)
            raise

        result = PdfResult(
            pdf_bytes=outcome.pdf_bytes,
            filename=self.build_filename(template_id, page_number),
            content_type='application/pdf',
            engine=outcome.engine,
        )
        logger.info(
            f"Successfully generated PDF: {result.filename} "
            f"({len(result.pdf_bytes)} bytes, engine {result.engine})"
        )
        return result

    def render_pdf_with_engine(
        self,
        engine_name: str,
        template_id: Any,
        params: Optional[Mapping[str, Any]] = None,
        page_number: Optional[int] = None,
        orientation: Optional[PageOrientation] = None,
    ) -> bytes:
        """
        Render a template with one specific engine, without fallback.

        Raises:
            KeyError: If the engine name is unknown
            AllEnginesFailedError: If the engine failed
        """
        html, orientation = self._prepare(template_id, params, page_number, orientation)
        try:
            return self.orchestrator.render_with_engine(
                engine_name, html, page_number, orientation, template_id
            )
        except Exception as e:
            logger.error(
                f"Failed to render PDF for template {template_id} with {engine_name}: {e}",
                exc_info=True,
            )
            raise

    def build_filename(self, template_id: Any, page_number: Optional[int] = None) -> str:
        """File name for a rendered template: <name>[_page_N].pdf"""
        try:
            base = get_valid_filename(self.source.get_name(template_id))
        except SuspiciousFileOperation:
            base = 'document'
        if page_number is not None:
            base = f"{base}_page_{page_number}"
        return f"{base}.pdf"

    def get_engine_status(self) -> Dict[str, dict]:
        """Engine name to availability, description and priority."""
        return self.registry.status()

    def get_engine_order(self) -> List[str]:
        """Engine names in the order a render would try them."""
        return [descriptor.name for descriptor in self.registry.ordered(self.orchestrator.preference)]

    def reprobe_engines(self) -> Mapping[str, bool]:
        """Re-check engine availability, e.g. after an external service came up."""
        return self.registry.probe()
