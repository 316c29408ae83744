"""
ReportLab Engine

In-process fallback that turns composed HTML into a simple PDF with
ReportLab Platypus. Layout is approximate: block elements become paragraphs
and page containers become page breaks. It has no external requirements, so
it is always available and ends every fallback chain.
"""

import html as html_lib
import logging
from io import BytesIO

from bs4 import BeautifulSoup, Comment, Doctype, NavigableString, Tag
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.units import cm
from reportlab.platypus import PageBreak, Paragraph, SimpleDocTemplate, Spacer

from ..compositor import PAGE_CONTAINER_CLASS
from ..dto import PageOrientation, RenderRequest
from ..exceptions import EngineRenderError
from ..interfaces import IPdfEngine
from ..sanitizer import paragraph_markup, plain_text
from .styles import get_fallback_styles


logger = logging.getLogger('pagesmith.engine.reportlab')


BLOCK_TAGS = {
    'h1', 'h2', 'h3', 'h4', 'h5', 'h6', 'p', 'div', 'section', 'article',
    'header', 'footer', 'main', 'aside', 'nav', 'blockquote', 'pre', 'ul',
    'ol', 'li', 'dl', 'dt', 'dd', 'table', 'thead', 'tbody', 'tfoot', 'tr',
    'td', 'th', 'caption', 'figure', 'figcaption', 'address', 'hr',
}

SKIPPED_TAGS = ['script', 'style', 'head', 'title', 'meta', 'link', 'noscript']

MARGIN = 1 * cm


class ReportLabEngine(IPdfEngine):
    """
    PDF engine using ReportLab Platypus.

    Usage:
        engine = ReportLabEngine()
        pdf_bytes = engine.render(RenderRequest(html='<p>Hello</p>'))
    """

    name = 'reportlab'
    description = 'In-process ReportLab fallback (always available)'

    def __init__(self):
        self.styles = get_fallback_styles()

    def is_available(self) -> bool:
        return True

    def render(self, request: RenderRequest) -> bytes:
        """
        Render HTML to PDF with ReportLab.

        The deadline is not enforced; ReportLab cannot be interrupted.

        Raises:
            EngineRenderError: If the document cannot be built
        """
        orientation = PageOrientation.parse(request.orientation)
        pagesize = landscape(A4) if orientation.is_landscape else A4

        try:
            story = self.build_story(request.html)

            buffer = BytesIO()
            doc = SimpleDocTemplate(
                buffer,
                pagesize=pagesize,
                rightMargin=MARGIN,
                leftMargin=MARGIN,
                topMargin=MARGIN,
                bottomMargin=MARGIN,
                title=str(request.template_id) if request.template_id is not None else '',
            )
            doc.build(story)
            pdf_bytes = buffer.getvalue()
            buffer.close()

        except Exception as e:
            logger.error(f"ReportLab rendering failed ({request.page_label}): {e}", exc_info=True)
            raise EngineRenderError(f"ReportLab rendering failed: {e}", engine=self.name) from e

        logger.info(f"Rendered PDF with ReportLab ({request.page_label}): {len(pdf_bytes)} bytes")
        return pdf_bytes

    def build_story(self, html: str) -> list:
        """
        Build the Platypus story for a document.

        Each page container starts a new PDF page. The story is never empty.
        """
        soup = BeautifulSoup(html or '', 'html.parser')
        for tag in soup.find_all(SKIPPED_TAGS):
            tag.decompose()

        sections = [
            container for container in soup.find_all('div', class_=PAGE_CONTAINER_CLASS)
            if container.find_parent('div', class_=PAGE_CONTAINER_CLASS) is None
        ]
        if not sections:
            sections = [soup.body or soup]

        story = []
        for index, section in enumerate(sections):
            if index:
                story.append(PageBreak())
            blocks = []
            self._collect_blocks(section, blocks)
            for tag_name, fragment in blocks:
                story.append(self._paragraph(tag_name, fragment))

        if not story:
            story.append(Spacer(1, 1))
        return story

    def _collect_blocks(self, node, blocks: list) -> None:
        """Flatten a node into (tag name, inline HTML) pairs."""
        inline = []

        def flush():
            fragment = ''.join(inline).strip()
            inline.clear()
            if fragment:
                blocks.append(('p', fragment))

        for child in node.children:
            if isinstance(child, (Comment, Doctype)):
                continue
            if isinstance(child, NavigableString):
                inline.append(html_lib.escape(str(child), quote=False))
                continue
            if not isinstance(child, Tag):
                continue
            if child.name not in BLOCK_TAGS:
                inline.append(child.decode())
                continue

            flush()
            if child.name == 'hr':
                continue
            if child.find(BLOCK_TAGS) is not None:
                self._collect_blocks(child, blocks)
            else:
                fragment = child.decode_contents().strip()
                if fragment:
                    blocks.append((child.name, fragment))
        flush()

    def _paragraph(self, tag_name: str, fragment: str):
        style = self.styles.get(tag_name, self.styles['p'])
        markup = paragraph_markup(fragment)
        if tag_name == 'li':
            markup = f'&bull; {markup}'
        try:
            return Paragraph(markup, style)
        except Exception as e:
            logger.debug(f"Paragraph markup rejected, using plain text: {e}")
            return Paragraph(plain_text(fragment), style)
