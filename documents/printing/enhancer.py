"""
PDF Markup Enhancer

Prepares a composed document for print engines: completes the document
structure and adds page size, margin and page-break rules. Enhancement is
additive and best effort; when it fails the original markup is used as is.
"""

import logging
from typing import Optional

from bs4 import BeautifulSoup, Doctype

from .compositor import PAGE_BREAK_CLASS, PAGE_CONTAINER_CLASS
from .dto import PageOrientation


logger = logging.getLogger(__name__)


PAGE_MARGIN = '1cm'
PRINT_STYLE_MARKER = 'data-print-styles'
VIEWPORT_CONTENT = 'width=device-width, initial-scale=1.0'

_HEAD_TAGS = ('meta', 'title', 'link', 'base')


def page_size(orientation: PageOrientation) -> str:
    """CSS page size for A4 in the given orientation."""
    return 'A4 landscape' if PageOrientation.parse(orientation).is_landscape else 'A4 portrait'


def generate_print_css(orientation: PageOrientation) -> str:
    """
    Build the print style sheet for an orientation.

    Page container and page-break rules match the containers produced by the
    compositor. They are repeated under @media print for engines that only
    honour print media.
    """
    rules = f"""
.{PAGE_CONTAINER_CLASS} {{
    width: 100%;
    box-sizing: border-box;
    position: relative;
}}
.{PAGE_CONTAINER_CLASS}.{PAGE_BREAK_CLASS} {{
    page-break-before: always;
    break-before: page;
}}
.page-break {{
    page-break-before: always;
}}
.no-page-break {{
    page-break-inside: avoid;
}}"""
    return f"""
@page {{
    size: {page_size(orientation)};
    margin: {PAGE_MARGIN};
}}
{rules}

@media print {{{rules}
.no-print {{
    display: none !important;
}}
}}
"""


class PdfMarkupEnhancer:
    """
    Injects print-oriented structure and styling into HTML.

    Usage:
        enhancer = PdfMarkupEnhancer()
        html = enhancer.enhance(composed_html, template_css, PageOrientation.LANDSCAPE)
    """

    parser = 'html.parser'

    def enhance(
        self,
        html: str,
        style_sheet: Optional[str] = None,
        orientation: PageOrientation = PageOrientation.PORTRAIT,
    ) -> str:
        """
        Make HTML print ready.

        Args:
            html: Composed document
            style_sheet: Template CSS, injected only if the document has no <style> yet
            orientation: Page orientation for the @page rule

        Returns:
            Enhanced HTML, or the original HTML if enhancement failed
        """
        try:
            soup = BeautifulSoup(html or '', self.parser)
            head, _body = self._ensure_structure(soup)

            if soup.find('meta', attrs={'name': 'viewport'}) is None:
                head.append(soup.new_tag('meta', attrs={'name': 'viewport', 'content': VIEWPORT_CONTENT}))

            if style_sheet and style_sheet.strip() and soup.find('style') is None:
                style = soup.new_tag('style', attrs={'type': 'text/css'})
                style.string = style_sheet
                head.append(style)

            print_style = soup.find('style', attrs={PRINT_STYLE_MARKER: True})
            if print_style is None:
                print_style = soup.new_tag('style', attrs={'type': 'text/css', PRINT_STYLE_MARKER: ''})
                head.append(print_style)
            print_style.string = generate_print_css(orientation)

            if not any(isinstance(node, Doctype) for node in soup.contents):
                soup.insert(0, Doctype('html'))

            return str(soup)

        except Exception as e:
            logger.warning(f"Failed to enhance HTML, using original: {e}")
            return html

    def _ensure_structure(self, soup):
        """Make sure the document has <html>, <head> and <body>; return head and body."""
        root = soup.find('html')
        if root is None:
            root = soup.new_tag('html')
            for node in list(soup.contents):
                if isinstance(node, Doctype):
                    continue
                root.append(node.extract())
            soup.append(root)

        head = root.find('head')
        if head is None:
            head = soup.new_tag('head')
            root.insert(0, head)

        body = root.find('body')
        if body is None:
            body = soup.new_tag('body')
            for node in list(root.contents):
                if node is head:
                    continue
                if getattr(node, 'name', None) in _HEAD_TAGS:
                    head.append(node.extract())
                else:
                    body.append(node.extract())
            root.append(body)

        return head, body
