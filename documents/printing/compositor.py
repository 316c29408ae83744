"""
Page Compositor

Renders the pages of a template against a parameter set and joins them into
one paginated HTML document.
"""

import logging
from typing import Any, Mapping, Optional, Sequence

from django.template import Context, Engine

from . import config
from .dto import TemplatePage
from .exceptions import InvalidPageNumber, TemplateRenderError
from .markup import has_text_content, translate
from .parameters import materialize_iterators, resolve


logger = logging.getLogger(__name__)


PAGE_CONTAINER_CLASS = 'template-page'
PAGE_BREAK_CLASS = 'page-break-before'
PAGE_BREAK_DIRECTIVE = 'page-break-before: always'

EMPTY_DOCUMENT = '<div class="empty-document"></div>'
EMPTY_PAGE = f'<div class="{PAGE_CONTAINER_CLASS} empty-page"></div>'


def sort_pages(pages: Optional[Sequence[TemplatePage]]) -> list:
    """Return pages in ascending page order (stable for equal orders)."""
    return sorted(pages or [], key=lambda page: page.order)


def page_container(content: str, position: int) -> str:
    """
    Wrap rendered page content in its page container.

    Every container after the first carries the page-break-before directive.
    """
    if position == 1:
        return (
            f'<div class="{PAGE_CONTAINER_CLASS}" data-page-number="{position}">'
            f'{content}</div>'
        )
    return (
        f'<div class="{PAGE_CONTAINER_CLASS} {PAGE_BREAK_CLASS}" '
        f'data-page-number="{position}" '
        f'style="{PAGE_BREAK_DIRECTIVE}; break-before: page;">'
        f'{content}</div>'
    )


class PageCompositor:
    """
    Composes template pages into one document.

    Usage:
        compositor = PageCompositor()
        html = compositor.compose(pages, {'name': 'Ann'})
        page_2 = compositor.compose_single_page(pages, 2, {'name': 'Ann'})
    """

    def __init__(self, autoescape: Optional[bool] = None):
        """
        Initialize the compositor.

        Args:
            autoescape: HTML-escape substituted values. Defaults to the
                PDF_TEMPLATE_AUTOESCAPE setting.
        """
        if autoescape is None:
            autoescape = config.is_autoescape_enabled()
        self.engine = Engine(autoescape=autoescape, string_if_invalid='')

    def render_content(self, content: str, name: str, params: Optional[Mapping[str, Any]]) -> str:
        """
        Render one piece of markup against the parameters.

        Raises:
            TemplateRenderError: If the markup is malformed or rendering fails
        """
        effective = resolve(content, params)
        source = translate(content, page_name=name)
        try:
            template = self.engine.from_string(source)
            return template.render(Context(effective, autoescape=self.engine.autoescape))
        except Exception as e:
            logger.error(f"Failed to render content for {name}: {e}")
            raise TemplateRenderError(str(e), page_name=name) from e

    def non_empty_pages(self, pages: Optional[Sequence[TemplatePage]]) -> list:
        """Return pages with visible text, in page order."""
        return [page for page in sort_pages(pages) if has_text_content(page.content)]

    def page_count(self, pages: Optional[Sequence[TemplatePage]]) -> int:
        """Number of non-empty pages, at least 1."""
        return max(1, len(self.non_empty_pages(pages)))

    def compose(self, pages: Optional[Sequence[TemplatePage]], params: Optional[Mapping[str, Any]] = None) -> str:
        """
        Render all non-empty pages into one document.

        A single page is returned bare, several pages are wrapped in page
        containers with page breaks between them.

        Raises:
            TemplateRenderError: If any page fails to render
        """
        content_pages = self.non_empty_pages(pages)
        skipped = len(pages or []) - len(content_pages)
        if skipped:
            logger.debug(f"Skipping {skipped} empty page(s)")

        if not content_pages:
            logger.info("No page has content, returning empty document")
            return EMPTY_DOCUMENT

        params = materialize_iterators(params)
        if len(content_pages) == 1:
            page = content_pages[0]
            return self.render_content(page.content, page.name, params)

        parts = []
        for position, page in enumerate(content_pages, start=1):
            rendered = self.render_content(page.content, page.name, params)
            parts.append(page_container(rendered, position))

        logger.info(f"Composed {len(content_pages)} pages")
        return ''.join(parts)

    def compose_single_page(
        self,
        pages: Optional[Sequence[TemplatePage]],
        page_number: int,
        params: Optional[Mapping[str, Any]] = None,
    ) -> str:
        """
        Render one page selected by its 1-based position in page order.

        Raises:
            InvalidPageNumber: If page_number is outside [1, page_count]
            TemplateRenderError: If the page fails to render
        """
        count = self.page_count(pages)
        if (
            page_number is None
            or isinstance(page_number, bool)
            or not isinstance(page_number, int)
            or page_number < 1
            or page_number > count
        ):
            raise InvalidPageNumber(page_number, count)

        ordered = sort_pages(pages)
        if page_number > len(ordered):
            return EMPTY_PAGE

        page = ordered[page_number - 1]
        if not has_text_content(page.content):
            logger.warning(f"Page {page.name} has no content")
            return EMPTY_PAGE

        return self.render_content(page.content, page.name, params)
