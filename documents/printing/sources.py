"""
In-memory template source.

Holds DocumentTemplate objects keyed by id. Used by the command line tools
and tests, and by integrators whose templates are not stored in a database.
"""

import threading
from typing import Any, Dict, Iterable, List, Optional

from .compositor import sort_pages
from .dto import DocumentTemplate, PageOrientation, TemplatePage
from .exceptions import TemplateNotFound
from .interfaces import ITemplateSource


class InMemoryTemplateSource(ITemplateSource):
    """
    Template source backed by a dictionary.

    Usage:
        source = InMemoryTemplateSource()
        source.add(DocumentTemplate(id=1, name='letter', pages=(page,)))
    """

    def __init__(self, templates: Optional[Iterable[DocumentTemplate]] = None):
        self._templates: Dict[Any, DocumentTemplate] = {}
        self._lock = threading.Lock()
        for template in templates or []:
            self.add(template)

    def add(self, template: DocumentTemplate) -> DocumentTemplate:
        """Register a template, replacing any template with the same id."""
        with self._lock:
            self._templates[template.id] = template
        return template

    def register(
        self,
        template_id: Any,
        pages: Iterable[str],
        *,
        name: Optional[str] = None,
        style_sheet: str = '',
        orientation=PageOrientation.PORTRAIT,
        html_content: str = '',
    ) -> DocumentTemplate:
        """
        Build and register a template from raw page markup.

        Pages are named "Page N" and ordered as given.
        """
        template_pages = tuple(
            TemplatePage(name=f"Page {order}", content=content, order=order)
            for order, content in enumerate(pages, start=1)
        )
        return self.add(DocumentTemplate(
            id=template_id,
            name=name or str(template_id),
            pages=template_pages,
            style_sheet=style_sheet or '',
            orientation=PageOrientation.parse(orientation),
            html_content=html_content or '',
        ))

    def remove(self, template_id: Any) -> None:
        with self._lock:
            if self._templates.pop(template_id, None) is None:
                raise TemplateNotFound(template_id)

    def get_template(self, template_id: Any) -> DocumentTemplate:
        """
        Raises:
            TemplateNotFound: If the id is unknown
        """
        try:
            return self._templates[template_id]
        except KeyError:
            raise TemplateNotFound(template_id) from None

    def get_pages(self, template_id: Any) -> List[TemplatePage]:
        return sort_pages(self.get_template(template_id).pages)

    def get_style_sheet(self, template_id: Any) -> str:
        return self.get_template(template_id).style_sheet or ''

    def get_orientation(self, template_id: Any) -> PageOrientation:
        return PageOrientation.parse(self.get_template(template_id).orientation)

    def get_fallback_content(self, template_id: Any) -> str:
        return self.get_template(template_id).html_content or ''

    def get_name(self, template_id: Any) -> str:
        return self.get_template(template_id).name
