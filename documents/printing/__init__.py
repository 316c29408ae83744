"""
Document Printing Framework

Renders multi-page document templates to a single paginated PDF, trying
several rendering engines in priority order until one succeeds.
"""

from .dto import DocumentTemplate, PageOrientation, PdfResult, TemplatePage
from .exceptions import (
    AllEnginesFailedError,
    EngineError,
    InvalidPageNumber,
    PrintingError,
    TemplateError,
    TemplateNotFound,
    TemplateRenderError,
)
from .interfaces import IPdfEngine, ITemplateSource
from .orchestrator import FallbackOrchestrator
from .selector import EngineRegistry
from .service import TemplateRenderService
from .sources import InMemoryTemplateSource

__all__ = [
    'AllEnginesFailedError',
    'DocumentTemplate',
    'EngineError',
    'EngineRegistry',
    'FallbackOrchestrator',
    'IPdfEngine',
    'ITemplateSource',
    'InMemoryTemplateSource',
    'InvalidPageNumber',
    'PageOrientation',
    'PdfResult',
    'PrintingError',
    'TemplateError',
    'TemplateNotFound',
    'TemplatePage',
    'TemplateRenderError',
    'TemplateRenderService',
]
