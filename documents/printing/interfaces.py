"""
Interfaces for the Printing Framework

Defines the contracts between the rendering core and its collaborators:
rendering engines on one side, the application that owns templates on the
other.
"""

from abc import ABC, abstractmethod
from typing import Any, List

from .dto import PageOrientation, RenderRequest, TemplatePage


class IPdfEngine(ABC):
    """
    Interface for PDF rendering engines.

    Implementations convert print-ready HTML to PDF bytes using their specific
    backend. The fallback orchestrator depends only on this interface.
    """

    #: Engine code used in settings and status reports
    name: str = None

    #: Human readable description for status reports
    description: str = ""

    @abstractmethod
    def is_available(self) -> bool:
        """Return True if the engine can currently be used. Must not block."""
        pass

    def probe(self) -> bool:
        """
        Check availability, possibly doing real work (health checks, warm-up).

        Called at startup and on explicit re-probe, never during a render.
        """
        return self.is_available()

    @abstractmethod
    def render(self, request: RenderRequest) -> bytes:
        """
        Render HTML to PDF.

        Args:
            request: Markup, page number, orientation, template id and deadline

        Returns:
            PDF content as bytes

        Raises:
            EngineUnavailable: If the engine cannot be used
            EngineRenderError: If rendering fails
        """
        pass

    def close(self) -> None:
        """Release pooled resources (browser processes, connections)."""
        pass


class ITemplateSource(ABC):
    """
    Interface for the application layer that owns templates.

    All methods raise TemplateNotFound for unknown template ids.
    """

    @abstractmethod
    def get_pages(self, template_id: Any) -> List[TemplatePage]:
        """Return the template's pages ordered by their page order."""
        pass

    @abstractmethod
    def get_style_sheet(self, template_id: Any) -> str:
        """Return the template's CSS text (may be empty)."""
        pass

    @abstractmethod
    def get_orientation(self, template_id: Any) -> PageOrientation:
        """Return the template's page orientation."""
        pass

    def get_fallback_content(self, template_id: Any) -> str:
        """Return the template's own body, rendered when it has no pages."""
        return ""

    def get_name(self, template_id: Any) -> str:
        """Return a display name, used for render labels and file names."""
        return str(template_id)
