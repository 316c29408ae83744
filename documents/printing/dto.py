"""
Data Transfer Objects for the Printing Framework
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class PageOrientation(str, Enum):
    """Page orientation of a rendered document."""

    PORTRAIT = "PORTRAIT"
    LANDSCAPE = "LANDSCAPE"

    @property
    def is_landscape(self) -> bool:
        return self is PageOrientation.LANDSCAPE

    @classmethod
    def parse(cls, value) -> "PageOrientation":
        """
        Parse an orientation from an enum member, a string or None.

        Strings are matched case-insensitively; None means PORTRAIT.

        Raises:
            ValueError: If the value is not a known orientation
        """
        if value is None:
            return cls.PORTRAIT
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValueError(f"Unknown page orientation: {value!r}") from None


@dataclass(frozen=True)
class TemplatePage:
    """One page of a document template as supplied by the template source."""

    name: str
    content: str
    order: int = 0
    id: Optional[Any] = None


@dataclass(frozen=True)
class DocumentTemplate:
    """
    A multi-page document template.

    Owned by the surrounding application; the rendering core only reads it.
    html_content is the template's own body, used when it has no pages.
    """

    id: Any
    name: str
    pages: tuple = ()
    style_sheet: str = ""
    orientation: PageOrientation = PageOrientation.PORTRAIT
    html_content: str = ""


@dataclass(frozen=True)
class EngineDescriptor:
    """Name, availability and rank of a rendering engine."""

    name: str
    available: bool
    priority: int
    description: str = ""


class Deadline:
    """
    A point in time after which rendering work should stop.

    Built from a timeout in seconds; None means no deadline.
    """

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout
        self._expires_at = None if timeout is None else time.monotonic() + timeout

    def remaining(self) -> Optional[float]:
        """Seconds left, never negative; None when unbounded."""
        if self._expires_at is None:
            return None
        return max(0.0, self._expires_at - time.monotonic())

    @property
    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0

    def clamp(self, timeout: Optional[float]) -> Optional[float]:
        """Return the smaller of timeout and the remaining time."""
        remaining = self.remaining()
        if remaining is None:
            return timeout
        if timeout is None:
            return remaining
        return min(timeout, remaining)


@dataclass(frozen=True)
class RenderRequest:
    """
    Everything an engine needs for one conversion.

    Identifiers travel with the request instead of ambient state.
    """

    html: str
    page_number: Optional[int] = None
    orientation: PageOrientation = PageOrientation.PORTRAIT
    template_id: Optional[Any] = None
    deadline: Deadline = field(default_factory=Deadline)

    @property
    def page_label(self) -> str:
        return f"page {self.page_number}" if self.page_number is not None else "all"


@dataclass
class RenderAttempt:
    """Outcome of trying one engine."""

    engine: str
    error: Optional[BaseException] = None
    elapsed: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass
class RenderOutcome:
    """Successful result of the fallback chain."""

    pdf_bytes: bytes
    engine: str
    attempts: list = field(default_factory=list)


@dataclass
class PdfResult:
    """
    Result of PDF rendering operation.

    Contains the PDF bytes and metadata for HTTP responses.
    """

    pdf_bytes: bytes
    filename: str
    content_type: str = "application/pdf"
    engine: Optional[str] = None

    def __len__(self) -> int:
        """Return the size of PDF in bytes"""
        return len(self.pdf_bytes)
