"""
Printing-specific exceptions.

Two families matter to callers:
- TemplateError: the template or its parameters are invalid. Shown to the user,
  never retried on another engine.
- AllEnginesFailedError: no rendering backend produced output. An operational
  problem, worth an alert.

EngineError subclasses describe a single backend failing and are recovered
inside the fallback orchestrator.
"""


class PrintingError(Exception):
    """Base exception for all printing errors."""
    pass


class TemplateError(PrintingError):
    """Base exception for problems caused by the template or its parameters."""
    pass


class TemplateNotFound(TemplateError):
    """Raised when a template source does not know the requested template id."""

    def __init__(self, template_id):
        super().__init__(f"Template not found with id: {template_id}")
        self.template_id = template_id


class InvalidPageNumber(TemplateError):
    """
    Raised when a requested page lies outside [1, page_count].

    Attributes:
        page_number: The requested 1-based page number
        page_count: Number of pages the template has
    """

    def __init__(self, page_number, page_count):
        super().__init__(
            f"Invalid page number: {page_number}. Template has {page_count} pages."
        )
        self.page_number = page_number
        self.page_count = page_count


class TemplateRenderError(TemplateError):
    """
    Raised when a page cannot be rendered.

    Covers malformed placeholder syntax and failures of the template engine.
    One failing page fails the whole composition.

    Attributes:
        page_name: Name of the offending page (None when unknown)
    """

    def __init__(self, message, page_name=None):
        if page_name:
            message = f"Failed to render content for {page_name}: {message}"
        super().__init__(message)
        self.page_name = page_name


class EngineError(PrintingError):
    """Base exception for a single rendering engine failing."""

    def __init__(self, message, engine=None):
        super().__init__(message)
        self.engine = engine


class EngineUnavailable(EngineError):
    """Raised when an engine's preconditions are not met (not installed, disabled)."""
    pass


class EngineRenderError(EngineError):
    """Raised when an engine was invoked but did not produce a PDF."""
    pass


class EngineTimeout(EngineRenderError):
    """Raised when an engine did not finish within its time budget."""
    pass


class AllEnginesFailedError(PrintingError):
    """
    Raised when every engine in the fallback chain failed.

    The last underlying error is chained as __cause__.

    Attributes:
        attempts: RenderAttempt records, one per engine tried
        engine_names: Names of the engines that were attempted, in order
        last_error: The last underlying exception (or None)
    """

    def __init__(self, attempts, last_error=None):
        self.attempts = list(attempts)
        self.engine_names = [attempt.engine for attempt in self.attempts]
        self.last_error = last_error
        detail = str(last_error) if last_error is not None else "Unknown error"
        super().__init__(
            f"All {len(self.engine_names)} PDF engines failed "
            f"({', '.join(self.engine_names) or 'none'}). Last error: {detail}"
        )
