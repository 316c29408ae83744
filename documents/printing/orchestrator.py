"""
Fallback Orchestrator

Tries the engines of the fallback chain in order until one produces a PDF.
"""

import logging
import time
from enum import Enum
from typing import Any, Optional

from . import config
from .dto import Deadline, PageOrientation, RenderAttempt, RenderOutcome, RenderRequest
from .exceptions import AllEnginesFailedError, EngineRenderError, EngineTimeout, EngineUnavailable
from .selector import FALLBACK_ENGINE, EngineRegistry, parse_preference


logger = logging.getLogger(__name__)


class RenderState(str, Enum):
    """States of one orchestrated render."""

    PENDING = 'pending'
    TRYING = 'trying'
    SUCCESS = 'success'
    ALL_FAILED = 'all_failed'


class FallbackOrchestrator:
    """
    Runs the fallback chain for one engine registry.

    Usage:
        orchestrator = FallbackOrchestrator(get_default_registry())
        pdf_bytes = orchestrator.render(html, orientation=PageOrientation.LANDSCAPE)
    """

    def __init__(
        self,
        registry: EngineRegistry,
        preference: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            registry: Engines and their availability
            preference: Engine code or 'auto'. Defaults to the PDF_ENGINE setting.
            timeout: Overall deadline per render in seconds. Defaults to the
                PDF_RENDER_TIMEOUT setting.
        """
        self.registry = registry
        self.preference = parse_preference(
            preference if preference is not None else config.get_preferred_engine()
        )
        self.timeout = timeout if timeout is not None else config.get_render_timeout()

    def _request(self, html, page_number, orientation, template_id) -> RenderRequest:
        return RenderRequest(
            html=html,
            page_number=page_number,
            orientation=PageOrientation.parse(orientation),
            template_id=template_id,
            deadline=Deadline(self.timeout),
        )

    def _attempt(self, name: str, request: RenderRequest):
        """
        Run one engine.

        Returns:
            Tuple of (RenderAttempt, pdf bytes or None)
        """
        started = time.monotonic()
        engine = self.registry.get(name)
        try:
            if engine is None:
                raise EngineUnavailable(f"PDF engine {name} is not installed", engine=name)
            pdf_bytes = engine.render(request)
            if not pdf_bytes:
                raise EngineRenderError(f"PDF engine {name} returned an empty document", engine=name)
        except Exception as e:
            return RenderAttempt(engine=name, error=e, elapsed=time.monotonic() - started), None
        return RenderAttempt(engine=name, elapsed=time.monotonic() - started), pdf_bytes

    def render_outcome(
        self,
        html: str,
        page_number: Optional[int] = None,
        orientation: PageOrientation = PageOrientation.PORTRAIT,
        template_id: Optional[Any] = None,
    ) -> RenderOutcome:
        """
        Render HTML with the first engine of the chain that succeeds.

        Each engine is tried at most once. When the deadline has passed, the
        remaining engines are skipped except the terminal fallback engine.

        Returns:
            RenderOutcome with the PDF, the engine that produced it and all attempts

        Raises:
            AllEnginesFailedError: If no engine produced a PDF
        """
        request = self._request(html, page_number, orientation, template_id)
        chain = self.registry.ordered(self.preference)
        attempts = []
        last_error = None
        state = RenderState.PENDING

        logger.info(
            f"Rendering PDF ({request.page_label}, {request.orientation.value}) "
            f"with engine chain: {[descriptor.name for descriptor in chain]}"
        )

        for index, descriptor in enumerate(chain, start=1):
            name = descriptor.name
            if request.deadline.expired and name != FALLBACK_ENGINE:
                last_error = EngineTimeout(f"Render deadline expired, skipping {name}", engine=name)
                attempts.append(RenderAttempt(engine=name, error=last_error))
                logger.warning(f"Render deadline expired, skipping PDF engine {name}")
                continue

            state = RenderState.TRYING
            logger.debug(f"{state.value} engine {index}/{len(chain)}: {name}")
            attempt, pdf_bytes = self._attempt(name, request)
            attempts.append(attempt)

            if attempt.succeeded:
                state = RenderState.SUCCESS
                logger.info(
                    f"PDF generated with {name}: {len(pdf_bytes)} bytes "
                    f"in {attempt.elapsed:.2f}s"
                )
                return RenderOutcome(pdf_bytes=pdf_bytes, engine=name, attempts=attempts)

            last_error = attempt.error
            logger.warning(f"PDF engine {name} failed: {attempt.error}")

        state = RenderState.ALL_FAILED
        logger.error(f"PDF rendering {state.value}: tried {[attempt.engine for attempt in attempts]}")
        raise AllEnginesFailedError(attempts, last_error) from last_error

    def render(
        self,
        html: str,
        page_number: Optional[int] = None,
        orientation: PageOrientation = PageOrientation.PORTRAIT,
        template_id: Optional[Any] = None,
    ) -> bytes:
        """
        Render HTML to PDF using the fallback chain.

        Raises:
            AllEnginesFailedError: If no engine produced a PDF
        """
        return self.render_outcome(html, page_number, orientation, template_id).pdf_bytes

    def render_with_engine(
        self,
        engine_name: str,
        html: str,
        page_number: Optional[int] = None,
        orientation: PageOrientation = PageOrientation.PORTRAIT,
        template_id: Optional[Any] = None,
    ) -> bytes:
        """
        Render with exactly one engine, without fallback.

        Args:
            engine_name: Engine code

        Raises:
            KeyError: If the engine name is unknown
            AllEnginesFailedError: If the engine failed (one attempt)
        """
        self.registry.get(engine_name)
        request = self._request(html, page_number, orientation, template_id)
        attempt, pdf_bytes = self._attempt(engine_name, request)
        if not attempt.succeeded:
            logger.error(f"PDF engine {engine_name} failed: {attempt.error}")
            raise AllEnginesFailedError([attempt], attempt.error) from attempt.error

        logger.info(f"PDF generated with {engine_name}: {len(pdf_bytes)} bytes")
        return pdf_bytes
