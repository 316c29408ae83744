"""
Rendering engine adapters and the default engine registry.
"""

import atexit
import logging
import threading
from typing import Optional

from .. import config
from ..selector import EngineRegistry
from .gotenberg_engine import GotenbergEngine
from .playwright_engine import PlaywrightEngine
from .reportlab_engine import ReportLabEngine
from .weasyprint_engine import WeasyPrintEngine


logger = logging.getLogger(__name__)

_default_registry: Optional[EngineRegistry] = None
_registry_lock = threading.Lock()


def build_default_engines() -> dict:
    """
    Construct every engine from settings.

    An engine that cannot be constructed is logged and registered as None,
    which makes it permanently unavailable.
    """
    builders = {
        GotenbergEngine.name: lambda: GotenbergEngine(config.get_gotenberg_settings()),
        PlaywrightEngine.name: lambda: PlaywrightEngine(config.get_playwright_settings()),
        WeasyPrintEngine.name: lambda: WeasyPrintEngine(**vars(config.get_weasyprint_settings())),
        ReportLabEngine.name: ReportLabEngine,
    }
    engines = {}
    for name, build in builders.items():
        try:
            engines[name] = build()
        except Exception as e:
            logger.error(f"Failed to initialize PDF engine {name}: {e}")
            engines[name] = None
    return engines


def get_default_registry() -> EngineRegistry:
    """
    Get the process-wide engine registry, creating it on first use.

    Engines are closed when the interpreter exits.
    """
    global _default_registry
    with _registry_lock:
        if _default_registry is None:
            _default_registry = EngineRegistry(build_default_engines())
            atexit.register(_default_registry.close)
        return _default_registry


__all__ = [
    'GotenbergEngine',
    'PlaywrightEngine',
    'ReportLabEngine',
    'WeasyPrintEngine',
    'build_default_engines',
    'get_default_registry',
]
