"""
Engine selection and the engine registry.

ordered_engines() turns a preference plus an availability snapshot into the
fallback chain. EngineRegistry owns the engine adapters and that snapshot.
"""

import logging
import threading
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional

from .dto import EngineDescriptor
from .interfaces import IPdfEngine


logger = logging.getLogger(__name__)


class EngineName(str, Enum):
    """Codes of the supported engines, in default priority order."""

    GOTENBERG = 'gotenberg'
    PLAYWRIGHT = 'playwright'
    WEASYPRINT = 'weasyprint'
    REPORTLAB = 'reportlab'


AUTO = 'auto'

DEFAULT_ORDER = (
    EngineName.GOTENBERG.value,
    EngineName.PLAYWRIGHT.value,
    EngineName.WEASYPRINT.value,
    EngineName.REPORTLAB.value,
)

#: The in-process engine that is always considered available
FALLBACK_ENGINE = EngineName.REPORTLAB.value

DESCRIPTIONS = {
    EngineName.GOTENBERG.value: 'External Gotenberg conversion service',
    EngineName.PLAYWRIGHT.value: 'Headless Chromium with full CSS support',
    EngineName.WEASYPRINT.value: 'WeasyPrint native rendering library',
    EngineName.REPORTLAB.value: 'In-process ReportLab fallback (always available)',
}


def parse_preference(value: Optional[str]) -> str:
    """
    Normalize an engine preference code.

    Unknown codes fall back to 'auto' with a warning.
    """
    if value is None:
        return AUTO
    code = str(value).strip().lower()
    if code == AUTO or code in DEFAULT_ORDER:
        return code
    logger.warning(f"Unknown PDF engine preference '{value}', using '{AUTO}'")
    return AUTO


def priority_of(name: str) -> int:
    """1-based rank of an engine in the default order."""
    return DEFAULT_ORDER.index(name) + 1


def candidate_order(preference: str) -> List[str]:
    """Engine names to consider before availability filtering."""
    preference = parse_preference(preference)
    if preference == AUTO:
        return list(DEFAULT_ORDER)
    return [preference] + [name for name in DEFAULT_ORDER if name != preference]


def ordered_engines(preference: str, availability: Mapping[str, bool]) -> List[EngineDescriptor]:
    """
    Compute the fallback chain.

    The preferred engine goes first and the others follow in default priority
    order; with 'auto' the default order is used as is. Unavailable engines
    are dropped. The fallback engine is never dropped and is appended at the
    end when it is not already in the chain, so the result is never empty.

    Args:
        preference: 'auto' or an engine code
        availability: Engine name to availability flag

    Returns:
        EngineDescriptor list in the order engines should be attempted
    """
    chain = []
    for name in candidate_order(preference):
        available = bool(availability.get(name, False))
        if name == FALLBACK_ENGINE:
            available = True
        elif not available:
            continue
        chain.append(EngineDescriptor(
            name=name,
            available=available,
            priority=priority_of(name),
            description=DESCRIPTIONS.get(name, ''),
        ))

    if all(descriptor.name != FALLBACK_ENGINE for descriptor in chain):
        chain.append(EngineDescriptor(
            name=FALLBACK_ENGINE,
            available=True,
            priority=priority_of(FALLBACK_ENGINE),
            description=DESCRIPTIONS[FALLBACK_ENGINE],
        ))
    return chain


class EngineRegistry:
    """
    Registry of engine adapters and their availability.

    An adapter may be None (library missing, engine not built); such an
    engine is permanently unavailable. Availability is a read-only snapshot
    that is replaced as a whole by probe(), so concurrent renders always see
    a complete set.
    """

    def __init__(self, engines: Optional[Mapping[str, Optional[IPdfEngine]]] = None):
        self._engines: Dict[str, Optional[IPdfEngine]] = {name: None for name in DEFAULT_ORDER}
        for name, engine in (engines or {}).items():
            if name not in self._engines:
                raise ValueError(f"Unknown PDF engine '{name}'")
            self._engines[name] = engine
        if self._engines[FALLBACK_ENGINE] is None:
            from .engines.reportlab_engine import ReportLabEngine
            self._engines[FALLBACK_ENGINE] = ReportLabEngine()
        self._lock = threading.Lock()
        self._availability: Mapping[str, bool] = MappingProxyType(self._snapshot(probe=False))

    def _snapshot(self, probe: bool) -> Dict[str, bool]:
        snapshot = {}
        for name, engine in self._engines.items():
            if engine is None:
                snapshot[name] = False
                continue
            try:
                snapshot[name] = bool(engine.probe() if probe else engine.is_available())
            except Exception as e:
                logger.warning(f"Availability check for {name} failed: {e}")
                snapshot[name] = False
        return snapshot

    def probe(self) -> Mapping[str, bool]:
        """
        Re-check every engine and swap in the new availability snapshot.

        Returns:
            The new snapshot
        """
        with self._lock:
            snapshot = MappingProxyType(self._snapshot(probe=True))
            self._availability = snapshot
        available = [name for name, flag in snapshot.items() if flag]
        logger.info(f"PDF engine availability: {available or 'none'}")
        return snapshot

    def availability(self) -> Mapping[str, bool]:
        """Current availability snapshot (read-only)."""
        return self._availability

    def get(self, name: str) -> Optional[IPdfEngine]:
        """
        Get the adapter registered for an engine.

        Raises:
            KeyError: If the engine name is unknown
        """
        if name not in self._engines:
            raise KeyError(f"PDF engine '{name}' not found")
        return self._engines[name]

    def ordered(self, preference: str) -> List[EngineDescriptor]:
        """Fallback chain for a preference under the current snapshot."""
        return ordered_engines(preference, self._availability)

    def status(self) -> Dict[str, dict]:
        """Status report: engine name to availability, description and priority."""
        availability = self._availability
        status = {}
        for name in DEFAULT_ORDER:
            engine = self._engines[name]
            description = (engine.description if engine is not None and engine.description
                           else DESCRIPTIONS[name])
            status[name] = {
                'available': bool(availability.get(name, False)),
                'description': description,
                'priority': priority_of(name),
            }
        return status

    def close(self) -> None:
        """Release resources held by every adapter."""
        for name, engine in self._engines.items():
            if engine is None:
                continue
            try:
                engine.close()
            except Exception as e:
                logger.warning(f"Failed to close PDF engine {name}: {e}")
