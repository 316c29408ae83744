"""
Configuration accessors for the printing framework.

Every rendering setting is read from Django settings through this module so
that defaults live in one place. Engines receive plain settings objects and
never touch django.conf themselves, which keeps them easy to construct in
tests.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from django.conf import settings


DEFAULT_RENDER_TIMEOUT = 120.0


@dataclass(frozen=True)
class GotenbergSettings:
    """Settings for the external Gotenberg conversion service."""

    enabled: bool = False
    url: str = "http://gotenberg:3000"
    timeout: float = 60.0
    paper_width: float = 8.27  # A4 width in inches
    paper_height: float = 11.7  # A4 height in inches
    margin: float = 0.39  # 10mm in inches
    print_background: bool = True
    wait_delay: str = "1s"


@dataclass(frozen=True)
class PlaywrightSettings:
    """Settings for the embedded headless Chromium engine."""

    enabled: bool = True
    timeout: float = 30.0
    headless: bool = True
    browser_path: str = ""
    no_sandbox: bool = True
    disable_gpu: bool = True


@dataclass(frozen=True)
class WeasyPrintSettings:
    """Settings for the WeasyPrint engine."""

    enabled: bool = True
    stylesheets: List[str] = field(default_factory=list)
    base_url: Optional[str] = None


def get_preferred_engine() -> str:
    """
    Get the configured engine preference code.

    Returns:
        Engine code such as 'auto', 'gotenberg' or 'playwright'
    """
    return str(getattr(settings, 'PDF_ENGINE', 'auto') or 'auto')


def get_render_timeout() -> Optional[float]:
    """
    Get the overall deadline for one PDF render in seconds.

    Returns:
        Timeout in seconds, or None for no deadline
    """
    return getattr(settings, 'PDF_RENDER_TIMEOUT', DEFAULT_RENDER_TIMEOUT)


def should_probe_on_startup() -> bool:
    """Check if engine availability should be probed when the app loads."""
    return bool(getattr(settings, 'PDF_PROBE_ON_STARTUP', True))


def get_base_url() -> Optional[str]:
    """Get the base URL used to resolve relative asset URLs in documents."""
    return getattr(settings, 'PDF_BASE_URL', None)


def is_autoescape_enabled() -> bool:
    """Check if substituted parameter values are HTML-escaped."""
    return bool(getattr(settings, 'PDF_TEMPLATE_AUTOESCAPE', False))


def get_gotenberg_settings() -> GotenbergSettings:
    """Build Gotenberg settings from Django settings."""
    defaults = GotenbergSettings()
    return GotenbergSettings(
        enabled=bool(getattr(settings, 'GOTENBERG_ENABLED', defaults.enabled)),
        url=getattr(settings, 'GOTENBERG_URL', defaults.url) or '',
        timeout=float(getattr(settings, 'GOTENBERG_TIMEOUT', defaults.timeout)),
        paper_width=float(getattr(settings, 'GOTENBERG_PAPER_WIDTH', defaults.paper_width)),
        paper_height=float(getattr(settings, 'GOTENBERG_PAPER_HEIGHT', defaults.paper_height)),
        margin=float(getattr(settings, 'GOTENBERG_MARGIN', defaults.margin)),
        print_background=bool(
            getattr(settings, 'GOTENBERG_PRINT_BACKGROUND', defaults.print_background)
        ),
        wait_delay=str(getattr(settings, 'GOTENBERG_WAIT_DELAY', defaults.wait_delay)),
    )


def get_playwright_settings() -> PlaywrightSettings:
    """Build Playwright settings from Django settings."""
    defaults = PlaywrightSettings()
    return PlaywrightSettings(
        enabled=bool(getattr(settings, 'PLAYWRIGHT_ENABLED', defaults.enabled)),
        timeout=float(getattr(settings, 'PLAYWRIGHT_TIMEOUT', defaults.timeout)),
        headless=bool(getattr(settings, 'PLAYWRIGHT_HEADLESS', defaults.headless)),
        browser_path=getattr(settings, 'PLAYWRIGHT_BROWSER_PATH', defaults.browser_path) or '',
        no_sandbox=bool(getattr(settings, 'PLAYWRIGHT_NO_SANDBOX', defaults.no_sandbox)),
        disable_gpu=bool(getattr(settings, 'PLAYWRIGHT_DISABLE_GPU', defaults.disable_gpu)),
    )


def get_weasyprint_settings() -> WeasyPrintSettings:
    """Build WeasyPrint settings from Django settings."""
    return WeasyPrintSettings(
        enabled=bool(getattr(settings, 'WEASYPRINT_ENABLED', True)),
        stylesheets=list(getattr(settings, 'WEASYPRINT_STYLESHEETS', []) or []),
        base_url=get_base_url(),
    )
