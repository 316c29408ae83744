import logging

from django.apps import AppConfig


logger = logging.getLogger(__name__)


class DocumentsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'documents'

    def ready(self):
        """Probe PDF engine availability when the app is ready."""
        from documents.printing import config

        if not config.should_probe_on_startup():
            return
        from documents.printing.engines import get_default_registry

        try:
            get_default_registry().probe()
        except Exception as e:
            # Rendering still works through the ReportLab fallback
            logger.error(f"PDF engine probe failed: {e}", exc_info=True)
