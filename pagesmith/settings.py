"""
Django settings for the Pagesmith project.

Rendering-related settings are read from the environment so that engine
selection can be changed per deployment without code changes.
"""

import os
from pathlib import Path


def _env_bool(name, default):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def _env_float(name, default):
    value = os.environ.get(name)
    if value is None or value.strip() == '':
        return default
    return float(value)


BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'pagesmith-insecure-development-key')

DEBUG = _env_bool('DJANGO_DEBUG', False)

ALLOWED_HOSTS = [h for h in os.environ.get('DJANGO_ALLOWED_HOSTS', 'localhost').split(',') if h]

INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'documents',
]

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': BASE_DIR / 'db.sqlite3',
    }
}

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {},
    },
]

USE_TZ = True
TIME_ZONE = 'UTC'

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'


# PDF rendering
PDF_ENGINE = os.environ.get('PDF_ENGINE', 'auto')
PDF_RENDER_TIMEOUT = _env_float('PDF_RENDER_TIMEOUT', 120.0)
PDF_PROBE_ON_STARTUP = _env_bool('PDF_PROBE_ON_STARTUP', True)
PDF_BASE_URL = os.environ.get('PDF_BASE_URL') or None
PDF_TEMPLATE_AUTOESCAPE = _env_bool('PDF_TEMPLATE_AUTOESCAPE', False)

# Gotenberg (external HTML → PDF conversion service)
GOTENBERG_ENABLED = _env_bool('GOTENBERG_ENABLED', False)
GOTENBERG_URL = os.environ.get('GOTENBERG_URL', 'http://gotenberg:3000')
GOTENBERG_TIMEOUT = _env_float('GOTENBERG_TIMEOUT', 60.0)
GOTENBERG_PAPER_WIDTH = _env_float('GOTENBERG_PAPER_WIDTH', 8.27)
GOTENBERG_PAPER_HEIGHT = _env_float('GOTENBERG_PAPER_HEIGHT', 11.7)
GOTENBERG_MARGIN = _env_float('GOTENBERG_MARGIN', 0.39)
GOTENBERG_PRINT_BACKGROUND = _env_bool('GOTENBERG_PRINT_BACKGROUND', True)
GOTENBERG_WAIT_DELAY = os.environ.get('GOTENBERG_WAIT_DELAY', '1s')

# Playwright (headless Chromium)
PLAYWRIGHT_ENABLED = _env_bool('PLAYWRIGHT_ENABLED', True)
PLAYWRIGHT_TIMEOUT = _env_float('PLAYWRIGHT_TIMEOUT', 30.0)
PLAYWRIGHT_HEADLESS = _env_bool('PLAYWRIGHT_HEADLESS', True)
PLAYWRIGHT_BROWSER_PATH = os.environ.get('PLAYWRIGHT_BROWSER_PATH', '')
PLAYWRIGHT_NO_SANDBOX = _env_bool('PLAYWRIGHT_NO_SANDBOX', True)
PLAYWRIGHT_DISABLE_GPU = _env_bool('PLAYWRIGHT_DISABLE_GPU', True)

# WeasyPrint (native library)
WEASYPRINT_ENABLED = _env_bool('WEASYPRINT_ENABLED', True)
WEASYPRINT_STYLESHEETS = [
    path for path in os.environ.get('WEASYPRINT_STYLESHEETS', '').split(os.pathsep) if path
]


LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{asctime} {levelname} {name}: {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'loggers': {
        'documents': {
            'handlers': ['console'],
            'level': os.environ.get('PAGESMITH_LOG_LEVEL', 'INFO'),
            'propagate': False,
        },
        'pagesmith': {
            'handlers': ['console'],
            'level': os.environ.get('PAGESMITH_LOG_LEVEL', 'INFO'),
            'propagate': False,
        },
    },
}
