from pagesmith.settings import *

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

# Keep the test run independent of whatever engines the host has installed
PDF_PROBE_ON_STARTUP = False
GOTENBERG_ENABLED = False
PLAYWRIGHT_ENABLED = False
PDF_RENDER_TIMEOUT = 30.0
PDF_ENGINE = 'auto'
PDF_TEMPLATE_AUTOESCAPE = False
