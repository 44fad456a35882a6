from .base import *

# Use file-based SQLite for local development
DEBUG = True
DEBUG_PROPAGATE_EXCEPTIONS = True

ALLOWED_HOSTS = ["*"]

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': BASE_DIR / 'db.sqlite3',
    }
}

# Full logging to console and django.log
LOGGING['handlers']['file'] = {
    'class': 'logging.FileHandler',
    'filename': BASE_DIR / 'django.log',
    'formatter': 'verbose',
}
LOGGING['root'] = {
    'handlers': ['console', 'file'],
    'level': 'DEBUG',
}
LOGGING['loggers']['auditable']['handlers'] = ['console', 'file']
LOGGING['loggers']['auditable']['level'] = 'DEBUG'
