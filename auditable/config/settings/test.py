from .base import *

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

INSTALLED_APPS += [
    'tests.testapp',
]

PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.MD5PasswordHasher',
]

LOGGING['loggers']['auditable']['level'] = 'WARNING'

ROOT_URLCONF = 'tests.testapp.urls'
