"""
Settings consumed by the audit app, with their defaults.

All values are read lazily from ``django.conf.settings`` so tests can use
``override_settings``.
"""
from django.conf import settings


def audit_enabled():
    return getattr(settings, 'AUDITABLE_ENABLED', True)


def json_indent():
    return getattr(settings, 'AUDITABLE_JSON_INDENT', 4)


def default_limit():
    return getattr(settings, 'AUDITABLE_DEFAULT_LIMIT', 100)
