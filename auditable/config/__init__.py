"""
Django project configuration for auditable.

Settings are split per environment under ``config/settings``; select one
with ``DJANGO_SETTINGS_MODULE``.
"""
