"""
Filterset definitions for the audit API.

Uses ``django_filters`` to allow clients to filter audit log entries by
user, key, owning type, owning id and creation time range.
"""

import django_filters
from .models import AuditableLog


class AuditableLogFilter(django_filters.FilterSet):
    class Meta:
        model = AuditableLog
        fields = {
            "user": ["exact"],
            "key": ["exact"],
            "auditable_type": ["exact", "isnull"],
            "auditable_id": ["exact"],
            "created_at": ["gte", "lte"],
        }
