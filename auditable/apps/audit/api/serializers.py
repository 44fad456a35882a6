"""
Serializers for the audit API.

``old_value`` and ``new_value`` are returned decoded from their JSON text;
``changes`` merges both sides per column with the configured labels and
resolved values.
"""
import json
import logging
from typing import Any, Dict, List

from drf_spectacular.utils import extend_schema_field
from rest_framework import serializers

from auditable.apps.audit.exceptions import ResolutionError
from auditable.apps.audit.models import AuditableLog

logger = logging.getLogger(__name__)


class AuditableLogSerializer(serializers.ModelSerializer):
    user = serializers.StringRelatedField()
    old_value = serializers.SerializerMethodField()
    new_value = serializers.SerializerMethodField()
    changes = serializers.SerializerMethodField()

    class Meta:
        model = AuditableLog
        fields = (
            'id',
            'auditable_type',
            'auditable_id',
            'user',
            'key',
            'old_value',
            'new_value',
            'changes',
            'created_at',
            'updated_at',
        )

    @extend_schema_field({'type': 'array', 'items': {'type': 'object'}, 'nullable': True})
    def get_old_value(self, obj) -> Any:
        return json.loads(obj.old_value) if obj.old_value is not None else None

    @extend_schema_field({'type': 'array', 'items': {'type': 'object'}, 'nullable': True})
    def get_new_value(self, obj) -> Any:
        return json.loads(obj.new_value) if obj.new_value is not None else None

    @extend_schema_field(serializers.ListSerializer(child=serializers.DictField()))
    def get_changes(self, obj) -> List[Dict[str, Any]]:
        try:
            return obj.changes()
        except ResolutionError as exc:
            # fall back to stored values
            logger.warning("Showing stored values of audit log %s: %s", obj.pk, exc)
            return obj.changes(resolve=False)
