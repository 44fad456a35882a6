"""
API views for the audit app.

Provides a read-only viewset for ``AuditableLog`` objects with filtering
and ordering, plus ``latest`` and ``simple`` actions returning the most
recent owned and unowned entries.
"""
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import filters, permissions, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response

from auditable.apps.audit import conf
from auditable.apps.audit.filters import AuditableLogFilter
from auditable.apps.audit.models import AuditableLog
from .serializers import AuditableLogSerializer

LIMIT_PARAMETER = OpenApiParameter(
    name='limit',
    type=OpenApiTypes.INT,
    location=OpenApiParameter.QUERY,
    required=False,
    description='Maximum number of entries to return',
)


class AuditableLogViewSet(viewsets.ReadOnlyModelViewSet):
    """API endpoint that allows audit logs to be viewed."""

    queryset = AuditableLog.objects.select_related('user')
    serializer_class = AuditableLogSerializer
    permission_classes = [permissions.IsAuthenticated]
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_class = AuditableLogFilter
    ordering_fields = ['created_at', 'user', 'key']
    ordering = ['-created_at', '-id']

    def _limit(self, request):
        raw = request.query_params.get('limit')
        if raw is None:
            return conf.default_limit()
        try:
            limit = int(raw)
        except ValueError:
            raise ValidationError({'limit': 'Must be an integer.'})
        if limit < 1:
            raise ValidationError({'limit': 'Must be a positive integer.'})
        return limit

    @extend_schema(parameters=[LIMIT_PARAMETER], responses={200: AuditableLogSerializer(many=True)})
    @action(detail=False, methods=['get'])
    def latest(self, request):
        """Most recent entries that belong to a model instance."""
        logs = AuditableLog.objects.latest_audits(self._limit(request))
        return Response(self.get_serializer(logs, many=True).data)

    @extend_schema(parameters=[LIMIT_PARAMETER], responses={200: AuditableLogSerializer(many=True)})
    @action(detail=False, methods=['get'])
    def simple(self, request):
        """Most recent entries that belong to no model instance."""
        logs = AuditableLog.objects.latest_simple_logs(self._limit(request))
        return Response(self.get_serializer(logs, many=True).data)
