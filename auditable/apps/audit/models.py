"""
Models for storing audit log entries.

``AuditableLog`` stores one row per create/update/delete of a tracked
model: the owning instance (``auditable_type`` + ``auditable_id``), the
acting user, a key such as ``"updated"`` and the old/new values as JSON
text.  Rows without an owner are *simple logs* written directly with
``recorder.record_simple``.

Rows are immutable once written.
"""
import json

from django.conf import settings
from django.core.exceptions import PermissionDenied
from django.db import models
from django.utils.functional import cached_property

from . import conf
from .registry import discriminator_for, load_instance
from .resolver import format_column, resolve_value


class AuditableLogQuerySet(models.QuerySet):
    """Custom queryset for audit logs with filtering helpers"""

    def latest_first(self):
        return self.order_by('-created_at', '-id')

    def simple_logs(self):
        return self.filter(auditable_type__isnull=True)

    def audits(self):
        return self.filter(auditable_type__isnull=False)

    def for_instance(self, instance):
        return self.filter(auditable_type=discriminator_for(instance), auditable_id=instance.pk)

    def for_user(self, user):
        return self.filter(user=user)

    def for_key(self, key):
        return self.filter(key=key)

    def latest_simple_logs(self, limit=None):
        limit = conf.default_limit() if limit is None else limit
        return self.simple_logs().select_related('user').latest_first()[:limit]

    def latest_audits(self, limit=None):
        limit = conf.default_limit() if limit is None else limit
        return self.audits().select_related('user').latest_first()[:limit]


class AuditableLogManager(models.Manager):
    """Custom manager for audit logs"""

    def get_queryset(self):
        return AuditableLogQuerySet(self.model, using=self._db)

    def for_instance(self, instance):
        return self.get_queryset().for_instance(instance)

    def for_user(self, user):
        return self.get_queryset().for_user(user)

    def for_key(self, key):
        return self.get_queryset().for_key(key)

    def latest_simple_logs(self, limit=None):
        return self.get_queryset().latest_simple_logs(limit)

    def latest_audits(self, limit=None):
        return self.get_queryset().latest_audits(limit)


class AuditableLog(models.Model):
    """
    A recorded change of a tracked model instance.

    ``old_value`` and ``new_value`` hold JSON text, normally a list of
    ``{"column": ..., "value": ...}`` pairs.
    """

    auditable_type = models.CharField(max_length=255, null=True, blank=True)
    auditable_id = models.IntegerField(null=True, blank=True)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='auditable_logs',
    )
    key = models.CharField(max_length=255)
    old_value = models.TextField(null=True, blank=True)
    new_value = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = AuditableLogManager()

    class Meta:
        db_table = 'auditable_log'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['auditable_id', 'auditable_type'], name='auditable_log_owner_idx'),
        ]
        verbose_name = 'Audit Log'
        verbose_name_plural = 'Audit Logs'

    def __str__(self):
        owner = f"{self.auditable_type} #{self.auditable_id}" if self.auditable_type else 'simple log'
        return f"{self.key} - {owner} by {self.user or 'System'} at {self.created_at}"

    def save(self, *args, **kwargs):
        if self.pk is not None:
            raise PermissionDenied("Audit logs are immutable and cannot be modified after creation.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise PermissionDenied("Audit logs are immutable and cannot be deleted.")

    @cached_property
    def auditable(self):
        """The owning instance, or ``None`` for simple logs and deleted owners."""
        return load_instance(self.auditable_type, self.auditable_id)

    def get_user_responsible(self):
        return self.user

    def get_column_name(self, column):
        return format_column(column, self.auditable)

    def _decode(self, raw):
        if raw is None:
            return None
        return json.loads(raw)

    def _resolve(self, payload):
        owner = self.auditable
        if isinstance(payload, list) and all(isinstance(item, dict) and 'column' in item for item in payload):
            return [
                {'column': item['column'], 'value': resolve_value(item['column'], owner, item.get('value'))}
                for item in payload
            ]
        if payload is None:
            return None
        return resolve_value(self.key, owner, payload)

    def get_old_value(self):
        return self._resolve(self._decode(self.old_value))

    def get_new_value(self):
        return self._resolve(self._decode(self.new_value))

    def changes(self, resolve=True):
        """
        Old and new payloads merged per column, for display.

        With ``resolve=False`` the stored values are returned as written.
        """
        if resolve:
            old, new = self.get_old_value(), self.get_new_value()
        else:
            old, new = self._decode(self.old_value), self._decode(self.new_value)
        old_pairs = {item['column']: item['value'] for item in old} if isinstance(old, list) else {}
        new_pairs = {item['column']: item['value'] for item in new} if isinstance(new, list) else {}

        columns = list(new_pairs)
        columns += [column for column in old_pairs if column not in new_pairs]
        return [
            {
                'column': column,
                'label': self.get_column_name(column),
                'old': old_pairs.get(column),
                'new': new_pairs.get(column),
            }
            for column in columns
        ]
