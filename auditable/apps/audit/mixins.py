"""
Abstract base for models whose changes are audited.

Subclasses declare their column policy as class attributes::

    class Order(AuditableModel):
        audit_columns = ['*']
        audit_columns_to_avoid = ['updated_at']
        audit_columns_formatted = {'total': 'Order total'}
        audit_columns_mean = {'customer_id': 'customer.name'}

Original values are snapshotted when an instance is initialised and after
every audited save, so ``is_dirty()`` and ``get_original()`` behave like
an active record's dirty tracking.  Columns are database column names
(``field.column``), so a foreign key is tracked as ``customer_id``.
"""
import copy

from django.db import models, router

from .context import current_user_id
from .schema import list_columns

WILDCARD = '*'


class AuditableModel(models.Model):
    audit_columns = [WILDCARD]
    audit_columns_to_avoid = []
    audit_columns_formatted = {}
    audit_columns_mean = {}

    # Overrides the "created" / "updated" / "deleted" key of the next rows.
    audit_key = None

    class Meta:
        abstract = True

    # Dirty tracking

    def _column_attnames(self):
        return {field.column: field.attname for field in self._meta.concrete_fields}

    def snapshot_original(self, columns=None):
        """Remember the current values as the persisted originals."""
        if columns is None or not hasattr(self, '_audit_original'):
            self._audit_original = {}
            attnames = self._column_attnames().values()
        else:
            mapping = self._column_attnames()
            attnames = [mapping[column] for column in columns if column in mapping]
        for attname in attnames:
            # Deferred fields are left out rather than loaded.
            if attname in self.__dict__:
                self._audit_original[attname] = copy.deepcopy(self.__dict__[attname])

    def get_original(self, column):
        attname = self._column_attnames().get(column, column)
        return getattr(self, '_audit_original', {}).get(attname)

    def get_attribute_value(self, column):
        attname = self._column_attnames().get(column, column)
        return getattr(self, attname)

    def is_tracked_column(self, column):
        return column in self._column_attnames()

    def is_dirty(self, *columns):
        mapping = self._column_attnames()
        original = getattr(self, '_audit_original', {})
        columns = columns or tuple(mapping)
        for column in columns:
            attname = mapping.get(column)
            if attname is None or attname not in original or attname not in self.__dict__:
                continue
            if self.__dict__[attname] != original[attname]:
                return True
        return False

    def get_dirty(self):
        return {
            column: self.get_attribute_value(column)
            for column in self._column_attnames()
            if self.is_dirty(column)
        }

    def load_missing_originals(self):
        """
        Read the persisted value of every column absent from the snapshot.

        Columns deferred at load time (``only()`` / ``defer()``) have no
        snapshot; their originals come from the row as it is in the database.
        """
        if self.pk is None:
            return
        original = self.__dict__.setdefault('_audit_original', {})
        missing = [attname for attname in self._column_attnames().values() if attname not in original]
        if not missing:
            return
        row = (
            type(self)._base_manager.using(self._state.db)
            .filter(pk=self.pk)
            .values(*missing)
            .first()
        )
        if row is not None:
            original.update(row)

    def refresh_from_db(self, using=None, fields=None, **kwargs):
        super().refresh_from_db(using=using, fields=fields, **kwargs)
        if fields is None:
            self.snapshot_original()
            return
        # Partial refresh, e.g. reading a deferred field: only those columns.
        columns = {}
        for field in self._meta.concrete_fields:
            columns[field.name] = columns[field.attname] = field.column
        self.snapshot_original([columns[name] for name in fields if name in columns])

    # Column policy

    def set_audit_columns(self, columns=None):
        self.audit_columns = list(columns) if columns is not None else [WILDCARD]
        return self

    def set_audit_columns_to_avoid(self, columns=None):
        self.audit_columns_to_avoid = list(columns) if columns is not None else []
        return self

    def get_audit_columns_formatted(self):
        return self.audit_columns_formatted

    def get_audit_columns_mean(self):
        return self.audit_columns_mean

    def get_audit_columns(self):
        """The tracked columns: allow-list (or whole table) minus deny-list."""
        columns = list(self.audit_columns) if isinstance(self.audit_columns, (list, tuple)) else []
        if columns and columns[0] == WILDCARD:
            using = self._state.db or router.db_for_write(type(self), instance=self)
            columns = list_columns(self._meta.db_table, using=using)

        avoid = self.audit_columns_to_avoid
        avoid = set(avoid) if isinstance(avoid, (list, tuple, set)) else set()
        return [column for column in columns if column not in avoid]

    # Relations

    @property
    def audits(self):
        from .models import AuditableLog

        return AuditableLog.objects.for_instance(self)

    def audit_user_id(self):
        """Id of the user responsible for the current change."""
        return current_user_id()
