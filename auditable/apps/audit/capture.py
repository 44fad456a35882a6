"""
Change capture: which tracked columns changed, and from what to what.

Each function returns a ``Diff`` of ``{"column": ..., "value": ...}``
pairs and never modifies the instance.
"""
from typing import NamedTuple, Optional

KEY_CREATED = 'created'
KEY_UPDATED = 'updated'
KEY_DELETED = 'deleted'


class Diff(NamedTuple):
    old: Optional[list]
    new: Optional[list]


def _pair(column, value):
    return {'column': column, 'value': value}


def _tracked_columns(instance, only=None):
    columns = [column for column in instance.get_audit_columns() if instance.is_tracked_column(column)]
    if only is not None:
        columns = [column for column in columns if column in only]
    return columns


def capture_create(instance):
    """Every tracked column holding a value goes to the new side."""
    new = []
    for column in _tracked_columns(instance):
        value = instance.get_attribute_value(column)
        if value is not None:
            new.append(_pair(column, value))
    return Diff(old=None, new=new)


def capture_update(instance, only=None):
    """
    Changed tracked columns, before and after.

    ``only`` restricts the comparison to the given columns (the
    ``update_fields`` of a partial save).  Returns ``None`` when nothing
    tracked changed.
    """
    old, new = [], []
    for column in _tracked_columns(instance, only):
        if instance.is_dirty(column):
            old.append(_pair(column, instance.get_original(column)))
            new.append(_pair(column, instance.get_attribute_value(column)))
    if not new:
        return None
    return Diff(old=old, new=new)


def capture_delete(instance):
    """Every tracked column's last persisted value goes to the old side."""
    old = [_pair(column, instance.get_original(column)) for column in _tracked_columns(instance)]
    return Diff(old=old, new=None)
