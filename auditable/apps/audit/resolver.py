"""
Resolution of the value shown for an audited column.

A tracked model may map a column to a dot-notated path through its
relations (``audit_columns_mean``), e.g. ``{"customer_id": "customer.name"}``.
Every segment but the last walks a relation; the last segment is either
passed through a display transform declared on the target's class, or
read from the target itself.

Display transforms are declared with ``@display_transform("attr")``::

    class Customer(AuditableModel):
        @display_transform("email")
        def mask_email(self, value):
            ...
"""
from functools import lru_cache

from django.core.exceptions import ObjectDoesNotExist

from .exceptions import ResolutionError

_TRANSFORM_MARKER = '_audit_display_transform'


def display_transform(attribute):
    """Mark a method as the display transform for ``attribute``."""

    def decorator(func):
        setattr(func, _TRANSFORM_MARKER, attribute)
        return func

    return decorator


@lru_cache(maxsize=None)
def display_transforms_for(cls):
    """Map of attribute name -> method name, collected once per class."""
    transforms = {}
    # Walk base classes first so subclasses override.
    for klass in reversed(cls.__mro__):
        for name, member in vars(klass).items():
            attribute = getattr(member, _TRANSFORM_MARKER, None)
            if attribute is not None:
                transforms[attribute] = name
    return transforms


def has_display_transform(obj, attribute):
    return attribute in display_transforms_for(type(obj))


def apply_display_transform(obj, attribute, value):
    method_name = display_transforms_for(type(obj))[attribute]
    return getattr(obj, method_name)(value)


def _mapping(instance, getter, attribute):
    if hasattr(instance, getter):
        mapping = getattr(instance, getter)()
    else:
        mapping = getattr(instance, attribute, None)
    return mapping if isinstance(mapping, dict) else {}


def get_column_means(column, instance):
    """Return the configured dot path for ``column``, or ``None``."""
    return _mapping(instance, 'get_audit_columns_mean', 'audit_columns_mean').get(column)


def format_column(column, instance):
    """Human label for ``column``; the column itself when none is configured."""
    if instance is None:
        return column
    formatted = _mapping(instance, 'get_audit_columns_formatted', 'audit_columns_formatted')
    return formatted.get(column, column)


def _follow(target, segment, path):
    try:
        related = getattr(target, segment)
    except (AttributeError, ObjectDoesNotExist) as exc:
        raise ResolutionError(path, segment, target) from exc
    if related is None:
        raise ResolutionError(path, segment, target)
    return related


def resolve_means_path(path, instance, value):
    segments = path.split('.')
    target = instance
    for segment in segments[:-1]:
        target = _follow(target, segment, path)

    attribute = segments[-1]
    if has_display_transform(target, attribute):
        return apply_display_transform(target, attribute, value)
    try:
        return getattr(target, attribute)
    except (AttributeError, ObjectDoesNotExist) as exc:
        raise ResolutionError(path, attribute, target) from exc


def resolve_value(column, instance, value):
    """
    Return the audit/display value of ``column``.

    Without a configured path the raw ``value`` is returned unchanged.
    Never mutates ``instance`` or anything reached from it.
    """
    if instance is None:
        return value
    means = get_column_means(column, instance)
    if not means:
        return value
    return resolve_means_path(means, instance, value)
