"""
Exceptions raised by the audit app.

Both kinds propagate to the caller of the triggering ``save()`` or
``delete()``; the audit app never swallows them.
"""


class AuditError(Exception):
    """Base class for audit failures."""


class ResolutionError(AuditError):
    """A column-means path points at a missing relation or attribute."""

    def __init__(self, path, segment, target):
        self.path = path
        self.segment = segment
        self.target = target
        super().__init__(
            f"Cannot resolve '{segment}' of column path '{path}' on {target!r}"
        )


class PersistenceError(AuditError):
    """The audit store rejected or failed to write a log row."""
