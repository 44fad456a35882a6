"""
Persistence of audit rows.

Payloads are stored as pretty-printed JSON text.  Rows are only ever
inserted; a failed insert is raised to the caller as ``PersistenceError``.
"""
import json
import logging

from django.core.serializers.json import DjangoJSONEncoder
from django.db import DatabaseError

from . import conf
from .context import current_user_id
from .exceptions import PersistenceError
from .models import AuditableLog
from .registry import discriminator_for

logger = logging.getLogger(__name__)


def serialize_payload(payload):
    """``None`` stays ``None``; anything else becomes JSON text."""
    if payload is None:
        return None
    return json.dumps(payload, cls=DjangoJSONEncoder, indent=conf.json_indent(), ensure_ascii=False)


def _save(log, using=None):
    try:
        log.save(using=using)
    except DatabaseError as exc:
        logger.error(
            "Failed to write audit log %r for %s #%s",
            log.key, log.auditable_type or 'simple log', log.auditable_id,
            exc_info=True,
        )
        raise PersistenceError(f"Could not write audit log '{log.key}': {exc}") from exc

    logger.debug("Audit: %s %s #%s by user %s", log.key, log.auditable_type, log.auditable_id, log.user_id)
    return log


def record(instance, key, old, new):
    """Write one audit row owned by ``instance``."""
    log = AuditableLog(
        auditable_type=discriminator_for(instance),
        auditable_id=instance.pk,
        user_id=instance.audit_user_id(),
        key=key,
        old_value=serialize_payload(old),
        new_value=serialize_payload(new),
    )
    return _save(log, using=instance._state.db)


def record_simple(key, old=None, new=None, user=None):
    """Write an audit row that belongs to no model instance."""
    log = AuditableLog(
        user_id=user.pk if user is not None else current_user_id(),
        key=key,
        old_value=serialize_payload(old),
        new_value=serialize_payload(new),
    )
    return _save(log)
