"""
Lifecycle hooks binding change capture and recording to tracked models.

Columns deferred at load time get their originals from the database right
before an update or delete.

``connect_auditable_models`` is called once from ``AuditConfig.ready`` and
connects the handlers below for every concrete ``AuditableModel``
subclass.  Handlers run synchronously after the row has been written, so
an audit failure surfaces from ``save()`` / ``delete()``.
"""
import logging

from django.apps import apps
from django.db.models.signals import post_delete, post_init, post_save, pre_delete, pre_save

from . import conf
from .capture import KEY_CREATED, KEY_DELETED, KEY_UPDATED, capture_create, capture_delete, capture_update
from .context import is_audit_suspended
from .mixins import AuditableModel
from .recorder import record
from .registry import discriminator_for, register

logger = logging.getLogger(__name__)


def _hooks_active():
    return conf.audit_enabled() and not is_audit_suspended()


def _update_columns(instance, update_fields):
    if update_fields is None:
        return None
    return {instance._meta.get_field(name).column for name in update_fields}


def snapshot_on_init(sender, instance, **kwargs):
    instance.snapshot_original()


def load_originals_before_write(sender, instance, raw=False, **kwargs):
    if raw or instance._state.adding or not _hooks_active():
        return
    instance.load_missing_originals()


def audit_on_save(sender, instance, created, raw=False, update_fields=None, **kwargs):
    only = _update_columns(instance, update_fields)
    try:
        if raw or not _hooks_active():
            return

        if created:
            diff = capture_create(instance)
            key = instance.audit_key or KEY_CREATED
        else:
            diff = capture_update(instance, only=only)
            key = instance.audit_key or KEY_UPDATED

        if diff is not None:
            record(instance, key, diff.old, diff.new)
    finally:
        instance.snapshot_original(only)


def audit_on_delete(sender, instance, **kwargs):
    if not _hooks_active():
        return
    diff = capture_delete(instance)
    record(instance, instance.audit_key or KEY_DELETED, diff.old, diff.new)


def connect_model(model):
    label = discriminator_for(model)
    register(model)
    post_init.connect(snapshot_on_init, sender=model, dispatch_uid=f'audit_post_init_{label}')
    pre_save.connect(load_originals_before_write, sender=model, dispatch_uid=f'audit_pre_save_{label}')
    pre_delete.connect(load_originals_before_write, sender=model, dispatch_uid=f'audit_pre_delete_{label}')
    post_save.connect(audit_on_save, sender=model, dispatch_uid=f'audit_post_save_{label}')
    post_delete.connect(audit_on_delete, sender=model, dispatch_uid=f'audit_post_delete_{label}')


def connect_auditable_models():
    for model in apps.get_models():
        if issubclass(model, AuditableModel):
            connect_model(model)
            logger.debug("Auditing changes of %s", model._meta.label)
